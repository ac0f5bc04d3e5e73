"""Tests for the commission configuration API."""

from __future__ import annotations

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.commissions.models import Commission, CommissionSettings
from apps.properties.models import PropertyType

User = get_user_model()


class CommissionAPITests(APITestCase):
    def setUp(self) -> None:
        self.staff = User.objects.create_user(username="staff", password="StrongPass123", is_staff=True)
        self.host = User.objects.create_user(username="host", password="StrongPass123")
        self.villa = PropertyType.objects.create(name="Villa")
        self.hotel = PropertyType.objects.create(name="Hotel room", is_hotel_type=True)
        self.client.force_authenticate(self.staff)

    def _payload(self, property_type: PropertyType, **overrides) -> dict:
        payload = {
            "title": f"{property_type.name} commission",
            "property_type": property_type.id,
            "host_commission_rate": "0.1000",
            "host_commission_fixed": "0.00",
            "client_commission_rate": "0.0500",
            "client_commission_fixed": "1.50",
        }
        payload.update(overrides)
        return payload

    def test_non_staff_is_forbidden(self) -> None:
        self.client.force_authenticate(self.host)
        response = self.client.get(reverse("commission-list"))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_create_commission(self) -> None:
        response = self.client.post(reverse("commission-list"), self._payload(self.villa), format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data["property_type_name"], "Villa")
        self.assertEqual(response.data["created_by"], self.staff.id)

    def test_duplicate_type_returns_conflict(self) -> None:
        self.client.post(reverse("commission-list"), self._payload(self.villa), format="json")
        response = self.client.post(
            reverse("commission-list"),
            self._payload(self.villa, title="Second"),
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT, response.data)
        self.assertEqual(response.data["property_type"], self.villa.id)
        self.assertEqual(Commission.objects.count(), 1)

    def test_rate_above_one_is_rejected(self) -> None:
        response = self.client.post(
            reverse("commission-list"),
            self._payload(self.villa, client_commission_rate="1.5000"),
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_move_to_taken_type_returns_conflict(self) -> None:
        first = self.client.post(reverse("commission-list"), self._payload(self.villa), format="json")
        self.client.post(reverse("commission-list"), self._payload(self.hotel), format="json")
        response = self.client.patch(
            reverse("commission-detail", args=[first.data["id"]]),
            {"property_type": self.hotel.id},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT, response.data)

    def test_toggle_by_type_and_gaps(self) -> None:
        created = self.client.post(reverse("commission-list"), self._payload(self.villa), format="json")

        response = self.client.post(reverse("commission-toggle", args=[created.data["id"]]))
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertFalse(response.data["is_active"])

        response = self.client.get(reverse("commission-by-type", kwargs={"type_id": self.villa.id}))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["id"], created.data["id"])

        response = self.client.get(reverse("commission-by-type", kwargs={"type_id": self.hotel.id}))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

        response = self.client.get(reverse("commission-types-without-commission"))
        self.assertEqual([item["id"] for item in response.data], [self.hotel.id])

    def test_delete_unknown_commission_returns_not_found(self) -> None:
        response = self.client.delete(reverse("commission-detail", args=[9999]))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_commission_settings_crud(self) -> None:
        response = self.client.post(
            reverse("commission-settings-list"),
            {"client_commission_rate": "0.0300", "host_commission_rate": "0.0800"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)

        response = self.client.get(reverse("commission-settings-active"))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Decimal(response.data["client_commission_rate"]), Decimal("0.03"))

        response = self.client.delete(reverse("commission-settings-detail", args=[response.data["id"]]))
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(CommissionSettings.objects.exists())
