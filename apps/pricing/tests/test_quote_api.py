"""Tests for the quote API."""

from __future__ import annotations

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.commissions.models import CommissionSettings
from apps.properties.models import Property, PropertyExtra

User = get_user_model()


class QuoteAPITests(APITestCase):
    def setUp(self) -> None:
        self.host = User.objects.create_user(username="host", password="StrongPass123")
        self.property = Property.objects.create(
            owner=self.host,
            title="Villa Ifaty",
            base_price=Decimal("100.00"),
            status=Property.Status.ACTIVE,
            max_guests=4,
        )
        self.transfer = PropertyExtra.objects.create(
            property=self.property,
            name="Airport transfer",
            price_eur=Decimal("25.00"),
        )

    def _payload(self, **overrides) -> dict:
        payload = {
            "property": self.property.id,
            "arriving_date": "2025-07-01",
            "leaving_date": "2025-07-04",
            "guests_count": 2,
            "extras": [{"extra": self.transfer.id, "quantity": 2}],
        }
        payload.update(overrides)
        return payload

    def test_anonymous_quote(self) -> None:
        CommissionSettings.objects.create(client_commission_rate=Decimal("0.10"))

        response = self.client.post(reverse("pricing-quote"), self._payload(), format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        summary = response.data["summary"]
        self.assertEqual(summary["number_of_nights"], 3)
        self.assertEqual(summary["subtotal"], "300.00")
        self.assertEqual(summary["extras_total"], "50.00")
        self.assertEqual(summary["client_commission"], "35.00")
        self.assertEqual(summary["total_amount"], "385.00")
        self.assertEqual(len(response.data["daily_breakdown"]), 3)
        self.assertEqual(response.data["extras_breakdown"][0]["billed_units"], 2)

    def test_leaving_before_arriving_is_rejected(self) -> None:
        response = self.client.post(
            reverse("pricing-quote"),
            self._payload(leaving_date="2025-07-01"),
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("leaving_date", response.data)

    def test_too_many_guests_is_rejected(self) -> None:
        response = self.client.post(reverse("pricing-quote"), self._payload(guests_count=9), format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_unknown_property_is_rejected(self) -> None:
        response = self.client.post(reverse("pricing-quote"), self._payload(property=999999), format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("property", response.data)

    def test_inactive_property_is_not_quoted(self) -> None:
        self.property.status = Property.Status.DRAFT
        self.property.save(update_fields=["status"])

        response = self.client.post(reverse("pricing-quote"), self._payload(), format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("property", response.data)
