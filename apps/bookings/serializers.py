"""Serializers for the booking domain."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from apps.pricing.serializers import QuoteRequestSerializer

from .models import SNAPSHOT_FIELDS, Booking


class BookingCreateSerializer(QuoteRequestSerializer):
    """Booking request from a guest; same shape as a quote request."""


class BookingSerializer(serializers.ModelSerializer):
    """Booking with its frozen pricing snapshot."""

    guest_id = serializers.ReadOnlyField(source="guest.id")
    property_id = serializers.ReadOnlyField(source="property.id")
    property_title = serializers.ReadOnlyField(source="property.title")

    class Meta:
        model = Booking
        fields = [
            "id",
            "booking_code",
            "guest_id",
            "property_id",
            "property_title",
            "check_in",
            "check_out",
            "guests_count",
            "status",
            "currency",
            *SNAPSHOT_FIELDS,
            "cancelled_at",
            "cancellation_reason",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class BookingCancelSerializer(serializers.Serializer):
    reason = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
