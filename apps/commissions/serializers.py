"""Serializers for commission configuration."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import Commission, CommissionSettings

RATE_FIELDS = [
    "host_commission_rate",
    "host_commission_fixed",
    "client_commission_rate",
    "client_commission_fixed",
]


class CommissionSerializer(serializers.ModelSerializer):
    property_type_name = serializers.ReadOnlyField(source="property_type.name")
    created_by = serializers.ReadOnlyField(source="created_by_id")

    class Meta:
        model = Commission
        fields = [
            "id",
            "title",
            "description",
            "property_type",
            "property_type_name",
            *RATE_FIELDS,
            "is_active",
            "created_by",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["created_by", "created_at", "updated_at"]
        # one-per-type is enforced by the service layer (409 instead of 400)
        extra_kwargs = {"property_type": {"validators": []}}


class CommissionSettingsSerializer(serializers.ModelSerializer):
    class Meta:
        model = CommissionSettings
        fields = ["id", *RATE_FIELDS, "is_active", "created_at", "updated_at"]
        read_only_fields = ["created_at", "updated_at"]
