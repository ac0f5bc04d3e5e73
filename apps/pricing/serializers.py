"""Serializers for the quote endpoint."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from apps.properties.models import Property


class ExtraSelectionSerializer(serializers.Serializer):
    extra = serializers.IntegerField(min_value=1)
    quantity = serializers.IntegerField(min_value=1, default=1)


class QuoteRequestSerializer(serializers.Serializer):
    property = serializers.PrimaryKeyRelatedField(
        queryset=Property.objects.filter(status=Property.Status.ACTIVE),
    )
    arriving_date = serializers.DateField()
    leaving_date = serializers.DateField()
    guests_count = serializers.IntegerField(min_value=1, default=1)
    extras = ExtraSelectionSerializer(many=True, required=False, default=list)

    def validate(self, attrs):  # type: ignore
        if attrs["leaving_date"] <= attrs["arriving_date"]:
            raise serializers.ValidationError(
                {"leaving_date": "Leaving date must be after arriving date."}
            )
        property_obj = attrs["property"]
        if attrs["guests_count"] > property_obj.max_guests:
            raise serializers.ValidationError(
                {"guests_count": f"This property hosts at most {property_obj.max_guests} guests."}
            )
        return attrs

    def to_quote_kwargs(self) -> dict:
        data = self.validated_data
        return {
            "product_id": data["property"].pk,
            "arriving_date": data["arriving_date"],
            "leaving_date": data["leaving_date"],
            "guests_count": data["guests_count"],
            "extras": [dict(item) for item in data.get("extras") or []],
        }
