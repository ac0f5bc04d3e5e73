"""Serializers for the properties domain."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import Property, PropertyExtra, PropertyType, SpecialPrice


class PropertyTypeSerializer(serializers.ModelSerializer):
    class Meta:
        model = PropertyType
        fields = ["id", "slug", "name", "description", "is_hotel_type"]
        read_only_fields = ["slug"]


class PropertyExtraSerializer(serializers.ModelSerializer):
    pricing_type_display = serializers.ReadOnlyField(source="get_pricing_type_display")

    class Meta:
        model = PropertyExtra
        fields = [
            "id",
            "name",
            "description",
            "price_eur",
            "price_mga",
            "pricing_type",
            "pricing_type_display",
            "is_active",
            "created_at",
        ]
        read_only_fields = ["created_at", "pricing_type_display"]


class SpecialPriceSerializer(serializers.ModelSerializer):
    weekdays = serializers.ListField(
        child=serializers.ChoiceField(choices=SpecialPrice.Weekday.choices),
        allow_empty=False,
    )

    class Meta:
        model = SpecialPrice
        fields = [
            "id",
            "price_eur",
            "price_mga",
            "weekdays",
            "start_date",
            "end_date",
            "activate",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["created_at", "updated_at"]

    def validate_weekdays(self, value):  # type: ignore
        return sorted(set(value))

    def validate(self, attrs):  # type: ignore
        start = attrs.get("start_date", getattr(self.instance, "start_date", None))
        end = attrs.get("end_date", getattr(self.instance, "end_date", None))
        if start and end and start > end:
            raise serializers.ValidationError("End date cannot be before start date.")
        return attrs


class PropertySerializer(serializers.ModelSerializer):
    """Read serializer with the pricing inputs nested."""

    owner_id = serializers.ReadOnlyField(source="owner.id")
    property_type = PropertyTypeSerializer(read_only=True)
    extras = PropertyExtraSerializer(many=True, read_only=True)
    special_prices = SpecialPriceSerializer(many=True, read_only=True)

    class Meta:
        model = Property
        fields = [
            "id",
            "owner_id",
            "title",
            "slug",
            "description",
            "status",
            "property_type",
            "base_price",
            "price_mga",
            "currency",
            "max_guests",
            "extras",
            "special_prices",
            "published_at",
            "created_at",
            "updated_at",
        ]


class PropertyWriteSerializer(serializers.ModelSerializer):
    property_type = serializers.PrimaryKeyRelatedField(
        queryset=PropertyType.objects.all(),
        allow_null=True,
        required=False,
    )

    class Meta:
        model = Property
        fields = [
            "title",
            "description",
            "property_type",
            "base_price",
            "price_mga",
            "max_guests",
        ]

    def create(self, validated_data):  # type: ignore
        request = self.context["request"]
        validated_data["owner"] = request.user
        return super().create(validated_data)

    def to_representation(self, instance):  # type: ignore
        return PropertySerializer(instance, context=self.context).data
