"""Serializers for promotions."""

from __future__ import annotations

from decimal import Decimal

from rest_framework import serializers  # type: ignore

from apps.properties.models import Property

from .models import Promotion


class PromotionSerializer(serializers.ModelSerializer):
    property_title = serializers.ReadOnlyField(source="property.title")
    created_by = serializers.ReadOnlyField(source="created_by_id")
    replaced_by = serializers.ReadOnlyField(source="replaced_by_id")

    class Meta:
        model = Promotion
        fields = [
            "id",
            "property",
            "property_title",
            "discount_percentage",
            "start_date",
            "end_date",
            "is_active",
            "created_by",
            "replaced_by",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class PromotionProposalSerializer(serializers.Serializer):
    property = serializers.PrimaryKeyRelatedField(queryset=Property.objects.all())
    discount_percentage = serializers.DecimalField(
        max_digits=5,
        decimal_places=2,
        min_value=Decimal("0"),
        max_value=Decimal("100"),
    )
    start_date = serializers.DateField()
    end_date = serializers.DateField()

    def validate_property(self, value: Property) -> Property:
        user = self.context["request"].user
        if not (user.is_staff or value.owner_id == user.id):
            raise serializers.ValidationError("You can only promote your own properties.")
        return value

    def validate(self, attrs):  # type: ignore
        if attrs["start_date"] > attrs["end_date"]:
            raise serializers.ValidationError({"end_date": "End date cannot be before start date."})
        return attrs

    def to_promotion_data(self) -> dict:
        data = dict(self.validated_data)
        data["property"] = data["property"].pk
        data.pop("overlapping_ids", None)
        return data


class ConfirmOverlapSerializer(PromotionProposalSerializer):
    overlapping_ids = serializers.ListField(
        child=serializers.IntegerField(min_value=1),
        allow_empty=True,
    )


class PromotionUpdateSerializer(serializers.Serializer):
    discount_percentage = serializers.DecimalField(
        max_digits=5,
        decimal_places=2,
        min_value=Decimal("0"),
        max_value=Decimal("100"),
        required=False,
    )
    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)
