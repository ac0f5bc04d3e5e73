"""Property API views."""

from __future__ import annotations

from django.db.models import Q  # type: ignore
from django.shortcuts import get_object_or_404  # type: ignore
from django_filters.rest_framework import DjangoFilterBackend  # type: ignore
from rest_framework import permissions, viewsets  # type: ignore
from rest_framework.filters import OrderingFilter  # type: ignore

from .models import Property, PropertyExtra, PropertyType, SpecialPrice
from .serializers import (
    PropertyExtraSerializer,
    PropertySerializer,
    PropertyTypeSerializer,
    PropertyWriteSerializer,
    SpecialPriceSerializer,
)


def is_staff(user) -> bool:  # type: ignore
    return bool(getattr(user, "is_staff", False) or getattr(user, "is_superuser", False))


class IsPropertyOwnerOrAdmin(permissions.BasePermission):
    """Lets the owner and staff manage a property, everyone else may only read."""

    def has_permission(self, request, view):  # type: ignore
        if request.method in permissions.SAFE_METHODS:
            return True
        return bool(request.user and request.user.is_authenticated)

    def has_object_permission(self, request, view, obj):  # type: ignore
        if request.method in permissions.SAFE_METHODS and getattr(view, "allow_public_read", False):
            return True
        user = request.user
        if not user.is_authenticated:
            return False
        if is_staff(user):
            return True
        # special prices and extras are owned through their property
        property_obj = obj if isinstance(obj, Property) else obj.property
        return property_obj.owner_id == user.id


class PropertyViewSet(viewsets.ModelViewSet):
    """Listings: public read of active ones, owners manage their own."""

    queryset = Property.objects.select_related("owner", "property_type").prefetch_related(
        "extras", "special_prices"
    )
    permission_classes = [IsPropertyOwnerOrAdmin]
    filter_backends = [DjangoFilterBackend, OrderingFilter]
    filterset_fields = ["status", "property_type"]
    ordering_fields = ["base_price", "created_at"]
    allow_public_read = True

    def get_queryset(self):  # type: ignore
        qs = super().get_queryset()
        user = self.request.user
        if not user.is_authenticated:
            return qs.filter(status=Property.Status.ACTIVE)
        if is_staff(user):
            return qs
        if self.action in {"list", "retrieve"}:
            return qs.filter(Q(status=Property.Status.ACTIVE) | Q(owner=user))
        return qs.filter(owner=user)

    def get_serializer_class(self):  # type: ignore
        if self.action in {"create", "update", "partial_update"}:
            return PropertyWriteSerializer
        return PropertySerializer


class PropertyTypeViewSet(viewsets.ModelViewSet):
    """CRUD over property types (staff only, readable by everyone)."""

    queryset = PropertyType.objects.all()
    serializer_class = PropertyTypeSerializer

    def get_permissions(self):  # type: ignore
        if self.action in {"list", "retrieve"}:
            return [permissions.AllowAny()]
        return [permissions.IsAdminUser()]


class PropertyPricingMixin:
    """Resolves the parent property from the URL and checks ownership."""

    property_lookup_url_kwarg = "property_id"
    permission_classes = [permissions.IsAuthenticated, IsPropertyOwnerOrAdmin]

    def initial(self, request, *args, **kwargs):  # type: ignore
        super().initial(request, *args, **kwargs)
        property_id = kwargs.get(self.property_lookup_url_kwarg)
        self.property_object = get_object_or_404(Property, pk=property_id)
        self.check_object_permissions(request, self.property_object)

    def get_property(self) -> Property:
        return self.property_object

    def perform_create(self, serializer):  # type: ignore
        serializer.save(property=self.get_property())


class SpecialPriceViewSet(PropertyPricingMixin, viewsets.ModelViewSet):
    """Weekday special prices of one property."""

    serializer_class = SpecialPriceSerializer
    queryset = SpecialPrice.objects.all()

    def get_queryset(self):  # type: ignore
        return super().get_queryset().filter(property=self.get_property())


class PropertyExtraViewSet(PropertyPricingMixin, viewsets.ModelViewSet):
    """Extras catalog of one property."""

    serializer_class = PropertyExtraSerializer
    queryset = PropertyExtra.objects.all()

    def get_queryset(self):  # type: ignore
        return super().get_queryset().filter(property=self.get_property())
