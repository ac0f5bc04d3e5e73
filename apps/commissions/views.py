"""Commission configuration API views (staff only)."""

from __future__ import annotations

from rest_framework import permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.properties.serializers import PropertyTypeSerializer
from shared.domain.exceptions import NotFoundError

from . import services
from .serializers import CommissionSerializer, CommissionSettingsSerializer


class CommissionViewSet(viewsets.ModelViewSet):
    """Per property type commissions."""

    serializer_class = CommissionSerializer
    permission_classes = [permissions.IsAdminUser]
    filterset_fields = ["is_active", "property_type"]

    def get_queryset(self):  # type: ignore
        return services.get_all_commissions()

    def get_object(self):  # type: ignore
        commission = services.get_commission_by_id(self.kwargs[self.lookup_field])
        self.check_object_permissions(self.request, commission)
        return commission

    def perform_create(self, serializer):  # type: ignore
        data = dict(serializer.validated_data)
        property_type = data.pop("property_type")
        serializer.instance = services.create_commission(
            property_type.pk,
            created_by=self.request.user,
            **data,
        )

    def perform_update(self, serializer):  # type: ignore
        data = dict(serializer.validated_data)
        property_type = data.pop("property_type", None)
        if property_type is not None:
            data["property_type_id"] = property_type.pk
        serializer.instance = services.update_commission(
            serializer.instance.pk,
            actor=self.request.user,
            **data,
        )

    def perform_destroy(self, instance):  # type: ignore
        services.delete_commission(instance.pk, actor=self.request.user)

    @action(detail=True, methods=["post"])
    def toggle(self, request, pk=None):  # type: ignore
        commission = services.toggle_commission_active(pk, actor=request.user)
        return Response(self.get_serializer(commission).data, status=status.HTTP_200_OK)

    @action(detail=False, methods=["get"], url_path=r"by-type/(?P<type_id>[^/.]+)")
    def by_type(self, request, type_id=None):  # type: ignore
        commission = services.get_commission_by_type(type_id)
        if commission is None:
            raise NotFoundError(f"No commission for property type {type_id}", property_type=type_id)
        return Response(self.get_serializer(commission).data)

    @action(detail=False, methods=["get"], url_path="types-without-commission")
    def types_without_commission(self, request):  # type: ignore
        types = services.get_types_without_commission()
        return Response(PropertyTypeSerializer(types, many=True).data)


class CommissionSettingsViewSet(viewsets.ModelViewSet):
    """Global fallback commission rows; the newest active one is in force."""

    serializer_class = CommissionSettingsSerializer
    permission_classes = [permissions.IsAdminUser]

    def get_queryset(self):  # type: ignore
        return services.get_all_commission_settings()

    def get_object(self):  # type: ignore
        row = services.get_commission_settings_by_id(self.kwargs[self.lookup_field])
        self.check_object_permissions(self.request, row)
        return row

    def perform_create(self, serializer):  # type: ignore
        serializer.instance = services.create_commission_settings(
            actor=self.request.user,
            **serializer.validated_data,
        )

    def perform_update(self, serializer):  # type: ignore
        serializer.instance = services.update_commission_settings(
            serializer.instance.pk,
            actor=self.request.user,
            **serializer.validated_data,
        )

    def perform_destroy(self, instance):  # type: ignore
        services.delete_commission_settings(instance.pk, actor=self.request.user)

    @action(detail=False, methods=["get"])
    def active(self, request):  # type: ignore
        row = services.get_active_commission_settings()
        if row is None:
            raise NotFoundError("No active commission settings")
        return Response(self.get_serializer(row).data)
