"""Promotion API views."""

from __future__ import annotations

from rest_framework import mixins, permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from . import services
from .models import Promotion
from .serializers import (
    ConfirmOverlapSerializer,
    PromotionProposalSerializer,
    PromotionSerializer,
    PromotionUpdateSerializer,
)


class IsPromotionOwnerOrAdmin(permissions.BasePermission):
    """Hosts manage promotions of their own properties, staff manage all."""

    def has_object_permission(self, request, view, obj: Promotion):  # type: ignore
        user = request.user
        if getattr(user, "is_staff", False) or getattr(user, "is_superuser", False):
            return True
        return obj.property.owner_id == user.id


class PromotionViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """Propose, confirm, update and cancel promotions."""

    serializer_class = PromotionSerializer
    permission_classes = [permissions.IsAuthenticated, IsPromotionOwnerOrAdmin]
    filterset_fields = ["property", "is_active"]

    def get_queryset(self):  # type: ignore
        return services.promotions_for_host(self.request.user)

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = PromotionProposalSerializer(data=request.data, context=self.get_serializer_context())
        serializer.is_valid(raise_exception=True)
        data = serializer.to_promotion_data()
        outcome = services.propose_promotion(
            data["property"],
            data["discount_percentage"],
            data["start_date"],
            data["end_date"],
            created_by=request.user,
        )
        if outcome.conflict:
            return Response(
                {
                    "detail": "This promotion overlaps active promotions. Confirm to replace them.",
                    "state": outcome.proposal.state.value,
                    "overlapping_promotions": PromotionSerializer(outcome.overlapping, many=True).data,
                },
                status=status.HTTP_409_CONFLICT,
            )
        return Response(PromotionSerializer(outcome.promotion).data, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=["post"], url_path="confirm-overlap")
    def confirm_overlap(self, request):  # type: ignore
        serializer = ConfirmOverlapSerializer(data=request.data, context=self.get_serializer_context())
        serializer.is_valid(raise_exception=True)
        promotion = services.confirm_overlap(
            serializer.to_promotion_data(),
            serializer.validated_data["overlapping_ids"],
            created_by=request.user,
        )
        return Response(PromotionSerializer(promotion).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request, *args, **kwargs):  # type: ignore
        promotion = self.get_object()
        serializer = PromotionUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        promotion = services.update_promotion(promotion.pk, **serializer.validated_data)
        return Response(PromotionSerializer(promotion).data)

    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):  # type: ignore
        promotion = self.get_object()
        promotion = services.cancel_promotion(promotion.pk)
        return Response(PromotionSerializer(promotion).data)
