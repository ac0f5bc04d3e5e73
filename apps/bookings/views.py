"""API views for the booking domain."""

from __future__ import annotations

from rest_framework import mixins, permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from . import services
from .models import Booking
from .serializers import BookingCancelSerializer, BookingCreateSerializer, BookingSerializer


class IsBookingStakeholder(permissions.BasePermission):
    """Guests, property owners and staff can see a booking."""

    def has_object_permission(self, request, view, obj: Booking):  # type: ignore
        user = request.user
        if not user.is_authenticated:
            return False
        if getattr(user, "is_staff", False) or getattr(user, "is_superuser", False):
            return True
        return obj.guest_id == user.id or obj.property.owner_id == user.id


class BookingViewSet(
    mixins.CreateModelMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """Confirm, list and cancel bookings."""

    serializer_class = BookingSerializer
    permission_classes = [permissions.IsAuthenticated, IsBookingStakeholder]
    filterset_fields = ["status", "property"]

    def get_queryset(self):  # type: ignore
        return services.bookings_for_user(self.request.user)

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = BookingCreateSerializer(data=request.data, context=self.get_serializer_context())
        serializer.is_valid(raise_exception=True)
        booking = services.confirm_booking(request.user, **serializer.to_quote_kwargs())
        read_serializer = BookingSerializer(booking, context=self.get_serializer_context())
        headers = self.get_success_headers(read_serializer.data)
        return Response(read_serializer.data, status=status.HTTP_201_CREATED, headers=headers)

    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):  # type: ignore
        booking: Booking = self.get_object()  # type: ignore
        user = request.user
        if not (user.is_staff or booking.guest_id == user.id):
            return Response(status=status.HTTP_403_FORBIDDEN)
        serializer = BookingCancelSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        services.cancel_booking(booking, serializer.validated_data["reason"])
        return Response(BookingSerializer(booking, context=self.get_serializer_context()).data)
