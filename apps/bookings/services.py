"""Domain services for booking workflows."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Iterable, Optional

from django.db.models import Q  # type: ignore

from apps.commissions.resolver import CommissionResolver
from apps.pricing.services import ExtraRequest, calculate_booking_price
from apps.properties.models import Property
from shared.application.uow import DjangoUnitOfWork
from shared.domain.exceptions import ConflictError, NotFoundError, ValidationError
from shared.infrastructure.locking import lock_queryset_if_possible

from .events import BookingCancelled, BookingConfirmed
from .models import Booking

logger = logging.getLogger(__name__)


def ensure_property_is_available(
    property_obj,
    check_in: date,
    check_out: date,
    *,
    exclude_booking_id=None,
) -> None:
    """Ensure no pending or confirmed booking overlaps ``[check_in, check_out)``."""

    overlapping_filter = Q(check_in__lt=check_out) & Q(check_out__gt=check_in)

    bookings_qs = Booking.objects.filter(
        property=property_obj,
        status__in=Booking.BLOCKING_STATUSES,
    ).filter(overlapping_filter)

    if exclude_booking_id is not None:
        bookings_qs = bookings_qs.exclude(pk=exclude_booking_id)

    bookings_qs = lock_queryset_if_possible(bookings_qs)

    if bookings_qs.exists():
        raise ConflictError(
            "The property is not available for the selected dates.",
            property=property_obj.pk,
            check_in=check_in.isoformat(),
            check_out=check_out.isoformat(),
        )


def _lock_property(product_id: Any) -> Property:
    try:
        return lock_queryset_if_possible(Property.objects.filter(pk=product_id)).get()
    except (Property.DoesNotExist, ValueError, TypeError) as e:
        raise NotFoundError(f"Property {product_id} not found", property=product_id) from e


def confirm_booking(
    guest,
    product_id: Any,
    arriving_date: date,
    leaving_date: date,
    extras: Iterable[ExtraRequest] = (),
    guests_count: int = 1,
    *,
    resolver: Optional[CommissionResolver] = None,
) -> Booking:
    """
    Book ``product_id`` for ``guest`` and freeze the price.

    The quote is computed again here rather than trusted from the client.
    Raises ``ConflictError`` when the stay overlaps another pending or
    confirmed booking of the property.
    """
    extras = list(extras or ())
    result = calculate_booking_price(
        product_id,
        arriving_date,
        leaving_date,
        extras=extras,
        guests_count=guests_count,
        resolver=resolver,
    )

    with DjangoUnitOfWork() as uow:
        # serializes concurrent confirmations on the same property
        property_obj = _lock_property(product_id)
        if property_obj.status != Property.Status.ACTIVE:
            raise ValidationError(
                "The property is not open for booking.",
                field="property",
                property=property_obj.pk,
            )
        ensure_property_is_available(property_obj, arriving_date, leaving_date)

        booking = Booking(
            guest=guest,
            property=property_obj,
            check_in=arriving_date,
            check_out=leaving_date,
            guests_count=guests_count,
            status=Booking.Status.CONFIRMED,
        )
        booking.apply_price(result)
        booking.save()

        uow.add_event(BookingConfirmed(
            aggregate_id=booking.pk,
            property_id=property_obj.pk,
            guest_id=getattr(guest, "pk", None),
            check_in=arriving_date,
            check_out=leaving_date,
            total_amount=booking.total_amount,
            platform_amount=booking.platform_amount,
            commission_source=result.summary.commission.source,
        ))

    logger.info(f"Booking {booking.booking_code} confirmed for property {property_obj.pk}")
    return booking


def cancel_booking(booking: Booking, reason: str = "") -> Booking:
    """Cancel a pending or confirmed booking; the pricing snapshot is kept."""
    if not booking.is_cancellable:
        raise ConflictError(
            f"A {booking.status} booking cannot be cancelled",
            booking=booking.pk,
            status=booking.status,
        )

    with DjangoUnitOfWork() as uow:
        booking.mark_cancelled(reason)
        uow.add_event(BookingCancelled(
            aggregate_id=booking.pk,
            property_id=booking.property_id,
            reason=reason,
        ))

    logger.info(f"Booking {booking.booking_code} cancelled")
    return booking


def bookings_for_user(user: Any):
    """Staff see every booking, hosts the bookings of their properties, guests their own."""
    qs = Booking.objects.select_related("property", "guest", "property__owner")
    if getattr(user, "is_staff", False) or getattr(user, "is_superuser", False):
        return qs
    return qs.filter(Q(guest=user) | Q(property__owner=user))
