"""Audit log handlers for booking events."""

from __future__ import annotations

import logging

from .events import BookingCancelled, BookingConfirmed

logger = logging.getLogger(__name__)


def log_booking_confirmed(event: BookingConfirmed) -> None:
    logger.info(
        "Booking %s on property %s frozen: %s..%s, total %s, platform %s (%s commission)",
        event.aggregate_id,
        event.property_id,
        event.check_in,
        event.check_out,
        event.total_amount,
        event.platform_amount,
        event.commission_source,
    )


def log_booking_cancelled(event: BookingCancelled) -> None:
    logger.info(
        "Booking %s on property %s cancelled (%s)",
        event.aggregate_id,
        event.property_id,
        event.reason or "no reason given",
    )
