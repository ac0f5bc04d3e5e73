"""
Booking Domain Events

Published after commit once a booking's price is frozen or the booking
is cancelled.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Optional

from shared.domain.base import DomainEvent


@dataclass
class BookingConfirmed(DomainEvent):
    """Event: a booking was created with its pricing snapshot"""
    property_id: Optional[Any] = None
    guest_id: Optional[Any] = None
    check_in: Optional[date] = None
    check_out: Optional[date] = None
    total_amount: Decimal = Decimal('0.00')
    platform_amount: Decimal = Decimal('0.00')
    commission_source: str = 'none'


@dataclass
class BookingCancelled(DomainEvent):
    """Event: a booking was cancelled; its snapshot stays as it was"""
    property_id: Optional[Any] = None
    reason: str = ''
