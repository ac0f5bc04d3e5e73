"""
Booking Price Aggregator

Prices every night of a stay with the daily calculator, adds the selected
extras and applies commission rates to produce a ``BookingPriceResult``.

Stays follow the hotel-night convention: arriving on A and leaving on B
bills the nights [A, B).
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Iterable, List, Optional, Protocol, Sequence, Tuple

from apps.commissions.resolver import CommissionRates
from shared.domain.base import ValueObject, utcnow
from shared.domain.exceptions import ValidationError
from shared.domain.value_objects import DateRange, ZERO, to_money

from .calculator import NightPrice, PromotionLike, SpecialPriceLike, price_for_night

PER_BOOKING = 'per_booking'
PER_DAY = 'per_day'
PER_PERSON = 'per_person'
PER_DAY_PERSON = 'per_day_person'
PRICING_TYPES = (PER_BOOKING, PER_DAY, PER_PERSON, PER_DAY_PERSON)


class ExtraLike(Protocol):
    id: Any
    name: str
    price_eur: Decimal
    pricing_type: str


@dataclass(frozen=True)
class ExtraLine(ValueObject):
    """One selected extra, priced for the stay"""
    extra_id: Any
    name: str
    pricing_type: str
    quantity: int
    billed_units: int
    unit_price: Decimal
    total: Decimal

    def to_dict(self) -> dict:
        return {
            'extra_id': self.extra_id,
            'name': self.name,
            'pricing_type': self.pricing_type,
            'quantity': self.quantity,
            'billed_units': self.billed_units,
            'unit_price': str(self.unit_price),
            'total': str(self.total),
        }


@dataclass(frozen=True)
class PriceSummary(ValueObject):
    number_of_nights: int
    average_nightly_price: Decimal
    subtotal: Decimal
    total_savings: Decimal
    extras_total: Decimal
    client_commission: Decimal
    host_commission: Decimal
    platform_amount: Decimal
    total_amount: Decimal
    host_amount: Decimal
    promotion_applied: bool
    special_price_applied: bool
    commission: CommissionRates = field(default_factory=CommissionRates.zero)

    def to_dict(self) -> dict:
        return {
            'number_of_nights': self.number_of_nights,
            'average_nightly_price': str(self.average_nightly_price),
            'subtotal': str(self.subtotal),
            'total_savings': str(self.total_savings),
            'extras_total': str(self.extras_total),
            'client_commission': str(self.client_commission),
            'host_commission': str(self.host_commission),
            'platform_amount': str(self.platform_amount),
            'total_amount': str(self.total_amount),
            'host_amount': str(self.host_amount),
            'promotion_applied': self.promotion_applied,
            'special_price_applied': self.special_price_applied,
            'commission': self.commission.to_dict(),
        }


@dataclass(frozen=True)
class BookingPriceResult(ValueObject):
    daily_breakdown: Tuple[NightPrice, ...]
    extras_breakdown: Tuple[ExtraLine, ...]
    summary: PriceSummary
    calculated_at: datetime = field(default_factory=utcnow)
    currency: str = 'EUR'

    def to_dict(self) -> dict:
        return {
            'daily_breakdown': [night.to_dict() for night in self.daily_breakdown],
            'extras_breakdown': [line.to_dict() for line in self.extras_breakdown],
            'summary': self.summary.to_dict(),
            'currency': self.currency,
            'calculated_at': self.calculated_at.isoformat(),
        }


def billed_units(pricing_type: str, quantity: int, nights: int, guests: int) -> int:
    """How many times the unit price is charged for a stay"""
    if pricing_type == PER_DAY:
        return quantity * nights
    if pricing_type == PER_PERSON:
        return quantity * guests
    if pricing_type == PER_DAY_PERSON:
        return quantity * nights * guests
    return quantity


def price_extra(extra: ExtraLike, quantity: int, nights: int, guests: int) -> ExtraLine:
    if quantity < 1:
        raise ValidationError(f"Quantity of extra {extra.id} must be at least 1", field='extras')
    pricing_type = extra.pricing_type or PER_BOOKING
    if pricing_type not in PRICING_TYPES:
        raise ValidationError(f"Unknown pricing type {pricing_type!r} for extra {extra.id}", field='extras')
    units = billed_units(pricing_type, quantity, nights, guests)
    unit_price = to_money(extra.price_eur)
    return ExtraLine(
        extra_id=extra.id,
        name=extra.name,
        pricing_type=pricing_type,
        quantity=quantity,
        billed_units=units,
        unit_price=unit_price,
        total=to_money(unit_price * units),
    )


def build_booking_price(
    base_price: Decimal,
    arriving_date: date,
    leaving_date: date,
    *,
    promotions: Iterable[PromotionLike] = (),
    special_prices: Iterable[SpecialPriceLike] = (),
    extras: Sequence[Tuple[ExtraLike, int]] = (),
    guests_count: int = 1,
    commission: Optional[CommissionRates] = None,
    calculated_at: Optional[datetime] = None,
    currency: str = 'EUR',
) -> BookingPriceResult:
    """
    Assemble the full price of a stay from already fetched rows

    ``extras`` pairs each selected extra with its quantity. Commission is
    charged on ``subtotal + extras_total``: the client commission is added
    to what the guest pays, the host commission deducted from what the host
    receives.
    """
    stay = DateRange(arriving_date, leaving_date)
    base_price = Decimal(str(base_price))
    if base_price <= 0:
        raise ValidationError(f"Base price must be positive, got {base_price}", field='base_price')
    if guests_count < 1:
        raise ValidationError("guests_count must be at least 1", field='guests_count')

    promotions = list(promotions)
    special_prices = list(special_prices)
    commission = commission or CommissionRates.zero()

    daily: List[NightPrice] = [
        price_for_night(base_price, night, promotions, special_prices)
        for night in stay.nights()
    ]
    nights = len(daily)

    subtotal = sum((night.final_price for night in daily), ZERO)
    total_savings = sum((night.savings for night in daily), ZERO)

    lines = [price_extra(extra, quantity, nights, guests_count) for extra, quantity in extras]
    extras_total = sum((line.total for line in lines), ZERO)

    commissionable = subtotal + extras_total
    client_commission = commission.client_commission(commissionable)
    host_commission = commission.host_commission(commissionable)

    summary = PriceSummary(
        number_of_nights=nights,
        average_nightly_price=to_money(subtotal / nights),
        subtotal=subtotal,
        total_savings=total_savings,
        extras_total=extras_total,
        client_commission=client_commission,
        host_commission=host_commission,
        platform_amount=client_commission + host_commission,
        total_amount=commissionable + client_commission,
        host_amount=commissionable - host_commission,
        promotion_applied=any(night.promotion_applied for night in daily),
        special_price_applied=any(night.special_price_applied for night in daily),
        commission=commission,
    )
    return BookingPriceResult(
        daily_breakdown=tuple(daily),
        extras_breakdown=tuple(lines),
        summary=summary,
        calculated_at=calculated_at or utcnow(),
        currency=currency,
    )
