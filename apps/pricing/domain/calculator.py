"""
Daily Price Calculator

Effective price of one night for a property:

1. an active special price whose weekdays and optional window match the
   night replaces the base price outright;
2. otherwise an active promotion covering the night takes its percentage
   off the base price;
3. otherwise the base price applies.

Pure functions over plain values. Callers fetch promotions and special
prices once per stay and pass them in for every night.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Iterable, Optional, Protocol, Sequence, Tuple

from shared.domain.base import ValueObject
from shared.domain.value_objects import DateWindow, ZERO, to_money

HUNDRED = Decimal('100')


class SpecialPriceLike(Protocol):
    id: Any
    price_eur: Decimal
    weekdays: Sequence[int]
    start_date: Optional[date]
    end_date: Optional[date]
    activate: bool
    created_at: Any


class PromotionLike(Protocol):
    id: Any
    discount_percentage: Decimal
    start_date: date
    end_date: date
    is_active: bool
    created_at: Any


@dataclass(frozen=True)
class NightPrice(ValueObject):
    """Price of a single night of a stay"""
    date: date
    base_price: Decimal
    final_price: Decimal
    promotion_applied: bool = False
    special_price_applied: bool = False
    promotion_discount: Optional[Decimal] = None
    special_price_value: Optional[Decimal] = None

    @property
    def savings(self) -> Decimal:
        return self.base_price - self.final_price

    def to_dict(self) -> dict:
        return {
            'date': self.date.isoformat(),
            'base_price': str(self.base_price),
            'final_price': str(self.final_price),
            'promotion_applied': self.promotion_applied,
            'special_price_applied': self.special_price_applied,
            'savings': str(self.savings),
            'promotion_discount': (
                str(self.promotion_discount) if self.promotion_discount is not None else None
            ),
            'special_price_value': (
                str(self.special_price_value) if self.special_price_value is not None else None
            ),
        }


def special_price_matches(special: SpecialPriceLike, night: date) -> bool:
    if not special.activate:
        return False
    if night.weekday() not in {int(day) for day in (special.weekdays or ())}:
        return False
    return DateWindow(special.start_date, special.end_date).contains(night)


def _special_price_rank(special: SpecialPriceLike) -> Tuple:
    # narrowest window first (open bounds sort last), then newest, then highest id
    width = DateWindow(special.start_date, special.end_date).width()
    return (
        width is None,
        width or 0,
        _descending(special.created_at),
        _descending(special.id),
    )


def _descending(value: Any) -> Any:
    if value is None:
        return (1, 0)
    if hasattr(value, 'timestamp'):
        return (0, -value.timestamp())
    if isinstance(value, (int, float, Decimal)):
        return (0, -value)
    return (0, 0)


def select_special_price(
    special_prices: Iterable[SpecialPriceLike],
    night: date,
) -> Optional[SpecialPriceLike]:
    """
    The special price in force on ``night``

    Several matches are resolved by the narrowest explicit date window (a
    window with an open bound counts as infinitely wide), then by the most
    recently created row, then by the highest id.
    """
    matching = [special for special in special_prices if special_price_matches(special, night)]
    if not matching:
        return None
    return min(matching, key=_special_price_rank)


def promotion_matches(promotion: PromotionLike, night: date) -> bool:
    return bool(promotion.is_active) and promotion.start_date <= night <= promotion.end_date


def select_promotion(
    promotions: Iterable[PromotionLike],
    night: date,
) -> Optional[PromotionLike]:
    """The promotion covering ``night``; the most recently created one if several do"""
    matching = [promotion for promotion in promotions if promotion_matches(promotion, night)]
    if not matching:
        return None
    return min(matching, key=lambda promotion: (_descending(promotion.created_at), _descending(promotion.id)))


def price_for_night(
    base_price: Decimal,
    night: date,
    promotions: Iterable[PromotionLike] = (),
    special_prices: Iterable[SpecialPriceLike] = (),
) -> NightPrice:
    """
    Effective price of ``night``

    A special price is a fixed override and suppresses promotions for
    that night. ``base_price`` must be positive; callers validate it.
    """
    base_price = to_money(base_price)

    special = select_special_price(special_prices, night)
    if special is not None:
        special_value = to_money(special.price_eur)
        return NightPrice(
            date=night,
            base_price=base_price,
            final_price=special_value,
            special_price_applied=True,
            special_price_value=special_value,
        )

    promotion = select_promotion(promotions, night)
    if promotion is not None:
        discount = Decimal(str(promotion.discount_percentage))
        final_price = to_money(base_price * (HUNDRED - discount) / HUNDRED)
        return NightPrice(
            date=night,
            base_price=base_price,
            final_price=max(final_price, ZERO),
            promotion_applied=True,
            promotion_discount=discount,
        )

    return NightPrice(date=night, base_price=base_price, final_price=base_price)
