"""
Common Value Objects

Value objects used across multiple domains:
- DateRange: a stay, from arrival (inclusive) to departure (exclusive)
- DateWindow: a closed date window whose bounds may be left open
- to_money: quantization of monetary amounts to cents
"""

from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterator, Optional, Union

from shared.domain.base import ValueObject
from shared.domain.exceptions import ValidationError

CENT = Decimal('0.01')
ZERO = Decimal('0.00')


def to_money(value: Union[Decimal, int, float, str, None]) -> Decimal:
    """Convert a number to a Decimal rounded half-up to cents"""
    if value is None:
        return ZERO
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class DateRange(ValueObject):
    """
    Date range value object

    Represents a range from start_date (inclusive) to end_date (exclusive).
    Used for stays: the arrival night is billed, the departure day is not.
    """
    start_date: date
    end_date: date

    def __post_init__(self):
        if self.start_date >= self.end_date:
            raise ValidationError(
                f"Start date ({self.start_date}) must be before end date ({self.end_date})",
                field='leaving_date',
            )

    def overlaps_with(self, other: 'DateRange') -> bool:
        """
        Check if this range overlaps with another

        Note: end_date is exclusive, so back-to-back stays don't overlap.
        """
        if not isinstance(other, DateRange):
            raise TypeError("Can only check overlap with another DateRange")
        return (self.start_date < other.end_date and
                self.end_date > other.start_date)

    def contains(self, check_date: date) -> bool:
        return self.start_date <= check_date < self.end_date

    def nights(self) -> Iterator[date]:
        """Yield every billed night of the stay, in order"""
        current = self.start_date
        while current < self.end_date:
            yield current
            current += timedelta(days=1)

    def __len__(self) -> int:
        """Number of nights"""
        return (self.end_date - self.start_date).days

    def __str__(self):
        return f"{self.start_date.strftime('%d.%m.%Y')} - {self.end_date.strftime('%d.%m.%Y')}"

    def __repr__(self):
        return f"DateRange({self.start_date}, {self.end_date})"


@dataclass(frozen=True)
class DateWindow(ValueObject):
    """
    Closed date window [start_date, end_date]

    Both bounds are inclusive. A bound left as None is open-ended.
    Promotions always have both bounds; special prices may have none.
    """
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    def __post_init__(self):
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise ValidationError(
                f"Start date ({self.start_date}) must not be after end date ({self.end_date})",
                field='end_date',
            )

    def contains(self, check_date: date) -> bool:
        if self.start_date is not None and check_date < self.start_date:
            return False
        if self.end_date is not None and check_date > self.end_date:
            return False
        return True

    def overlaps_with(self, other: 'DateWindow') -> bool:
        """
        Closed-interval overlap: self.start <= other.end AND self.end >= other.start

        Adjacent windows ([1, 5] and [6, 9]) do not overlap.
        """
        starts_before_other_ends = (
            self.start_date is None or other.end_date is None
            or self.start_date <= other.end_date
        )
        ends_after_other_starts = (
            self.end_date is None or other.start_date is None
            or self.end_date >= other.start_date
        )
        return starts_before_other_ends and ends_after_other_starts

    @property
    def is_bounded(self) -> bool:
        return self.start_date is not None and self.end_date is not None

    def width(self) -> Optional[int]:
        """Number of days covered, or None for an open-ended window"""
        if not self.is_bounded:
            return None
        return (self.end_date - self.start_date).days + 1

    def __str__(self):
        start = self.start_date.isoformat() if self.start_date else '...'
        end = self.end_date.isoformat() if self.end_date else '...'
        return f"[{start}, {end}]"
