"""
Promotion Domain

PromotionTerms: what a host asks for (discount and inclusive date range)
PromotionProposal: the propose / confirm workflow as an explicit state machine

    PROPOSED ──> CONFIRMED                      no overlap, promotion created
    PROPOSED ──> CONFLICT_PRESENTED ──> CONFIRMED   overlaps replaced on confirm
                                   └──> ABORTED     overlap set changed, or dropped
    PROPOSED ──> ABORTED                         rejected before any write

Events are collected on the proposal and published by the unit of work
after the transaction commits.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Optional, Tuple

from shared.domain.base import Aggregate, DomainEvent, ValueObject
from shared.domain.exceptions import ConflictError, ValidationError
from shared.domain.value_objects import DateWindow, to_money

HUNDRED = Decimal('100')


class ProposalState(str, Enum):
    PROPOSED = 'proposed'
    CONFLICT_PRESENTED = 'conflict_presented'
    CONFIRMED = 'confirmed'
    ABORTED = 'aborted'


ALLOWED_TRANSITIONS = {
    ProposalState.PROPOSED: {
        ProposalState.CONFLICT_PRESENTED,
        ProposalState.CONFIRMED,
        ProposalState.ABORTED,
    },
    ProposalState.CONFLICT_PRESENTED: {
        ProposalState.CONFIRMED,
        ProposalState.ABORTED,
    },
    ProposalState.CONFIRMED: set(),
    ProposalState.ABORTED: set(),
}


@dataclass(frozen=True)
class PromotionTerms(ValueObject):
    """Validated promotion input"""
    property_id: Any
    discount_percentage: Decimal
    start_date: date
    end_date: date

    def __post_init__(self):
        try:
            discount = Decimal(str(self.discount_percentage))
        except (InvalidOperation, ValueError) as e:
            raise ValidationError(
                "Discount percentage must be a number",
                field='discount_percentage',
            ) from e
        if not Decimal('0') <= discount <= HUNDRED:
            raise ValidationError(
                f"Discount percentage must be between 0 and 100, got {discount}",
                field='discount_percentage',
            )
        object.__setattr__(self, 'discount_percentage', discount)
        # raises on start_date > end_date
        DateWindow(self.start_date, self.end_date)

    @property
    def window(self) -> DateWindow:
        return DateWindow(self.start_date, self.end_date)

    def discounted(self, price: Decimal) -> Decimal:
        return to_money(price * (HUNDRED - self.discount_percentage) / HUNDRED)

    def to_dict(self) -> dict:
        return {
            'property': self.property_id,
            'discount_percentage': str(self.discount_percentage),
            'start_date': self.start_date.isoformat(),
            'end_date': self.end_date.isoformat(),
        }


# ===== Events =====

@dataclass
class PromotionCreated(DomainEvent):
    """Event: a promotion became active on a property"""
    property_id: Optional[Any] = None
    discount_percentage: Decimal = Decimal('0')
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    created_by_id: Optional[Any] = None


@dataclass
class PromotionsReplaced(DomainEvent):
    """Event: overlapping promotions were deactivated by a confirmed proposal"""
    property_id: Optional[Any] = None
    replaced_ids: Tuple[Any, ...] = field(default_factory=tuple)


@dataclass
class PromotionCancelled(DomainEvent):
    """Event: a promotion was switched off by its host or by expiry"""
    property_id: Optional[Any] = None
    reason: str = 'cancelled'


# ===== Aggregate =====

@dataclass(eq=False)
class PromotionProposal(Aggregate):
    """
    One attempt to put a promotion in place

    The proposal never touches the database; services drive it and
    persist the outcome inside a unit of work.
    """
    terms: Optional[PromotionTerms] = None
    created_by_id: Optional[Any] = None
    state: ProposalState = ProposalState.PROPOSED
    overlapping_ids: Tuple[Any, ...] = field(default_factory=tuple)
    promotion_id: Optional[Any] = None
    abort_reason: str = ''

    def __post_init__(self):
        if self.terms is None:
            raise ValidationError("A proposal needs promotion terms")

    @property
    def is_final(self) -> bool:
        return not ALLOWED_TRANSITIONS[self.state]

    def can_transition_to(self, target: ProposalState) -> bool:
        return target in ALLOWED_TRANSITIONS[self.state]

    def _transition(self, target: ProposalState):
        if not self.can_transition_to(target):
            raise ConflictError(
                f"Cannot move promotion proposal from {self.state.value} to {target.value}",
                state=self.state.value,
            )
        self.state = target

    def present_conflict(self, overlapping_ids):
        """Overlaps found: the caller has to confirm replacing them"""
        overlapping_ids = tuple(overlapping_ids)
        if not overlapping_ids:
            raise ValidationError("A conflict needs at least one overlapping promotion")
        self._transition(ProposalState.CONFLICT_PRESENTED)
        self.overlapping_ids = overlapping_ids

    def confirm(self, promotion_id: Any, replaced_ids=()):
        """Record the created promotion and the ones it replaced"""
        replaced_ids = tuple(replaced_ids)
        self._transition(ProposalState.CONFIRMED)
        self.promotion_id = promotion_id

        terms = self.terms
        if replaced_ids:
            self.add_event(PromotionsReplaced(
                aggregate_id=promotion_id,
                property_id=terms.property_id,
                replaced_ids=replaced_ids,
            ))
        self.add_event(PromotionCreated(
            aggregate_id=promotion_id,
            property_id=terms.property_id,
            discount_percentage=terms.discount_percentage,
            start_date=terms.start_date,
            end_date=terms.end_date,
            created_by_id=self.created_by_id,
        ))

    def abort(self, reason: str):
        self._transition(ProposalState.ABORTED)
        self.abort_reason = reason
