"""Tests for the promotion proposal state machine."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from apps.promotions.domain import (
    PromotionCreated,
    PromotionProposal,
    PromotionsReplaced,
    PromotionTerms,
    ProposalState,
)
from shared.domain.exceptions import ConflictError, ValidationError


def make_terms(**overrides) -> PromotionTerms:
    values = {
        "property_id": 1,
        "discount_percentage": Decimal("20"),
        "start_date": date(2025, 7, 1),
        "end_date": date(2025, 7, 10),
    }
    values.update(overrides)
    return PromotionTerms(**values)


@pytest.mark.parametrize("discount", [Decimal("-1"), Decimal("100.01"), "abc"])
def test_terms_reject_invalid_discount(discount):
    with pytest.raises(ValidationError):
        make_terms(discount_percentage=discount)


def test_terms_reject_reversed_dates():
    with pytest.raises(ValidationError):
        make_terms(start_date=date(2025, 7, 10), end_date=date(2025, 7, 1))


def test_terms_accept_single_day_and_bounds():
    assert make_terms(start_date=date(2025, 7, 1), end_date=date(2025, 7, 1)).window.width() == 1
    assert make_terms(discount_percentage=0).discount_percentage == Decimal("0")
    assert make_terms(discount_percentage="100").discounted(Decimal("80.00")) == Decimal("0.00")


def test_terms_discounted_price():
    assert make_terms(discount_percentage=Decimal("15")).discounted(Decimal("99.99")) == Decimal("84.99")


def test_direct_confirmation_emits_created_event():
    proposal = PromotionProposal(terms=make_terms(), created_by_id=7)
    proposal.confirm(42)

    assert proposal.state == ProposalState.CONFIRMED
    assert proposal.is_final
    (event,) = proposal.events
    assert isinstance(event, PromotionCreated)
    assert event.aggregate_id == 42
    assert event.created_by_id == 7


def test_conflict_then_confirmation_emits_replaced_event():
    proposal = PromotionProposal(terms=make_terms())
    proposal.present_conflict([3, 4])
    assert proposal.state == ProposalState.CONFLICT_PRESENTED
    assert proposal.overlapping_ids == (3, 4)

    proposal.confirm(5, replaced_ids=[3, 4])
    replaced, created = proposal.events
    assert isinstance(replaced, PromotionsReplaced)
    assert replaced.replaced_ids == (3, 4)
    assert isinstance(created, PromotionCreated)


def test_conflict_can_be_aborted():
    proposal = PromotionProposal(terms=make_terms())
    proposal.present_conflict([3])
    proposal.abort("overlap set changed")
    assert proposal.state == ProposalState.ABORTED
    assert proposal.abort_reason == "overlap set changed"
    assert proposal.events == []


def test_final_states_reject_transitions():
    confirmed = PromotionProposal(terms=make_terms())
    confirmed.confirm(1)
    with pytest.raises(ConflictError):
        confirmed.confirm(2)
    with pytest.raises(ConflictError):
        confirmed.abort("late")

    aborted = PromotionProposal(terms=make_terms())
    aborted.abort("rejected")
    with pytest.raises(ConflictError):
        aborted.present_conflict([1])


def test_conflict_needs_overlaps_and_proposal_needs_terms():
    with pytest.raises(ValidationError):
        PromotionProposal(terms=make_terms()).present_conflict([])
    with pytest.raises(ValidationError):
        PromotionProposal()
