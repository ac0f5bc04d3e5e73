"""Tests for the promotion conflict manager."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from unittest import mock

import pytest

from apps.commissions.models import Commission
from apps.promotions import services
from apps.promotions.domain import ProposalState
from apps.promotions.models import Promotion
from apps.promotions.tasks import deactivate_expired_promotions
from shared.domain.exceptions import ConflictError, NotFoundError, ValidationError

pytestmark = pytest.mark.django_db


def add_promotion(property_obj, start, end, discount="10", **extra):
    return Promotion.objects.create(
        property=property_obj,
        discount_percentage=Decimal(discount),
        start_date=start,
        end_date=end,
        **extra,
    )


@pytest.mark.parametrize(
    "start, end, expected",
    [
        (date(2025, 7, 1), date(2025, 7, 5), True),
        (date(2025, 7, 10), date(2025, 7, 12), True),
        (date(2025, 7, 11), date(2025, 7, 12), False),
        (date(2025, 6, 1), date(2025, 7, 4), True),
        (date(2025, 6, 1), date(2025, 7, 3), False),
        (date(2025, 7, 5), date(2025, 7, 6), True),
    ],
)
def test_overlap_uses_closed_intervals(villa, start, end, expected):
    existing = add_promotion(villa, date(2025, 7, 4), date(2025, 7, 10))
    overlapping = services.find_overlapping_promotions(villa.pk, start, end)
    assert (overlapping == [existing]) is expected


def test_overlap_ignores_inactive_and_other_properties(villa, host):
    from apps.properties.models import Property

    other = Property.objects.create(owner=host, title="Other", base_price=Decimal("50.00"))
    add_promotion(villa, date(2025, 7, 1), date(2025, 7, 10), is_active=False)
    add_promotion(other, date(2025, 7, 1), date(2025, 7, 10))
    assert services.find_overlapping_promotions(villa.pk, date(2025, 7, 1), date(2025, 7, 10)) == []


def test_promotion_window_is_closed(villa):
    promotion = add_promotion(villa, date(2025, 7, 1), date(2025, 7, 10))
    assert promotion.window.contains(date(2025, 7, 10))
    assert not promotion.window.contains(date(2025, 7, 11))


def test_propose_without_overlap_creates(villa, host):
    outcome = services.propose_promotion(villa.pk, Decimal("20"), date(2025, 7, 1), date(2025, 7, 10), host)
    assert outcome.created
    assert outcome.proposal.state == ProposalState.CONFIRMED
    assert outcome.promotion.is_active
    assert outcome.promotion.created_by == host


def test_propose_with_overlap_writes_nothing(villa, host):
    existing = add_promotion(villa, date(2025, 7, 5), date(2025, 7, 15))
    outcome = services.propose_promotion(villa.pk, Decimal("20"), date(2025, 7, 1), date(2025, 7, 10), host)

    assert outcome.conflict
    assert outcome.promotion is None
    assert outcome.overlapping == [existing]
    assert outcome.proposal.overlapping_ids == (existing.pk,)
    assert Promotion.objects.count() == 1


def test_propose_validates_input(villa):
    with pytest.raises(ValidationError):
        services.propose_promotion(villa.pk, Decimal("120"), date(2025, 7, 1), date(2025, 7, 10))
    with pytest.raises(ValidationError):
        services.propose_promotion(villa.pk, Decimal("10"), date(2025, 7, 10), date(2025, 7, 1))
    with pytest.raises(NotFoundError):
        services.propose_promotion(9999, Decimal("10"), date(2025, 7, 1), date(2025, 7, 10))


def test_confirm_overlap_replaces_and_creates(villa, host):
    first = add_promotion(villa, date(2025, 7, 1), date(2025, 7, 5))
    second = add_promotion(villa, date(2025, 7, 8), date(2025, 7, 12))
    data = {
        "property": villa.pk,
        "discount_percentage": Decimal("25"),
        "start_date": date(2025, 7, 3),
        "end_date": date(2025, 7, 9),
    }

    promotion = services.confirm_overlap(data, [first.pk, second.pk], created_by=host)

    first.refresh_from_db()
    second.refresh_from_db()
    assert promotion.is_active
    assert not first.is_active and first.replaced_by == promotion
    assert not second.is_active and second.replaced_by == promotion
    assert services.find_overlapping_promotions(villa.pk, date(2025, 7, 1), date(2025, 7, 12)) == [promotion]


def test_confirm_overlap_replaces_listed_ids_that_no_longer_overlap(villa, host):
    overlapping = add_promotion(villa, date(2025, 7, 1), date(2025, 7, 10))
    listed_elsewhere = add_promotion(villa, date(2025, 8, 1), date(2025, 8, 10))
    data = {
        "property": villa.pk,
        "discount_percentage": Decimal("25"),
        "start_date": date(2025, 7, 5),
        "end_date": date(2025, 7, 20),
    }

    promotion = services.confirm_overlap(data, [overlapping.pk, listed_elsewhere.pk], created_by=host)

    overlapping.refresh_from_db()
    listed_elsewhere.refresh_from_db()
    assert not overlapping.is_active and overlapping.replaced_by == promotion
    assert not listed_elsewhere.is_active and listed_elsewhere.replaced_by == promotion
    assert list(Promotion.objects.active()) == [promotion]


def test_confirm_overlap_aborts_on_new_overlap(villa):
    listed = add_promotion(villa, date(2025, 7, 1), date(2025, 7, 5))
    sneaked_in = add_promotion(villa, date(2025, 7, 8), date(2025, 7, 9))
    data = {
        "property": villa.pk,
        "discount_percentage": Decimal("25"),
        "start_date": date(2025, 7, 3),
        "end_date": date(2025, 7, 9),
    }

    with pytest.raises(ConflictError) as excinfo:
        services.confirm_overlap(data, [listed.pk])

    ids = [item["id"] for item in excinfo.value.payload["overlapping_promotions"]]
    assert ids == [listed.pk, sneaked_in.pk]
    listed.refresh_from_db()
    assert listed.is_active
    assert Promotion.objects.count() == 2


def test_confirm_overlap_rolls_back_when_deactivation_fails(villa):
    existing = add_promotion(villa, date(2025, 7, 1), date(2025, 7, 5))
    data = {
        "property": villa.pk,
        "discount_percentage": Decimal("25"),
        "start_date": date(2025, 7, 3),
        "end_date": date(2025, 7, 9),
    }

    with mock.patch(
        "apps.promotions.services.Promotion.objects.filter",
        side_effect=[Promotion.objects.none(), RuntimeError("database went away")],
    ):
        with pytest.raises(RuntimeError):
            services.confirm_overlap(data, [existing.pk])

    existing.refresh_from_db()
    assert existing.is_active
    assert Promotion.objects.count() == 1


def test_confirm_overlap_rejects_foreign_ids(villa, host):
    from apps.properties.models import Property

    other = Property.objects.create(owner=host, title="Other", base_price=Decimal("50.00"))
    foreign = add_promotion(other, date(2025, 7, 1), date(2025, 7, 5))
    data = {
        "property": villa.pk,
        "discount_percentage": Decimal("25"),
        "start_date": date(2025, 7, 3),
        "end_date": date(2025, 7, 9),
    }
    with pytest.raises(ValidationError):
        services.confirm_overlap(data, [foreign.pk])
    foreign.refresh_from_db()
    assert foreign.is_active


def test_commission_guard_rejects_loss_making_discount(villa, villa_type):
    Commission.objects.create(
        title="Villas",
        property_type=villa_type,
        host_commission_rate=Decimal("0.01"),
        client_commission_rate=Decimal("0.01"),
    )
    # 95% off 100 EUR -> 5 EUR night -> 0.05 + 0.05 platform revenue
    with pytest.raises(ValidationError) as excinfo:
        services.propose_promotion(villa.pk, Decimal("95"), date(2025, 7, 1), date(2025, 7, 10))
    assert excinfo.value.payload["platform_revenue"] == "0.10"
    assert not Promotion.objects.exists()

    # 50% off -> 50 EUR night -> 1.00 platform revenue
    outcome = services.propose_promotion(villa.pk, Decimal("50"), date(2025, 7, 1), date(2025, 7, 10))
    assert outcome.created


def test_commission_guard_ignores_types_without_own_commission(villa):
    outcome = services.propose_promotion(villa.pk, Decimal("100"), date(2025, 7, 1), date(2025, 7, 10))
    assert outcome.created


def test_update_checks_overlaps_excluding_itself(villa):
    promotion = add_promotion(villa, date(2025, 7, 1), date(2025, 7, 5))
    add_promotion(villa, date(2025, 7, 10), date(2025, 7, 12))

    updated = services.update_promotion(promotion.pk, end_date=date(2025, 7, 9), discount_percentage=Decimal("30"))
    assert updated.end_date == date(2025, 7, 9)
    assert updated.discount_percentage == Decimal("30")

    with pytest.raises(ConflictError):
        services.update_promotion(promotion.pk, end_date=date(2025, 7, 10))


def test_cancel_is_a_soft_delete(villa):
    promotion = add_promotion(villa, date(2025, 7, 1), date(2025, 7, 5))
    services.cancel_promotion(promotion.pk)
    promotion.refresh_from_db()
    assert not promotion.is_active
    with pytest.raises(ConflictError):
        services.update_promotion(promotion.pk, discount_percentage=Decimal("5"))


def test_expired_promotions_are_deactivated(villa):
    expired = add_promotion(villa, date(2025, 6, 1), date(2025, 6, 30))
    current = add_promotion(villa, date(2025, 7, 1), date(2025, 7, 31))

    assert services.deactivate_expired_promotions(today=date(2025, 7, 1)) == 1
    expired.refresh_from_db()
    current.refresh_from_db()
    assert not expired.is_active
    assert current.is_active


def test_expiry_task_runs(villa):
    add_promotion(villa, date(2000, 1, 1), date(2000, 1, 2))
    assert deactivate_expired_promotions.apply().get() == {"deactivated": 1}
