"""Tests for the nightly price calculator and the booking aggregator."""

from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import Decimal
from types import SimpleNamespace

import pytest

from apps.commissions.resolver import CommissionRates
from apps.pricing.domain.aggregator import billed_units, build_booking_price
from apps.pricing.domain.calculator import price_for_night, select_special_price
from shared.domain.exceptions import ValidationError

BASE = Decimal("100.00")
MONDAY = 0
FIXED_NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


def special(price, weekdays, start=None, end=None, pk=1, created_at=None, activate=True):
    return SimpleNamespace(
        id=pk,
        price_eur=Decimal(price),
        weekdays=weekdays,
        start_date=start,
        end_date=end,
        activate=activate,
        created_at=created_at or datetime(2025, 1, 1, tzinfo=timezone.utc),
    )


def promotion(discount, start, end, pk=1, created_at=None, is_active=True):
    return SimpleNamespace(
        id=pk,
        discount_percentage=Decimal(discount),
        start_date=start,
        end_date=end,
        is_active=is_active,
        created_at=created_at or datetime(2025, 1, 1, tzinfo=timezone.utc),
    )


def extra(pk, price, pricing_type, name="Extra"):
    return SimpleNamespace(id=pk, name=name, price_eur=Decimal(price), pricing_type=pricing_type)


def test_plain_stay_costs_base_price_every_night():
    result = build_booking_price(BASE, date(2025, 7, 1), date(2025, 7, 4), calculated_at=FIXED_NOW)

    assert [night.final_price for night in result.daily_breakdown] == [BASE] * 3
    assert result.summary.subtotal == Decimal("300.00")
    assert result.summary.total_savings == Decimal("0.00")
    assert result.summary.average_nightly_price == BASE
    assert not result.summary.promotion_applied
    assert not result.summary.special_price_applied


def test_stay_bills_arrival_night_but_not_departure_day():
    result = build_booking_price(BASE, date(2025, 7, 30), date(2025, 8, 2))
    assert [night.date for night in result.daily_breakdown] == [
        date(2025, 7, 30),
        date(2025, 7, 31),
        date(2025, 8, 1),
    ]
    assert result.summary.number_of_nights == 3


def test_promotion_over_whole_stay():
    promo = promotion("20", date(2025, 7, 1), date(2025, 7, 31))
    result = build_booking_price(BASE, date(2025, 7, 10), date(2025, 7, 13), promotions=[promo])

    assert result.summary.subtotal == Decimal("240.00")
    assert result.summary.total_savings == Decimal("60.00")
    assert result.summary.promotion_applied
    assert all(night.promotion_discount == Decimal("20") for night in result.daily_breakdown)


def test_monday_special_price_overrides_one_night():
    # 2025-07-06 is a Sunday
    monday_rate = special("80", [MONDAY])
    result = build_booking_price(BASE, date(2025, 7, 6), date(2025, 7, 9), special_prices=[monday_rate])

    finals = {night.date: night.final_price for night in result.daily_breakdown}
    assert finals == {
        date(2025, 7, 6): Decimal("100.00"),
        date(2025, 7, 7): Decimal("80.00"),
        date(2025, 7, 8): Decimal("100.00"),
    }
    assert result.summary.subtotal == Decimal("280.00")
    assert result.summary.total_savings == Decimal("20.00")
    assert result.summary.special_price_applied
    assert not result.summary.promotion_applied


def test_subtotal_is_sum_of_nights():
    promo = promotion("15", date(2025, 7, 8), date(2025, 7, 9))
    monday_rate = special("90", [MONDAY])
    result = build_booking_price(
        BASE,
        date(2025, 7, 5),
        date(2025, 7, 15),
        promotions=[promo],
        special_prices=[monday_rate],
    )
    assert result.summary.subtotal == sum(night.final_price for night in result.daily_breakdown)
    assert result.summary.total_savings == sum(night.savings for night in result.daily_breakdown)


def test_special_price_suppresses_promotion_on_same_night():
    promo = promotion("50", date(2025, 7, 1), date(2025, 7, 31))
    night = price_for_night(BASE, date(2025, 7, 7), [promo], [special("95", [MONDAY])])

    assert night.final_price == Decimal("95.00")
    assert night.special_price_applied
    assert not night.promotion_applied


def test_premium_special_price_gives_negative_savings():
    night = price_for_night(BASE, date(2025, 7, 7), special_prices=[special("150", [MONDAY])])
    assert night.savings == Decimal("-50.00")


def test_special_price_window_bounds_are_inclusive_and_optional():
    windowed = special("70", [MONDAY], start=date(2025, 7, 7), end=date(2025, 7, 14))
    assert price_for_night(BASE, date(2025, 7, 7), special_prices=[windowed]).special_price_applied
    assert price_for_night(BASE, date(2025, 7, 14), special_prices=[windowed]).special_price_applied
    assert not price_for_night(BASE, date(2025, 6, 30), special_prices=[windowed]).special_price_applied

    open_ended = special("70", [MONDAY], start=date(2025, 7, 7))
    assert price_for_night(BASE, date(2026, 1, 5), special_prices=[open_ended]).special_price_applied


def test_inactive_rows_are_ignored():
    promo = promotion("20", date(2025, 7, 1), date(2025, 7, 31), is_active=False)
    monday_rate = special("80", [MONDAY], activate=False)
    night = price_for_night(BASE, date(2025, 7, 7), [promo], [monday_rate])
    assert night.final_price == BASE


def test_narrowest_window_wins():
    everywhere = special("60", [MONDAY], pk=1)
    july = special("70", [MONDAY], start=date(2025, 7, 1), end=date(2025, 7, 31), pk=2)
    one_week = special("75", [MONDAY], start=date(2025, 7, 5), end=date(2025, 7, 11), pk=3)

    chosen = select_special_price([everywhere, july, one_week], date(2025, 7, 7))
    assert chosen is one_week


def test_equal_windows_fall_back_to_newest_then_highest_id():
    older = special("60", [MONDAY], pk=5, created_at=datetime(2025, 1, 1, tzinfo=timezone.utc))
    newer = special("65", [MONDAY], pk=4, created_at=datetime(2025, 3, 1, tzinfo=timezone.utc))
    assert select_special_price([older, newer], date(2025, 7, 7)) is newer

    twin = special("66", [MONDAY], pk=6, created_at=newer.created_at)
    assert select_special_price([newer, twin], date(2025, 7, 7)) is twin


def test_most_recent_promotion_wins():
    first = promotion("10", date(2025, 7, 1), date(2025, 7, 31), pk=1)
    second = promotion(
        "30",
        date(2025, 7, 5),
        date(2025, 7, 10),
        pk=2,
        created_at=datetime(2025, 2, 1, tzinfo=timezone.utc),
    )
    night = price_for_night(BASE, date(2025, 7, 7), [first, second])
    assert night.final_price == Decimal("70.00")


@pytest.mark.parametrize(
    "pricing_type, expected",
    [
        ("per_booking", 2),
        ("per_day", 6),
        ("per_person", 8),
        ("per_day_person", 24),
    ],
)
def test_billed_units_per_pricing_type(pricing_type, expected):
    assert billed_units(pricing_type, quantity=2, nights=3, guests=4) == expected


def test_extras_and_commission_totals():
    rates = CommissionRates(
        client_commission_rate=Decimal("0.10"),
        client_commission_fixed=Decimal("1.00"),
        host_commission_rate=Decimal("0.05"),
        source=CommissionRates.SOURCE_TYPE,
    )
    result = build_booking_price(
        BASE,
        date(2025, 7, 1),
        date(2025, 7, 4),
        extras=[(extra(1, "10", "per_day", "Breakfast"), 2)],
        guests_count=2,
        commission=rates,
    )
    summary = result.summary

    assert result.extras_breakdown[0].billed_units == 6
    assert summary.extras_total == Decimal("60.00")
    assert summary.client_commission == Decimal("37.00")
    assert summary.host_commission == Decimal("18.00")
    assert summary.total_amount == Decimal("397.00")
    assert summary.host_amount == Decimal("342.00")
    assert summary.platform_amount == Decimal("55.00")
    assert summary.commission == rates


def test_mixed_extras():
    result = build_booking_price(
        BASE,
        date(2025, 7, 1),
        date(2025, 7, 4),
        extras=[
            (extra(1, "20", "per_booking"), 2),
            (extra(2, "15", "per_person"), 1),
            (extra(3, "5", "per_day_person"), 1),
        ],
        guests_count=2,
    )
    assert [line.total for line in result.extras_breakdown] == [
        Decimal("40.00"),
        Decimal("30.00"),
        Decimal("30.00"),
    ]
    assert result.summary.extras_total == Decimal("100.00")
    assert result.summary.total_amount == Decimal("400.00")


def test_zero_commission_leaves_amounts_untouched():
    result = build_booking_price(BASE, date(2025, 7, 1), date(2025, 7, 3))
    assert result.summary.client_commission == Decimal("0.00")
    assert result.summary.host_commission == Decimal("0.00")
    assert result.summary.total_amount == result.summary.host_amount == Decimal("200.00")


def test_same_inputs_give_identical_summary():
    kwargs = dict(
        promotions=[promotion("12.5", date(2025, 7, 1), date(2025, 7, 2))],
        special_prices=[special("81.35", [MONDAY])],
        commission=CommissionRates(client_commission_rate=Decimal("0.0333")),
    )
    first = build_booking_price(BASE, date(2025, 6, 28), date(2025, 7, 9), **kwargs)
    second = build_booking_price(BASE, date(2025, 6, 28), date(2025, 7, 9), **kwargs)
    assert first.summary == second.summary
    assert first.summary.to_dict() == second.summary.to_dict()


@pytest.mark.parametrize(
    "arriving, leaving",
    [(date(2025, 7, 4), date(2025, 7, 4)), (date(2025, 7, 5), date(2025, 7, 4))],
)
def test_empty_stay_is_rejected(arriving, leaving):
    with pytest.raises(ValidationError):
        build_booking_price(BASE, arriving, leaving)


def test_non_positive_base_price_is_rejected():
    with pytest.raises(ValidationError):
        build_booking_price(Decimal("0"), date(2025, 7, 1), date(2025, 7, 2))


def test_extra_quantity_must_be_positive():
    with pytest.raises(ValidationError):
        build_booking_price(
            BASE,
            date(2025, 7, 1),
            date(2025, 7, 2),
            extras=[(extra(1, "10", "per_booking"), 0)],
        )


def test_result_serializes_money_as_strings():
    result = build_booking_price(BASE, date(2025, 7, 1), date(2025, 7, 2), calculated_at=FIXED_NOW)
    data = result.to_dict()
    assert data["summary"]["subtotal"] == "100.00"
    assert data["daily_breakdown"][0]["date"] == "2025-07-01"
    assert data["calculated_at"] == FIXED_NOW.isoformat()
