"""Tests for the ORM-backed quote service."""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from unittest import mock

import pytest

from apps.commissions.models import Commission, CommissionSettings
from apps.pricing.services import calculate_booking_price
from apps.promotions.models import Promotion
from apps.properties.models import Property, PropertyExtra, SpecialPrice
from shared.domain.exceptions import NotFoundError, ValidationError

pytestmark = pytest.mark.django_db


def test_quote_without_rules_or_commission(villa, resolver):
    result = calculate_booking_price(villa.pk, date(2025, 7, 1), date(2025, 7, 4), resolver=resolver)

    assert result.summary.subtotal == Decimal("300.00")
    assert result.summary.total_savings == Decimal("0.00")
    assert result.summary.client_commission == Decimal("0.00")
    assert result.summary.host_commission == Decimal("0.00")
    assert result.summary.commission.source == "none"


def test_quote_applies_promotion_and_special_price(villa, resolver):
    Promotion.objects.create(
        property=villa,
        discount_percentage=Decimal("20"),
        start_date=date(2025, 7, 1),
        end_date=date(2025, 7, 31),
    )
    SpecialPrice.objects.create(property=villa, price_eur=Decimal("80"), weekdays=[0])

    # Sunday, Monday, Tuesday
    result = calculate_booking_price(villa.pk, date(2025, 7, 6), date(2025, 7, 9), resolver=resolver)

    assert [night.final_price for night in result.daily_breakdown] == [
        Decimal("80.00"),
        Decimal("80.00"),
        Decimal("80.00"),
    ]
    assert [night.special_price_applied for night in result.daily_breakdown] == [False, True, False]
    assert result.summary.promotion_applied
    assert result.summary.special_price_applied


def test_promotion_starting_on_departure_day_is_ignored(villa, resolver):
    Promotion.objects.create(
        property=villa,
        discount_percentage=Decimal("50"),
        start_date=date(2025, 7, 4),
        end_date=date(2025, 7, 10),
    )
    result = calculate_booking_price(villa.pk, date(2025, 7, 1), date(2025, 7, 4), resolver=resolver)
    assert not result.summary.promotion_applied
    assert result.summary.subtotal == Decimal("300.00")


def test_inactive_promotion_and_special_price_are_ignored(villa, resolver):
    Promotion.objects.create(
        property=villa,
        discount_percentage=Decimal("20"),
        start_date=date(2025, 7, 1),
        end_date=date(2025, 7, 31),
        is_active=False,
    )
    SpecialPrice.objects.create(property=villa, price_eur=Decimal("10"), weekdays=list(range(7)), activate=False)

    result = calculate_booking_price(villa.pk, date(2025, 7, 1), date(2025, 7, 3), resolver=resolver)
    assert result.summary.subtotal == Decimal("200.00")


def test_quote_uses_type_commission(villa, villa_type, resolver):
    CommissionSettings.objects.create(client_commission_rate=Decimal("0.50"))
    Commission.objects.create(
        title="Villas",
        property_type=villa_type,
        client_commission_rate=Decimal("0.10"),
        host_commission_rate=Decimal("0.05"),
        host_commission_fixed=Decimal("2.00"),
    )

    result = calculate_booking_price(villa.pk, date(2025, 7, 1), date(2025, 7, 3), resolver=resolver)

    assert result.summary.commission.source == "type"
    assert result.summary.client_commission == Decimal("20.00")
    assert result.summary.host_commission == Decimal("12.00")
    assert result.summary.total_amount == Decimal("220.00")
    assert result.summary.host_amount == Decimal("188.00")


def test_untyped_property_uses_global_settings(host, resolver):
    untyped = Property.objects.create(owner=host, title="Bungalow", base_price=Decimal("50.00"))
    CommissionSettings.objects.create(client_commission_rate=Decimal("0.10"))

    result = calculate_booking_price(untyped.pk, date(2025, 7, 1), date(2025, 7, 2), resolver=resolver)
    assert result.summary.commission.source == "global"
    assert result.summary.client_commission == Decimal("5.00")


def test_extras_are_priced_and_unknown_ones_skipped(villa, host, resolver, caplog):
    breakfast = PropertyExtra.objects.create(
        property=villa,
        name="Breakfast",
        price_eur=Decimal("8"),
        pricing_type=PropertyExtra.PricingType.PER_DAY_PERSON,
    )
    retired = PropertyExtra.objects.create(property=villa, name="Old shuttle", price_eur=Decimal("30"), is_active=False)
    other = Property.objects.create(owner=host, title="Elsewhere", base_price=Decimal("40.00"))
    foreign = PropertyExtra.objects.create(property=other, name="Kayak", price_eur=Decimal("12"))

    with caplog.at_level(logging.INFO, logger="apps.pricing.services"):
        result = calculate_booking_price(
            villa.pk,
            date(2025, 7, 1),
            date(2025, 7, 3),
            extras=[
                {"extra": breakfast.pk, "quantity": 1},
                {"extra": retired.pk, "quantity": 1},
                (foreign.pk, 1),
                {"extra": 999999, "quantity": 2},
            ],
            guests_count=3,
            resolver=resolver,
        )

    assert [line.extra_id for line in result.extras_breakdown] == [breakfast.pk]
    assert result.summary.extras_total == Decimal("48.00")
    assert "skipped" in caplog.text


def test_extra_quantity_below_one_is_rejected(villa, resolver):
    breakfast = PropertyExtra.objects.create(property=villa, name="Breakfast", price_eur=Decimal("8"))
    with pytest.raises(ValidationError):
        calculate_booking_price(
            villa.pk,
            date(2025, 7, 1),
            date(2025, 7, 2),
            extras=[{"extra": breakfast.pk, "quantity": 0}],
            resolver=resolver,
        )


def test_unknown_property_raises_not_found(resolver):
    with pytest.raises(NotFoundError):
        calculate_booking_price(424242, date(2025, 7, 1), date(2025, 7, 2), resolver=resolver)


def test_leaving_before_arriving_raises(villa, resolver):
    with pytest.raises(ValidationError):
        calculate_booking_price(villa.pk, date(2025, 7, 2), date(2025, 7, 2), resolver=resolver)


def test_commission_failure_quotes_without_commission(villa, caplog):
    broken = mock.Mock()
    broken.resolve_commission.side_effect = RuntimeError("cache down")

    with caplog.at_level(logging.WARNING, logger="apps.pricing.services"):
        result = calculate_booking_price(villa.pk, date(2025, 7, 1), date(2025, 7, 2), resolver=broken)

    assert result.summary.client_commission == Decimal("0.00")
    assert result.summary.total_amount == Decimal("100.00")
    assert "Commission lookup failed" in caplog.text


def test_repeated_quotes_have_identical_summary(villa, villa_type, resolver):
    Commission.objects.create(title="Villas", property_type=villa_type, client_commission_rate=Decimal("0.07"))
    first = calculate_booking_price(villa.pk, date(2025, 7, 1), date(2025, 7, 8), resolver=resolver)
    second = calculate_booking_price(villa.pk, date(2025, 7, 1), date(2025, 7, 8), resolver=resolver)
    assert first.summary.to_dict() == second.summary.to_dict()


def test_property_without_currency_uses_default_setting(villa, resolver, settings):
    settings.PRICING_CURRENCY = "MGA"
    Property.objects.filter(pk=villa.pk).update(currency="")

    result = calculate_booking_price(villa.pk, date(2025, 7, 1), date(2025, 7, 2), resolver=resolver)

    assert result.currency == "MGA"
