"""Quote service.

Fetches everything a stay needs (property, promotions, special prices,
extras, commission rates) once and hands it to the pure aggregator.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Iterable, List, Mapping, Optional, Tuple, Union

from django.conf import settings  # type: ignore
from django.utils import timezone  # type: ignore

from apps.commissions.resolver import CommissionRates, CommissionResolver, get_commission_resolver
from apps.promotions.models import Promotion
from apps.properties.models import Property, PropertyExtra, SpecialPrice
from shared.domain.exceptions import NotFoundError, ValidationError

from .domain.aggregator import BookingPriceResult, build_booking_price

logger = logging.getLogger(__name__)

ExtraRequest = Union[Mapping[str, Any], Tuple[Any, int]]


def _get_property(product_id: Any) -> Property:
    try:
        return Property.objects.select_related("property_type").get(pk=product_id)
    except (Property.DoesNotExist, ValueError, TypeError) as e:
        raise NotFoundError(f"Property {product_id} not found", property=product_id) from e


def _normalize_extras(extras: Iterable[ExtraRequest]) -> List[Tuple[Any, int]]:
    """Accept ``{"extra": id, "quantity": n}`` mappings or ``(id, n)`` pairs."""
    requested = []
    for item in extras or ():
        if isinstance(item, Mapping):
            extra_id = item.get("extra", item.get("id"))
            quantity = item.get("quantity", 1)
        else:
            extra_id, quantity = item
        try:
            quantity = int(quantity)
        except (TypeError, ValueError) as e:
            raise ValidationError("Extra quantity must be an integer", field="extras") from e
        if quantity < 1:
            raise ValidationError(
                f"Quantity of extra {extra_id} must be at least 1",
                field="extras",
            )
        requested.append((extra_id, quantity))
    return requested


def _load_extras(property_obj: Property, requested: List[Tuple[Any, int]]) -> List[Tuple[PropertyExtra, int]]:
    if not requested:
        return []
    ids = {str(extra_id) for extra_id, _ in requested}
    catalog = {
        str(extra.pk): extra
        for extra in PropertyExtra.objects.filter(
            property=property_obj,
            is_active=True,
            pk__in=[extra_id for extra_id, _ in requested],
        )
    }
    selected = []
    for extra_id, quantity in requested:
        extra = catalog.get(str(extra_id))
        if extra is None:
            logger.info(f"Extra {extra_id} is unknown or inactive for property {property_obj.pk}, skipped")
            continue
        selected.append((extra, quantity))
    if len(catalog) < len(ids):
        logger.debug(f"Quote for property {property_obj.pk} ignored {len(ids) - len(catalog)} extras")
    return selected


def _resolve_rates(property_obj: Property, resolver: CommissionResolver) -> CommissionRates:
    try:
        return resolver.resolve_commission(property_obj.property_type_id)
    except Exception as e:
        logger.warning(
            f"Commission lookup failed for property {property_obj.pk}, quoting without commission: {e}"
        )
        return CommissionRates.zero()


def calculate_booking_price(
    product_id: Any,
    arriving_date: date,
    leaving_date: date,
    extras: Iterable[ExtraRequest] = (),
    guests_count: int = 1,
    resolver: Optional[CommissionResolver] = None,
) -> BookingPriceResult:
    """
    Price a stay of ``product_id`` from ``arriving_date`` (first night) to
    ``leaving_date`` (not billed).

    Raises ``NotFoundError`` for an unknown property and ``ValidationError``
    for an empty stay, a non-positive base price or a bad extra quantity.
    """
    if arriving_date is None or leaving_date is None:
        raise ValidationError("arriving_date and leaving_date are required", field="arriving_date")
    if leaving_date <= arriving_date:
        raise ValidationError(
            f"Leaving date ({leaving_date}) must be after arriving date ({arriving_date})",
            field="leaving_date",
        )

    property_obj = _get_property(product_id)
    if property_obj.base_price is None or property_obj.base_price <= 0:
        raise ValidationError(
            f"Property {property_obj.pk} has no valid base price",
            field="base_price",
        )

    requested = _normalize_extras(extras)
    resolver = resolver or get_commission_resolver()

    # the last night is leaving_date - 1, so promotions starting on
    # leaving_date do not touch the stay
    promotions = list(
        Promotion.objects.active()
        .filter(property=property_obj, start_date__lt=leaving_date, end_date__gte=arriving_date)
    )
    special_prices = list(SpecialPrice.objects.filter(property=property_obj, activate=True))
    selected_extras = _load_extras(property_obj, requested)
    rates = _resolve_rates(property_obj, resolver)

    result = build_booking_price(
        property_obj.base_price,
        arriving_date,
        leaving_date,
        promotions=promotions,
        special_prices=special_prices,
        extras=selected_extras,
        guests_count=guests_count,
        commission=rates,
        calculated_at=timezone.now(),
        currency=property_obj.currency or settings.PRICING_CURRENCY,
    )
    logger.debug(
        f"Quoted property {property_obj.pk} {arriving_date}..{leaving_date}: "
        f"total {result.summary.total_amount} ({rates.source} commission)"
    )
    return result
