"""Audit log handlers for promotion events."""

from __future__ import annotations

import logging

from .domain import PromotionCancelled, PromotionCreated, PromotionsReplaced

logger = logging.getLogger(__name__)


def log_promotion_created(event: PromotionCreated) -> None:
    logger.info(
        "Promotion %s active on property %s: -%s%% from %s to %s (by %s)",
        event.aggregate_id,
        event.property_id,
        event.discount_percentage,
        event.start_date,
        event.end_date,
        event.created_by_id,
    )


def log_promotions_replaced(event: PromotionsReplaced) -> None:
    logger.info(
        "Promotions %s on property %s replaced by %s",
        list(event.replaced_ids),
        event.property_id,
        event.aggregate_id,
    )


def log_promotion_cancelled(event: PromotionCancelled) -> None:
    logger.info(
        "Promotion %s on property %s deactivated (%s)",
        event.aggregate_id,
        event.property_id,
        event.reason,
    )
