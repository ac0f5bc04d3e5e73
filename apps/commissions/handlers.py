"""Message bus handlers for commission events."""

from __future__ import annotations

import logging

from .events import CommissionConfigurationChanged

logger = logging.getLogger(__name__)


def log_commission_change(event: CommissionConfigurationChanged) -> None:
    logger.info(
        "Commission configuration %s (types=%s, global=%s, actor=%s)",
        event.action,
        list(event.property_type_ids),
        event.affects_global,
        event.actor_id,
    )
