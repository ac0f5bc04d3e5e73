"""Celery tasks for the promotions domain."""

from __future__ import annotations

import logging

from celery import shared_task  # type: ignore

from .services import deactivate_expired_promotions as deactivate_expired

logger = logging.getLogger(__name__)


# ============================================================================
# PERIODIC TASKS (run by Celery Beat, see config/celery.py)
# ============================================================================

@shared_task(name="promotions.deactivate_expired_promotions")
def deactivate_expired_promotions() -> dict[str, int]:
    """
    Switch off promotions whose end date has passed.

    The rows are kept for audit, only ``is_active`` changes.

    Returns:
        dict: {"deactivated": number of promotions switched off}
    """
    deactivated = deactivate_expired()
    if deactivated:
        logger.info("Expired promotions deactivated: %s", deactivated)
    return {"deactivated": deactivated}
