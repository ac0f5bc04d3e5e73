"""Row locking helpers for the service layer."""

from __future__ import annotations

from django.db import transaction  # type: ignore
from django.db.utils import NotSupportedError  # type: ignore


def lock_queryset_if_possible(queryset):  # type: ignore
    """Apply select_for_update when inside transaction.atomic()."""

    if not transaction.get_connection(queryset.db).in_atomic_block:
        return queryset

    try:
        return queryset.select_for_update()
    except NotSupportedError:
        return queryset
