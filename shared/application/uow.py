"""
Unit of Work Pattern

Wraps a database transaction and makes sure domain events and
after-commit callbacks only run once the transaction has committed.
"""

import logging
from typing import Callable, List

from django.db import transaction

from shared.domain.base import DomainEvent

logger = logging.getLogger(__name__)


class DjangoUnitOfWork:
    """
    Django implementation of Unit of Work

    Usage:
        with DjangoUnitOfWork() as uow:
            Promotion.objects.filter(pk__in=ids).update(is_active=False)
            promotion = Promotion.objects.create(...)
            uow.add_event(PromotionCreated(aggregate_id=promotion.pk, ...))
            uow.on_commit(lambda: resolver.invalidate_type(type_id))
        # events and callbacks run here, after COMMIT

    If the block raises, the transaction is rolled back and the collected
    events and callbacks are discarded.
    """

    def __init__(self, using: str | None = None):
        self.using = using
        self._events: List[DomainEvent] = []
        self._callbacks: List[Callable[[], None]] = []
        self._transaction = None

    def __enter__(self):
        self._transaction = transaction.atomic(using=self.using)
        self._transaction.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        try:
            if exc_type is None:
                self.commit()
            else:
                self.rollback()
        finally:
            if self._transaction:
                self._transaction.__exit__(exc_type, exc_val, exc_tb)

    def add_event(self, event: DomainEvent):
        self._events.append(event)

    def collect_events(self, aggregate):
        """Move events from an aggregate root into this unit of work"""
        if hasattr(aggregate, 'events'):
            new_events = aggregate.events
            if new_events:
                self._events.extend(new_events)
                aggregate.clear_events()
                logger.debug(
                    f"Collected {len(new_events)} events from {aggregate.__class__.__name__}"
                )

    def on_commit(self, callback: Callable[[], None]):
        self._callbacks.append(callback)

    def commit(self):
        """Schedule event publishing and callbacks for after COMMIT"""
        events = self._events.copy()
        callbacks = self._callbacks.copy()
        self._events.clear()
        self._callbacks.clear()

        logger.debug(
            f"Committing unit of work with {len(events)} events, {len(callbacks)} callbacks"
        )

        for callback in callbacks:
            transaction.on_commit(callback, using=self.using)
        if events:
            transaction.on_commit(lambda: self._publish_events(events), using=self.using)

    def rollback(self):
        logger.warning(f"Rolling back unit of work, discarding {len(self._events)} events")
        self._events.clear()
        self._callbacks.clear()

    def _publish_events(self, events: List[DomainEvent]):
        from shared.application.message_bus import message_bus

        logger.info(f"Publishing {len(events)} domain events after commit")

        try:
            message_bus.publish_events(events)
        except Exception as e:
            # the transaction is already committed at this point
            logger.error(f"Error publishing events: {e}", exc_info=True)
