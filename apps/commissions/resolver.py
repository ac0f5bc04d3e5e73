"""
Commission Resolver

Answers "which commission rates apply to this property type?":
active per-type ``Commission`` row, else the most recent active
``CommissionSettings`` row, else zero.

Resolved rates are cached per type and under a separate global key for
``COMMISSION_CACHE_TTL`` seconds. The default cache is per-process, so
after a configuration change other workers may keep serving the old rates
until their entry expires. Bookings freeze whatever was resolved when they
were confirmed, so that window never rewrites a stored booking.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Optional

from django.conf import settings  # type: ignore
from django.db import DatabaseError  # type: ignore

from shared.domain.base import ValueObject
from shared.domain.value_objects import ZERO, to_money

from .cache import CommissionCache, DjangoCommissionCache

logger = logging.getLogger(__name__)

ZERO_RATE = Decimal('0')


@dataclass(frozen=True)
class CommissionRates(ValueObject):
    """Rates and fixed amounts from one commission source."""
    host_commission_rate: Decimal = ZERO_RATE
    host_commission_fixed: Decimal = ZERO
    client_commission_rate: Decimal = ZERO_RATE
    client_commission_fixed: Decimal = ZERO
    source: str = 'none'

    SOURCE_TYPE = 'type'
    SOURCE_GLOBAL = 'global'
    SOURCE_NONE = 'none'

    @classmethod
    def zero(cls) -> 'CommissionRates':
        return cls()

    @classmethod
    def from_record(cls, record: Any, source: str) -> 'CommissionRates':
        return cls(
            host_commission_rate=Decimal(record.host_commission_rate),
            host_commission_fixed=to_money(record.host_commission_fixed),
            client_commission_rate=Decimal(record.client_commission_rate),
            client_commission_fixed=to_money(record.client_commission_fixed),
            source=source,
        )

    @property
    def is_zero(self) -> bool:
        return not any((
            self.host_commission_rate,
            self.host_commission_fixed,
            self.client_commission_rate,
            self.client_commission_fixed,
        ))

    def client_commission(self, amount: Decimal) -> Decimal:
        """Surcharge added to what the guest pays"""
        return to_money(amount * self.client_commission_rate + self.client_commission_fixed)

    def host_commission(self, amount: Decimal) -> Decimal:
        """Deduction taken from what the host receives"""
        return to_money(amount * self.host_commission_rate + self.host_commission_fixed)

    def to_dict(self) -> dict:
        return {
            'host_commission_rate': str(self.host_commission_rate),
            'host_commission_fixed': str(self.host_commission_fixed),
            'client_commission_rate': str(self.client_commission_rate),
            'client_commission_fixed': str(self.client_commission_fixed),
            'source': self.source,
        }


class CommissionResolver:
    """Cached commission lookup with explicit invalidation."""

    GLOBAL_KEY = 'global'

    def __init__(self, cache: Optional[CommissionCache] = None, ttl: Optional[int] = None):
        self.cache: CommissionCache = cache if cache is not None else DjangoCommissionCache()
        self.ttl = ttl if ttl is not None else getattr(settings, 'COMMISSION_CACHE_TTL', 300)

    @staticmethod
    def type_key(type_id: Any) -> str:
        return f"type:{type_id}"

    def resolve_commission(self, type_id: Optional[Any]) -> CommissionRates:
        """
        Rates for a property type; a property without a type gets the global rates.

        A database failure yields zero rates, which are not cached so the
        next call tries again.
        """
        if type_id is None:
            return self.resolve_global()

        key = self.type_key(type_id)
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug(f"Commission cache hit for {key}")
            return cached

        logger.debug(f"Commission cache miss for {key}")
        try:
            rates = self._load_type(type_id)
        except DatabaseError as e:
            logger.warning(f"Commission lookup failed for type {type_id}, using zero rates: {e}")
            return CommissionRates.zero()

        if rates is None:
            logger.warning(f"No active commission for property type {type_id}, falling back to global settings")
            rates = self.resolve_global()
        self.cache.set(key, rates, self.ttl)
        return rates

    def resolve_global(self) -> CommissionRates:
        cached = self.cache.get(self.GLOBAL_KEY)
        if cached is not None:
            return cached

        try:
            rates = self._load_global()
        except DatabaseError as e:
            logger.warning(f"Global commission lookup failed, using zero rates: {e}")
            return CommissionRates.zero()

        if rates is None:
            rates = CommissionRates.zero()
        self.cache.set(self.GLOBAL_KEY, rates, self.ttl)
        return rates

    def invalidate_type(self, type_id: Any):
        logger.debug(f"Invalidating commission cache for type {type_id}")
        self.cache.invalidate(self.type_key(type_id))

    def invalidate_global(self):
        logger.debug("Invalidating global commission cache entry")
        self.cache.invalidate(self.GLOBAL_KEY)

    def invalidate_all(self):
        logger.debug("Clearing commission cache")
        self.cache.clear()

    def _load_type(self, type_id: Any) -> Optional[CommissionRates]:
        from .models import Commission

        record = Commission.objects.filter(property_type_id=type_id, is_active=True).first()
        if record is None:
            return None
        return CommissionRates.from_record(record, CommissionRates.SOURCE_TYPE)

    def _load_global(self) -> Optional[CommissionRates]:
        from .models import CommissionSettings

        record = CommissionSettings.objects.filter(is_active=True).order_by('-created_at', '-id').first()
        if record is None:
            return None
        return CommissionRates.from_record(record, CommissionRates.SOURCE_GLOBAL)


_default_resolver: Optional[CommissionResolver] = None


def get_commission_resolver() -> CommissionResolver:
    """Process-wide resolver backed by the Django cache"""
    global _default_resolver
    if _default_resolver is None:
        _default_resolver = CommissionResolver()
    return _default_resolver


def resolve_commission(type_id: Optional[Any]) -> CommissionRates:
    return get_commission_resolver().resolve_commission(type_id)
