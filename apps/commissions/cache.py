"""Cache backends for resolved commission rates."""

from __future__ import annotations

import threading
import time
from typing import Any, Callable, Dict, List, Optional, Protocol, Tuple

from django.conf import settings  # type: ignore
from django.core.cache import caches  # type: ignore


class CommissionCache(Protocol):
    """What the resolver needs from a cache: keyed values with a TTL."""

    def get(self, key: str) -> Optional[Any]: ...

    def set(self, key: str, value: Any, ttl: int) -> None: ...

    def invalidate(self, key: str) -> None: ...

    def clear(self) -> None: ...


class DjangoCommissionCache:
    """Commission cache on top of Django's cache framework.

    Keys are namespaced with ``COMMISSION_CACHE_PREFIX`` and recorded in a
    registry entry so ``clear()`` only drops commission entries and leaves
    the rest of the cache alone. With the local-memory backend entries are
    per-process; configure a Redis cache to share them between workers.
    """

    def __init__(self, alias: Optional[str] = None, prefix: Optional[str] = None):
        self.alias = alias or getattr(settings, "COMMISSION_CACHE_ALIAS", "default")
        self.prefix = prefix or getattr(settings, "COMMISSION_CACHE_PREFIX", "commissions")

    @property
    def backend(self):  # type: ignore
        return caches[self.alias]

    @property
    def registry_key(self) -> str:
        return f"{self.prefix}:keys"

    def _key(self, key: str) -> str:
        return f"{self.prefix}:{key}"

    def _register_key(self, full_key: str) -> None:
        keys: List[str] | None = self.backend.get(self.registry_key)
        if keys is None:
            self.backend.set(self.registry_key, [full_key], None)
            return
        if full_key in keys:
            return
        keys.append(full_key)
        self.backend.set(self.registry_key, keys, None)

    def get(self, key: str) -> Optional[Any]:
        return self.backend.get(self._key(key))

    def set(self, key: str, value: Any, ttl: int) -> None:
        full_key = self._key(key)
        self.backend.set(full_key, value, ttl)
        self._register_key(full_key)

    def invalidate(self, key: str) -> None:
        self.backend.delete(self._key(key))

    def clear(self) -> None:
        keys: List[str] | None = self.backend.get(self.registry_key)
        if keys:
            self.backend.delete_many(keys)
        self.backend.delete(self.registry_key)


class InMemoryCommissionCache:
    """Dict-backed TTL cache for tests and callers without Django caches.

    Expiry is checked when an entry is read; ``set`` replaces the whole
    entry under a lock so readers never see a half-written value.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: Dict[str, Tuple[float, Any]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expires_at, value = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                return None
            return value

    def set(self, key: str, value: Any, ttl: int) -> None:
        with self._lock:
            self._entries[key] = (self._clock() + ttl, value)

    def invalidate(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None


__all__ = [
    "CommissionCache",
    "DjangoCommissionCache",
    "InMemoryCommissionCache",
]
