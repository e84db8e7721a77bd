"""Time-to-live cache for model readings.

Values are wrapped in a :class:`CacheEntry` (payload, write time, TTL),
serialised to JSON, and handed to a :class:`~jyotish.cache.store.KeyValueStore`
under a ``jyotish_cache_`` prefix.  Expiry is checked lazily: there is no
background sweep, and a record is only deleted when a read finds it stale
or undecodable.  The key space is unbounded.

Reads never raise.  A record that is missing, expired, or cannot be
decoded is reported as a miss (``None``), and broken records are removed
so they cannot poison later reads.
"""

from __future__ import annotations

import math
import time
from typing import Any, Callable, Optional

from pydantic import BaseModel, Field, ValidationError

from jyotish.cache.store import KeyValueStore

CACHE_PREFIX = "jyotish_cache_"

INFINITE_TTL = -1
"""TTL sentinel: the entry never expires."""


def hours(value: float) -> float:
    """Convert a TTL in hours to seconds, preserving :data:`INFINITE_TTL`."""
    if value == INFINITE_TTL:
        return INFINITE_TTL
    return value * 3600


def _lifetime(ttl: float) -> float:
    """Map any TTL onto the stored form: seconds >= 0 or :data:`INFINITE_TTL`.

    ``math.inf`` means the same as :data:`INFINITE_TTL`.  Other negative
    values and NaN give an entry that is already stale.
    """
    if ttl == INFINITE_TTL or ttl == math.inf:
        return INFINITE_TTL
    if math.isnan(ttl) or ttl < 0:
        return 0.0
    return ttl


class CacheEntry(BaseModel):
    """The persisted form of one cached value.

    Attributes:
        data: The cached payload (any JSON-compatible value).
        timestamp: Wall-clock seconds when the entry was written.
        expiry: Lifetime in seconds, or :data:`INFINITE_TTL`.
    """

    data: Any
    timestamp: float
    expiry: float = Field(ge=INFINITE_TTL)

    def is_expired(self, now: float) -> bool:
        if self.expiry == INFINITE_TTL:
            return False
        return now - self.timestamp >= self.expiry


class TTLCache:
    """Key-value cache with per-entry time-to-live.

    Args:
        store: Storage substrate for the serialised entries.
        clock: Returns the current wall-clock time in seconds.  Tests pass
            a controllable clock to simulate elapsed time.
        prefix: Namespace prepended to every key inside *store*.

    Example::

        from jyotish.cache import MemoryStore, TTLCache, hours

        cache = TTLCache(MemoryStore())
        cache.put("horo_aries_daily_english", {"overview": "..."}, hours(12))
        hit = cache.get("horo_aries_daily_english")
    """

    def __init__(
        self,
        store: KeyValueStore,
        clock: Callable[[], float] = time.time,
        prefix: str = CACHE_PREFIX,
    ) -> None:
        self._store = store
        self._clock = clock
        self._prefix = prefix

    @property
    def store(self) -> KeyValueStore:
        return self._store

    def put(self, key: str, value: Any, ttl: float) -> None:
        """Store *value* under *key* for *ttl* seconds, replacing any previous entry.

        Args:
            key: Cache key, typically built by :mod:`jyotish.cache.keys`.
            value: A JSON-compatible payload.
            ttl: Lifetime in seconds, or :data:`INFINITE_TTL`.  Infinite,
                negative and NaN values are normalised rather than rejected.
        """
        entry = CacheEntry(data=value, timestamp=self._clock(), expiry=_lifetime(ttl))
        self._store.write(self._prefix + key, entry.model_dump_json())

    def get(self, key: str) -> Optional[Any]:
        """Return the value stored under *key*, or ``None`` on a miss.

        Expired and undecodable records are removed as a side effect.
        """
        raw = self._store.read(self._prefix + key)
        if raw is None:
            return None

        try:
            entry = CacheEntry.model_validate_json(raw)
        except ValidationError:
            self._store.remove(self._prefix + key)
            return None

        if entry.is_expired(self._clock()):
            self._store.remove(self._prefix + key)
            return None
        return entry.data

    def invalidate(self, key: str) -> None:
        """Remove the entry for *key*.  A missing key is not an error."""
        self._store.remove(self._prefix + key)

    def clear(self) -> None:
        """Remove every entry from the underlying store."""
        self._store.clear()

    def stats(self) -> dict[str, Any]:
        """Return ``size`` (records in the store) and, for disk stores, ``directory``."""
        result: dict[str, Any] = {"size": len(self._store)}
        directory = getattr(self._store, "directory", None)
        if directory is not None:
            result["directory"] = str(directory)
        return result
