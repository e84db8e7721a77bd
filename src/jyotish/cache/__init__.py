"""Reading cache for jyotish.

This package provides :class:`TTLCache`, a time-to-live cache that sits
between the CLI and the generative model so that repeated requests for the
same reading do not cost another model call.  The cache is layered on an
injected :class:`KeyValueStore`; :class:`DiskStore` persists entries with
:mod:`diskcache`, :class:`MemoryStore` keeps them in-process.

Cache keys are built by :mod:`jyotish.cache.keys`; lifetimes come from the
``cache.ttl_hours`` table of :class:`~jyotish.models.CacheConfig`.
"""

from jyotish.cache import keys
from jyotish.cache.cache import CACHE_PREFIX, INFINITE_TTL, CacheEntry, TTLCache, hours
from jyotish.cache.preferences import Preferences
from jyotish.cache.store import DiskStore, KeyValueStore, MemoryStore, NullStore

__all__ = [
    "CACHE_PREFIX",
    "INFINITE_TTL",
    "CacheEntry",
    "DiskStore",
    "KeyValueStore",
    "MemoryStore",
    "NullStore",
    "Preferences",
    "TTLCache",
    "hours",
    "keys",
]
