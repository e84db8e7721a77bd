"""Key-value substrates the reading cache is layered on.

:class:`~jyotish.cache.cache.TTLCache` never talks to a storage medium
directly.  It is handed an object satisfying :class:`KeyValueStore` --
plain string reads, writes and removals -- and owns the serialisation
format on top.  Three stores ship:

* :class:`DiskStore` -- persistent, backed by a :mod:`diskcache`
  directory under the XDG cache dir.  Used by the CLI.
* :class:`MemoryStore` -- a ``dict``.  Used by tests and by callers that
  want a per-process cache.
* :class:`NullStore` -- forgets everything.  Installed when the cache is
  disabled in :class:`~jyotish.models.CacheConfig`.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Protocol

import diskcache


class KeyValueStore(Protocol):
    """Synchronous string-to-string storage."""

    def read(self, key: str) -> Optional[str]: ...

    def write(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...

    def clear(self) -> None: ...

    def __len__(self) -> int: ...


class MemoryStore:
    """In-process store backed by a ``dict``.

    The underlying mapping is exposed as :attr:`data` so tests can plant
    corrupt records.
    """

    def __init__(self) -> None:
        self.data: dict[str, str] = {}

    def read(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def write(self, key: str, value: str) -> None:
        self.data[key] = value

    def remove(self, key: str) -> None:
        self.data.pop(key, None)

    def clear(self) -> None:
        self.data.clear()

    def __len__(self) -> int:
        return len(self.data)


class NullStore:
    """A store that keeps nothing; every read is a miss."""

    def read(self, key: str) -> Optional[str]:
        return None

    def write(self, key: str, value: str) -> None:
        pass

    def remove(self, key: str) -> None:
        pass

    def clear(self) -> None:
        pass

    def __len__(self) -> int:
        return 0


class DiskStore:
    """Persistent store kept in a :class:`diskcache.Cache` directory.

    Expiry is not delegated to diskcache: values are written without an
    ``expire`` so that the TTL cache above can apply its own rules
    (including the never-expires sentinel) and remove stale records lazily.

    Args:
        cache_dir: Root directory for the cache.  A ``readings/``
            subdirectory is created inside it.
    """

    def __init__(self, cache_dir: str | Path) -> None:
        self._directory = Path(cache_dir) / "readings"
        self._cache: Optional[diskcache.Cache] = diskcache.Cache(str(self._directory))

    @property
    def directory(self) -> Path:
        return self._directory

    def read(self, key: str) -> Optional[str]:
        value = self._open().get(key)
        # Anything that is not text was not written by us.
        return value if isinstance(value, str) else None

    def write(self, key: str, value: str) -> None:
        self._open().set(key, value)

    def remove(self, key: str) -> None:
        self._open().delete(key)

    def clear(self) -> None:
        self._open().clear()

    def __len__(self) -> int:
        return len(self._open())

    def close(self) -> None:
        """Close the underlying :class:`diskcache.Cache` and release resources."""
        if self._cache is not None:
            self._cache.close()
            self._cache = None

    def _open(self) -> diskcache.Cache:
        if self._cache is None:
            self._cache = diskcache.Cache(str(self._directory))
        return self._cache
