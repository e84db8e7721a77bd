"""User preferences kept next to the reading cache.

The preferred moon sign is what ``jyotish sync`` warms and what
``jyotish horoscope`` falls back to when no sign is given.  It is stored
in the same :class:`~jyotish.cache.store.KeyValueStore` as the readings,
as a bare sign name with no TTL.
"""

from __future__ import annotations

from typing import Optional

from jyotish.cache.cache import CACHE_PREFIX
from jyotish.cache.store import KeyValueStore
from jyotish.models import MoonSign

_SIGN_KEY = CACHE_PREFIX + "pref_sign"


class Preferences:
    """Read and write the user's saved preferences."""

    def __init__(self, store: KeyValueStore) -> None:
        self._store = store

    def set_user_sign(self, sign: MoonSign) -> None:
        self._store.write(_SIGN_KEY, sign.value)

    def get_user_sign(self) -> Optional[MoonSign]:
        """Return the saved sign, or ``None`` if unset or unrecognisable."""
        raw = self._store.read(_SIGN_KEY)
        if raw is None:
            return None
        try:
            return MoonSign.parse(raw)
        except ValueError:
            return None
