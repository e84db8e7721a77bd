"""Tests for the TTL reading cache and its stores."""

from __future__ import annotations

import json
import math
from pathlib import Path

import diskcache
import pytest

from jyotish.cache import (
    CACHE_PREFIX,
    INFINITE_TTL,
    CacheEntry,
    DiskStore,
    MemoryStore,
    NullStore,
    TTLCache,
    hours,
)


@pytest.fixture()
def disk_store(tmp_path):
    """Create a DiskStore rooted at tmp_path."""
    store = DiskStore(tmp_path)
    yield store
    store.close()


# ------------------------------------------------------------------ #
# Core get/put behaviour
# ------------------------------------------------------------------ #


class TestGetPut:
    def test_put_and_get(self, cache: TTLCache) -> None:
        cache.put("horo_aries_daily_english", {"overview": "calm"}, hours(12))
        assert cache.get("horo_aries_daily_english") == {"overview": "calm"}

    def test_missing_key_is_miss(self, cache: TTLCache) -> None:
        assert cache.get("nope") is None

    def test_scalar_payloads(self, cache: TTLCache) -> None:
        cache.put("s", "text", 60)
        cache.put("n", 42, 60)
        cache.put("l", [1, 2, 3], 60)
        assert cache.get("s") == "text"
        assert cache.get("n") == 42
        assert cache.get("l") == [1, 2, 3]

    def test_overwrite_replaces_value(self, cache: TTLCache) -> None:
        cache.put("k", "old", 60)
        cache.put("k", "new", 60)
        assert cache.get("k") == "new"

    def test_overwrite_resets_lifetime(self, cache: TTLCache, clock) -> None:
        cache.put("k", "old", 60)
        clock.advance(50)
        cache.put("k", "new", 60)
        clock.advance(50)
        assert cache.get("k") == "new"

    def test_keys_are_prefixed_in_store(self, cache: TTLCache, memory_store: MemoryStore) -> None:
        cache.put("k", 1, 60)
        assert list(memory_store.data) == [CACHE_PREFIX + "k"]

    def test_serialised_entry_format(self, cache: TTLCache, memory_store: MemoryStore, clock) -> None:
        """Entries are stored as JSON with data, timestamp and expiry."""
        cache.put("k", {"a": 1}, hours(1))
        record = json.loads(memory_store.data[CACHE_PREFIX + "k"])
        assert record == {"data": {"a": 1}, "timestamp": clock.now, "expiry": 3600}


# ------------------------------------------------------------------ #
# Expiry
# ------------------------------------------------------------------ #


class TestExpiry:
    def test_valid_just_before_ttl(self, cache: TTLCache, clock) -> None:
        cache.put("k", "v", 10)
        clock.advance(9.999)
        assert cache.get("k") == "v"

    def test_expired_at_ttl(self, cache: TTLCache, clock) -> None:
        """An entry is valid only while elapsed time is strictly below the TTL."""
        cache.put("k", "v", 10)
        clock.advance(10)
        assert cache.get("k") is None

    def test_expired_record_is_removed(self, cache: TTLCache, memory_store: MemoryStore, clock) -> None:
        cache.put("k", "v", 10)
        clock.advance(11)
        cache.get("k")
        assert CACHE_PREFIX + "k" not in memory_store.data

    def test_expired_record_kept_until_read(self, cache: TTLCache, memory_store: MemoryStore, clock) -> None:
        cache.put("k", "v", 10)
        clock.advance(11)
        assert CACHE_PREFIX + "k" in memory_store.data

    def test_zero_ttl_is_immediately_stale(self, cache: TTLCache) -> None:
        cache.put("k", "v", 0)
        assert cache.get("k") is None

    def test_infinite_ttl_never_expires(self, cache: TTLCache, clock) -> None:
        cache.put("k", "v", INFINITE_TTL)
        clock.advance(10 * 365 * 24 * 3600)
        assert cache.get("k") == "v"

    def test_math_inf_stored_as_infinite(self, cache: TTLCache, memory_store: MemoryStore, clock) -> None:
        cache.put("k", "v", math.inf)
        assert json.loads(memory_store.data[CACHE_PREFIX + "k"])["expiry"] == INFINITE_TTL
        clock.advance(10 * 365 * 24 * 3600)
        assert cache.get("k") == "v"

    @pytest.mark.parametrize("ttl", [-5, -1.5, math.nan, -math.inf])
    def test_invalid_ttl_gives_stale_entry(self, cache: TTLCache, ttl: float) -> None:
        cache.put("k", "v", ttl)
        assert cache.get("k") is None

    def test_daily_horoscope_lifetime(self, cache: TTLCache, clock) -> None:
        cache.put("horo_aries_daily_english", {"x": 1}, hours(12))
        clock.advance(hours(11))
        assert cache.get("horo_aries_daily_english") is not None
        clock.advance(hours(1))
        assert cache.get("horo_aries_daily_english") is None


class TestHours:
    def test_converts_to_seconds(self) -> None:
        assert hours(12) == 43200
        assert hours(0.5) == 1800

    def test_preserves_infinite(self) -> None:
        assert hours(INFINITE_TTL) == INFINITE_TTL


class TestCacheEntry:
    def test_is_expired(self) -> None:
        entry = CacheEntry(data=1, timestamp=100.0, expiry=10)
        assert not entry.is_expired(109.5)
        assert entry.is_expired(110.0)

    def test_infinite_never_expired(self) -> None:
        entry = CacheEntry(data=1, timestamp=0.0, expiry=INFINITE_TTL)
        assert not entry.is_expired(1e12)


# ------------------------------------------------------------------ #
# Corrupt records
# ------------------------------------------------------------------ #


class TestCorruptRecords:
    @pytest.mark.parametrize(
        "raw",
        [
            "not json at all",
            "{truncated",
            json.dumps({"data": 1}),
            json.dumps({"data": 1, "timestamp": "yesterday", "expiry": 10}),
            json.dumps({"data": 1, "timestamp": 0, "expiry": -5}),
            json.dumps([1, 2, 3]),
        ],
    )
    def test_corrupt_record_is_miss_and_removed(
        self, cache: TTLCache, memory_store: MemoryStore, raw: str
    ) -> None:
        memory_store.data[CACHE_PREFIX + "bad"] = raw
        assert cache.get("bad") is None
        assert CACHE_PREFIX + "bad" not in memory_store.data

    def test_corrupt_record_does_not_affect_others(
        self, cache: TTLCache, memory_store: MemoryStore
    ) -> None:
        cache.put("good", "v", 60)
        memory_store.data[CACHE_PREFIX + "bad"] = "garbage"
        assert cache.get("bad") is None
        assert cache.get("good") == "v"


# ------------------------------------------------------------------ #
# Invalidate / clear / stats
# ------------------------------------------------------------------ #


class TestMaintenance:
    def test_invalidate(self, cache: TTLCache) -> None:
        cache.put("k", "v", 60)
        cache.invalidate("k")
        assert cache.get("k") is None

    def test_invalidate_missing_key(self, cache: TTLCache) -> None:
        cache.invalidate("never-written")

    def test_clear(self, cache: TTLCache, memory_store: MemoryStore) -> None:
        cache.put("a", 1, 60)
        cache.put("b", 2, 60)
        cache.clear()
        assert len(memory_store) == 0
        assert cache.get("a") is None

    def test_stats_memory(self, cache: TTLCache) -> None:
        cache.put("a", 1, 60)
        assert cache.stats() == {"size": 1}

    def test_stats_disk(self, disk_store: DiskStore) -> None:
        cache = TTLCache(disk_store)
        cache.put("a", 1, 60)
        cache.put("b", 2, 60)
        stats = cache.stats()
        assert stats["size"] == 2
        assert stats["directory"] == str(disk_store.directory)


# ------------------------------------------------------------------ #
# Stores
# ------------------------------------------------------------------ #


class TestNullStore:
    def test_forgets_everything(self) -> None:
        cache = TTLCache(NullStore())
        cache.put("k", "v", INFINITE_TTL)
        assert cache.get("k") is None
        assert cache.stats() == {"size": 0}


class TestDiskStore:
    def test_directory_under_cache_dir(self, disk_store: DiskStore, tmp_path: Path) -> None:
        assert disk_store.directory == tmp_path / "readings"
        assert disk_store.directory.is_dir()

    def test_read_write_remove(self, disk_store: DiskStore) -> None:
        disk_store.write("k", "v")
        assert disk_store.read("k") == "v"
        assert len(disk_store) == 1
        disk_store.remove("k")
        assert disk_store.read("k") is None
        disk_store.remove("k")

    def test_persists_across_instances(self, tmp_path: Path) -> None:
        first = TTLCache(DiskStore(tmp_path))
        first.put("horo_leo_weekly_english", {"overview": "bright"}, hours(168))
        first.store.close()

        second_store = DiskStore(tmp_path)
        try:
            assert TTLCache(second_store).get("horo_leo_weekly_english") == {"overview": "bright"}
        finally:
            second_store.close()

    def test_non_text_value_reads_as_miss(self, disk_store: DiskStore) -> None:
        with diskcache.Cache(str(disk_store.directory)) as raw:
            raw.set("foreign", 12345)
        assert disk_store.read("foreign") is None

    def test_usable_after_close(self, disk_store: DiskStore) -> None:
        disk_store.write("k", "v")
        disk_store.close()
        assert disk_store.read("k") == "v"

    def test_clear(self, disk_store: DiskStore) -> None:
        disk_store.write("a", "1")
        disk_store.write("b", "2")
        disk_store.clear()
        assert len(disk_store) == 0
