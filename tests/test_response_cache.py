"""
Tests for the response cache, its stores and the request fingerprint.
"""

import json
from unittest.mock import MagicMock

import redis

from kisah_ai.entities import CacheEntryEntity
from kisah_ai.repositories import InMemoryCacheRepository, RedisCacheRepository
from kisah_ai.services import ResponseCache, fingerprint


def test_get_returns_value_before_expiry(clock):
    cache = ResponseCache.create(clock=clock)
    cache.set("k", "v", ttl_ms=1000)

    clock.advance(999)
    assert cache.get("k") == "v"


def test_entry_is_gone_at_expiry_and_purged(clock):
    cache = ResponseCache.create(clock=clock)
    cache.set("k", "v", ttl_ms=1000)

    clock.advance(1000)
    assert cache.get("k") is None
    assert cache.store.count_all() == 0


def test_missing_key_returns_none(clock):
    assert ResponseCache.create(clock=clock).get("nope") is None


def test_set_overwrites_value_and_expiry(clock):
    cache = ResponseCache.create(clock=clock)
    cache.set("k", "old", ttl_ms=1000)
    clock.advance(900)
    entry = cache.set("k", "new", ttl_ms=1000)

    assert entry.expires_at == clock.now + 1000
    clock.advance(500)
    assert cache.get("k") == "new"


def test_delete_and_clear(clock):
    cache = ResponseCache.create(clock=clock)
    cache.set("a", "1", ttl_ms=1000)
    cache.set("b", "2", ttl_ms=1000)

    assert cache.delete("a") is True
    assert cache.delete("a") is False
    assert cache.clear() == 1
    assert cache.get("b") is None


def test_fingerprint_is_deterministic():
    assert fingerprint("", "halo", 400) == fingerprint("", "halo", 400)
    assert fingerprint("", "halo", 400).startswith("ai:")


def test_fingerprint_distinguishes_each_field():
    base = fingerprint("", "halo", 400)
    assert fingerprint("summarize", "halo", 400) != base
    assert fingerprint("", "halo!", 400) != base
    assert fingerprint("", "halo", 200) != base


def test_fingerprint_has_no_separator_collisions():
    assert fingerprint("a|b", "c", 1) != fingerprint("a", "b|c", 1)
    assert fingerprint("a", "1", 1) != fingerprint("a1", "", 1)


def test_memory_store_evicts_least_recently_used():
    store = InMemoryCacheRepository(max_entries=2)
    store.save(CacheEntryEntity("a", "1", 10))
    store.save(CacheEntryEntity("b", "2", 10))
    store.load("a")
    store.save(CacheEntryEntity("c", "3", 10))

    assert store.load("b") is None
    assert store.load("a") is not None
    assert store.load("c") is not None


def test_memory_store_unbounded_when_zero():
    store = InMemoryCacheRepository(max_entries=0)
    for i in range(50):
        store.save(CacheEntryEntity(str(i), "x", 10))
    assert store.count_all() == 50


def test_mirror_survives_new_in_process_store(clock):
    mirror = InMemoryCacheRepository(max_entries=0)
    ResponseCache.create(mirror=mirror, clock=clock).set("k", "v", ttl_ms=1000)

    restarted = ResponseCache.create(mirror=mirror, clock=clock)
    assert restarted.store.count_all() == 0
    assert restarted.get("k") == "v"
    # repopulated in process
    assert restarted.store.load("k").value == "v"


def test_expired_mirror_entry_is_purged(clock):
    mirror = InMemoryCacheRepository(max_entries=0)
    mirror.save(CacheEntryEntity("k", "v", clock.now + 10))
    cache = ResponseCache.create(mirror=mirror, clock=clock)

    clock.advance(10)
    assert cache.get("k") is None
    assert mirror.count_all() == 0


def test_failing_mirror_is_ignored(clock):
    mirror = MagicMock()
    mirror.load.side_effect = redis.ConnectionError("down")
    mirror.save.side_effect = redis.ConnectionError("down")
    cache = ResponseCache.create(mirror=mirror, clock=clock)

    cache.set("k", "v", ttl_ms=1000)
    assert cache.get("k") == "v"
    assert cache.get("other") is None
    mirror.save.assert_called_once()


def test_stats_report_mirror(clock):
    mirror = InMemoryCacheRepository(max_entries=0)
    cache = ResponseCache.create(mirror=mirror, clock=clock)
    cache.set("k", "v", ttl_ms=1000)

    stats = cache.get_stats()
    assert stats["total_entries"] == 1
    assert stats["persisted"] is True
    assert stats["mirror_healthy"] is True


def test_redis_store_saves_json_with_native_expiry(clock):
    client = MagicMock()
    store = RedisCacheRepository(redis_client=client, key_prefix="ai_cache_", clock=clock)

    store.save(CacheEntryEntity("ai:abc", "Halo", clock.now + 5000))

    client.set.assert_called_once_with(
        "ai_cache_ai:abc",
        json.dumps({"value": "Halo", "expiresAt": clock.now + 5000}),
        px=5000,
    )


def test_redis_store_deletes_instead_of_saving_stale_entry(clock):
    client = MagicMock()
    store = RedisCacheRepository(redis_client=client, key_prefix="p_", clock=clock)

    store.save(CacheEntryEntity("k", "v", clock.now))

    client.set.assert_not_called()
    client.delete.assert_called_once_with("p_k")


def test_redis_store_loads_record(clock):
    client = MagicMock()
    client.get.return_value = json.dumps({"value": "Halo", "expiresAt": 123})
    store = RedisCacheRepository(redis_client=client, key_prefix="p_", clock=clock)

    entry = store.load("k")

    client.get.assert_called_once_with("p_k")
    assert entry == CacheEntryEntity("k", "Halo", 123)


def test_redis_store_drops_corrupt_record(clock):
    client = MagicMock()
    client.get.return_value = "not json"
    store = RedisCacheRepository(redis_client=client, key_prefix="p_", clock=clock)

    assert store.load("k") is None
    client.delete.assert_called_once_with("p_k")


def test_redis_health_check_handles_errors(clock):
    client = MagicMock()
    client.ping.side_effect = redis.ConnectionError("down")
    store = RedisCacheRepository(redis_client=client, key_prefix="p_", clock=clock)

    assert store.health_check() is False
