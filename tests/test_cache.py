import pytest
from inline_snapshot import snapshot
from time_machine import travel

from signature_sdk import CacheStats, EtagCache


def test_set_then_get_returns_the_stored_entry():
    with travel(1_700_000_000, tick=False):
        cache = EtagCache()
        cache.set("/api/v1/documents", '"v1"', {"items": [1, 2]}, max_age=60, last_modified="yesterday")
        entry = cache.get("/api/v1/documents")

    assert entry is not None
    assert entry.etag == '"v1"'
    assert entry.body == {"items": [1, 2]}
    assert entry.last_modified == "yesterday"
    assert entry.expires_at == 1_700_000_060


def test_zero_max_age_expires_immediately():
    cache = EtagCache(clock=lambda: 100.0)

    cache.set("/api/v1/documents", '"v1"', [], max_age=0)

    assert cache.get("/api/v1/documents") is None
    assert len(cache) == 0


def test_default_ttl_applies_without_max_age():
    with travel(1_700_000_000, tick=False) as traveller:
        cache = EtagCache()
        cache.set("/api/v1/envelopes", '"v1"', [])

        traveller.shift(299)
        assert cache.get("/api/v1/envelopes") is not None

        traveller.shift(1)
        assert cache.get("/api/v1/envelopes") is None


def test_oldest_entry_is_evicted_when_full():
    cache = EtagCache(max_size=3, clock=lambda: 0.0)

    for index in range(4):
        cache.set(f"/api/v1/documents/{index}", f'"v{index}"', {"id": index})

    assert len(cache) == 3
    assert "/api/v1/documents/0" not in cache
    assert list(cache) == ["/api/v1/documents/1", "/api/v1/documents/2", "/api/v1/documents/3"]


def test_overwriting_a_key_does_not_evict():
    cache = EtagCache(max_size=2, clock=lambda: 0.0)

    cache.set("/a", '"1"', None)
    cache.set("/b", '"1"', None)
    cache.set("/a", '"2"', None)

    assert len(cache) == 2
    entry = cache.get("/a")
    assert entry is not None and entry.etag == '"2"'
    assert list(cache) == ["/b", "/a"]


def test_invalid_capacity():
    with pytest.raises(ValueError, match="Capacity must be positive"):
        EtagCache(max_size=0)


def test_invalidate():
    cache = EtagCache(clock=lambda: 0.0)
    cache.set("/api/v1/documents", '"v1"', [])

    cache.invalidate("/api/v1/documents")
    cache.invalidate("/api/v1/unknown")

    assert "/api/v1/documents" not in cache


def test_invalidate_pattern():
    cache = EtagCache(clock=lambda: 0.0)
    for key in ("/api/v1/documents", "/api/v1/documents?page=2", "/api/v1/documents/1", "/api/v1/envelopes"):
        cache.set(key, '"v1"', [])

    removed = cache.invalidate_pattern(r"^/api/v1/documents(\?|$)")

    assert removed == 2
    assert list(cache) == ["/api/v1/documents/1", "/api/v1/envelopes"]


def test_cleanup_and_stats():
    now = [100.0]
    cache = EtagCache(clock=lambda: now[0])
    cache.set("/short", '"1"', None, max_age=10)
    cache.set("/long", '"1"', None, max_age=100)

    now[0] = 150.0

    assert cache.cleanup() == 1
    assert "/long" in cache
    assert cache.stats() == CacheStats(size=1, max_size=500)


def test_clear():
    cache = EtagCache(clock=lambda: 0.0)
    cache.set("/a", '"1"', None)
    cache.set("/b", '"1"', None)

    cache.clear()

    assert len(cache) == 0


def test_cache_logging(caplog):
    cache = EtagCache(clock=lambda: 0.0)

    with caplog.at_level("DEBUG", logger="signature_sdk.cache"):
        cache.get("/api/v1/documents")
        cache.set("/api/v1/documents", '"v1"', [], max_age=60)
        cache.get("/api/v1/documents")

    assert caplog.record_tuples == snapshot(
        [
            ("signature_sdk.cache", 10, "Cache miss for /api/v1/documents"),
            ("signature_sdk.cache", 10, 'Cached /api/v1/documents with ETag "v1" (expires in 60s)'),
            ("signature_sdk.cache", 10, 'Cache hit for /api/v1/documents: "v1"'),
        ]
    )
