from app.cache import _cache, cache_get, cache_key, cache_set


def test_key_depends_on_mapping_order():
    assert cache_key({"X": 1, "Y": 2}) != cache_key({"Y": 2, "X": 1})
    assert cache_key({"X": 1, "Y": 2}) == cache_key({"X": 1, "Y": 2})


def test_expired_entries_are_purged_on_set():
    cache_set("short-lived", 1, 0)
    assert cache_get("short-lived") is None

    cache_set("stale", 1, 0)
    cache_set("fresh", 2, 60)
    assert "stale" not in _cache
    assert cache_get("fresh") == 2
