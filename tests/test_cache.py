"""Tests for the in-memory lookup cache."""

from biteledger.services.cache import InMemoryCache


def test_entries_expire_after_ttl() -> None:
    now = [1000.0]
    cache = InMemoryCache(clock=lambda: now[0])

    cache.set("off:product:1", "nutella", ttl_seconds=60)
    assert cache.get("off:product:1") == "nutella"

    now[0] += 60
    assert cache.get("off:product:1") is None


def test_clear_drops_entries() -> None:
    cache = InMemoryCache()
    cache.set("usda:food:1", "apple", ttl_seconds=60)

    cache.clear()

    assert cache.get("usda:food:1") is None
