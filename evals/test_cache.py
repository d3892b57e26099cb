"""
Unit tests for the in-memory result cache.

Tests cover:
  1. Hits within the TTL return the stored listings
  2. Entries at or past the TTL are evicted when read
  3. Oldest-first eviction once the entry ceiling is exceeded
"""

from house_finder.cache import ResultCache


class FakeClock:
    def __init__(self, start: float = 1_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# ---------------------------------------------------------------------------
# Test 1 — hits
# ---------------------------------------------------------------------------

def test_hit_within_ttl(make_property):
    clock = FakeClock()
    cache = ResultCache(ttl_seconds=1800, clock=clock)
    props = [make_property(id="a"), make_property(id="b")]

    cache.set("key", props)
    clock.advance(1799)

    assert cache.get("key") == props


def test_miss_for_unknown_key():
    assert ResultCache().get("nope") is None


def test_returned_list_is_a_copy(make_property):
    cache = ResultCache()
    cache.set("key", [make_property(id="a")])
    cache.get("key").clear()
    assert len(cache.get("key")) == 1


# ---------------------------------------------------------------------------
# Test 2 — expiry
# ---------------------------------------------------------------------------

def test_expired_entry_is_evicted_on_read(make_property):
    clock = FakeClock()
    cache = ResultCache(ttl_seconds=1800, clock=clock)
    cache.set("key", [make_property()])

    clock.advance(1800)

    assert "key" in cache
    assert cache.get("key") is None
    assert "key" not in cache
    assert len(cache) == 0


# ---------------------------------------------------------------------------
# Test 3 — size ceiling
# ---------------------------------------------------------------------------

def test_oldest_entry_evicted_past_ceiling(make_property):
    cache = ResultCache(max_entries=2)
    for key in ("a", "b", "c"):
        cache.set(key, [make_property(id=key)])

    assert "a" not in cache
    assert "b" in cache and "c" in cache
    assert len(cache) == 2


def test_rewrite_refreshes_position(make_property):
    cache = ResultCache(max_entries=2)
    cache.set("a", [make_property(id="a")])
    cache.set("b", [make_property(id="b")])
    cache.set("a", [make_property(id="a2")])
    cache.set("c", [make_property(id="c")])

    assert "b" not in cache
    assert cache.get("a")[0].id == "a2"


def test_default_ceiling_is_one_hundred(make_property):
    cache = ResultCache()
    prop = make_property()
    for i in range(101):
        cache.set(f"k{i}", [prop])
    assert len(cache) == 100
    assert "k0" not in cache
