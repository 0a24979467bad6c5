from posai.utils.cache import MAX_ENTRIES, MemoryCache


def make_cache(clock, **kwargs):
    kwargs.setdefault("clock", clock)
    return MemoryCache(60, **kwargs)


def test_hit_and_miss_are_counted(clock):
    cache = make_cache(clock)
    assert cache.get("a") is None
    cache.set("a", 1)
    assert cache.get("a") == 1
    assert (cache.hits, cache.misses) == (1, 1)
    assert cache.hit_rate() == 50.0


def test_expired_entry_is_dropped(clock):
    cache = make_cache(clock)
    cache.set("a", 1)
    clock.advance(60)
    assert cache.get("a") == 1  # boundary is still fresh
    clock.advance(1)
    assert cache.get("a") is None
    assert len(cache) == 0


def test_per_entry_ttl_overrides_default(clock):
    cache = make_cache(clock)
    cache.set("short", 1, ttl=5)
    cache.set("long", 2)
    clock.advance(10)
    assert cache.get("short") is None
    assert cache.get("long") == 2


def test_disabled_cache_stores_nothing_and_counts_misses(clock):
    cache = make_cache(clock, enabled=False)
    cache.set("a", 1)
    assert cache.get("a") is None
    assert len(cache) == 0
    assert cache.misses == 1


def test_zero_ttl_disables_cache(clock):
    cache = MemoryCache(0, clock=clock)
    assert not cache.active
    cache.set("a", 1)
    assert cache.get("a") is None
    assert cache.misses == 1


def test_oldest_entry_evicted_past_bound(clock):
    cache = make_cache(clock, max_entries=3)
    for k in "abcd":
        cache.set(k, k)
    assert len(cache) == 3
    assert cache.get("a") is None
    assert cache.get("d") == "d"


def test_overwrite_keeps_insertion_slot(clock):
    cache = make_cache(clock, max_entries=3)
    for k in "abc":
        cache.set(k, k)
    cache.set("a", "A")
    cache.set("d", "d")
    assert cache.get("a") is None
    assert cache.get("b") == "b"


def test_clear_by_pattern(clock):
    cache = make_cache(clock)
    cache.set("demand:1:7", 1)
    cache.set("demand:2:7", 2)
    cache.set("pricing:1", 3)
    assert cache.clear("demand:") == 2
    assert len(cache) == 1
    assert cache.clear() == 1
    assert len(cache) == 0


def test_reset_stats_keeps_entries(clock):
    cache = make_cache(clock)
    cache.set("a", 1)
    cache.get("a")
    cache.get("b")
    cache.reset_stats()
    assert (cache.hits, cache.misses) == (0, 0)
    assert cache.hit_rate() == 0.0
    assert len(cache) == 1


def test_default_bound_is_one_hundred_entries(clock):
    cache = make_cache(clock)
    assert cache.max_entries == MAX_ENTRIES == 100
    for i in range(MAX_ENTRIES + 1):
        cache.set(f"k{i}", i)
    assert len(cache) == 100
    assert cache.get("k0") is None
    assert cache.get("k1") == 1
    assert cache.get("k100") == 100
