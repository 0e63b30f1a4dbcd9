from signaldesk.cache import DEFAULT_TTL, IndicatorCache, make_key


class TestMakeKey:
    def test_format(self) -> None:
        assert make_key("AAPL", "1h") == "AAPL-1h"
        assert make_key("BTC/USD", "15m") == "BTC/USD-15m"


class TestIndicatorCache:
    def test_default_ttl(self) -> None:
        assert IndicatorCache().ttl == DEFAULT_TTL == 30.0

    def test_miss(self, clock) -> None:
        cache = IndicatorCache(clock=clock)
        assert cache.get("AAPL-1h") is None

    def test_hit_while_fresh(self, clock) -> None:
        cache = IndicatorCache(ttl=30.0, clock=clock)
        cache.set("AAPL-1h", {"rsi14": 55.0})

        clock.advance(29.9)
        assert cache.get("AAPL-1h") == {"rsi14": 55.0}

    def test_expires_at_ttl(self, clock) -> None:
        cache = IndicatorCache(ttl=30.0, clock=clock)
        cache.set("AAPL-1h", "snapshot")

        clock.advance(30.0)
        assert cache.get("AAPL-1h") is None

    def test_expired_entry_is_evicted_on_read(self, clock) -> None:
        cache = IndicatorCache(ttl=5.0, clock=clock)
        cache.set("k", "v")
        clock.advance(10.0)

        assert "k" in cache
        cache.get("k")
        assert "k" not in cache
        assert len(cache) == 0

    def test_set_overwrites_and_restamps(self, clock) -> None:
        cache = IndicatorCache(ttl=30.0, clock=clock)
        cache.set("k", "old")
        clock.advance(20.0)
        cache.set("k", "new")
        clock.advance(20.0)

        assert cache.get("k") == "new"

    def test_keys_are_independent(self, clock) -> None:
        cache = IndicatorCache(clock=clock)
        cache.set("AAPL-1h", 1)
        cache.set("AAPL-1d", 2)

        assert cache.get("AAPL-1h") == 1
        assert cache.get("AAPL-1d") == 2

    def test_clear(self, clock) -> None:
        cache = IndicatorCache(clock=clock)
        cache.set("a", 1)
        cache.set("b", 2)
        cache.clear()

        assert len(cache) == 0
        assert cache.get("a") is None

    def test_zero_ttl_never_serves(self, clock) -> None:
        cache = IndicatorCache(ttl=0, clock=clock)
        cache.set("k", "v")
        assert cache.get("k") is None

    def test_repr(self, clock) -> None:
        cache = IndicatorCache(ttl=30, clock=clock)
        cache.set("k", "v")
        assert repr(cache) == "IndicatorCache(ttl=30.0, entries=1)"
