"""Tests for TimedCache and the price oracle cache."""
import asyncio
from decimal import Decimal

import pytest

from household_networth.services.cache import TimedCache
from household_networth.services.price_cache import (QUOTE_ERROR_MESSAGE,
                                                     PriceOracleCache, Quote,
                                                     QuoteError, price_map)

from conftest import FakePriceProvider


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class SlowProvider(FakePriceProvider):
    """Provider that holds each quote until released, to observe concurrency."""

    def __init__(self, prices) -> None:
        super().__init__(prices)
        self.active = 0
        self.peak = 0

    async def get_quote(self, symbol):
        self.active += 1
        self.peak = max(self.peak, self.active)
        try:
            await asyncio.sleep(0.01)
            return await super().get_quote(symbol)
        finally:
            self.active -= 1


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


class TestTimedCache:
    def test_entry_expires_after_ttl(self, clock):
        cache: TimedCache[str, int] = TimedCache(10, clock)
        cache.set("a", 1)

        clock.advance(9.9)
        assert cache.get("a") == 1
        clock.advance(0.1)
        assert cache.get("a") is None
        assert cache.peek("a") == 1

    def test_concurrent_misses_share_one_fetch(self, clock):
        cache: TimedCache[str, int] = TimedCache(10, clock)
        calls = []

        async def fetch():
            calls.append(1)
            await asyncio.sleep(0.01)
            return 42

        async def scenario():
            return await asyncio.gather(*(cache.get_or_fetch("k", fetch) for _ in range(5)))

        results = asyncio.run(scenario())

        assert len(calls) == 1
        assert [value for value, _ in results] == [42] * 5

    def test_failed_fetch_is_not_stored(self, clock):
        cache: TimedCache[str, int] = TimedCache(10, clock)

        async def boom():
            raise RuntimeError("down")

        with pytest.raises(RuntimeError):
            asyncio.run(cache.get_or_fetch("k", boom))
        assert cache.peek("k") is None
        assert len(cache) == 0


class TestPriceOracleCache:
    def test_fresh_quote_served_from_cache(self, clock):
        provider = FakePriceProvider({"AAPL": "175"})
        cache = PriceOracleCache(provider, quote_ttl_seconds=60, clock=clock)

        first = asyncio.run(cache.get_price("aapl"))
        second = asyncio.run(cache.get_price(" AAPL "))

        assert isinstance(first, Quote) and not first.from_cache
        assert isinstance(second, Quote) and second.from_cache
        assert second.price == Decimal("175")
        assert provider.calls == ["AAPL"]

    def test_expired_quote_is_refetched(self, clock):
        provider = FakePriceProvider({"AAPL": "175"})
        cache = PriceOracleCache(provider, quote_ttl_seconds=60, clock=clock)

        asyncio.run(cache.get_price("AAPL"))
        clock.advance(61)
        result = asyncio.run(cache.get_price("AAPL"))

        assert not result.from_cache
        assert provider.calls == ["AAPL", "AAPL"]

    def test_failure_falls_back_to_stale_price(self, clock):
        provider = FakePriceProvider({"AAPL": "175"})
        cache = PriceOracleCache(provider, quote_ttl_seconds=60, clock=clock)
        asyncio.run(cache.get_price("AAPL"))

        del provider.prices["AAPL"]
        clock.advance(61)
        result = asyncio.run(cache.get_price("AAPL"))

        assert isinstance(result, Quote)
        assert result.from_cache
        assert result.price == Decimal("175")

    def test_unknown_symbol_yields_quote_error(self, clock):
        cache = PriceOracleCache(FakePriceProvider(), clock=clock)

        result = asyncio.run(cache.get_price("UNKNOWN"))

        assert result == QuoteError(symbol="UNKNOWN", error=QUOTE_ERROR_MESSAGE)

    def test_batch_deduplicates_and_isolates_failures(self, clock):
        provider = FakePriceProvider({"AAPL": "175", "MSFT": "400"})
        cache = PriceOracleCache(provider, clock=clock)

        results = asyncio.run(cache.get_prices(["AAPL", "aapl", "MSFT", "UNKNOWN", " "]))

        assert list(results) == ["AAPL", "MSFT", "UNKNOWN"]
        assert sorted(provider.calls) == ["AAPL", "MSFT", "UNKNOWN"]
        assert isinstance(results["UNKNOWN"], QuoteError)
        assert price_map(results) == {"AAPL": Decimal("175"), "MSFT": Decimal("400")}

    def test_batch_respects_concurrency_limit(self, clock):
        provider = SlowProvider({s: "1" for s in ("A", "B", "C", "D", "E", "F")})
        cache = PriceOracleCache(provider, max_concurrency=2, clock=clock)

        asyncio.run(cache.get_prices(["A", "B", "C", "D", "E", "F"]))

        assert provider.peak <= 2

    def test_refresh_bypasses_freshness(self, clock):
        provider = FakePriceProvider({"AAPL": "175"})
        cache = PriceOracleCache(provider, clock=clock)
        asyncio.run(cache.get_price("AAPL"))

        provider.prices["AAPL"] = Decimal("180")
        results = asyncio.run(cache.refresh(["AAPL"]))

        assert results["AAPL"].price == Decimal("180")
        assert not results["AAPL"].from_cache
        assert cache.latest("aapl").price == Decimal("180")

    def test_search_is_cached_per_query(self, clock):
        provider = FakePriceProvider({"AAPL": "175", "AMZN": "120"})
        cache = PriceOracleCache(provider, clock=clock)

        first = asyncio.run(cache.search("A"))
        second = asyncio.run(cache.search(" a "))

        assert [m.symbol for m in first] == ["AAPL", "AMZN"]
        assert second == first
        assert provider.searches == ["A"]

    def test_empty_search_skips_provider(self, clock):
        provider = FakePriceProvider()
        cache = PriceOracleCache(provider, clock=clock)

        assert asyncio.run(cache.search("   ")) == []
        assert provider.searches == []
