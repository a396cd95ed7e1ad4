"""Price oracle cache: TTL-cached, de-duplicated and batched stock quotes."""
import asyncio
import logging
import time
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from household_networth.core.exceptions import UpstreamUnavailableError
from household_networth.providers.core import (PriceProviderABC,
                                               normalize_stock_symbol)
from household_networth.schemas.market import ProviderQuote, SymbolMatch
from household_networth.services.cache import TimedCache

logger = logging.getLogger(__name__)

QUOTE_ERROR_MESSAGE = "Unable to fetch stock price. Please try again later."


@dataclass(frozen=True)
class Quote:
    symbol: str
    price: Decimal
    timestamp: datetime
    from_cache: bool = False


@dataclass(frozen=True)
class QuoteError:
    symbol: str
    error: str = QUOTE_ERROR_MESSAGE


PriceResult = Quote | QuoteError


def price_map(results: Mapping[str, PriceResult]) -> dict[str, Decimal]:
    """Prices of the successful results; errors are left out (valued as 0)."""
    return {sym: r.price for sym, r in results.items() if isinstance(r, Quote)}


class PriceOracleCache:
    """Shared per-process cache in front of a PriceProviderABC.

    Quotes stay fresh for quote_ttl_seconds and searches for
    search_ttl_seconds. A failed refresh falls back to the last known price
    (marked from_cache) and otherwise yields a QuoteError for that symbol only.
    """

    def __init__(
        self,
        provider: PriceProviderABC,
        quote_ttl_seconds: float = 6 * 60 * 60,
        search_ttl_seconds: float = 5 * 60,
        max_concurrency: int = 5,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._provider = provider
        self._quotes: TimedCache[str, ProviderQuote] = TimedCache(quote_ttl_seconds, clock)
        self._searches: TimedCache[str, list[SymbolMatch]] = TimedCache(
            search_ttl_seconds, clock
        )
        self._max_concurrency = max(1, max_concurrency)

    @property
    def provider(self) -> PriceProviderABC:
        return self._provider

    def latest(self, symbol: str) -> ProviderQuote | None:
        """Last known quote for symbol, fresh or not, without fetching."""
        return self._quotes.peek(normalize_stock_symbol(symbol))

    async def get_price(self, symbol: str, *, force_refresh: bool = False) -> PriceResult:
        """Get the price for one symbol. Never raises for upstream failures."""
        sym = normalize_stock_symbol(symbol)
        if not sym:
            return QuoteError(symbol=symbol, error="Symbol is required")
        try:
            quote, from_cache = await self._quotes.get_or_fetch(
                sym, lambda: self._provider.get_quote(sym), force=force_refresh
            )
        except UpstreamUnavailableError as exc:
            logger.warning("Price lookup failed for %s: %s", sym, exc.reason)
            return self._fallback(sym)
        except Exception:  # pylint: disable=broad-except
            logger.exception("Unexpected price provider error for %s", sym)
            return self._fallback(sym)
        return Quote(
            symbol=sym, price=quote.price, timestamp=quote.timestamp, from_cache=from_cache
        )

    def _fallback(self, sym: str) -> PriceResult:
        stale = self._quotes.peek(sym)
        if stale is None:
            return QuoteError(symbol=sym)
        logger.info("Serving stale price for %s from %s", sym, stale.timestamp.isoformat())
        return Quote(symbol=sym, price=stale.price, timestamp=stale.timestamp, from_cache=True)

    async def get_prices(
        self, symbols: Iterable[str], *, force_refresh: bool = False
    ) -> dict[str, PriceResult]:
        """Get prices for many symbols; one lookup per distinct symbol.

        Lookups run concurrently, at most max_concurrency at a time, and each
        symbol's result is independent of the others.
        """
        distinct = list(
            dict.fromkeys(normalize_stock_symbol(s) for s in symbols if s and s.strip())
        )
        if not distinct:
            return {}
        semaphore = asyncio.Semaphore(self._max_concurrency)

        async def bounded(sym: str) -> PriceResult:
            async with semaphore:
                return await self.get_price(sym, force_refresh=force_refresh)

        results = await asyncio.gather(*(bounded(s) for s in distinct))
        return dict(zip(distinct, results))

    async def refresh(self, symbols: Iterable[str]) -> dict[str, PriceResult]:
        """Force a provider round-trip for every symbol, bypassing freshness."""
        return await self.get_prices(symbols, force_refresh=True)

    async def search(self, query: str, limit: int = 10) -> list[SymbolMatch]:
        """Search symbols; results are cached per normalized query."""
        q = query.strip()
        if not q:
            return []
        key = f"{q.lower()}:{limit}"
        try:
            matches, _ = await self._searches.get_or_fetch(
                key, lambda: self._provider.search(q, limit)
            )
        except UpstreamUnavailableError as exc:
            logger.warning("Symbol search failed for %r: %s", q, exc.reason)
            return self._searches.peek(key) or []
        return matches

    async def close(self) -> None:
        await self._provider.close()
