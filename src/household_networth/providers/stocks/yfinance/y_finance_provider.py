"""Yahoo Finance price provider for stocks."""
import asyncio
from decimal import Decimal

import yfinance as yf

from household_networth.core.exceptions import UpstreamUnavailableError
from household_networth.providers.core import (PriceProviderABC,
                                               normalize_stock_symbol,
                                               parse_price)
from household_networth.schemas.market import ProviderQuote, SymbolMatch


class YFinanceProvider(PriceProviderABC):
    """Price provider for stocks via Yahoo Finance.

    Uses the yfinance library; no API key required. yfinance is blocking, so
    every call runs in a worker thread.
    """

    name = "yfinance"

    def _extract_price(self, ticker: yf.Ticker, symbol: str) -> Decimal:
        """Extract the last price from ticker; raises if price unavailable."""
        info = getattr(ticker, "fast_info", None)
        if info and (price := parse_price(info.get("lastPrice") or info.get("regularMarketPrice"))):
            return price
        full = ticker.info
        price = parse_price(full.get("currentPrice") or full.get("regularMarketPrice"))
        if price is None:
            raise UpstreamUnavailableError(symbol, "no price data")
        return price

    def _fetch_quote_sync(self, symbol: str) -> ProviderQuote:
        """Fetch a single quote synchronously (run in thread)."""
        ticker = yf.Ticker(symbol)
        try:
            price = self._extract_price(ticker, symbol)
        except UpstreamUnavailableError:
            raise
        except Exception as e:
            raise UpstreamUnavailableError(symbol, f"yfinance lookup failed: {e}") from e
        return ProviderQuote(symbol=symbol, price=price, provider=self.name)

    async def get_quote(self, symbol: str) -> ProviderQuote:
        """Fetch the current quote for a stock symbol."""
        sym = normalize_stock_symbol(symbol)
        return await asyncio.to_thread(self._fetch_quote_sync, sym)

    def _search_sync(self, query: str, limit: int) -> list[SymbolMatch]:
        try:
            quotes = yf.Search(query, max_results=limit).quotes
        except Exception as e:
            raise UpstreamUnavailableError(query, f"yfinance search failed: {e}") from e
        return [
            SymbolMatch(
                symbol=q["symbol"],
                name=q.get("longname") or q.get("shortname") or q["symbol"],
                exchange=q.get("exchDisp") or q.get("exchange"),
                type=q.get("quoteType"),
            )
            for q in quotes
            if q.get("symbol")
        ]

    async def search(self, query: str, limit: int = 10) -> list[SymbolMatch]:
        """Search Yahoo Finance for tickers matching query."""
        return await asyncio.to_thread(self._search_sync, query.strip(), limit)
