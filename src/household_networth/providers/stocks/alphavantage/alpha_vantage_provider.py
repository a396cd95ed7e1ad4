"""Alpha Vantage price provider for stocks."""
import logging

import httpx

from household_networth.core.exceptions import UpstreamUnavailableError
from household_networth.providers.core import (PriceProviderABC,
                                               normalize_stock_symbol,
                                               parse_price)
from household_networth.providers.stocks.alphavantage.models import (
    AlphaVantageGlobalQuote, AlphaVantageMatch, AlphaVantageQuoteParams,
    AlphaVantageSearchParams)
from household_networth.schemas.market import ProviderQuote, SymbolMatch

logger = logging.getLogger(__name__)


class AlphaVantageProvider(PriceProviderABC):
    """Price provider backed by the Alpha Vantage REST API.

    Uses GLOBAL_QUOTE for prices and SYMBOL_SEARCH for lookups. Rate-limit
    notices come back as HTTP 200 without a quote body and are reported as
    UpstreamUnavailableError like any other miss.
    """

    name = "alphavantage"
    BASE_URL = "https://www.alphavantage.co"

    def __init__(
        self,
        api_key: str | None,
        base_url: str | None = None,
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the Alpha Vantage provider.

        Args:
            api_key: Alpha Vantage API key. Without one every lookup fails.
            base_url: Override for the API host (tests, proxies).
            timeout: Per-request timeout in seconds.
            client: Pre-built client; the provider closes it on close().
        """
        self._api_key = api_key
        self._client = client or httpx.AsyncClient(
            base_url=base_url or self.BASE_URL,
            headers={"Accept": "application/json"},
            timeout=timeout,
        )

    async def _query(self, params: dict[str, str], symbol: str) -> dict:
        if not self._api_key:
            raise UpstreamUnavailableError(symbol, "ALPHA_VANTAGE_API_KEY not configured")
        try:
            response = await self._client.get("/query", params=params | {"apikey": self._api_key})
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as exc:
            raise UpstreamUnavailableError(
                symbol, f"Alpha Vantage returned {exc.response.status_code}"
            ) from exc
        except (httpx.HTTPError, ValueError) as exc:
            raise UpstreamUnavailableError(symbol, f"Alpha Vantage request failed: {exc}") from exc

    async def get_quote(self, symbol: str) -> ProviderQuote:
        """Fetch the latest price for a stock symbol."""
        sym = normalize_stock_symbol(symbol)
        data = await self._query(AlphaVantageQuoteParams(symbol=sym).model_dump(), sym)
        quote = AlphaVantageGlobalQuote.model_validate(data.get("Global Quote") or {})
        price = parse_price(quote.price)
        if price is None:
            logger.warning("No price data for symbol %s", sym)
            raise UpstreamUnavailableError(sym, "no price data")
        return ProviderQuote(symbol=sym, price=price, provider=self.name)

    async def search(self, query: str, limit: int = 10) -> list[SymbolMatch]:
        """Search symbols by keyword."""
        params = AlphaVantageSearchParams(keywords=query.strip()).model_dump()
        data = await self._query(params, query)
        matches = [AlphaVantageMatch.model_validate(row) for row in data.get("bestMatches", [])]
        return [
            SymbolMatch(
                symbol=m.symbol,
                name=m.name,
                exchange=m.region,
                currency=m.currency,
                type=m.type,
            )
            for m in matches[:limit]
        ]

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()
