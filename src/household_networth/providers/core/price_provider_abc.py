"""Abstract base class for stock price providers."""
from abc import ABC, abstractmethod

from household_networth.schemas.market import ProviderQuote, SymbolMatch


class PriceProviderABC(ABC):
    """Base interface for the price oracle behind the price cache.

    Implementations raise UpstreamUnavailableError when a symbol cannot be
    priced; they do not cache. Caching and batching belong to PriceOracleCache.
    """

    name: str = "provider"

    @abstractmethod
    async def get_quote(self, symbol: str) -> ProviderQuote:
        """Fetch the latest price for a symbol.

        Args:
            symbol: Normalized ticker (e.g. "AAPL").

        Returns:
            ProviderQuote with a Decimal price.
        """

    @abstractmethod
    async def search(self, query: str, limit: int = 10) -> list[SymbolMatch]:
        """Search symbols by ticker or company name."""

    async def close(self) -> None:
        """Clean up resources (connections, clients).

        Override in subclasses if cleanup is needed.
        """

    async def __aenter__(self) -> "PriceProviderABC":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        """Async context manager exit - calls close()."""
        await self.close()
