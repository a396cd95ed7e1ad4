"""Stock quotes and symbol search through the shared price cache."""
import logging

from fastapi import APIRouter, Query

from household_networth.core.exceptions import NotFoundError
from household_networth.deps import CurrentUser, PriceCacheDep
from household_networth.schemas import Envelope, QuoteOut, SymbolMatch, ok
from household_networth.services import QuoteError

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/stocks", tags=["stocks"])


@router.get("/price/{symbol}", response_model=Envelope[QuoteOut])
async def get_stock_price(
    symbol: str, _user: CurrentUser, cache: PriceCacheDep
) -> Envelope[QuoteOut]:
    """Get the current price for a stock symbol.

    Args:
        symbol: Stock ticker (e.g., "AAPL"); case and surrounding spaces are ignored.

    Returns:
        Price, quote timestamp and whether it was served from cache.
    """
    result = await cache.get_price(symbol)
    if isinstance(result, QuoteError):
        raise NotFoundError(result.error)
    return ok(
        QuoteOut(
            symbol=result.symbol,
            price=result.price,
            timestamp=result.timestamp,
            from_cache=result.from_cache,
        )
    )


@router.get("/search", response_model=Envelope[list[SymbolMatch]])
async def search_stocks(
    _user: CurrentUser,
    cache: PriceCacheDep,
    q: str = Query(default="", max_length=100, description="Ticker or company name"),
) -> Envelope[list[SymbolMatch]]:
    """Search symbols; at most 10 matches, [] for an empty query."""
    return ok(await cache.search(q, limit=10))
