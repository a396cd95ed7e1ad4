"""Market data schemas: provider quotes, symbol search results and API payloads."""
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field, field_serializer

from household_networth.core.utils import money, utcnow
from household_networth.schemas.base import CamelModel


class ProviderQuote(BaseModel):
    """A quote as returned by a price provider, before caching."""

    symbol: str
    price: Decimal
    timestamp: datetime = Field(default_factory=utcnow)
    provider: str


class SymbolMatch(CamelModel):
    """One result of a symbol search."""

    symbol: str
    name: str
    exchange: str | None = None
    currency: str | None = None
    type: str | None = None


class QuoteOut(CamelModel):
    symbol: str
    price: Decimal
    timestamp: datetime
    from_cache: bool

    @field_serializer("price")
    def _price(self, value: Decimal) -> float | None:
        return money(value)
