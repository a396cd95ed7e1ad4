"""Models for the Alpha Vantage provider (query params and response rows)."""
from pydantic import BaseModel, ConfigDict, Field


class AlphaVantageQuoteParams(BaseModel):
    """Params for function=GLOBAL_QUOTE. Merge with 'apikey' at call site."""

    function: str = "GLOBAL_QUOTE"
    symbol: str


class AlphaVantageSearchParams(BaseModel):
    """Params for function=SYMBOL_SEARCH. Merge with 'apikey' at call site."""

    function: str = "SYMBOL_SEARCH"
    keywords: str


class AlphaVantageGlobalQuote(BaseModel):
    """The 'Global Quote' object; keys carry Alpha Vantage's numbered prefixes."""

    model_config = ConfigDict(populate_by_name=True)

    symbol: str | None = Field(default=None, alias="01. symbol")
    price: str | None = Field(default=None, alias="05. price")
    latest_trading_day: str | None = Field(default=None, alias="07. latest trading day")


class AlphaVantageMatch(BaseModel):
    """One row of 'bestMatches' from SYMBOL_SEARCH."""

    model_config = ConfigDict(populate_by_name=True)

    symbol: str = Field(alias="1. symbol")
    name: str = Field(alias="2. name")
    type: str | None = Field(default=None, alias="3. type")
    region: str | None = Field(default=None, alias="4. region")
    currency: str | None = Field(default=None, alias="8. currency")
