"""Stock account, holding and owner schemas."""
from datetime import datetime
from decimal import Decimal
from typing import Annotated

from pydantic import field_validator

from household_networth.schemas.base import (CamelModel, Money, OptionalMoney,
                                             Quantity, number_field,
                                             require_text)

SUPPORTED_CURRENCIES = ("USD", "ILS", "EUR", "GBP")

PositiveQuantity = Annotated[
    Decimal, number_field("Quantity must be a positive number", minimum=0, exclusive_minimum=True)
]
PositiveCost = Annotated[
    Decimal,
    number_field("Average cost basis must be a positive number", minimum=0, exclusive_minimum=True),
]


class OwnersUpdate(CamelModel):
    """Replacement owner set; validated against the active household by the service."""

    profile_ids: list[str] | None = None


class OwnerOut(CamelModel):
    id: str
    name: str
    image: str | None = None
    color: str


class StockAccountCreate(CamelModel):
    name: str
    broker: str | None = None
    currency: str = "USD"
    owner_ids: list[str] | None = None

    @field_validator("name", mode="before")
    @classmethod
    def _name(cls, value: str | None) -> str:
        return require_text(value, "Account name is required", 255)

    @field_validator("broker")
    @classmethod
    def _broker(cls, value: str | None) -> str | None:
        if value is not None and not value.strip():
            raise ValueError("Broker name cannot be empty or whitespace only")
        return value.strip() if value else value

    @field_validator("currency", mode="before")
    @classmethod
    def _currency(cls, value: str | None) -> str:
        # Unknown or missing currencies fall back to USD.
        code = (value or "").strip().upper()
        return code if code in SUPPORTED_CURRENCIES else "USD"


class StockAccountUpdate(CamelModel):
    name: str | None = None
    broker: str | None = None
    currency: str | None = None

    @field_validator("name", mode="before")
    @classmethod
    def _name(cls, value: str | None) -> str | None:
        return None if value is None else require_text(value, "Account name cannot be empty", 255)

    @field_validator("currency")
    @classmethod
    def _currency(cls, value: str | None) -> str | None:
        if value is not None and value.upper() not in SUPPORTED_CURRENCIES:
            raise ValueError("Invalid currency")
        return value.upper() if value else value


class HoldingCreate(CamelModel):
    symbol: str
    name: str | None = None
    quantity: PositiveQuantity
    avg_cost_basis: PositiveCost

    @field_validator("symbol", mode="before")
    @classmethod
    def _symbol(cls, value: str | None) -> str:
        return require_text(value, "Stock symbol is required", 20).upper()


class HoldingUpdate(CamelModel):
    name: str | None = None
    quantity: Annotated[
        Decimal | None,
        number_field("Quantity must be a positive number", minimum=0, exclusive_minimum=True, optional=True),
    ] = None
    avg_cost_basis: Annotated[
        Decimal | None,
        number_field(
            "Average cost basis must be a positive number",
            minimum=0,
            exclusive_minimum=True,
            optional=True,
        ),
    ] = None


class HoldingOut(CamelModel):
    id: str
    symbol: str
    name: str | None = None
    quantity: Quantity
    avg_cost_basis: Quantity
    current_price: OptionalMoney = None
    value: Money
    cost_basis: Money
    gain: Money
    gain_percent: OptionalMoney = None
    price_error: str | None = None


class StockAccountOut(CamelModel):
    id: str
    name: str
    broker: str | None = None
    currency: str
    owners: list[OwnerOut]
    holdings: list[HoldingOut]
    total_value: Money
    total_cost_basis: Money
    total_gain: Money
    total_gain_percent: OptionalMoney = None
    created_at: datetime
    updated_at: datetime
