"""Misc asset (deposits, savings, loans, mortgages) schemas."""
from datetime import date, datetime
from decimal import Decimal
from typing import Annotated

from pydantic import field_validator, model_validator

from household_networth.db.models import MiscAssetType
from household_networth.schemas.accounts import OwnerOut
from household_networth.schemas.base import (CamelModel, Money, OptionalMoney,
                                             number_field, parse_iso_date,
                                             require_text)

MAX_NAME_LENGTH = 255
_TYPE_MESSAGE = "Type must be one of: bank_deposit, loan, mortgage, child_savings"
_RATE_MESSAGE = "Interest rate must be a percentage between 0 and 100"
_PAYMENT_REQUIRED = "Monthly payment is required for loans and mortgages"
_DEPOSIT_MESSAGE = "Monthly deposit must be a non-negative number"


def _asset_type(value: object) -> MiscAssetType:
    try:
        return MiscAssetType(value)
    except ValueError:
        raise ValueError(_TYPE_MESSAGE) from None


def _maturity_date(value: object) -> date | None:
    if value is None or value == "":
        return None
    return parse_iso_date(value, "Invalid maturity date format")


class MiscAssetCreate(CamelModel):
    type: MiscAssetType
    name: str
    current_value: Annotated[Decimal, number_field("Current value must be a number")]
    interest_rate: Annotated[Decimal, number_field(_RATE_MESSAGE, minimum=0, maximum=100)] = Decimal(0)
    monthly_payment: Annotated[
        Decimal | None,
        number_field(_PAYMENT_REQUIRED, minimum=0, exclusive_minimum=True, optional=True),
    ] = None
    monthly_deposit: Annotated[
        Decimal | None, number_field(_DEPOSIT_MESSAGE, minimum=0, optional=True)
    ] = None
    maturity_date: date | None = None
    owner_ids: list[str] | None = None

    @field_validator("type", mode="before")
    @classmethod
    def _type(cls, value: object) -> MiscAssetType:
        return _asset_type(value)

    @field_validator("name", mode="before")
    @classmethod
    def _name(cls, value: str | None) -> str:
        return require_text(
            value, "Name is required", MAX_NAME_LENGTH,
            f"Name must be at most {MAX_NAME_LENGTH} characters",
        )

    @field_validator("maturity_date", mode="before")
    @classmethod
    def _maturity(cls, value: object) -> date | None:
        return _maturity_date(value)

    @model_validator(mode="after")
    def _liability_payment(self) -> "MiscAssetCreate":
        if self.type.is_liability and not self.monthly_payment:
            raise ValueError(_PAYMENT_REQUIRED)
        return self


class MiscAssetUpdate(CamelModel):
    name: str | None = None
    current_value: Annotated[
        Decimal | None, number_field("Current value must be a number", optional=True)
    ] = None
    interest_rate: Annotated[
        Decimal | None, number_field(_RATE_MESSAGE, minimum=0, maximum=100, optional=True)
    ] = None
    monthly_payment: Annotated[
        Decimal | None,
        number_field("Monthly payment must be a non-negative number", minimum=0, optional=True),
    ] = None
    monthly_deposit: Annotated[
        Decimal | None, number_field(_DEPOSIT_MESSAGE, minimum=0, optional=True)
    ] = None
    maturity_date: date | None = None

    @field_validator("name", mode="before")
    @classmethod
    def _name(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return require_text(
            value, "Name cannot be empty", MAX_NAME_LENGTH,
            f"Name must be at most {MAX_NAME_LENGTH} characters",
        )

    @field_validator("maturity_date", mode="before")
    @classmethod
    def _maturity(cls, value: object) -> date | None:
        return _maturity_date(value)


class MiscAssetOut(CamelModel):
    id: str
    type: MiscAssetType
    name: str
    current_value: Money
    interest_rate: Money
    monthly_payment: OptionalMoney = None
    monthly_deposit: OptionalMoney = None
    maturity_date: date | None = None
    owners: list[OwnerOut] = []
    created_at: datetime
    updated_at: datetime


class AssetTotals(CamelModel):
    total_assets: Money
    total_liabilities: Money
    net_value: Money
    items_count: int


class MiscAssetList(CamelModel):
    items: list[MiscAssetOut]
    summary: AssetTotals
