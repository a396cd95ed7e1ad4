"""Pension account and deposit schemas."""
from datetime import date, datetime
from decimal import Decimal
from typing import Annotated

from pydantic import BeforeValidator, field_validator

from household_networth.db.models import PensionType
from household_networth.schemas.accounts import OwnerOut
from household_networth.schemas.base import (CamelModel, Money, number_field,
                                             parse_iso_date, require_text)

MAX_BULK_DEPOSITS = 100

NonNegativeValue = Annotated[
    Decimal, number_field("Current value must be a non-negative number", minimum=0)
]


def _fee(message: str, optional: bool = False) -> BeforeValidator:
    return number_field(message, minimum=0, maximum=100, optional=optional)


class PensionAccountCreate(CamelModel):
    type: PensionType = PensionType.PENSION
    provider_name: str
    account_name: str
    current_value: NonNegativeValue
    fee_from_deposit: Annotated[
        Decimal, _fee("Fee from deposit must be a percentage between 0 and 100")
    ] = Decimal(0)
    fee_from_total: Annotated[
        Decimal, _fee("Fee from total must be a percentage between 0 and 100")
    ] = Decimal(0)
    owner_ids: list[str] | None = None

    @field_validator("provider_name", mode="before")
    @classmethod
    def _provider(cls, value: str | None) -> str:
        return require_text(value, "Provider name is required", 255)

    @field_validator("account_name", mode="before")
    @classmethod
    def _account(cls, value: str | None) -> str:
        return require_text(value, "Account name is required", 255)


class PensionAccountUpdate(CamelModel):
    provider_name: str | None = None
    account_name: str | None = None
    current_value: Annotated[
        Decimal | None,
        number_field("Current value must be a non-negative number", minimum=0, optional=True),
    ] = None
    fee_from_deposit: Annotated[
        Decimal | None, _fee("Fee from deposit must be a percentage between 0 and 100", True)
    ] = None
    fee_from_total: Annotated[
        Decimal | None, _fee("Fee from total must be a percentage between 0 and 100", True)
    ] = None

    @field_validator("provider_name", mode="before")
    @classmethod
    def _provider(cls, value: str | None) -> str | None:
        return None if value is None else require_text(value, "Provider name cannot be empty", 255)

    @field_validator("account_name", mode="before")
    @classmethod
    def _account(cls, value: str | None) -> str | None:
        return None if value is None else require_text(value, "Account name cannot be empty", 255)


class DepositCreate(CamelModel):
    deposit_date: date
    salary_month: date
    amount: Annotated[
        Decimal, number_field("Amount must be a positive number", minimum=0, exclusive_minimum=True)
    ]
    employer: str

    @field_validator("employer", mode="before")
    @classmethod
    def _employer(cls, value: str | None) -> str:
        return require_text(value, "Employer name is required", 255)

    @field_validator("deposit_date", mode="before")
    @classmethod
    def _deposit_date(cls, value: object) -> object:
        return parse_iso_date(value, "Invalid deposit date format")

    @field_validator("salary_month", mode="before")
    @classmethod
    def _salary_month(cls, value: object) -> object:
        return parse_iso_date(value, "Invalid salary month format")


class DepositUpdate(CamelModel):
    deposit_date: date | None = None
    salary_month: date | None = None
    amount: Annotated[
        Decimal | None,
        number_field(
            "Amount must be a positive number", minimum=0, exclusive_minimum=True, optional=True
        ),
    ] = None
    employer: str | None = None

    @field_validator("employer", mode="before")
    @classmethod
    def _employer(cls, value: str | None) -> str | None:
        return None if value is None else require_text(value, "Employer name cannot be empty", 255)

    @field_validator("deposit_date", mode="before")
    @classmethod
    def _deposit_date(cls, value: object) -> object:
        return None if value is None else parse_iso_date(value, "Invalid deposit date format")

    @field_validator("salary_month", mode="before")
    @classmethod
    def _salary_month(cls, value: object) -> object:
        return None if value is None else parse_iso_date(value, "Invalid salary month format")


class DepositBulkCreate(CamelModel):
    """Deposits imported together into one account, all or nothing."""

    account_id: str
    deposits: list[DepositCreate]

    @field_validator("account_id", mode="before")
    @classmethod
    def _account_id(cls, value: object) -> str:
        if not isinstance(value, str) or not value:
            raise ValueError("Account ID is required")
        return value

    @field_validator("deposits", mode="before")
    @classmethod
    def _deposits(cls, value: object) -> object:
        if not isinstance(value, list) or not value:
            raise ValueError("At least one deposit is required")
        if len(value) > MAX_BULK_DEPOSITS:
            raise ValueError(f"Maximum {MAX_BULK_DEPOSITS} deposits allowed per request")
        return value


class DepositOut(CamelModel):
    id: str
    account_id: str
    deposit_date: date
    salary_month: date
    amount: Money
    employer: str


class PensionAccountOut(CamelModel):
    id: str
    type: PensionType
    provider_name: str
    account_name: str
    current_value: Money
    fee_from_deposit: Money
    fee_from_total: Money
    owners: list[OwnerOut]
    deposits: list[DepositOut] = []
    created_at: datetime
    updated_at: datetime
