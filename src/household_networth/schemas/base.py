"""Base models and field helpers shared by request and response schemas."""
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Annotated, Generic, TypeVar

from pydantic import BaseModel, BeforeValidator, ConfigDict, PlainSerializer
from pydantic.alias_generators import to_camel

from household_networth.core.utils import money

DataT = TypeVar("DataT")

# Decimal in Python, rounded JSON number on the wire.
Money = Annotated[Decimal, PlainSerializer(money, return_type=float)]
OptionalMoney = Annotated[Decimal | None, PlainSerializer(money, return_type=float | None)]
Quantity = Annotated[Decimal, PlainSerializer(float, return_type=float)]


class CamelModel(BaseModel):
    """JSON uses camelCase keys; Python code uses snake_case attributes."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Envelope(BaseModel, Generic[DataT]):
    """Success envelope: {"success": true, "data": ...}."""

    success: bool = True
    data: DataT


def ok(data: DataT) -> Envelope[DataT]:
    return Envelope(data=data)


def require_text(
    value: str | None,
    required: str,
    max_length: int | None = None,
    too_long: str | None = None,
) -> str:
    """Trim and validate a mandatory text field; raises ValueError with the given messages."""
    if value is None or not str(value).strip():
        raise ValueError(required)
    text = str(value).strip()
    if max_length is not None and len(text) > max_length:
        raise ValueError(too_long or f"Must be at most {max_length} characters")
    return text


def to_number(value: object, message: str) -> Decimal | None:
    """Coerce a JSON number into Decimal, rejecting strings, booleans and NaN."""
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        raise ValueError(message)
    try:
        number = Decimal(str(value))
    except InvalidOperation:
        raise ValueError(message) from None
    if not number.is_finite():
        raise ValueError(message)
    return number


def number_field(
    message: str,
    *,
    minimum: Decimal | int | None = None,
    exclusive_minimum: bool = False,
    maximum: Decimal | int | None = None,
    optional: bool = False,
) -> BeforeValidator:
    """BeforeValidator for numeric JSON inputs that reports one fixed message."""

    def check(value: object) -> Decimal | None:
        number = to_number(value, message)
        if number is None:
            if optional:
                return None
            raise ValueError(message)
        if minimum is not None and (
            number < minimum or (exclusive_minimum and number == minimum)
        ):
            raise ValueError(message)
        if maximum is not None and number > maximum:
            raise ValueError(message)
        return number

    return BeforeValidator(check)


def parse_iso_date(value: object, message: str) -> date:
    """Accept 'YYYY-MM-DD' or a full ISO timestamp; keep the date part."""
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        raise ValueError(message)
    try:
        return date.fromisoformat(value.strip()[:10])
    except ValueError:
        raise ValueError(message) from None
