"""Shared utilities: identifiers, timestamps and Decimal rounding."""
import re
import uuid
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal

from household_networth.core.exceptions import ValidationError

DECIMALS = 2
_CENT = Decimal(10) ** -DECIMALS
_ID_PATTERN = re.compile(r"^[0-9a-f]{32}$")


def new_id() -> str:
    """Return a new opaque identifier (32 lower-case hex chars)."""
    return uuid.uuid4().hex


def utcnow() -> datetime:
    """Timezone-aware UTC now."""
    return datetime.now(timezone.utc)


def validate_id(value: str, label: str | None = None) -> str:
    """Reject malformed identifiers before any query is issued."""
    if not isinstance(value, str) or not _ID_PATTERN.match(value):
        raise ValidationError(f"Invalid {label} format" if label else "Invalid ID format")
    return value


def round2(x: Decimal | None) -> Decimal | None:
    """Round half-up to 2 decimal places; preserve None."""
    if x is None:
        return None
    return Decimal(x).quantize(_CENT, rounding=ROUND_HALF_UP)


def money(x: Decimal | int | float | None) -> float | None:
    """Convert a Decimal amount to a JSON-safe number at the response boundary."""
    if x is None:
        return None
    return float(round2(Decimal(str(x)) if isinstance(x, float) else Decimal(x)))


