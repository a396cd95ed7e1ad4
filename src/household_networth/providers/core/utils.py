"""Shared utilities for price providers."""
from decimal import Decimal, InvalidOperation


def normalize_stock_symbol(symbol: str) -> str:
    """Normalize a stock symbol (trimmed, uppercase)."""
    return symbol.strip().upper()


def parse_price(raw: object) -> Decimal | None:
    """Parse a provider price into a positive Decimal; None when unusable."""
    if raw is None:
        return None
    try:
        price = Decimal(str(raw).strip())
    except (InvalidOperation, ValueError):
        return None
    if not price.is_finite() or price <= 0:
        return None
    return price
