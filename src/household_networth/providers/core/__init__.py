"""Core provider abstractions."""
from household_networth.providers.core.identity_provider_abc import (
    ExternalIdentity, IdentityProviderABC)
from household_networth.providers.core.price_provider_abc import \
    PriceProviderABC
from household_networth.providers.core.utils import (normalize_stock_symbol,
                                                     parse_price)

__all__ = [
    "ExternalIdentity",
    "IdentityProviderABC",
    "PriceProviderABC",
    "normalize_stock_symbol",
    "parse_price",
]
