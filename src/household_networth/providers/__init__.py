"""Price and identity providers.

This package provides the ports the service consumes from the outside world:

- PriceProviderABC: stock prices and symbol search
  (AlphaVantageProvider via REST, YFinanceProvider via the yfinance library)
- IdentityProviderABC: bearer token -> external identity
  (UserInfoIdentityProvider via an OIDC userinfo endpoint)

Example:
    async with AlphaVantageProvider(api_key="...") as provider:
        quote = await provider.get_quote("AAPL")
        print(f"{quote.symbol}: ${quote.price}")
"""
from household_networth.providers.core import (ExternalIdentity,
                                               IdentityProviderABC,
                                               PriceProviderABC)
from household_networth.providers.factory import (create_identity_provider,
                                                  create_price_provider)
from household_networth.providers.identity import UserInfoIdentityProvider
from household_networth.providers.stocks import (AlphaVantageProvider,
                                                 YFinanceProvider)

__all__ = [
    "AlphaVantageProvider",
    "ExternalIdentity",
    "IdentityProviderABC",
    "PriceProviderABC",
    "UserInfoIdentityProvider",
    "YFinanceProvider",
    "create_identity_provider",
    "create_price_provider",
]
