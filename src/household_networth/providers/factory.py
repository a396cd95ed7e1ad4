"""Factories that build providers from Settings."""
from household_networth.config import Settings
from household_networth.providers.core import (IdentityProviderABC,
                                               PriceProviderABC)
from household_networth.providers.identity import UserInfoIdentityProvider
from household_networth.providers.stocks import (AlphaVantageProvider,
                                                 YFinanceProvider)


def create_price_provider(settings: Settings) -> PriceProviderABC:
    """Create the price provider named by settings.price_provider.

    Args:
        settings: Process settings; "alphavantage" (default) or "yfinance".

    Returns:
        A configured PriceProviderABC instance.
    """
    if settings.price_provider == "yfinance":
        return YFinanceProvider()
    if settings.price_provider == "alphavantage":
        return AlphaVantageProvider(
            api_key=settings.price_api_key, base_url=settings.price_api_base_url
        )
    raise ValueError(f"Unknown price provider: {settings.price_provider}")


def create_identity_provider(settings: Settings) -> IdentityProviderABC:
    return UserInfoIdentityProvider(settings.auth_userinfo_url)
