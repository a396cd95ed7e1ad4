"""Stock price providers."""
from household_networth.providers.stocks.alphavantage.alpha_vantage_provider import \
    AlphaVantageProvider
from household_networth.providers.stocks.yfinance.y_finance_provider import \
    YFinanceProvider

__all__ = ["AlphaVantageProvider", "YFinanceProvider"]
