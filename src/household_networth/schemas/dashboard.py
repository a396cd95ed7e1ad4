"""Dashboard, net-worth history and scheduled job schemas."""
from datetime import datetime

from household_networth.schemas.assets import AssetTotals
from household_networth.schemas.base import CamelModel, Money, OptionalMoney


class PortfolioTotals(CamelModel):
    total_value: Money
    total_cost_basis: Money
    total_gain: Money
    total_gain_percent: OptionalMoney = None
    holdings_count: int


class PensionTotals(CamelModel):
    total_value: Money
    accounts_count: int


class DashboardOut(CamelModel):
    net_worth: Money
    portfolio: PortfolioTotals
    pension: PensionTotals
    assets: AssetTotals


class SnapshotOut(CamelModel):
    id: str
    date: datetime
    net_worth: Money
    portfolio: Money
    pension: Money
    assets: Money


class SnapshotFailure(CamelModel):
    target: str
    error: str


class SnapshotRunOut(CamelModel):
    created: int
    households: int
    users: int
    failed: list[SnapshotFailure]
    duration_ms: int


class PriceRefreshOut(CamelModel):
    symbols: int
    updated: int
    failed: list[str]
