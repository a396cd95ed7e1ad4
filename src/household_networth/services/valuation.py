"""Valuation engine: pure Decimal arithmetic over holdings, pensions and assets.

Nothing here performs I/O. Prices come in as a symbol -> Decimal map; a
missing symbol is valued at 0 but the holding is still counted.
"""
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from decimal import Decimal
from typing import Protocol

ZERO = Decimal(0)
HUNDRED = Decimal(100)


class HoldingLike(Protocol):
    symbol: str
    quantity: Decimal
    avg_cost_basis: Decimal


class HoldingsAccountLike(Protocol):
    id: str
    holdings: Sequence[HoldingLike]


class ValuedLike(Protocol):
    current_value: Decimal


@dataclass(frozen=True)
class AccountHoldings:
    """A stock account paired with its holdings, as valuation input."""

    id: str
    holdings: tuple[HoldingLike, ...]


@dataclass(frozen=True)
class HoldingValuation:
    symbol: str
    quantity: Decimal
    avg_cost_basis: Decimal
    price: Decimal | None
    value: Decimal
    cost_basis: Decimal
    gain: Decimal
    gain_percent: Decimal | None


@dataclass(frozen=True)
class AccountValuation:
    account_id: str
    holdings: tuple[HoldingValuation, ...]
    total_value: Decimal
    total_cost_basis: Decimal
    gain: Decimal
    gain_percent: Decimal | None


@dataclass(frozen=True)
class PortfolioSummary:
    total_value: Decimal
    total_cost_basis: Decimal
    total_gain: Decimal
    total_gain_percent: Decimal | None
    holdings_count: int
    accounts: tuple[AccountValuation, ...] = ()


@dataclass(frozen=True)
class PensionSummary:
    total_value: Decimal
    accounts_count: int


@dataclass(frozen=True)
class AssetsSummary:
    total_assets: Decimal
    total_liabilities: Decimal
    net_value: Decimal
    items_count: int


@dataclass(frozen=True)
class NetWorthSummary:
    net_worth: Decimal
    portfolio: PortfolioSummary
    pension: PensionSummary
    assets: AssetsSummary


def _dec(value: Decimal | int | str | None) -> Decimal:
    if value is None:
        return ZERO
    return value if isinstance(value, Decimal) else Decimal(str(value))


def gain_percent(gain: Decimal, cost_basis: Decimal) -> Decimal | None:
    """gain / cost * 100, or None when there is no cost basis."""
    if cost_basis == 0:
        return None
    return gain / cost_basis * HUNDRED


def value_holding(holding: HoldingLike, prices: Mapping[str, Decimal]) -> HoldingValuation:
    quantity = _dec(holding.quantity)
    avg_cost = _dec(holding.avg_cost_basis)
    price = prices.get(holding.symbol.upper())
    value = quantity * price if price is not None else ZERO
    cost = quantity * avg_cost
    gain = value - cost
    return HoldingValuation(
        symbol=holding.symbol,
        quantity=quantity,
        avg_cost_basis=avg_cost,
        price=price,
        value=value,
        cost_basis=cost,
        gain=gain,
        gain_percent=gain_percent(gain, cost),
    )


def value_account(
    account: HoldingsAccountLike, prices: Mapping[str, Decimal]
) -> AccountValuation:
    holdings = tuple(value_holding(h, prices) for h in account.holdings)
    total_value = sum((h.value for h in holdings), ZERO)
    total_cost = sum((h.cost_basis for h in holdings), ZERO)
    gain = total_value - total_cost
    return AccountValuation(
        account_id=account.id,
        holdings=holdings,
        total_value=total_value,
        total_cost_basis=total_cost,
        gain=gain,
        gain_percent=gain_percent(gain, total_cost),
    )


def value_portfolio(
    accounts: Sequence[HoldingsAccountLike], prices: Mapping[str, Decimal]
) -> PortfolioSummary:
    valued = tuple(value_account(a, prices) for a in accounts)
    total_value = sum((a.total_value for a in valued), ZERO)
    total_cost = sum((a.total_cost_basis for a in valued), ZERO)
    gain = total_value - total_cost
    return PortfolioSummary(
        total_value=total_value,
        total_cost_basis=total_cost,
        total_gain=gain,
        total_gain_percent=gain_percent(gain, total_cost),
        holdings_count=sum(len(a.holdings) for a in valued),
        accounts=valued,
    )


def summarize_pension(accounts: Sequence[ValuedLike]) -> PensionSummary:
    return PensionSummary(
        total_value=sum((_dec(a.current_value) for a in accounts), ZERO),
        accounts_count=len(accounts),
    )


def summarize_assets(assets: Sequence[ValuedLike]) -> AssetsSummary:
    """Split into assets (value >= 0) and liabilities (value < 0, summed as magnitudes)."""
    total_assets = ZERO
    total_liabilities = ZERO
    for asset in assets:
        value = _dec(asset.current_value)
        if value >= 0:
            total_assets += value
        else:
            total_liabilities += -value
    return AssetsSummary(
        total_assets=total_assets,
        total_liabilities=total_liabilities,
        net_value=total_assets - total_liabilities,
        items_count=len(assets),
    )


def compute_net_worth(
    stock_accounts: Sequence[HoldingsAccountLike],
    pension_accounts: Sequence[ValuedLike],
    misc_assets: Sequence[ValuedLike],
    prices: Mapping[str, Decimal],
) -> NetWorthSummary:
    """Net worth = portfolio value + pension total + misc net value."""
    portfolio = value_portfolio(stock_accounts, prices)
    pension = summarize_pension(pension_accounts)
    assets = summarize_assets(misc_assets)
    return NetWorthSummary(
        net_worth=portfolio.total_value + pension.total_value + assets.net_value,
        portfolio=portfolio,
        pension=pension,
        assets=assets,
    )
