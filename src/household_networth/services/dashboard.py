"""Net-worth dashboard and snapshot history for the active household."""
import asyncio
from collections.abc import Sequence
from dataclasses import dataclass

from household_networth.db.models import MiscAsset, PensionAccount, StockAccount
from household_networth.db.storage import Storage
from household_networth.schemas.assets import AssetTotals
from household_networth.schemas.dashboard import (DashboardOut, PensionTotals,
                                                  PortfolioTotals, SnapshotOut)
from household_networth.services.directory import Context
from household_networth.services.price_cache import PriceOracleCache, price_map
from household_networth.services.valuation import (AccountHoldings,
                                                   NetWorthSummary,
                                                   compute_net_worth)

HISTORY_LIMIT = 24


@dataclass(frozen=True)
class NetWorthInputs:
    """Every record that counts toward the net worth of a set of profiles."""

    stock_accounts: tuple[AccountHoldings, ...]
    pension_accounts: tuple[PensionAccount, ...]
    misc_assets: tuple[MiscAsset, ...]

    @property
    def symbols(self) -> list[str]:
        return [h.symbol for a in self.stock_accounts for h in a.holdings]


def load_net_worth_inputs(storage: Storage, profile_ids: Sequence[str]) -> NetWorthInputs:
    """Records with at least one owner among profile_ids, for all three classes.

    Used by the live dashboard and by the snapshot job, so both value a
    household the same way whoever asks.
    """
    stock = storage.records_owned_by(StockAccount, profile_ids)
    holdings = storage.holdings_for_accounts([a.id for a in stock])
    return NetWorthInputs(
        stock_accounts=tuple(
            AccountHoldings(id=a.id, holdings=tuple(holdings.get(a.id, ()))) for a in stock
        ),
        pension_accounts=tuple(storage.records_owned_by(PensionAccount, profile_ids)),
        misc_assets=tuple(storage.records_owned_by(MiscAsset, profile_ids)),
    )


def dashboard_out(summary: NetWorthSummary) -> DashboardOut:
    portfolio, pension, assets = summary.portfolio, summary.pension, summary.assets
    return DashboardOut(
        net_worth=summary.net_worth,
        portfolio=PortfolioTotals(
            total_value=portfolio.total_value,
            total_cost_basis=portfolio.total_cost_basis,
            total_gain=portfolio.total_gain,
            total_gain_percent=portfolio.total_gain_percent,
            holdings_count=portfolio.holdings_count,
        ),
        pension=PensionTotals(
            total_value=pension.total_value, accounts_count=pension.accounts_count
        ),
        assets=AssetTotals(
            total_assets=assets.total_assets,
            total_liabilities=assets.total_liabilities,
            net_value=assets.net_value,
            items_count=assets.items_count,
        ),
    )


class DashboardService:
    def __init__(self, price_cache: PriceOracleCache) -> None:
        self._prices = price_cache

    async def summary(self, storage: Storage, context: Context) -> NetWorthSummary:
        inputs = await asyncio.to_thread(
            load_net_worth_inputs, storage, context.household_profile_ids
        )
        results = await self._prices.get_prices(inputs.symbols)
        return compute_net_worth(
            inputs.stock_accounts,
            inputs.pension_accounts,
            inputs.misc_assets,
            price_map(results),
        )

    def history(self, storage: Storage, context: Context) -> list[SnapshotOut]:
        return [
            SnapshotOut(
                id=s.id,
                date=s.date,
                net_worth=s.net_worth,
                portfolio=s.portfolio,
                pension=s.pension,
                assets=s.assets,
            )
            for s in storage.recent_snapshots(context.household_id, HISTORY_LIMIT)
        ]
