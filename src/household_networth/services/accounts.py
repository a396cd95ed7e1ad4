"""Stock accounts and holdings, valued through the price oracle cache."""
import asyncio
import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from household_networth.core.exceptions import ConflictError, NotFoundError
from household_networth.db.models import StockAccount, StockHolding
from household_networth.db.storage import Storage
from household_networth.schemas.accounts import (HoldingCreate, HoldingOut,
                                                 HoldingUpdate, OwnerOut,
                                                 StockAccountCreate,
                                                 StockAccountOut,
                                                 StockAccountUpdate)
from household_networth.services.authorization import Action, OwnershipGuard
from household_networth.services.directory import Context
from household_networth.services.owners import clean_owner_ids, owners_by_record
from household_networth.services.price_cache import (PriceOracleCache,
                                                     PriceResult, Quote,
                                                     QuoteError, price_map)
from household_networth.services.valuation import (AccountHoldings,
                                                   HoldingValuation,
                                                   value_account,
                                                   value_holding)

logger = logging.getLogger(__name__)

ACCOUNT_LABEL = "Account"
HOLDING_LABEL = "Holding"


@dataclass(frozen=True)
class AccountBundle:
    """A stock account loaded with everything needed to render it."""

    account: StockAccount
    holdings: tuple[StockHolding, ...]
    owners: tuple[OwnerOut, ...]

    def as_holdings(self) -> AccountHoldings:
        return AccountHoldings(id=self.account.id, holdings=self.holdings)


def load_household_accounts(storage: Storage, context: Context) -> list[AccountBundle]:
    """Stock accounts with at least one owner on the active household roster."""
    accounts = storage.records_owned_by(StockAccount, context.household_profile_ids)
    return _bundle(storage, accounts)


def _bundle(storage: Storage, accounts: Sequence[StockAccount]) -> list[AccountBundle]:
    ids = [a.id for a in accounts]
    holdings = storage.holdings_for_accounts(ids)
    owners = owners_by_record(storage, StockAccount, ids)
    return [
        AccountBundle(
            account=a, holdings=tuple(holdings.get(a.id, ())), owners=tuple(owners[a.id])
        )
        for a in accounts
    ]


def holding_out(
    holding: StockHolding, valued: HoldingValuation, result: PriceResult | None
) -> HoldingOut:
    return HoldingOut(
        id=holding.id,
        symbol=holding.symbol,
        name=holding.name,
        quantity=valued.quantity,
        avg_cost_basis=valued.avg_cost_basis,
        current_price=valued.price,
        value=valued.value,
        cost_basis=valued.cost_basis,
        gain=valued.gain,
        gain_percent=valued.gain_percent,
        price_error=result.error if isinstance(result, QuoteError) else None,
    )


def render_account(bundle: AccountBundle, results: Mapping[str, PriceResult]) -> StockAccountOut:
    valuation = value_account(bundle.as_holdings(), price_map(results))
    holdings = [
        holding_out(holding, valued, results.get(holding.symbol.upper()))
        for holding, valued in zip(bundle.holdings, valuation.holdings)
    ]
    account = bundle.account
    return StockAccountOut(
        id=account.id,
        name=account.name,
        broker=account.broker,
        currency=account.currency,
        owners=list(bundle.owners),
        holdings=holdings,
        total_value=valuation.total_value,
        total_cost_basis=valuation.total_cost_basis,
        total_gain=valuation.gain,
        total_gain_percent=valuation.gain_percent,
        created_at=account.created_at,
        updated_at=account.updated_at,
    )


class StockAccountService:
    """Owner-gated stock account CRUD. Reads are async because they price holdings."""

    def __init__(self, guard: OwnershipGuard, price_cache: PriceOracleCache) -> None:
        self._guard = guard
        self._prices = price_cache

    async def list_accounts(self, storage: Storage, context: Context) -> list[StockAccountOut]:
        bundles = await asyncio.to_thread(load_household_accounts, storage, context)
        results = await self._prices.get_prices(
            h.symbol for b in bundles for h in b.holdings
        )
        return [render_account(b, results) for b in bundles]

    async def get_account(
        self, storage: Storage, context: Context, account_id: str
    ) -> StockAccountOut:
        bundle = await asyncio.to_thread(self._load_one, storage, context, account_id)
        results = await self._prices.get_prices(h.symbol for h in bundle.holdings)
        return render_account(bundle, results)

    def create_account(
        self, storage: Storage, context: Context, payload: StockAccountCreate
    ) -> StockAccountOut:
        if payload.owner_ids is None:
            owner_ids = [context.profile.id]
        else:
            owner_ids = clean_owner_ids(payload.owner_ids, context)
        with storage.transaction():
            account = storage.add(
                StockAccount(
                    name=payload.name,
                    broker=payload.broker,
                    currency=payload.currency,
                    user_id=context.user_id,
                )
            )
            storage.add_owners(StockAccount, account.id, owner_ids)
        logger.info("Created stock account %s with %d owner(s)", account.id, len(owner_ids))
        return render_account(_bundle(storage, [account])[0], {})

    def update_account(
        self,
        storage: Storage,
        context: Context,
        account_id: str,
        payload: StockAccountUpdate,
    ) -> StockAccountOut:
        account = self._guard.require_record(
            storage, context, StockAccount, account_id, Action.WRITE, label=ACCOUNT_LABEL
        )
        changes = payload.model_dump(exclude_unset=True)
        for key in ("name", "currency"):
            if changes.get(key) is not None:
                setattr(account, key, changes[key])
        if "broker" in changes:
            account.broker = changes["broker"]
        storage.touch(account)
        bundle = _bundle(storage, [account])[0]
        return render_account(bundle, self._cached_results(bundle.holdings))

    def delete_account(self, storage: Storage, context: Context, account_id: str) -> None:
        account = self._guard.require_record(
            storage, context, StockAccount, account_id, Action.WRITE, label=ACCOUNT_LABEL
        )
        with storage.transaction():
            storage.delete_record(account)
        logger.info("Deleted stock account %s", account_id)

    # -- holdings -----------------------------------------------------------

    def add_holding(
        self,
        storage: Storage,
        context: Context,
        account_id: str,
        payload: HoldingCreate,
    ) -> HoldingOut:
        self._guard.require_record(
            storage, context, StockAccount, account_id, Action.WRITE, label=ACCOUNT_LABEL
        )
        if storage.find_holding(account_id, payload.symbol) is not None:
            raise ConflictError(f"Holding for {payload.symbol} already exists in this account")
        holding = storage.add(
            StockHolding(
                account_id=account_id,
                symbol=payload.symbol,
                name=payload.name,
                quantity=payload.quantity,
                avg_cost_basis=payload.avg_cost_basis,
            )
        )
        return self._render_holding(holding)

    def update_holding(
        self,
        storage: Storage,
        context: Context,
        account_id: str,
        holding_id: str,
        payload: HoldingUpdate,
    ) -> HoldingOut:
        holding = self._load_holding(storage, context, account_id, holding_id)
        for key, value in payload.model_dump(exclude_unset=True).items():
            if value is not None:
                setattr(holding, key, value)
        storage.touch(holding)
        return self._render_holding(holding)

    def delete_holding(
        self, storage: Storage, context: Context, account_id: str, holding_id: str
    ) -> None:
        holding = self._load_holding(storage, context, account_id, holding_id)
        storage.delete(holding)

    # -- helpers ------------------------------------------------------------

    def _load_one(self, storage: Storage, context: Context, account_id: str) -> AccountBundle:
        account = self._guard.require_record(
            storage, context, StockAccount, account_id, Action.READ, label=ACCOUNT_LABEL
        )
        return _bundle(storage, [account])[0]

    def _load_holding(
        self, storage: Storage, context: Context, account_id: str, holding_id: str
    ) -> StockHolding:
        self._guard.require_record(
            storage, context, StockAccount, account_id, Action.WRITE, label=HOLDING_LABEL
        )
        holding = storage.get(StockHolding, holding_id)
        if holding is None or holding.account_id != account_id:
            raise NotFoundError(f"{HOLDING_LABEL} not found")
        return holding

    def _cached_results(self, holdings: Sequence[StockHolding]) -> dict[str, PriceResult]:
        """Last known prices only; write paths never wait on the provider."""
        results: dict[str, PriceResult] = {}
        for holding in holdings:
            quote = self._prices.latest(holding.symbol)
            if quote is not None:
                results[holding.symbol.upper()] = Quote(
                    symbol=quote.symbol,
                    price=quote.price,
                    timestamp=quote.timestamp,
                    from_cache=True,
                )
        return results

    def _render_holding(self, holding: StockHolding) -> HoldingOut:
        results = self._cached_results([holding])
        valued = value_holding(holding, price_map(results))
        return holding_out(holding, valued, results.get(holding.symbol.upper()))
