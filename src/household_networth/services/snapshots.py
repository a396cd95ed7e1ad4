"""Scheduled jobs: net-worth snapshots and price cache warm-up.

Runs as the system principal, so no ownership guard applies. Each unit
(household or orphaned user) uses its own session and is isolated from the
failures of the others.
"""
import asyncio
import logging
import time
from collections.abc import Sequence
from dataclasses import dataclass, field

from sqlalchemy.engine import Engine

from household_networth.core.exceptions import SnapshotTimeoutError
from household_networth.db.models import NetWorthSnapshot
from household_networth.db.sessions import session_scope
from household_networth.db.storage import Storage
from household_networth.services.dashboard import (NetWorthInputs,
                                                  load_net_worth_inputs)
from household_networth.services.price_cache import (PriceOracleCache, Quote,
                                                     price_map)
from household_networth.services.valuation import (NetWorthSummary,
                                                   compute_net_worth)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SnapshotTarget:
    """One unit of a snapshot run: a household, or a user with no household."""

    label: str
    profile_ids: tuple[str, ...]
    household_id: str | None = None
    user_id: str | None = None


@dataclass
class SnapshotRunResult:
    created: int = 0
    households: int = 0
    users: int = 0
    failed: list[tuple[str, str]] = field(default_factory=list)
    duration_ms: int = 0


@dataclass
class PriceRefreshResult:
    symbols: int = 0
    updated: int = 0
    failed: list[str] = field(default_factory=list)


class SnapshotScheduler:
    def __init__(
        self,
        engine: Engine,
        price_cache: PriceOracleCache,
        timeout_seconds: float = 300,
    ) -> None:
        self._engine = engine
        self._prices = price_cache
        self._timeout = timeout_seconds

    async def run(self) -> SnapshotRunResult:
        """Append one snapshot per household and per orphaned user.

        Raises SnapshotTimeoutError when the whole run exceeds the timeout.
        Snapshots committed before the deadline are kept. No snapshot is
        written once the deadline has passed, but a write already handed to
        the worker thread when the run is cancelled may still commit.
        """
        started = time.monotonic()
        try:
            return await asyncio.wait_for(
                self._run(started + self._timeout), timeout=self._timeout
            )
        except asyncio.TimeoutError:
            logger.error("Snapshot run exceeded %ss", self._timeout)
            raise SnapshotTimeoutError() from None

    async def _run(self, deadline: float) -> SnapshotRunResult:
        started = time.monotonic()
        result = SnapshotRunResult()
        targets = await asyncio.to_thread(self._targets)
        for target in targets:
            try:
                summary = await self._value(target)
                if time.monotonic() >= deadline:
                    raise SnapshotTimeoutError()
                await asyncio.to_thread(self._write, target, summary)
            except SnapshotTimeoutError:
                logger.error("Snapshot run passed its deadline before writing %s", target.label)
                raise
            except Exception as exc:  # pylint: disable=broad-except
                logger.exception("Snapshot failed for %s", target.label)
                result.failed.append((target.label, str(exc) or type(exc).__name__))
                continue
            result.created += 1
            if target.household_id is not None:
                result.households += 1
            else:
                result.users += 1
        result.duration_ms = int((time.monotonic() - started) * 1000)
        logger.info(
            "Snapshot run created %d snapshot(s), %d failed, in %dms",
            result.created,
            len(result.failed),
            result.duration_ms,
        )
        return result

    def _targets(self) -> list[SnapshotTarget]:
        with session_scope(self._engine) as session:
            storage = Storage(session)
            targets = [
                SnapshotTarget(
                    label=f"household {household.id}",
                    household_id=household.id,
                    profile_ids=tuple(p.id for _, p in storage.household_roster(household.id)),
                )
                for household in storage.all_households()
            ]
            targets.extend(
                SnapshotTarget(label=f"user {user.id}", user_id=user.id, profile_ids=(profile.id,))
                for user, profile in storage.users_without_household()
            )
        return targets

    async def _value(self, target: SnapshotTarget) -> NetWorthSummary:
        inputs = await asyncio.to_thread(self._load, target.profile_ids)
        results = await self._prices.get_prices(inputs.symbols)
        return compute_net_worth(
            inputs.stock_accounts,
            inputs.pension_accounts,
            inputs.misc_assets,
            price_map(results),
        )

    def _load(self, profile_ids: Sequence[str]) -> NetWorthInputs:
        with session_scope(self._engine) as session:
            return load_net_worth_inputs(Storage(session), profile_ids)

    def _write(self, target: SnapshotTarget, summary: NetWorthSummary) -> None:
        with session_scope(self._engine) as session:
            Storage(session).add(
                NetWorthSnapshot(
                    household_id=target.household_id,
                    user_id=target.user_id,
                    net_worth=summary.net_worth,
                    portfolio=summary.portfolio.total_value,
                    pension=summary.pension.total_value,
                    assets=summary.assets.net_value,
                )
            )

    async def refresh_prices(self) -> PriceRefreshResult:
        """Force-refresh every symbol currently held in any account."""
        symbols = await asyncio.to_thread(self._distinct_symbols)
        results = await self._prices.refresh(symbols)
        refreshed = PriceRefreshResult(symbols=len(results))
        for symbol, outcome in results.items():
            if isinstance(outcome, Quote) and not outcome.from_cache:
                refreshed.updated += 1
            else:
                refreshed.failed.append(symbol)
        if refreshed.failed:
            logger.warning("Price refresh failed for %s", ", ".join(refreshed.failed))
        return refreshed

    def _distinct_symbols(self) -> list[str]:
        with session_scope(self._engine) as session:
            return Storage(session).distinct_symbols()
