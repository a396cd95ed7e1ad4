"""Tests for the snapshot scheduler and the price refresh job."""
import asyncio
import time
from decimal import Decimal

import pytest
from sqlmodel import select

from household_networth.core.exceptions import SnapshotTimeoutError
from household_networth.db import MiscAssetType, NetWorthSnapshot, Profile
from household_networth.services.dashboard import DashboardService
from household_networth.services.snapshots import SnapshotScheduler

from conftest import (ALICE, BOB, CAROL, context_for, make_asset,
                      make_household, make_member, make_pension,
                      make_stock_account)


@pytest.fixture
def scheduler(container) -> SnapshotScheduler:
    return container.snapshots()


def snapshots(storage_scope) -> list[NetWorthSnapshot]:
    with storage_scope() as storage:
        return list(storage.session.exec(select(NetWorthSnapshot)).all())


class TestSnapshotRun:
    def test_one_snapshot_per_household(self, storage_scope, scheduler):
        with storage_scope() as storage:
            alice, alice_profile, home = make_household(storage, ALICE)
            make_stock_account(storage, [alice_profile], {"AAPL": ("10", "150")})
            make_pension(storage, [alice_profile], "50000")
            make_asset(storage, alice, [alice_profile], MiscAssetType.BANK_DEPOSIT, "10000")
            make_asset(storage, alice, [alice_profile], MiscAssetType.LOAN, "-5000")
            make_household(storage, BOB, "Other")

        result = asyncio.run(scheduler.run())

        assert result.created == 2
        assert result.households == 2
        assert result.users == 0
        assert result.failed == []
        rows = {row.household_id: row for row in snapshots(storage_scope)}
        assert rows[home.id].net_worth == Decimal("56750")
        assert rows[home.id].portfolio == Decimal("1750")
        assert rows[home.id].pension == Decimal("50000")
        assert rows[home.id].assets == Decimal("5000")

    def test_orphaned_user_snapshotted_with_own_profile(self, storage_scope, scheduler):
        with storage_scope() as storage:
            carol = storage.get_or_create_user(CAROL, "Carol")
            profile = storage.add(Profile(name="Carol", user_id=carol.id))
            make_pension(storage, [profile], "1200")

        result = asyncio.run(scheduler.run())

        assert result.users == 1
        [row] = snapshots(storage_scope)
        assert row.user_id == carol.id
        assert row.household_id is None
        assert row.net_worth == Decimal("1200")

    def test_failed_unit_does_not_stop_the_run(self, storage_scope, scheduler, monkeypatch):
        with storage_scope() as storage:
            _, _, broken = make_household(storage, ALICE)
            _, _, healthy = make_household(storage, BOB, "Other")

        original = scheduler._value

        async def flaky(target):
            if target.household_id == broken.id:
                raise RuntimeError("database hiccup")
            return await original(target)

        monkeypatch.setattr(scheduler, "_value", flaky)

        result = asyncio.run(scheduler.run())

        assert result.created == 1
        assert result.failed == [(f"household {broken.id}", "database hiccup")]
        assert [row.household_id for row in snapshots(storage_scope)] == [healthy.id]

    def test_unpriced_symbol_is_valued_at_zero(self, storage_scope, scheduler):
        with storage_scope() as storage:
            _, profile, home = make_household(storage, ALICE)
            make_stock_account(storage, [profile], {"UNKNOWN": ("100", "50")})

        result = asyncio.run(scheduler.run())

        assert result.failed == []
        [row] = snapshots(storage_scope)
        assert row.household_id == home.id
        assert row.net_worth == 0

    def test_timeout(self, storage_scope, container):
        with storage_scope() as storage:
            make_household(storage, ALICE)
        scheduler = SnapshotScheduler(container.engine(), container.price_cache(), 0.05)

        async def stuck(target):
            await asyncio.sleep(5)

        scheduler._value = stuck

        with pytest.raises(SnapshotTimeoutError):
            asyncio.run(scheduler.run())

    def test_nothing_written_after_the_deadline(self, storage_scope, container):
        with storage_scope() as storage:
            make_household(storage, ALICE)
        scheduler = SnapshotScheduler(container.engine(), container.price_cache(), 0.5)
        original = scheduler._value

        async def slow(target):
            summary = await original(target)
            time.sleep(0.6)
            return summary

        scheduler._value = slow

        with pytest.raises(SnapshotTimeoutError):
            asyncio.run(scheduler.run())
        assert snapshots(storage_scope) == []

    def test_household_snapshot_matches_dashboard_of_any_member(
        self, storage_scope, scheduler, container
    ):
        with storage_scope() as storage:
            alice, alice_profile, home = make_household(storage, ALICE)
            bob = storage.get_or_create_user(BOB, "Bob")
            bob_profile = make_member(storage, home, "Bob", user=bob)
            make_asset(storage, bob, [bob_profile], MiscAssetType.BANK_DEPOSIT, "10000")
            make_asset(storage, alice, [alice_profile], MiscAssetType.LOAN, "-2500")

        asyncio.run(scheduler.run())

        dashboard = DashboardService(container.price_cache())
        with storage_scope() as storage:
            totals = [
                asyncio.run(dashboard.summary(storage, context_for(storage, user))).net_worth
                for user in (alice, bob)
            ]
        [row] = snapshots(storage_scope)
        assert totals == [Decimal("7500"), Decimal("7500")]
        assert row.net_worth == Decimal("7500")


class TestPriceRefresh:
    def test_refresh_counts_updated_and_failed(self, storage_scope, scheduler, price_provider):
        with storage_scope() as storage:
            _, profile, _ = make_household(storage, ALICE)
            make_stock_account(storage, [profile], {"AAPL": ("1", "1"), "UNKNOWN": ("1", "1")})
            make_stock_account(storage, [profile], {"AAPL": ("2", "1")}, name="IRA")

        result = asyncio.run(scheduler.refresh_prices())

        assert result.symbols == 2
        assert result.updated == 1
        assert result.failed == ["UNKNOWN"]
        assert price_provider.calls.count("AAPL") == 1
