"""Tests for the storage layer: timestamps survive a database round trip."""
from datetime import datetime, timedelta, timezone

from household_networth.db import Household, NetWorthSnapshot, User

from conftest import ALICE


class TestTimestamps:
    def test_written_rows_read_back_as_aware_utc(self, storage_scope):
        with storage_scope() as storage:
            user_id = storage.get_or_create_user(ALICE, "Alice").id

        with storage_scope() as storage:
            user = storage.get(User, user_id)

            assert user.created_at.tzinfo is not None
            assert user.created_at.utcoffset() == timedelta(0)
            assert abs(datetime.now(timezone.utc) - user.created_at) < timedelta(minutes=5)

    def test_naive_and_offset_values_are_stored_as_utc(self, storage_scope):
        offset = timezone(timedelta(hours=3))
        with storage_scope() as storage:
            household = storage.add(Household(name="Home"))
            naive = storage.add(
                NetWorthSnapshot(
                    household_id=household.id,
                    date=datetime(2024, 1, 1, 12, 0),
                    net_worth=0, portfolio=0, pension=0, assets=0,
                )
            )
            shifted = storage.add(
                NetWorthSnapshot(
                    household_id=household.id,
                    date=datetime(2024, 1, 1, 15, 0, tzinfo=offset),
                    net_worth=0, portfolio=0, pension=0, assets=0,
                )
            )
            ids = naive.id, shifted.id

        with storage_scope() as storage:
            dates = [storage.get(NetWorthSnapshot, snapshot_id).date for snapshot_id in ids]

        expected = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
        assert dates == [expected, expected]

    def test_touch_moves_updated_at_forward(self, storage_scope):
        with storage_scope() as storage:
            household = storage.add(Household(name="Home"))
            created = household.updated_at
            household.name = "Renamed"
            storage.touch(household)
            household_id = household.id

        with storage_scope() as storage:
            stored = storage.get(Household, household_id)

            assert stored.name == "Renamed"
            assert stored.updated_at >= created
