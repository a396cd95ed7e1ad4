"""Scheduled jobs, triggered by an external cron."""
from fastapi import APIRouter

from household_networth.deps import CronAuth, SnapshotSchedulerDep
from household_networth.schemas import (Envelope, PriceRefreshOut,
                                        SnapshotRunOut, ok)
from household_networth.schemas.dashboard import SnapshotFailure

router = APIRouter(prefix="/cron", tags=["cron"], dependencies=[CronAuth])


@router.get("/create-snapshot", response_model=Envelope[SnapshotRunOut])
async def create_snapshot(scheduler: SnapshotSchedulerDep) -> Envelope[SnapshotRunOut]:
    """Append a net-worth snapshot for every household and every orphaned user."""
    result = await scheduler.run()
    return ok(
        SnapshotRunOut(
            created=result.created,
            households=result.households,
            users=result.users,
            failed=[SnapshotFailure(target=t, error=e) for t, e in result.failed],
            duration_ms=result.duration_ms,
        )
    )


@router.get("/refresh-prices", response_model=Envelope[PriceRefreshOut])
async def refresh_prices(scheduler: SnapshotSchedulerDep) -> Envelope[PriceRefreshOut]:
    """Force-refresh the cached price of every held symbol."""
    result = await scheduler.refresh_prices()
    return ok(
        PriceRefreshOut(symbols=result.symbols, updated=result.updated, failed=result.failed)
    )
