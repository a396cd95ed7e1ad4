"""Net-worth dashboard for the active household."""
import logging

from fastapi import APIRouter

from household_networth.core.exceptions import AppError
from household_networth.deps import (CurrentContext, DashboardServiceDep,
                                     StorageDep)
from household_networth.schemas import DashboardOut, Envelope, SnapshotOut, ok
from household_networth.services.dashboard import dashboard_out

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("", response_model=Envelope[DashboardOut])
async def get_dashboard(
    context: CurrentContext, storage: StorageDep, service: DashboardServiceDep
) -> Envelope[DashboardOut]:
    """Net worth with portfolio, pension and misc asset breakdowns.

    Symbols that cannot be priced are valued at 0; the request still succeeds.
    """
    try:
        summary = await service.summary(storage, context)
    except AppError:
        raise
    except Exception as exc:
        logger.exception("Dashboard failed for household %s", context.household_id)
        raise AppError("Failed to fetch dashboard data") from exc
    return ok(dashboard_out(summary))


@router.get("/history", response_model=Envelope[list[SnapshotOut]])
def get_history(
    context: CurrentContext, storage: StorageDep, service: DashboardServiceDep
) -> Envelope[list[SnapshotOut]]:
    """The latest 24 snapshots of the active household, oldest first."""
    return ok(service.history(storage, context))
