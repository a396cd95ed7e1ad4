"""FastAPI dependencies: the container on app.state holds singletons; Depends() resolves them.

Path identifiers are validated by their own dependencies, declared before
the auth and context dependencies in each route, so a malformed id is
rejected before any query runs.
"""
import hmac
from collections.abc import Generator
from typing import Annotated

from fastapi import Depends, Header, Path, Query, Request

from household_networth.config import Settings
from household_networth.container import Container
from household_networth.core.exceptions import UnauthenticatedError
from household_networth.core.utils import validate_id
from household_networth.db import Storage, User, session_scope
from household_networth.services import (Context, DashboardService,
                                         HouseholdService, MiscAssetService,
                                         OwnerService, PensionService,
                                         PriceOracleCache, ProfileService,
                                         SnapshotScheduler,
                                         StockAccountService)
from household_networth.services.identity import bearer_token


def get_container(request: Request) -> Container:
    """Resolve the DI container created by create_app()."""
    return request.app.state.container


ContainerDep = Annotated[Container, Depends(get_container)]


def get_settings(container: ContainerDep) -> Settings:
    return container.settings()


def get_storage(container: ContainerDep) -> Generator[Storage, None, None]:
    """One session per request; committed when the route succeeds, rolled back otherwise."""
    with session_scope(container.engine()) as session:
        yield Storage(session)


StorageDep = Annotated[Storage, Depends(get_storage)]
SettingsDep = Annotated[Settings, Depends(get_settings)]


async def get_current_user(
    request: Request, container: ContainerDep, storage: StorageDep
) -> User:
    """Resolve the caller from the Authorization header (or the dev bypass)."""
    return await container.identity_resolver().resolve(
        storage, request.headers.get("Authorization")
    )


CurrentUser = Annotated[User, Depends(get_current_user)]


def get_context(
    container: ContainerDep,
    storage: StorageDep,
    user: CurrentUser,
    household_id: Annotated[str | None, Query(alias="householdId")] = None,
    x_household_id: Annotated[str | None, Header(alias="X-Household-Id")] = None,
) -> Context:
    """Resolve profile, memberships and the active household for the caller."""
    requested = household_id or x_household_id
    if requested:
        validate_id(requested, "household ID")
    return container.directory().resolve_context(storage, user, requested)


CurrentContext = Annotated[Context, Depends(get_context)]


# -- path identifiers ---------------------------------------------------------


def record_id(id: Annotated[str, Path()]) -> str:  # pylint: disable=redefined-builtin
    return validate_id(id)


def profile_id(profile_id_: Annotated[str, Path(alias="profileId")]) -> str:
    return validate_id(profile_id_, "profile ID")


def holding_id(holding_id_: Annotated[str, Path(alias="holdingId")]) -> str:
    return validate_id(holding_id_, "holding ID")


RecordId = Annotated[str, Depends(record_id)]
ProfileId = Annotated[str, Depends(profile_id)]
HoldingId = Annotated[str, Depends(holding_id)]


# -- cron ---------------------------------------------------------------------


def require_cron_secret(request: Request, settings: SettingsDep) -> None:
    """In production, scheduled endpoints require 'Bearer $CRON_SECRET'.

    An unset secret rejects every call; outside production no auth is needed.
    """
    if not settings.is_production:
        return
    token = bearer_token(request.headers.get("Authorization"))
    secret = settings.cron_secret
    if not secret or token is None or not hmac.compare_digest(token, secret):
        raise UnauthenticatedError()


CronAuth = Depends(require_cron_secret)


# -- services -----------------------------------------------------------------


def get_households(container: ContainerDep) -> HouseholdService:
    return container.households()


def get_profiles(container: ContainerDep) -> ProfileService:
    return container.profiles()


def get_owners(container: ContainerDep) -> OwnerService:
    return container.owners()


def get_stock_accounts(container: ContainerDep) -> StockAccountService:
    return container.stock_accounts()


def get_pensions(container: ContainerDep) -> PensionService:
    return container.pensions()


def get_assets(container: ContainerDep) -> MiscAssetService:
    return container.assets()


def get_dashboard(container: ContainerDep) -> DashboardService:
    return container.dashboard()


def get_price_cache(container: ContainerDep) -> PriceOracleCache:
    return container.price_cache()


def get_snapshots(container: ContainerDep) -> SnapshotScheduler:
    return container.snapshots()


# Type aliases for route injection
HouseholdServiceDep = Annotated[HouseholdService, Depends(get_households)]
ProfileServiceDep = Annotated[ProfileService, Depends(get_profiles)]
OwnerServiceDep = Annotated[OwnerService, Depends(get_owners)]
StockAccountServiceDep = Annotated[StockAccountService, Depends(get_stock_accounts)]
PensionServiceDep = Annotated[PensionService, Depends(get_pensions)]
MiscAssetServiceDep = Annotated[MiscAssetService, Depends(get_assets)]
DashboardServiceDep = Annotated[DashboardService, Depends(get_dashboard)]
PriceCacheDep = Annotated[PriceOracleCache, Depends(get_price_cache)]
SnapshotSchedulerDep = Annotated[SnapshotScheduler, Depends(get_snapshots)]
