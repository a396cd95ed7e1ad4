"""DI container. main.create_app() attaches one to app.state; deps.py resolves from it."""
from dependency_injector import containers, providers

from household_networth.config import Settings
from household_networth.db import create_db_engine
from household_networth.providers import (create_identity_provider,
                                          create_price_provider)
from household_networth.services import (DashboardService, HouseholdDirectory,
                                         HouseholdService, IdentityResolver,
                                         MiscAssetService, OwnerService,
                                         OwnershipGuard, PensionService,
                                         PriceOracleCache, ProfileService,
                                         SnapshotScheduler,
                                         StockAccountService)


class Container(containers.DeclarativeContainer):
    settings = providers.Singleton(Settings.from_env)

    engine = providers.Singleton(
        create_db_engine,
        database_url=settings.provided.database_url,
        echo=settings.provided.sql_echo,
    )

    price_provider = providers.Singleton(create_price_provider, settings)
    identity_provider = providers.Singleton(create_identity_provider, settings)

    price_cache = providers.Singleton(
        PriceOracleCache,
        provider=price_provider,
        quote_ttl_seconds=settings.provided.quote_ttl_seconds,
        search_ttl_seconds=settings.provided.search_ttl_seconds,
        max_concurrency=settings.provided.price_max_concurrency,
    )
    identity_resolver = providers.Singleton(IdentityResolver, settings, identity_provider)

    directory = providers.Singleton(HouseholdDirectory)
    guard = providers.Singleton(OwnershipGuard)
    owners = providers.Singleton(OwnerService, guard)

    households = providers.Singleton(HouseholdService, guard)
    profiles = providers.Singleton(ProfileService, guard)
    stock_accounts = providers.Singleton(StockAccountService, guard, price_cache)
    pensions = providers.Singleton(PensionService, guard)
    assets = providers.Singleton(MiscAssetService, guard)
    dashboard = providers.Singleton(DashboardService, price_cache)

    snapshots = providers.Singleton(
        SnapshotScheduler,
        engine=engine,
        price_cache=price_cache,
        timeout_seconds=settings.provided.snapshot_timeout_seconds,
    )


def init_container(settings: Settings | None = None) -> Container:
    """Create the container, optionally pinned to explicit settings."""
    container = Container()
    if settings is not None:
        container.settings.override(providers.Object(settings))
    return container
