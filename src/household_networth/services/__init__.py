"""Domain services: identity, context, authorization, pricing, valuation and record CRUD."""
from household_networth.services.accounts import StockAccountService
from household_networth.services.assets import MiscAssetService
from household_networth.services.authorization import (Action, Decision,
                                                       OwnershipGuard,
                                                       OwnershipScope)
from household_networth.services.cache import TimedCache
from household_networth.services.dashboard import DashboardService
from household_networth.services.directory import Context, HouseholdDirectory
from household_networth.services.households import HouseholdService
from household_networth.services.identity import IdentityResolver
from household_networth.services.owners import OwnerService
from household_networth.services.pensions import PensionService
from household_networth.services.price_cache import (PriceOracleCache, Quote,
                                                     QuoteError)
from household_networth.services.profiles import ProfileService
from household_networth.services.roles import Capabilities, Capability
from household_networth.services.snapshots import SnapshotScheduler

__all__ = [
    "Action",
    "Capabilities",
    "Capability",
    "Context",
    "DashboardService",
    "Decision",
    "HouseholdDirectory",
    "HouseholdService",
    "IdentityResolver",
    "MiscAssetService",
    "OwnerService",
    "OwnershipGuard",
    "OwnershipScope",
    "PensionService",
    "PriceOracleCache",
    "ProfileService",
    "Quote",
    "QuoteError",
    "SnapshotScheduler",
    "StockAccountService",
    "TimedCache",
]
