"""Pydantic request/response schemas for the HTTP API."""
from household_networth.schemas.accounts import (HoldingCreate, HoldingOut,
                                                 HoldingUpdate, OwnerOut,
                                                 OwnersUpdate,
                                                 StockAccountCreate,
                                                 StockAccountOut,
                                                 StockAccountUpdate)
from household_networth.schemas.assets import (AssetTotals, MiscAssetCreate,
                                               MiscAssetList, MiscAssetOut,
                                               MiscAssetUpdate)
from household_networth.schemas.base import CamelModel, Envelope, ok
from household_networth.schemas.context import (ContextOut, HouseholdProfile,
                                                HouseholdSummary,
                                                ProfileSummary)
from household_networth.schemas.dashboard import (DashboardOut,
                                                  PriceRefreshOut,
                                                  SnapshotOut, SnapshotRunOut)
from household_networth.schemas.households import (HouseholdCreate,
                                                   HouseholdDetail,
                                                   HouseholdUpdate,
                                                   HouseholdWithRole,
                                                   MemberAdd, MemberOut,
                                                   MemberRoleUpdate,
                                                   OnboardingIn,
                                                   OnboardingOut,
                                                   ProfileCreate, ProfileOut,
                                                   ProfileUpdate)
from household_networth.schemas.market import (ProviderQuote, QuoteOut,
                                               SymbolMatch)
from household_networth.schemas.pension import (DepositBulkCreate,
                                                DepositCreate, DepositOut,
                                                DepositUpdate,
                                                PensionAccountCreate,
                                                PensionAccountOut,
                                                PensionAccountUpdate)

__all__ = [
    "AssetTotals",
    "CamelModel",
    "ContextOut",
    "DashboardOut",
    "DepositBulkCreate",
    "DepositCreate",
    "DepositOut",
    "DepositUpdate",
    "Envelope",
    "HoldingCreate",
    "HoldingOut",
    "HoldingUpdate",
    "HouseholdCreate",
    "HouseholdDetail",
    "HouseholdProfile",
    "HouseholdSummary",
    "HouseholdUpdate",
    "HouseholdWithRole",
    "MemberAdd",
    "MemberOut",
    "MemberRoleUpdate",
    "MiscAssetCreate",
    "MiscAssetList",
    "MiscAssetOut",
    "MiscAssetUpdate",
    "OnboardingIn",
    "OnboardingOut",
    "OwnerOut",
    "OwnersUpdate",
    "PensionAccountCreate",
    "PensionAccountOut",
    "PensionAccountUpdate",
    "PriceRefreshOut",
    "ProfileCreate",
    "ProfileOut",
    "ProfileSummary",
    "ProfileUpdate",
    "ProviderQuote",
    "QuoteOut",
    "SnapshotOut",
    "SnapshotRunOut",
    "StockAccountCreate",
    "StockAccountOut",
    "StockAccountUpdate",
    "SymbolMatch",
    "ok",
]
