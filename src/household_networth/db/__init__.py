"""Database package: models, session management and the storage port."""
from household_networth.db.models import (Household, HouseholdMember,
                                          HouseholdRole, MiscAsset,
                                          MiscAssetOwner, MiscAssetType,
                                          NetWorthSnapshot, PensionAccount,
                                          PensionAccountOwner, PensionDeposit,
                                          PensionType, Profile, StockAccount,
                                          StockAccountOwner, StockHolding, User)
from household_networth.db.sessions import (create_db_engine, init_db,
                                            session_scope)
from household_networth.db.storage import Storage

__all__ = [
    "Household",
    "HouseholdMember",
    "HouseholdRole",
    "MiscAsset",
    "MiscAssetOwner",
    "MiscAssetType",
    "NetWorthSnapshot",
    "PensionAccount",
    "PensionAccountOwner",
    "PensionDeposit",
    "PensionType",
    "Profile",
    "StockAccount",
    "StockAccountOwner",
    "StockHolding",
    "Storage",
    "User",
    "create_db_engine",
    "init_db",
    "session_scope",
]
