"""Database models for the household net-worth service.

Money is stored as fixed-point NUMERIC and read back as Decimal. Market
quotes are not persisted; they live in the in-process price cache.
"""
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum

from sqlalchemy import DateTime, UniqueConstraint
from sqlalchemy.types import TypeDecorator
from sqlmodel import Field, SQLModel

from household_networth.core.utils import new_id, utcnow


class UTCDateTime(TypeDecorator):
    """Timestamp column that always binds and returns timezone-aware UTC.

    SQLite keeps no offset, so values read back from it are naive; they are
    re-tagged as UTC here. Naive values on the way in are taken to be UTC.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    def process_result_value(self, value, dialect):
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class HouseholdRole(str, Enum):
    """Membership role inside a household."""

    OWNER = "owner"
    ADMIN = "admin"
    MEMBER = "member"


class PensionType(str, Enum):
    PENSION = "pension"
    HISHTALMUT = "hishtalmut"


class MiscAssetType(str, Enum):
    """Kinds of miscellaneous assets. Loans and mortgages are liabilities."""

    BANK_DEPOSIT = "bank_deposit"
    LOAN = "loan"
    MORTGAGE = "mortgage"
    CHILD_SAVINGS = "child_savings"

    @property
    def is_liability(self) -> bool:
        return self in (MiscAssetType.LOAN, MiscAssetType.MORTGAGE)


class User(SQLModel, table=True):
    """Authenticated identity, upserted by email on every login."""

    id: str = Field(default_factory=new_id, primary_key=True)
    email: str = Field(unique=True, index=True)
    name: str | None = None
    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)


class Profile(SQLModel, table=True):
    """Household persona. user_id is null for tracked-only family members."""

    id: str = Field(default_factory=new_id, primary_key=True)
    name: str
    image: str | None = None
    color: str = "#3b82f6"
    user_id: str | None = Field(
        default=None, foreign_key="user.id", unique=True, index=True
    )
    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)


class Household(SQLModel, table=True):
    id: str = Field(default_factory=new_id, primary_key=True)
    name: str
    description: str | None = None
    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)


class HouseholdMember(SQLModel, table=True):
    __tablename__ = "household_member"
    __table_args__ = (UniqueConstraint("household_id", "profile_id"),)

    id: str = Field(default_factory=new_id, primary_key=True)
    household_id: str = Field(foreign_key="household.id", index=True)
    profile_id: str = Field(foreign_key="profile.id", index=True)
    role: HouseholdRole = HouseholdRole.MEMBER
    joined_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)


class StockAccount(SQLModel, table=True):
    __tablename__ = "stock_account"

    id: str = Field(default_factory=new_id, primary_key=True)
    name: str
    broker: str | None = None
    currency: str = "USD"
    user_id: str | None = Field(default=None, foreign_key="user.id", index=True)
    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)


class StockHolding(SQLModel, table=True):
    __tablename__ = "stock_holding"
    __table_args__ = (UniqueConstraint("account_id", "symbol"),)

    id: str = Field(default_factory=new_id, primary_key=True)
    account_id: str = Field(foreign_key="stock_account.id", index=True)
    symbol: str  # upper-case ticker
    name: str | None = None
    quantity: Decimal = Field(default=Decimal(0), max_digits=18, decimal_places=8)
    avg_cost_basis: Decimal = Field(default=Decimal(0), max_digits=18, decimal_places=4)
    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)


class StockAccountOwner(SQLModel, table=True):
    __tablename__ = "stock_account_owner"
    __table_args__ = (UniqueConstraint("account_id", "profile_id"),)

    id: str = Field(default_factory=new_id, primary_key=True)
    account_id: str = Field(foreign_key="stock_account.id", index=True)
    profile_id: str = Field(foreign_key="profile.id", index=True)


class PensionAccount(SQLModel, table=True):
    __tablename__ = "pension_account"

    id: str = Field(default_factory=new_id, primary_key=True)
    type: PensionType = PensionType.PENSION
    provider_name: str
    account_name: str
    current_value: Decimal = Field(default=Decimal(0), max_digits=18, decimal_places=2)
    fee_from_deposit: Decimal = Field(default=Decimal(0), max_digits=5, decimal_places=2)
    fee_from_total: Decimal = Field(default=Decimal(0), max_digits=5, decimal_places=2)
    user_id: str | None = Field(default=None, foreign_key="user.id", index=True)
    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)


class PensionDeposit(SQLModel, table=True):
    __tablename__ = "pension_deposit"

    id: str = Field(default_factory=new_id, primary_key=True)
    account_id: str = Field(foreign_key="pension_account.id", index=True)
    deposit_date: date
    salary_month: date
    amount: Decimal = Field(max_digits=18, decimal_places=2)
    employer: str
    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)


class PensionAccountOwner(SQLModel, table=True):
    __tablename__ = "pension_account_owner"
    __table_args__ = (UniqueConstraint("account_id", "profile_id"),)

    id: str = Field(default_factory=new_id, primary_key=True)
    account_id: str = Field(foreign_key="pension_account.id", index=True)
    profile_id: str = Field(foreign_key="profile.id", index=True)


class MiscAsset(SQLModel, table=True):
    """Deposit, savings or liability. Liabilities are stored negative."""

    __tablename__ = "misc_asset"

    id: str = Field(default_factory=new_id, primary_key=True)
    type: MiscAssetType
    name: str
    current_value: Decimal = Field(default=Decimal(0), max_digits=18, decimal_places=2)
    interest_rate: Decimal = Field(default=Decimal(0), max_digits=5, decimal_places=2)
    monthly_payment: Decimal | None = Field(default=None, max_digits=18, decimal_places=2)
    monthly_deposit: Decimal | None = Field(default=None, max_digits=18, decimal_places=2)
    maturity_date: date | None = None
    user_id: str | None = Field(default=None, foreign_key="user.id", index=True)
    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)


class MiscAssetOwner(SQLModel, table=True):
    __tablename__ = "misc_asset_owner"
    __table_args__ = (UniqueConstraint("asset_id", "profile_id"),)

    id: str = Field(default_factory=new_id, primary_key=True)
    asset_id: str = Field(foreign_key="misc_asset.id", index=True)
    profile_id: str = Field(foreign_key="profile.id", index=True)


class NetWorthSnapshot(SQLModel, table=True):
    """Append-only net-worth history, one row per household (or orphaned user) per run."""

    __tablename__ = "net_worth_snapshot"

    id: str = Field(default_factory=new_id, primary_key=True)
    household_id: str | None = Field(default=None, foreign_key="household.id", index=True)
    user_id: str | None = Field(default=None, foreign_key="user.id", index=True)
    date: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime, index=True)
    net_worth: Decimal = Field(max_digits=18, decimal_places=2)
    portfolio: Decimal = Field(max_digits=18, decimal_places=2)
    pension: Decimal = Field(max_digits=18, decimal_places=2)
    assets: Decimal = Field(max_digits=18, decimal_places=2)
    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
