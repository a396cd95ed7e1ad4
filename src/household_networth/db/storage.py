"""Storage port: typed CRUD and relational queries over the SQLModel tables.

Services talk to Storage rather than to the session so the ownership joins
live in one place.
"""
import logging
from collections import defaultdict
from collections.abc import Generator, Iterable, Sequence
from contextlib import contextmanager
from typing import TypeVar

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, SQLModel, col, select

from household_networth.core.utils import utcnow
from household_networth.db.models import (Household, HouseholdMember, MiscAsset,
                                          MiscAssetOwner, NetWorthSnapshot,
                                          PensionAccount, PensionAccountOwner,
                                          PensionDeposit, Profile, StockAccount,
                                          StockAccountOwner, StockHolding, User)

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", StockAccount, PensionAccount, MiscAsset)
ModelT = TypeVar("ModelT", bound=SQLModel)

# Record model -> (owner link model, name of the link column pointing at the record)
OWNER_LINKS: dict[type[SQLModel], tuple[type[SQLModel], str]] = {
    StockAccount: (StockAccountOwner, "account_id"),
    PensionAccount: (PensionAccountOwner, "account_id"),
    MiscAsset: (MiscAssetOwner, "asset_id"),
}


def _owner_link(model: type[SQLModel]) -> tuple[type[SQLModel], str]:
    try:
        return OWNER_LINKS[model]
    except KeyError:
        raise TypeError(f"{model.__name__} has no ownership set") from None


class Storage:
    """Unit of work over one SQLModel session."""

    def __init__(self, session: Session) -> None:
        self.session = session

    # -- generic -----------------------------------------------------------

    def get(self, model: type[ModelT], record_id: str) -> ModelT | None:
        return self.session.get(model, record_id)

    def add(self, obj: ModelT) -> ModelT:
        self.session.add(obj)
        self.session.flush()
        return obj

    def delete(self, obj: SQLModel) -> None:
        self.session.delete(obj)
        self.session.flush()

    def touch(self, obj: SQLModel) -> None:
        """Stamp updated_at and flush pending changes for obj."""
        if hasattr(obj, "updated_at"):
            obj.updated_at = utcnow()
        self.session.add(obj)
        self.session.flush()

    @contextmanager
    def transaction(self) -> Generator["Storage", None, None]:
        """Commit the enclosed writes together or roll all of them back."""
        try:
            yield self
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

    # -- users and profiles -------------------------------------------------

    def find_user_by_email(self, email: str) -> User | None:
        return self.session.exec(select(User).where(User.email == email)).first()

    def get_or_create_user(self, email: str, name: str | None = None) -> User:
        """Upsert a user keyed by email and sync the display name.

        A concurrent insert of the same email loses on the unique index and
        falls back to the row that won.
        """
        email = email.strip().lower()
        user = self.find_user_by_email(email)
        if user is None:
            user = User(email=email, name=name)
            self.session.add(user)
            try:
                self.session.flush()
            except IntegrityError:
                self.session.rollback()
                logger.info("User %s created concurrently; reusing existing row", email)
                user = self.find_user_by_email(email)
                if user is None:
                    raise
        if name and user.name != name:
            user.name = name
            self.touch(user)
        return user

    def profile_for_user(self, user_id: str) -> Profile | None:
        return self.session.exec(select(Profile).where(Profile.user_id == user_id)).first()

    def profiles_by_ids(self, profile_ids: Iterable[str]) -> list[Profile]:
        ids = list(profile_ids)
        if not ids:
            return []
        return list(self.session.exec(select(Profile).where(col(Profile.id).in_(ids))).all())

    # -- households ---------------------------------------------------------

    def memberships_for_profile(
        self, profile_id: str
    ) -> list[tuple[HouseholdMember, Household]]:
        """Memberships of a profile, earliest joined first (ties by household id)."""
        statement = (
            select(HouseholdMember, Household)
            .join(Household, col(HouseholdMember.household_id) == col(Household.id))
            .where(HouseholdMember.profile_id == profile_id)
            .order_by(col(HouseholdMember.joined_at), col(Household.id))
        )
        return list(self.session.exec(statement).all())

    def household_roster(self, household_id: str) -> list[tuple[HouseholdMember, Profile]]:
        statement = (
            select(HouseholdMember, Profile)
            .join(Profile, col(HouseholdMember.profile_id) == col(Profile.id))
            .where(HouseholdMember.household_id == household_id)
            .order_by(col(HouseholdMember.joined_at), col(Profile.id))
        )
        return list(self.session.exec(statement).all())

    def membership(self, household_id: str, profile_id: str) -> HouseholdMember | None:
        statement = select(HouseholdMember).where(
            HouseholdMember.household_id == household_id,
            HouseholdMember.profile_id == profile_id,
        )
        return self.session.exec(statement).first()

    def all_households(self) -> list[Household]:
        return list(self.session.exec(select(Household).order_by(col(Household.created_at))).all())

    def delete_household(self, household: Household) -> None:
        """Delete a household together with its memberships and snapshot history."""
        members = self.session.exec(
            select(HouseholdMember).where(HouseholdMember.household_id == household.id)
        ).all()
        snapshots = self.session.exec(
            select(NetWorthSnapshot).where(NetWorthSnapshot.household_id == household.id)
        ).all()
        for row in [*members, *snapshots]:
            self.session.delete(row)
        self.session.flush()
        self.session.delete(household)
        self.session.flush()

    def delete_profile(self, profile: Profile) -> None:
        """Delete a tracked-only profile, its memberships and its owner links."""
        rows: list[SQLModel] = list(
            self.session.exec(
                select(HouseholdMember).where(HouseholdMember.profile_id == profile.id)
            ).all()
        )
        for link, _ in OWNER_LINKS.values():
            rows.extend(self.session.exec(select(link).where(link.profile_id == profile.id)).all())
        for row in rows:
            self.session.delete(row)
        self.session.flush()
        self.session.delete(profile)
        self.session.flush()

    def users_without_household(self) -> list[tuple[User, Profile]]:
        """Users whose profile belongs to no household."""
        has_membership = select(HouseholdMember.profile_id)
        statement = (
            select(User, Profile)
            .join(Profile, col(Profile.user_id) == col(User.id))
            .where(col(Profile.id).not_in(has_membership))
            .order_by(col(User.created_at))
        )
        return list(self.session.exec(statement).all())

    # -- ownership ----------------------------------------------------------

    def owner_ids(self, model: type[SQLModel], record_id: str) -> list[str]:
        link, column = _owner_link(model)
        statement = select(link).where(getattr(link, column) == record_id)
        return [row.profile_id for row in self.session.exec(statement).all()]

    def owner_ids_for(
        self, model: type[SQLModel], record_ids: Sequence[str]
    ) -> dict[str, list[str]]:
        link, column = _owner_link(model)
        owners: dict[str, list[str]] = defaultdict(list)
        if not record_ids:
            return owners
        statement = select(link).where(col(getattr(link, column)).in_(list(record_ids)))
        for row in self.session.exec(statement).all():
            owners[getattr(row, column)].append(row.profile_id)
        return owners

    def add_owners(self, model: type[SQLModel], record_id: str, profile_ids: Iterable[str]) -> None:
        link, column = _owner_link(model)
        for profile_id in profile_ids:
            self.session.add(link(**{column: record_id, "profile_id": profile_id}))
        self.session.flush()

    def replace_owners(
        self, model: type[SQLModel], record_id: str, profile_ids: Sequence[str]
    ) -> None:
        """Delete every owner link of the record and insert the new set atomically."""
        link, column = _owner_link(model)
        with self.transaction():
            current = self.session.exec(
                select(link).where(getattr(link, column) == record_id)
            ).all()
            for row in current:
                self.session.delete(row)
            self.session.flush()
            self.add_owners(model, record_id, profile_ids)

    def records_owned_by(
        self, model: type[RecordT], profile_ids: Iterable[str]
    ) -> list[RecordT]:
        """Records with at least one owner among profile_ids."""
        ids = list(profile_ids)
        if not ids:
            return []
        link, column = _owner_link(model)
        owned = select(getattr(link, column)).where(col(link.profile_id).in_(ids))
        statement = (
            select(model)
            .where(col(model.id).in_(owned))
            .order_by(col(model.created_at), col(model.id))
        )
        return list(self.session.exec(statement).all())

    def records_for_user(self, model: type[RecordT], user_id: str) -> list[RecordT]:
        statement = (
            select(model)
            .where(model.user_id == user_id)
            .order_by(col(model.created_at), col(model.id))
        )
        return list(self.session.exec(statement).all())

    def delete_record(self, record: StockAccount | PensionAccount | MiscAsset) -> None:
        """Delete a financial record with its owner links and child rows."""
        model = type(record)
        link, column = _owner_link(model)
        children: list[SQLModel] = list(
            self.session.exec(select(link).where(getattr(link, column) == record.id)).all()
        )
        if model is StockAccount:
            children.extend(self.holdings_for(record.id))
        elif model is PensionAccount:
            children.extend(self.deposits_for(record.id))
        for child in children:
            self.session.delete(child)
        self.session.delete(record)
        self.session.flush()

    # -- holdings and deposits ----------------------------------------------

    def holdings_for(self, account_id: str) -> list[StockHolding]:
        statement = (
            select(StockHolding)
            .where(StockHolding.account_id == account_id)
            .order_by(col(StockHolding.symbol))
        )
        return list(self.session.exec(statement).all())

    def holdings_for_accounts(self, account_ids: Sequence[str]) -> dict[str, list[StockHolding]]:
        holdings: dict[str, list[StockHolding]] = defaultdict(list)
        if not account_ids:
            return holdings
        statement = (
            select(StockHolding)
            .where(col(StockHolding.account_id).in_(list(account_ids)))
            .order_by(col(StockHolding.symbol))
        )
        for holding in self.session.exec(statement).all():
            holdings[holding.account_id].append(holding)
        return holdings

    def find_holding(self, account_id: str, symbol: str) -> StockHolding | None:
        statement = select(StockHolding).where(
            StockHolding.account_id == account_id, StockHolding.symbol == symbol
        )
        return self.session.exec(statement).first()

    def distinct_symbols(self) -> list[str]:
        statement = select(StockHolding.symbol).distinct().order_by(col(StockHolding.symbol))
        return list(self.session.exec(statement).all())

    def deposits_for(self, account_id: str) -> list[PensionDeposit]:
        statement = (
            select(PensionDeposit)
            .where(PensionDeposit.account_id == account_id)
            .order_by(col(PensionDeposit.deposit_date))
        )
        return list(self.session.exec(statement).all())

    # -- snapshots ----------------------------------------------------------

    def recent_snapshots(self, household_id: str, limit: int = 24) -> list[NetWorthSnapshot]:
        """The latest `limit` snapshots of a household, oldest first."""
        statement = (
            select(NetWorthSnapshot)
            .where(NetWorthSnapshot.household_id == household_id)
            .order_by(col(NetWorthSnapshot.date).desc(), col(NetWorthSnapshot.created_at).desc())
            .limit(limit)
        )
        rows = list(self.session.exec(statement).all())
        rows.reverse()
        return rows
