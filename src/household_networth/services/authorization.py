"""Ownership authorization guard.

Financial records are reachable under one of two strategies, chosen per
record type by its OwnershipScope:

- USER: the record belongs to the user that created it (record.user_id).
- HOUSEHOLD: any owner profile of the record is on the active household roster.

Both FORBIDDEN and NOT_FOUND surface to clients as 404 so record existence
cannot be probed; the two are logged differently.
"""
import logging
from collections.abc import Collection
from enum import Enum
from typing import TypeVar

from household_networth.core.exceptions import ForbiddenError, NotFoundError
from household_networth.db.models import MiscAsset, PensionAccount, StockAccount
from household_networth.db.storage import Storage
from household_networth.services.directory import Context
from household_networth.services.roles import Capability, capabilities

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", StockAccount, PensionAccount, MiscAsset)


class Decision(str, Enum):
    ALLOWED = "allowed"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"


class Action(str, Enum):
    READ = "read"
    WRITE = "write"


class OwnershipScope(str, Enum):
    USER = "user"
    HOUSEHOLD = "household"


RECORD_SCOPES: dict[type, OwnershipScope] = {
    StockAccount: OwnershipScope.HOUSEHOLD,
    PensionAccount: OwnershipScope.HOUSEHOLD,
    MiscAsset: OwnershipScope.USER,
}


def scope_for(model: type) -> OwnershipScope:
    return RECORD_SCOPES[model]


class OwnershipGuard:
    """Decides whether a caller context may act on a financial record.

    READ and WRITE currently follow the same rule: anyone who can see a
    record may change it.
    """

    def authorize(
        self,
        context: Context,
        record: StockAccount | PensionAccount | MiscAsset | None,
        owner_ids: Collection[str] = (),
        action: Action = Action.READ,
    ) -> Decision:
        """Pure decision for one record and its current owner profile ids."""
        if record is None:
            return Decision.NOT_FOUND
        if scope_for(type(record)) is OwnershipScope.USER:
            allowed = record.user_id is not None and record.user_id == context.user_id
        else:
            # Zero owners means orphaned: unreachable by construction.
            allowed = not context.household_profile_ids.isdisjoint(owner_ids)
        return Decision.ALLOWED if allowed else Decision.FORBIDDEN

    def require_record(
        self,
        storage: Storage,
        context: Context,
        model: type[RecordT],
        record_id: str,
        action: Action = Action.READ,
        *,
        label: str | None = None,
    ) -> RecordT:
        """Load a record and return it if allowed; raise NotFoundError otherwise."""
        record = storage.get(model, record_id)
        owner_ids: list[str] = []
        if record is not None and scope_for(model) is OwnershipScope.HOUSEHOLD:
            owner_ids = storage.owner_ids(model, record_id)
        decision = self.authorize(context, record, owner_ids, action)
        if decision is Decision.ALLOWED:
            return record
        if decision is Decision.FORBIDDEN:
            logger.warning(
                "Denied %s on %s %s for user %s in household %s",
                action.value,
                model.__name__,
                record_id,
                context.user_id,
                context.household_id,
            )
        raise NotFoundError(f"{label or model.__name__} not found")

    def authorize_household(
        self, context: Context, household_id: str, capability: Capability
    ) -> Decision:
        """Household-level actions depend on the caller's role in that household."""
        role = context.membership_role(household_id)
        if role is None or not capabilities(role).allows(capability):
            return Decision.FORBIDDEN
        return Decision.ALLOWED

    def require_household(
        self,
        context: Context,
        household_id: str,
        capability: Capability,
        message: str = "Forbidden",
    ) -> None:
        if self.authorize_household(context, household_id, capability) is not Decision.ALLOWED:
            logger.warning(
                "User %s lacks %s on household %s",
                context.user_id,
                capability.value,
                household_id,
            )
            raise ForbiddenError(message)
