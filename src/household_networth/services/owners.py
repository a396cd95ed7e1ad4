"""Reading and atomically replacing the owner set of a financial record."""
import logging
from collections.abc import Sequence

from household_networth.core.exceptions import ValidationError
from household_networth.core.utils import validate_id
from household_networth.db.models import Profile
from household_networth.db.storage import Storage
from household_networth.schemas.accounts import OwnerOut
from household_networth.services.authorization import (Action, OwnershipGuard,
                                                       RecordT)
from household_networth.services.directory import Context

logger = logging.getLogger(__name__)


def clean_owner_ids(profile_ids: Sequence[str] | None, context: Context) -> list[str]:
    """Validate a requested owner set against the active household.

    Returns the ids de-duplicated in request order.
    """
    if not profile_ids:
        raise ValidationError("Invalid data")
    try:
        ids = [validate_id(pid) for pid in profile_ids]
    except ValidationError:
        raise ValidationError("Invalid data") from None
    ids = list(dict.fromkeys(ids))
    if not context.household_profile_ids.issuperset(ids):
        raise ValidationError("Some profiles are not in your household")
    return ids


class OwnerService:
    """Owner-set operations shared by stock accounts, pension accounts and assets."""

    def __init__(self, guard: OwnershipGuard) -> None:
        self._guard = guard

    def list_owners(
        self,
        storage: Storage,
        context: Context,
        model: type[RecordT],
        record_id: str,
        label: str,
    ) -> list[OwnerOut]:
        self._guard.require_record(storage, context, model, record_id, Action.READ, label=label)
        return self._profiles_in_order(storage, storage.owner_ids(model, record_id))

    def replace_owners(
        self,
        storage: Storage,
        context: Context,
        model: type[RecordT],
        record_id: str,
        profile_ids: Sequence[str] | None,
        label: str,
    ) -> list[OwnerOut]:
        """Replace every owner of the record with profile_ids in one transaction.

        The new set is validated before the current one is authorized, and
        nothing is written unless both pass.
        """
        ids = clean_owner_ids(profile_ids, context)
        self._guard.require_record(storage, context, model, record_id, Action.WRITE, label=label)
        storage.replace_owners(model, record_id, ids)
        logger.info("Replaced owners of %s %s with %d profile(s)", model.__name__, record_id, len(ids))
        return self._profiles_in_order(storage, ids)

    @staticmethod
    def _profiles_in_order(storage: Storage, profile_ids: Sequence[str]) -> list[OwnerOut]:
        by_id = {p.id: p for p in storage.profiles_by_ids(profile_ids)}
        return [owner_out(by_id[pid]) for pid in profile_ids if pid in by_id]


def owners_by_record(
    storage: Storage, model: type[RecordT], record_ids: Sequence[str]
) -> dict[str, list[OwnerOut]]:
    """Owner profiles of many records, keyed by record id."""
    links = storage.owner_ids_for(model, record_ids)
    profiles = {
        p.id: p for p in storage.profiles_by_ids({pid for ids in links.values() for pid in ids})
    }
    return {
        record_id: [owner_out(profiles[pid]) for pid in links.get(record_id, []) if pid in profiles]
        for record_id in record_ids
    }


def owner_out(profile: Profile) -> OwnerOut:
    return OwnerOut(id=profile.id, name=profile.name, image=profile.image, color=profile.color)
