"""Role policy: what each household role may do."""
from dataclasses import dataclass
from enum import Enum

from household_networth.db.models import HouseholdRole


class Capability(str, Enum):
    MANAGE_MEMBERS = "can_manage_members"
    DELETE_HOUSEHOLD = "can_delete_household"
    EDIT_HOUSEHOLD = "can_edit_household"


@dataclass(frozen=True)
class Capabilities:
    can_manage_members: bool = False
    can_delete_household: bool = False
    can_edit_household: bool = False

    def allows(self, capability: Capability) -> bool:
        return getattr(self, capability.value)


_POLICY: dict[HouseholdRole, Capabilities] = {
    HouseholdRole.OWNER: Capabilities(
        can_manage_members=True, can_delete_household=True, can_edit_household=True
    ),
    HouseholdRole.ADMIN: Capabilities(can_manage_members=True, can_edit_household=True),
    HouseholdRole.MEMBER: Capabilities(),
}

# Roles that can be granted through member management; owner comes only with the household.
ASSIGNABLE_ROLES = frozenset({HouseholdRole.ADMIN, HouseholdRole.MEMBER})


def capabilities(role: HouseholdRole | str) -> Capabilities:
    return _POLICY[HouseholdRole(role)]


def is_protected(role: HouseholdRole | str) -> bool:
    """The owner can be neither demoted nor removed."""
    return HouseholdRole(role) is HouseholdRole.OWNER
