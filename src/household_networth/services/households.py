"""Household administration: CRUD on households and their membership rosters."""
import logging

from household_networth.core.exceptions import (ForbiddenError, NotFoundError,
                                                ValidationError)
from household_networth.db.models import (Household, HouseholdMember,
                                          HouseholdRole, Profile)
from household_networth.db.storage import Storage
from household_networth.schemas.households import (HouseholdCreate,
                                                   HouseholdDetail,
                                                   HouseholdUpdate,
                                                   HouseholdWithRole,
                                                   MemberAdd, MemberOut,
                                                   MemberRoleUpdate)
from household_networth.services.authorization import OwnershipGuard
from household_networth.services.directory import Context
from household_networth.services.roles import Capability, is_protected

logger = logging.getLogger(__name__)


def member_out(member: HouseholdMember, profile: Profile) -> MemberOut:
    return MemberOut(
        id=member.id,
        profile_id=profile.id,
        name=profile.name,
        image=profile.image,
        color=profile.color,
        role=member.role,
        has_user=profile.user_id is not None,
        joined_at=member.joined_at,
    )


def _with_role(household: Household, role: HouseholdRole) -> HouseholdWithRole:
    return HouseholdWithRole(
        id=household.id,
        name=household.name,
        description=household.description,
        created_at=household.created_at,
        updated_at=household.updated_at,
        role=role,
    )


class HouseholdService:
    """Household-level operations; authorization uses the caller's role in the target household."""

    def __init__(self, guard: OwnershipGuard) -> None:
        self._guard = guard

    def list_households(self, storage: Storage, context: Context) -> list[HouseholdWithRole]:
        return [
            _with_role(household, member.role)
            for member, household in storage.memberships_for_profile(context.profile.id)
        ]

    def create_household(
        self, storage: Storage, context: Context, payload: HouseholdCreate
    ) -> HouseholdWithRole:
        with storage.transaction():
            household = storage.add(
                Household(name=payload.name, description=payload.description)
            )
            storage.add(
                HouseholdMember(
                    household_id=household.id,
                    profile_id=context.profile.id,
                    role=HouseholdRole.OWNER,
                )
            )
        logger.info("Profile %s created household %s", context.profile.id, household.id)
        return _with_role(household, HouseholdRole.OWNER)

    def get_household(
        self, storage: Storage, context: Context, household_id: str
    ) -> HouseholdDetail:
        role = context.membership_role(household_id)
        if role is None:
            raise ForbiddenError()
        household = self._load(storage, household_id)
        members = [member_out(m, p) for m, p in storage.household_roster(household_id)]
        return HouseholdDetail(
            **_with_role(household, role).model_dump(), members=members
        )

    def update_household(
        self,
        storage: Storage,
        context: Context,
        household_id: str,
        payload: HouseholdUpdate,
    ) -> HouseholdWithRole:
        self._guard.require_household(
            context,
            household_id,
            Capability.EDIT_HOUSEHOLD,
            "Only household admins can update the household",
        )
        household = self._load(storage, household_id)
        changes = payload.model_dump(exclude_unset=True)
        if changes.get("name") is not None:
            household.name = changes["name"]
        if "description" in changes:
            household.description = changes["description"]
        storage.touch(household)
        return _with_role(household, context.membership_role(household_id))

    def delete_household(self, storage: Storage, context: Context, household_id: str) -> None:
        self._guard.require_household(
            context,
            household_id,
            Capability.DELETE_HOUSEHOLD,
            "Only household owner can delete",
        )
        if len(context.households) <= 1:
            raise ValidationError("Cannot delete your only household")
        household = self._load(storage, household_id)
        with storage.transaction():
            storage.delete_household(household)
        logger.info("Household %s deleted by profile %s", household_id, context.profile.id)

    # -- members ------------------------------------------------------------

    def add_member(
        self, storage: Storage, context: Context, household_id: str, payload: MemberAdd
    ) -> MemberOut:
        self._guard.require_household(context, household_id, Capability.MANAGE_MEMBERS)
        profile = storage.get(Profile, payload.profile_id)
        if profile is None:
            raise NotFoundError("Profile not found")
        if storage.membership(household_id, profile.id) is not None:
            raise ValidationError("Profile is already a member of this household")
        member = storage.add(
            HouseholdMember(household_id=household_id, profile_id=profile.id, role=payload.role)
        )
        logger.info("Added profile %s to household %s as %s", profile.id, household_id, payload.role.value)
        return member_out(member, profile)

    def update_member(
        self,
        storage: Storage,
        context: Context,
        household_id: str,
        profile_id: str,
        payload: MemberRoleUpdate,
    ) -> MemberOut:
        self._guard.require_household(context, household_id, Capability.MANAGE_MEMBERS)
        member = self._load_member(storage, household_id, profile_id)
        if is_protected(member.role):
            raise ValidationError("Cannot change owner role")
        member.role = payload.role
        storage.add(member)
        return member_out(member, storage.get(Profile, profile_id))

    def remove_member(
        self, storage: Storage, context: Context, household_id: str, profile_id: str
    ) -> None:
        self._guard.require_household(context, household_id, Capability.MANAGE_MEMBERS)
        member = self._load_member(storage, household_id, profile_id)
        if is_protected(member.role):
            raise ValidationError("Cannot remove household owner")
        profile = storage.get(Profile, profile_id)
        if profile.user_id is not None and len(storage.memberships_for_profile(profile_id)) <= 1:
            raise ValidationError("Cannot remove a user from their only household")
        storage.delete(member)
        logger.info("Removed profile %s from household %s", profile_id, household_id)

    @staticmethod
    def _load(storage: Storage, household_id: str) -> Household:
        household = storage.get(Household, household_id)
        if household is None:
            raise NotFoundError("Household not found")
        return household

    @staticmethod
    def _load_member(storage: Storage, household_id: str, profile_id: str) -> HouseholdMember:
        member = storage.membership(household_id, profile_id)
        if member is None:
            raise NotFoundError("Member not found")
        return member
