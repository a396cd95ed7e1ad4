"""Onboarding and profile management inside the active household."""
import logging

from household_networth.core.exceptions import (ForbiddenError, NotFoundError,
                                                ValidationError)
from household_networth.db.models import (Household, HouseholdMember,
                                          HouseholdRole, MiscAsset,
                                          PensionAccount, Profile,
                                          StockAccount, User)
from household_networth.db.storage import Storage
from household_networth.schemas.context import HouseholdProfile
from household_networth.schemas.households import (HouseholdOut,
                                                   MigratedRecords,
                                                   OnboardingIn,
                                                   OnboardingOut,
                                                   ProfileCreate, ProfileOut,
                                                   ProfileUpdate)
from household_networth.services.authorization import OwnershipGuard
from household_networth.services.directory import Context
from household_networth.services.roles import Capability

logger = logging.getLogger(__name__)


def profile_out(profile: Profile) -> ProfileOut:
    return ProfileOut(
        id=profile.id,
        name=profile.name,
        image=profile.image,
        color=profile.color,
        has_user=profile.user_id is not None,
    )


class ProfileService:
    def __init__(self, guard: OwnershipGuard) -> None:
        self._guard = guard

    def onboard(self, storage: Storage, user: User, payload: OnboardingIn) -> OnboardingOut:
        """Create the caller's profile, a household they own and tracked family profiles.

        Records created under the caller's user id before onboarding gain the
        new profile as an owner. Everything is written in one transaction.
        """
        if storage.profile_for_user(user.id) is not None:
            raise ValidationError("User already has a profile")

        with storage.transaction():
            profile = storage.add(
                Profile(name=payload.profile_name, color=payload.profile_color, user_id=user.id)
            )
            household = storage.add(Household(name=payload.household_name))
            storage.add(
                HouseholdMember(
                    household_id=household.id, profile_id=profile.id, role=HouseholdRole.OWNER
                )
            )
            family = []
            for member in payload.family_members:
                relative = storage.add(Profile(name=member.name, color=member.color))
                storage.add(
                    HouseholdMember(
                        household_id=household.id,
                        profile_id=relative.id,
                        role=HouseholdRole.MEMBER,
                    )
                )
                family.append(relative)

            migrated = {}
            for model in (StockAccount, PensionAccount, MiscAsset):
                records = storage.records_for_user(model, user.id)
                for record in records:
                    storage.add_owners(model, record.id, [profile.id])
                migrated[model] = len(records)

        logger.info(
            "Onboarded user %s into household %s with %d family profile(s)",
            user.id,
            household.id,
            len(family),
        )
        return OnboardingOut(
            profile=profile_out(profile),
            household=HouseholdOut.model_validate(household, from_attributes=True),
            family_members=[profile_out(p) for p in family],
            migrated=MigratedRecords(
                stock_accounts=migrated[StockAccount],
                pension_accounts=migrated[PensionAccount],
                misc_assets=migrated[MiscAsset],
            ),
        )

    def list_profiles(self, context: Context) -> list[HouseholdProfile]:
        return list(context.household_profiles)

    def get_profile(self, context: Context, profile_id: str) -> HouseholdProfile:
        return self._in_roster(context, profile_id)

    def create_profile(
        self, storage: Storage, context: Context, payload: ProfileCreate
    ) -> HouseholdProfile:
        self._guard.require_household(context, context.household_id, Capability.MANAGE_MEMBERS)
        with storage.transaction():
            profile = storage.add(
                Profile(name=payload.name, image=payload.image, color=payload.color)
            )
            storage.add(
                HouseholdMember(
                    household_id=context.household_id,
                    profile_id=profile.id,
                    role=HouseholdRole.MEMBER,
                )
            )
        return HouseholdProfile(
            id=profile.id,
            name=profile.name,
            image=profile.image,
            color=profile.color,
            role=HouseholdRole.MEMBER,
            has_user=False,
        )

    def update_profile(
        self, storage: Storage, context: Context, profile_id: str, payload: ProfileUpdate
    ) -> ProfileOut:
        """Callers edit their own profile; admins also edit tracked-only profiles."""
        entry = self._in_roster(context, profile_id)
        own = context.profile.id == profile_id
        manages = context.capabilities.can_manage_members and not entry.has_user
        if not (own or manages):
            raise ForbiddenError()
        profile = storage.get(Profile, profile_id)
        if profile is None:
            raise NotFoundError()
        for key, value in payload.model_dump(exclude_unset=True).items():
            if value is None and key != "image":
                continue
            setattr(profile, key, value)
        storage.touch(profile)
        return profile_out(profile)

    def delete_profile(self, storage: Storage, context: Context, profile_id: str) -> None:
        if context.profile.id == profile_id:
            raise ValidationError("Cannot delete your own profile")
        self._guard.require_household(context, context.household_id, Capability.MANAGE_MEMBERS)
        entry = self._in_roster(context, profile_id)
        if entry.has_user:
            raise ValidationError("Cannot delete a profile linked to a user")
        profile = storage.get(Profile, profile_id)
        if profile is None:
            raise NotFoundError()
        with storage.transaction():
            storage.delete_profile(profile)
        logger.info("Deleted profile %s from household %s", profile_id, context.household_id)

    @staticmethod
    def _in_roster(context: Context, profile_id: str) -> HouseholdProfile:
        for entry in context.household_profiles:
            if entry.id == profile_id:
                return entry
        raise NotFoundError()
