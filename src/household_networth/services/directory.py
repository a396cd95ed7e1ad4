"""Profile/household directory: resolves the caller's context for a request."""
import logging
from dataclasses import dataclass
from functools import cached_property

from household_networth.core.exceptions import NeedsOnboardingError
from household_networth.db.models import HouseholdRole, User
from household_networth.db.storage import Storage
from household_networth.schemas.context import (ContextOut, HouseholdProfile,
                                                HouseholdSummary,
                                                ProfileSummary)
from household_networth.services.roles import Capabilities, capabilities

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Context:
    """Who is asking, for which household, with which role.

    Built once per request and never mutated afterwards.
    """

    user_id: str
    profile: ProfileSummary
    households: tuple[HouseholdSummary, ...]
    active_household: HouseholdSummary
    household_profiles: tuple[HouseholdProfile, ...]

    @property
    def household_id(self) -> str:
        return self.active_household.id

    @property
    def role(self) -> HouseholdRole:
        return self.active_household.role

    @property
    def capabilities(self) -> Capabilities:
        return capabilities(self.role)

    @cached_property
    def household_profile_ids(self) -> frozenset[str]:
        return frozenset(p.id for p in self.household_profiles)

    def membership_role(self, household_id: str) -> HouseholdRole | None:
        for household in self.households:
            if household.id == household_id:
                return household.role
        return None

    def to_schema(self) -> ContextOut:
        return ContextOut(
            profile=self.profile,
            households=list(self.households),
            active_household=self.active_household,
            household_profiles=list(self.household_profiles),
        )


class HouseholdDirectory:
    """Builds a Context from storage.

    Memberships are ordered by earliest joined_at (ties broken by household
    id), so the default active household is stable across requests.
    """

    def resolve_context(
        self,
        storage: Storage,
        user: User,
        requested_household_id: str | None = None,
    ) -> Context:
        profile = storage.profile_for_user(user.id)
        if profile is None:
            raise NeedsOnboardingError("Profile not found")

        memberships = storage.memberships_for_profile(profile.id)
        if not memberships:
            logger.warning("Profile %s has no household memberships", profile.id)
            raise NeedsOnboardingError("No household found")

        households = tuple(
            HouseholdSummary(
                id=household.id,
                name=household.name,
                description=household.description,
                role=member.role,
            )
            for member, household in memberships
        )
        active = households[0]
        if requested_household_id:
            active = next(
                (h for h in households if h.id == requested_household_id), active
            )

        roster = tuple(
            HouseholdProfile(
                id=p.id,
                name=p.name,
                image=p.image,
                color=p.color,
                role=member.role,
                has_user=p.user_id is not None,
            )
            for member, p in storage.household_roster(active.id)
        )
        return Context(
            user_id=user.id,
            profile=ProfileSummary(
                id=profile.id, name=profile.name, image=profile.image, color=profile.color
            ),
            households=households,
            active_household=active,
            household_profiles=roster,
        )
