"""Caller context schemas: profile, memberships and the active household roster."""
from pydantic import ConfigDict

from household_networth.db.models import HouseholdRole
from household_networth.schemas.base import CamelModel


class _Frozen(CamelModel):
    model_config = ConfigDict(frozen=True)


class ProfileSummary(_Frozen):
    id: str
    name: str
    image: str | None = None
    color: str


class HouseholdSummary(_Frozen):
    id: str
    name: str
    description: str | None = None
    role: HouseholdRole


class HouseholdProfile(_Frozen):
    """A roster entry of the active household."""

    id: str
    name: str
    image: str | None = None
    color: str
    role: HouseholdRole
    has_user: bool


class ContextOut(CamelModel):
    profile: ProfileSummary
    households: list[HouseholdSummary]
    active_household: HouseholdSummary
    household_profiles: list[HouseholdProfile]
