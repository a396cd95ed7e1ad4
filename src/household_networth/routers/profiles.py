"""Profiles of the active household, and onboarding of new users."""
from fastapi import APIRouter

from household_networth.deps import (CurrentContext, CurrentUser,
                                     ProfileServiceDep, RecordId, StorageDep)
from household_networth.schemas import (Envelope, HouseholdProfile,
                                        OnboardingIn, OnboardingOut,
                                        ProfileCreate, ProfileOut,
                                        ProfileUpdate, ok)

router = APIRouter(prefix="/profiles", tags=["profiles"])
onboarding_router = APIRouter(tags=["onboarding"])


@onboarding_router.post("/onboarding", response_model=Envelope[OnboardingOut])
def complete_onboarding(
    payload: OnboardingIn,
    user: CurrentUser,
    storage: StorageDep,
    service: ProfileServiceDep,
) -> Envelope[OnboardingOut]:
    """Create the caller's profile and first household.

    Only needs an authenticated user; callers that already have a profile get 400.
    """
    return ok(service.onboard(storage, user, payload))


@router.get("", response_model=Envelope[list[HouseholdProfile]])
def list_profiles(
    context: CurrentContext, service: ProfileServiceDep
) -> Envelope[list[HouseholdProfile]]:
    return ok(service.list_profiles(context))


@router.post("", response_model=Envelope[HouseholdProfile])
def create_profile(
    payload: ProfileCreate,
    context: CurrentContext,
    storage: StorageDep,
    service: ProfileServiceDep,
) -> Envelope[HouseholdProfile]:
    """Add a tracked-only profile (no login) to the active household."""
    return ok(service.create_profile(storage, context, payload))


@router.get("/{id}", response_model=Envelope[HouseholdProfile])
def get_profile(
    profile_id: RecordId, context: CurrentContext, service: ProfileServiceDep
) -> Envelope[HouseholdProfile]:
    return ok(service.get_profile(context, profile_id))


@router.put("/{id}", response_model=Envelope[ProfileOut])
def update_profile(
    profile_id: RecordId,
    payload: ProfileUpdate,
    context: CurrentContext,
    storage: StorageDep,
    service: ProfileServiceDep,
) -> Envelope[ProfileOut]:
    return ok(service.update_profile(storage, context, profile_id, payload))


@router.delete("/{id}", response_model=Envelope[None])
def delete_profile(
    profile_id: RecordId,
    context: CurrentContext,
    storage: StorageDep,
    service: ProfileServiceDep,
) -> Envelope[None]:
    service.delete_profile(storage, context, profile_id)
    return ok(None)
