"""Household administration and membership management."""
from fastapi import APIRouter

from household_networth.deps import (CurrentContext, HouseholdServiceDep,
                                     ProfileId, RecordId, StorageDep)
from household_networth.schemas import (Envelope, HouseholdCreate,
                                        HouseholdDetail, HouseholdUpdate,
                                        HouseholdWithRole, MemberAdd,
                                        MemberOut, MemberRoleUpdate, ok)

router = APIRouter(prefix="/households", tags=["households"])


@router.get("", response_model=Envelope[list[HouseholdWithRole]])
def list_households(
    context: CurrentContext, storage: StorageDep, service: HouseholdServiceDep
) -> Envelope[list[HouseholdWithRole]]:
    """Households the caller belongs to, with the caller's role in each."""
    return ok(service.list_households(storage, context))


@router.post("", response_model=Envelope[HouseholdWithRole])
def create_household(
    payload: HouseholdCreate,
    context: CurrentContext,
    storage: StorageDep,
    service: HouseholdServiceDep,
) -> Envelope[HouseholdWithRole]:
    """Create a household owned by the caller."""
    return ok(service.create_household(storage, context, payload))


@router.get("/{id}", response_model=Envelope[HouseholdDetail])
def get_household(
    household_id: RecordId,
    context: CurrentContext,
    storage: StorageDep,
    service: HouseholdServiceDep,
) -> Envelope[HouseholdDetail]:
    return ok(service.get_household(storage, context, household_id))


@router.put("/{id}", response_model=Envelope[HouseholdWithRole])
def update_household(
    household_id: RecordId,
    payload: HouseholdUpdate,
    context: CurrentContext,
    storage: StorageDep,
    service: HouseholdServiceDep,
) -> Envelope[HouseholdWithRole]:
    """Rename or re-describe a household (owner or admin of that household)."""
    return ok(service.update_household(storage, context, household_id, payload))


@router.delete("/{id}", response_model=Envelope[None])
def delete_household(
    household_id: RecordId,
    context: CurrentContext,
    storage: StorageDep,
    service: HouseholdServiceDep,
) -> Envelope[None]:
    """Delete a household (owner only; never the caller's last one)."""
    service.delete_household(storage, context, household_id)
    return ok(None)


@router.post("/{id}/members", response_model=Envelope[MemberOut])
def add_member(
    household_id: RecordId,
    payload: MemberAdd,
    context: CurrentContext,
    storage: StorageDep,
    service: HouseholdServiceDep,
) -> Envelope[MemberOut]:
    return ok(service.add_member(storage, context, household_id, payload))


@router.put("/{id}/members/{profileId}", response_model=Envelope[MemberOut])
def update_member(
    household_id: RecordId,
    member_profile_id: ProfileId,
    payload: MemberRoleUpdate,
    context: CurrentContext,
    storage: StorageDep,
    service: HouseholdServiceDep,
) -> Envelope[MemberOut]:
    """Change a member's role to admin or member. The owner cannot be changed."""
    return ok(service.update_member(storage, context, household_id, member_profile_id, payload))


@router.delete("/{id}/members/{profileId}", response_model=Envelope[None])
def remove_member(
    household_id: RecordId,
    member_profile_id: ProfileId,
    context: CurrentContext,
    storage: StorageDep,
    service: HouseholdServiceDep,
) -> Envelope[None]:
    """Remove a member. The owner and the last member cannot be removed."""
    service.remove_member(storage, context, household_id, member_profile_id)
    return ok(None)
