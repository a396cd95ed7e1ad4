"""Stock accounts, their holdings and their owners."""
from fastapi import APIRouter

from household_networth.db import StockAccount
from household_networth.deps import (CurrentContext, HoldingId,
                                     OwnerServiceDep, RecordId,
                                     StockAccountServiceDep, StorageDep)
from household_networth.schemas import (Envelope, HoldingCreate, HoldingOut,
                                        HoldingUpdate, OwnerOut, OwnersUpdate,
                                        StockAccountCreate, StockAccountOut,
                                        StockAccountUpdate, ok)
from household_networth.services.accounts import ACCOUNT_LABEL

router = APIRouter(prefix="/accounts", tags=["accounts"])


@router.get("", response_model=Envelope[list[StockAccountOut]])
async def list_accounts(
    context: CurrentContext, storage: StorageDep, service: StockAccountServiceDep
) -> Envelope[list[StockAccountOut]]:
    """Stock accounts of the active household, valued at current prices."""
    return ok(await service.list_accounts(storage, context))


@router.post("", response_model=Envelope[StockAccountOut])
def create_account(
    payload: StockAccountCreate,
    context: CurrentContext,
    storage: StorageDep,
    service: StockAccountServiceDep,
) -> Envelope[StockAccountOut]:
    """Create an account owned by the caller, or by `ownerIds` from the roster."""
    return ok(service.create_account(storage, context, payload))


@router.get("/{id}", response_model=Envelope[StockAccountOut])
async def get_account(
    account_id: RecordId,
    context: CurrentContext,
    storage: StorageDep,
    service: StockAccountServiceDep,
) -> Envelope[StockAccountOut]:
    return ok(await service.get_account(storage, context, account_id))


@router.put("/{id}", response_model=Envelope[StockAccountOut])
def update_account(
    account_id: RecordId,
    payload: StockAccountUpdate,
    context: CurrentContext,
    storage: StorageDep,
    service: StockAccountServiceDep,
) -> Envelope[StockAccountOut]:
    return ok(service.update_account(storage, context, account_id, payload))


@router.delete("/{id}", response_model=Envelope[None])
def delete_account(
    account_id: RecordId,
    context: CurrentContext,
    storage: StorageDep,
    service: StockAccountServiceDep,
) -> Envelope[None]:
    """Delete the account with its holdings and owner links."""
    service.delete_account(storage, context, account_id)
    return ok(None)


@router.post("/{id}/holdings", response_model=Envelope[HoldingOut])
def add_holding(
    account_id: RecordId,
    payload: HoldingCreate,
    context: CurrentContext,
    storage: StorageDep,
    service: StockAccountServiceDep,
) -> Envelope[HoldingOut]:
    """Add a holding; 409 if the account already holds the symbol."""
    return ok(service.add_holding(storage, context, account_id, payload))


@router.put("/{id}/holdings/{holdingId}", response_model=Envelope[HoldingOut])
def update_holding(
    account_id: RecordId,
    holding_id: HoldingId,
    payload: HoldingUpdate,
    context: CurrentContext,
    storage: StorageDep,
    service: StockAccountServiceDep,
) -> Envelope[HoldingOut]:
    return ok(service.update_holding(storage, context, account_id, holding_id, payload))


@router.delete("/{id}/holdings/{holdingId}", response_model=Envelope[None])
def delete_holding(
    account_id: RecordId,
    holding_id: HoldingId,
    context: CurrentContext,
    storage: StorageDep,
    service: StockAccountServiceDep,
) -> Envelope[None]:
    service.delete_holding(storage, context, account_id, holding_id)
    return ok(None)


@router.get("/{id}/owners", response_model=Envelope[list[OwnerOut]])
def get_owners(
    account_id: RecordId,
    context: CurrentContext,
    storage: StorageDep,
    owners: OwnerServiceDep,
) -> Envelope[list[OwnerOut]]:
    return ok(owners.list_owners(storage, context, StockAccount, account_id, ACCOUNT_LABEL))


@router.put("/{id}/owners", response_model=Envelope[list[OwnerOut]])
def replace_owners(
    account_id: RecordId,
    payload: OwnersUpdate,
    context: CurrentContext,
    storage: StorageDep,
    owners: OwnerServiceDep,
) -> Envelope[list[OwnerOut]]:
    """Replace the whole owner set; every profile must be on the active household roster."""
    return ok(
        owners.replace_owners(
            storage, context, StockAccount, account_id, payload.profile_ids, ACCOUNT_LABEL
        )
    )
