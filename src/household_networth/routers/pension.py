"""Pension and study-fund accounts, deposits and owners."""
from fastapi import APIRouter

from household_networth.db import PensionAccount
from household_networth.deps import (CurrentContext, OwnerServiceDep,
                                     PensionServiceDep, RecordId, StorageDep)
from household_networth.schemas import (DepositBulkCreate, DepositCreate,
                                        DepositOut, DepositUpdate, Envelope,
                                        OwnerOut, OwnersUpdate,
                                        PensionAccountCreate,
                                        PensionAccountOut,
                                        PensionAccountUpdate, ok)
from household_networth.services.pensions import PENSION_LABEL

router = APIRouter(prefix="/pension/accounts", tags=["pension"])
deposits_router = APIRouter(prefix="/pension/deposits", tags=["pension"])


@router.get("", response_model=Envelope[list[PensionAccountOut]])
def list_accounts(
    context: CurrentContext, storage: StorageDep, service: PensionServiceDep
) -> Envelope[list[PensionAccountOut]]:
    return ok(service.list_accounts(storage, context))


@router.post("", response_model=Envelope[PensionAccountOut])
def create_account(
    payload: PensionAccountCreate,
    context: CurrentContext,
    storage: StorageDep,
    service: PensionServiceDep,
) -> Envelope[PensionAccountOut]:
    return ok(service.create_account(storage, context, payload))


@router.get("/{id}", response_model=Envelope[PensionAccountOut])
def get_account(
    account_id: RecordId,
    context: CurrentContext,
    storage: StorageDep,
    service: PensionServiceDep,
) -> Envelope[PensionAccountOut]:
    """Account details including its deposit history."""
    return ok(service.get_account(storage, context, account_id))


@router.put("/{id}", response_model=Envelope[PensionAccountOut])
def update_account(
    account_id: RecordId,
    payload: PensionAccountUpdate,
    context: CurrentContext,
    storage: StorageDep,
    service: PensionServiceDep,
) -> Envelope[PensionAccountOut]:
    return ok(service.update_account(storage, context, account_id, payload))


@router.delete("/{id}", response_model=Envelope[None])
def delete_account(
    account_id: RecordId,
    context: CurrentContext,
    storage: StorageDep,
    service: PensionServiceDep,
) -> Envelope[None]:
    service.delete_account(storage, context, account_id)
    return ok(None)


@router.post("/{id}/deposits", response_model=Envelope[DepositOut])
def add_deposit(
    account_id: RecordId,
    payload: DepositCreate,
    context: CurrentContext,
    storage: StorageDep,
    service: PensionServiceDep,
) -> Envelope[DepositOut]:
    return ok(service.add_deposit(storage, context, account_id, payload))


@router.get("/{id}/owners", response_model=Envelope[list[OwnerOut]])
def get_owners(
    account_id: RecordId,
    context: CurrentContext,
    storage: StorageDep,
    owners: OwnerServiceDep,
) -> Envelope[list[OwnerOut]]:
    return ok(owners.list_owners(storage, context, PensionAccount, account_id, PENSION_LABEL))


@router.put("/{id}/owners", response_model=Envelope[list[OwnerOut]])
def replace_owners(
    account_id: RecordId,
    payload: OwnersUpdate,
    context: CurrentContext,
    storage: StorageDep,
    owners: OwnerServiceDep,
) -> Envelope[list[OwnerOut]]:
    return ok(
        owners.replace_owners(
            storage, context, PensionAccount, account_id, payload.profile_ids, PENSION_LABEL
        )
    )


@deposits_router.post("/bulk", response_model=Envelope[list[DepositOut]])
def add_deposits(
    payload: DepositBulkCreate,
    context: CurrentContext,
    storage: StorageDep,
    service: PensionServiceDep,
) -> Envelope[list[DepositOut]]:
    """Import up to 100 deposits into one account in a single transaction."""
    return ok(service.add_deposits(storage, context, payload))


@deposits_router.get("/{id}", response_model=Envelope[DepositOut])
def get_deposit(
    deposit_id: RecordId,
    context: CurrentContext,
    storage: StorageDep,
    service: PensionServiceDep,
) -> Envelope[DepositOut]:
    return ok(service.get_deposit(storage, context, deposit_id))


@deposits_router.put("/{id}", response_model=Envelope[DepositOut])
def update_deposit(
    deposit_id: RecordId,
    payload: DepositUpdate,
    context: CurrentContext,
    storage: StorageDep,
    service: PensionServiceDep,
) -> Envelope[DepositOut]:
    return ok(service.update_deposit(storage, context, deposit_id, payload))


@deposits_router.delete("/{id}", response_model=Envelope[None])
def delete_deposit(
    deposit_id: RecordId,
    context: CurrentContext,
    storage: StorageDep,
    service: PensionServiceDep,
) -> Envelope[None]:
    service.delete_deposit(storage, context, deposit_id)
    return ok(None)
