"""Misc assets: deposits, savings, loans and mortgages."""
from fastapi import APIRouter

from household_networth.db import MiscAsset
from household_networth.deps import (CurrentContext, MiscAssetServiceDep,
                                     OwnerServiceDep, RecordId, StorageDep)
from household_networth.schemas import (Envelope, MiscAssetCreate,
                                        MiscAssetList, MiscAssetOut,
                                        MiscAssetUpdate, OwnerOut,
                                        OwnersUpdate, ok)
from household_networth.services.assets import ASSET_LABEL

router = APIRouter(prefix="/assets/items", tags=["assets"])


@router.get("", response_model=Envelope[MiscAssetList])
def list_assets(
    context: CurrentContext, storage: StorageDep, service: MiscAssetServiceDep
) -> Envelope[MiscAssetList]:
    """The caller's assets with asset/liability totals."""
    return ok(service.list_assets(storage, context))


@router.post("", response_model=Envelope[MiscAssetOut])
def create_asset(
    payload: MiscAssetCreate,
    context: CurrentContext,
    storage: StorageDep,
    service: MiscAssetServiceDep,
) -> Envelope[MiscAssetOut]:
    """Create an asset. Loans and mortgages are stored as negative values."""
    return ok(service.create_asset(storage, context, payload))


@router.get("/{id}", response_model=Envelope[MiscAssetOut])
def get_asset(
    asset_id: RecordId,
    context: CurrentContext,
    storage: StorageDep,
    service: MiscAssetServiceDep,
) -> Envelope[MiscAssetOut]:
    return ok(service.get_asset(storage, context, asset_id))


@router.put("/{id}", response_model=Envelope[MiscAssetOut])
def update_asset(
    asset_id: RecordId,
    payload: MiscAssetUpdate,
    context: CurrentContext,
    storage: StorageDep,
    service: MiscAssetServiceDep,
) -> Envelope[MiscAssetOut]:
    return ok(service.update_asset(storage, context, asset_id, payload))


@router.delete("/{id}", response_model=Envelope[None])
def delete_asset(
    asset_id: RecordId,
    context: CurrentContext,
    storage: StorageDep,
    service: MiscAssetServiceDep,
) -> Envelope[None]:
    service.delete_asset(storage, context, asset_id)
    return ok(None)


@router.get("/{id}/owners", response_model=Envelope[list[OwnerOut]])
def get_owners(
    asset_id: RecordId,
    context: CurrentContext,
    storage: StorageDep,
    owners: OwnerServiceDep,
) -> Envelope[list[OwnerOut]]:
    return ok(owners.list_owners(storage, context, MiscAsset, asset_id, ASSET_LABEL))


@router.put("/{id}/owners", response_model=Envelope[list[OwnerOut]])
def replace_owners(
    asset_id: RecordId,
    payload: OwnersUpdate,
    context: CurrentContext,
    storage: StorageDep,
    owners: OwnerServiceDep,
) -> Envelope[list[OwnerOut]]:
    return ok(
        owners.replace_owners(
            storage, context, MiscAsset, asset_id, payload.profile_ids, ASSET_LABEL
        )
    )
