"""Miscellaneous assets and liabilities owned by the calling user."""
import logging
from decimal import Decimal

from household_networth.db.models import MiscAsset, MiscAssetType
from household_networth.db.storage import Storage
from household_networth.schemas.assets import (AssetTotals, MiscAssetCreate,
                                               MiscAssetList, MiscAssetOut,
                                               MiscAssetUpdate)
from household_networth.schemas.accounts import OwnerOut
from household_networth.services.authorization import Action, OwnershipGuard
from household_networth.services.directory import Context
from household_networth.services.owners import clean_owner_ids, owners_by_record
from household_networth.services.valuation import summarize_assets

logger = logging.getLogger(__name__)

ASSET_LABEL = "Asset"


def signed_value(asset_type: MiscAssetType, value: Decimal) -> Decimal:
    """Liabilities are stored negative; a positive loan or mortgage value is flipped."""
    if asset_type.is_liability and value > 0:
        return -value
    return value


def asset_out(asset: MiscAsset, owners: list[OwnerOut]) -> MiscAssetOut:
    return MiscAssetOut(
        id=asset.id,
        type=asset.type,
        name=asset.name,
        current_value=asset.current_value,
        interest_rate=asset.interest_rate,
        monthly_payment=asset.monthly_payment,
        monthly_deposit=asset.monthly_deposit,
        maturity_date=asset.maturity_date,
        owners=owners,
        created_at=asset.created_at,
        updated_at=asset.updated_at,
    )


class MiscAssetService:
    def __init__(self, guard: OwnershipGuard) -> None:
        self._guard = guard

    def list_assets(self, storage: Storage, context: Context) -> MiscAssetList:
        assets = storage.records_for_user(MiscAsset, context.user_id)
        owners = owners_by_record(storage, MiscAsset, [a.id for a in assets])
        totals = summarize_assets(assets)
        return MiscAssetList(
            items=[asset_out(a, owners[a.id]) for a in assets],
            summary=AssetTotals(
                total_assets=totals.total_assets,
                total_liabilities=totals.total_liabilities,
                net_value=totals.net_value,
                items_count=totals.items_count,
            ),
        )

    def get_asset(self, storage: Storage, context: Context, asset_id: str) -> MiscAssetOut:
        asset = self._require(storage, context, asset_id, Action.READ)
        return self._render(storage, asset)

    def create_asset(
        self, storage: Storage, context: Context, payload: MiscAssetCreate
    ) -> MiscAssetOut:
        if payload.owner_ids is None:
            owner_ids = [context.profile.id]
        else:
            owner_ids = clean_owner_ids(payload.owner_ids, context)
        asset_type = payload.type
        with storage.transaction():
            asset = storage.add(
                MiscAsset(
                    type=asset_type,
                    name=payload.name,
                    current_value=signed_value(asset_type, payload.current_value),
                    interest_rate=payload.interest_rate,
                    monthly_payment=payload.monthly_payment if asset_type.is_liability else None,
                    monthly_deposit=(
                        payload.monthly_deposit
                        if asset_type is MiscAssetType.CHILD_SAVINGS
                        else None
                    ),
                    maturity_date=payload.maturity_date,
                    user_id=context.user_id,
                )
            )
            storage.add_owners(MiscAsset, asset.id, owner_ids)
        logger.info("Created %s asset %s", asset_type.value, asset.id)
        return self._render(storage, asset)

    def update_asset(
        self,
        storage: Storage,
        context: Context,
        asset_id: str,
        payload: MiscAssetUpdate,
    ) -> MiscAssetOut:
        asset = self._require(storage, context, asset_id, Action.WRITE)
        changes = payload.model_dump(exclude_unset=True)
        if changes.get("current_value") is not None:
            # Sign follows the stored type; the type itself is immutable.
            changes["current_value"] = signed_value(asset.type, changes["current_value"])
        for key, value in changes.items():
            if value is None and key not in ("maturity_date", "monthly_deposit"):
                continue
            setattr(asset, key, value)
        storage.touch(asset)
        return self._render(storage, asset)

    def delete_asset(self, storage: Storage, context: Context, asset_id: str) -> None:
        asset = self._require(storage, context, asset_id, Action.WRITE)
        with storage.transaction():
            storage.delete_record(asset)
        logger.info("Deleted asset %s", asset_id)

    def _require(
        self, storage: Storage, context: Context, asset_id: str, action: Action
    ) -> MiscAsset:
        return self._guard.require_record(
            storage, context, MiscAsset, asset_id, action, label=ASSET_LABEL
        )

    @staticmethod
    def _render(storage: Storage, asset: MiscAsset) -> MiscAssetOut:
        return asset_out(asset, owners_by_record(storage, MiscAsset, [asset.id])[asset.id])
