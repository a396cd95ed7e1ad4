"""Pension and study-fund accounts with their deposit history."""
import logging
from collections.abc import Sequence

from household_networth.core.exceptions import NotFoundError
from household_networth.core.utils import validate_id
from household_networth.db.models import PensionAccount, PensionDeposit
from household_networth.db.storage import Storage
from household_networth.schemas.accounts import OwnerOut
from household_networth.schemas.pension import (DepositBulkCreate,
                                                DepositCreate, DepositOut,
                                                DepositUpdate,
                                                PensionAccountCreate,
                                                PensionAccountOut,
                                                PensionAccountUpdate)
from household_networth.services.authorization import Action, OwnershipGuard
from household_networth.services.directory import Context
from household_networth.services.owners import clean_owner_ids, owners_by_record

logger = logging.getLogger(__name__)

PENSION_LABEL = "Pension account"
DEPOSIT_LABEL = "Deposit"


def deposit_out(deposit: PensionDeposit) -> DepositOut:
    return DepositOut(
        id=deposit.id,
        account_id=deposit.account_id,
        deposit_date=deposit.deposit_date,
        salary_month=deposit.salary_month,
        amount=deposit.amount,
        employer=deposit.employer,
    )


def pension_out(
    account: PensionAccount,
    owners: Sequence[OwnerOut],
    deposits: Sequence[PensionDeposit] = (),
) -> PensionAccountOut:
    return PensionAccountOut(
        id=account.id,
        type=account.type,
        provider_name=account.provider_name,
        account_name=account.account_name,
        current_value=account.current_value,
        fee_from_deposit=account.fee_from_deposit,
        fee_from_total=account.fee_from_total,
        owners=list(owners),
        deposits=[deposit_out(d) for d in deposits],
        created_at=account.created_at,
        updated_at=account.updated_at,
    )


def _new_deposit(account_id: str, payload: DepositCreate) -> PensionDeposit:
    return PensionDeposit(
        account_id=account_id,
        deposit_date=payload.deposit_date,
        salary_month=payload.salary_month,
        amount=payload.amount,
        employer=payload.employer,
    )


class PensionService:
    def __init__(self, guard: OwnershipGuard) -> None:
        self._guard = guard

    def list_accounts(self, storage: Storage, context: Context) -> list[PensionAccountOut]:
        accounts = storage.records_owned_by(PensionAccount, context.household_profile_ids)
        owners = owners_by_record(storage, PensionAccount, [a.id for a in accounts])
        return [pension_out(a, owners[a.id]) for a in accounts]

    def get_account(
        self, storage: Storage, context: Context, account_id: str
    ) -> PensionAccountOut:
        account = self._require(storage, context, account_id, Action.READ)
        return self._render(storage, account)

    def create_account(
        self, storage: Storage, context: Context, payload: PensionAccountCreate
    ) -> PensionAccountOut:
        if payload.owner_ids is None:
            owner_ids = [context.profile.id]
        else:
            owner_ids = clean_owner_ids(payload.owner_ids, context)
        with storage.transaction():
            account = storage.add(
                PensionAccount(
                    type=payload.type,
                    provider_name=payload.provider_name,
                    account_name=payload.account_name,
                    current_value=payload.current_value,
                    fee_from_deposit=payload.fee_from_deposit,
                    fee_from_total=payload.fee_from_total,
                    user_id=context.user_id,
                )
            )
            storage.add_owners(PensionAccount, account.id, owner_ids)
        logger.info("Created pension account %s", account.id)
        return self._render(storage, account)

    def update_account(
        self,
        storage: Storage,
        context: Context,
        account_id: str,
        payload: PensionAccountUpdate,
    ) -> PensionAccountOut:
        account = self._require(storage, context, account_id, Action.WRITE)
        for key, value in payload.model_dump(exclude_unset=True).items():
            if value is not None:
                setattr(account, key, value)
        storage.touch(account)
        return self._render(storage, account)

    def delete_account(self, storage: Storage, context: Context, account_id: str) -> None:
        account = self._require(storage, context, account_id, Action.WRITE)
        with storage.transaction():
            storage.delete_record(account)
        logger.info("Deleted pension account %s", account_id)

    def add_deposit(
        self, storage: Storage, context: Context, account_id: str, payload: DepositCreate
    ) -> DepositOut:
        self._require(storage, context, account_id, Action.WRITE)
        deposit = storage.add(_new_deposit(account_id, payload))
        return deposit_out(deposit)

    def add_deposits(
        self, storage: Storage, context: Context, payload: DepositBulkCreate
    ) -> list[DepositOut]:
        account_id = validate_id(payload.account_id, "account ID")
        self._require(storage, context, account_id, Action.WRITE)
        with storage.transaction():
            deposits = [storage.add(_new_deposit(account_id, d)) for d in payload.deposits]
        logger.info("Imported %d deposit(s) into pension account %s", len(deposits), account_id)
        return [deposit_out(d) for d in deposits]

    def get_deposit(self, storage: Storage, context: Context, deposit_id: str) -> DepositOut:
        return deposit_out(self._load_deposit(storage, context, deposit_id, Action.READ))

    def update_deposit(
        self, storage: Storage, context: Context, deposit_id: str, payload: DepositUpdate
    ) -> DepositOut:
        deposit = self._load_deposit(storage, context, deposit_id, Action.WRITE)
        for key, value in payload.model_dump(exclude_unset=True).items():
            if value is not None:
                setattr(deposit, key, value)
        storage.touch(deposit)
        return deposit_out(deposit)

    def delete_deposit(self, storage: Storage, context: Context, deposit_id: str) -> None:
        deposit = self._load_deposit(storage, context, deposit_id, Action.WRITE)
        storage.delete(deposit)
        logger.info("Deleted deposit %s from pension account %s", deposit_id, deposit.account_id)

    def _load_deposit(
        self, storage: Storage, context: Context, deposit_id: str, action: Action
    ) -> PensionDeposit:
        """A deposit is reachable exactly when its account is."""
        deposit = storage.get(PensionDeposit, deposit_id)
        if deposit is None:
            raise NotFoundError(f"{DEPOSIT_LABEL} not found")
        self._guard.require_record(
            storage, context, PensionAccount, deposit.account_id, action, label=DEPOSIT_LABEL
        )
        return deposit

    def _require(
        self, storage: Storage, context: Context, account_id: str, action: Action
    ) -> PensionAccount:
        return self._guard.require_record(
            storage, context, PensionAccount, account_id, action, label=PENSION_LABEL
        )

    @staticmethod
    def _render(storage: Storage, account: PensionAccount) -> PensionAccountOut:
        owners = owners_by_record(storage, PensionAccount, [account.id])[account.id]
        return pension_out(account, owners, storage.deposits_for(account.id))
