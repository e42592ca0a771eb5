"""
Account service — vendor money accounts and their ledgers.

Balance changes go through the LedgerStore rules inherited
here. This module adds the account lifecycle: opening (with an
optional opening balance posted as a real ledger entry),
whitelisted updates, removal of unused accounts, and per-vendor
totals.
"""

import uuid
from decimal import Decimal

from sqlalchemy import select, func

from pharmacy_ledger.exceptions import (
    AccountReferencedError,
    NonZeroBalanceError,
)
from pharmacy_ledger.logging_config import get_logger
from pharmacy_ledger.models.account import Account, AccountTransaction
from pharmacy_ledger.models.base import UnitOfWork
from pharmacy_ledger.models.enums import Direction, TransactionCategory
from pharmacy_ledger.schemas.account import AccountCreate, AccountUpdate
from pharmacy_ledger.services.ledger_store import LedgerStore, to_money

logger = get_logger("accounts")


class AccountService(LedgerStore):

    owner_model = Account
    entry_model = AccountTransaction
    owner_fk = "account_id"
    owner_kind = "Account"

    def create_account(self, uow: UnitOfWork, request: AccountCreate) -> Account:
        """
        Open a new vendor account.

        The account always starts at zero. A non-zero opening
        balance is posted as a DEPOSIT credit in the same commit,
        so the log replays to the stored balance from day one.
        """
        opening_balance = to_money(request.opening_balance)

        with uow:
            account = Account(
                vendor_id=request.vendor_id,
                account_name=request.account_name,
                account_type=request.account_type,
                currency=request.currency or self.settings.DEFAULT_CURRENCY,
                is_active=request.is_active,
                balance=Decimal("0.00"),
            )
            uow.session.add(account)
            uow.session.flush()

            if opening_balance > 0:
                self.stage_entry(
                    uow.session,
                    account,
                    Direction.CREDIT,
                    opening_balance,
                    TransactionCategory.DEPOSIT,
                    "Opening balance",
                )
            uow.commit()

        logger.info(
            "account_created",
            extra={
                "account_id": str(account.id),
                "vendor_id": str(account.vendor_id),
                "opening_balance": str(opening_balance),
            },
        )
        return account

    def list_accounts(
        self,
        vendor_id: uuid.UUID | None = None,
        is_active: bool | None = None,
    ) -> list[Account]:
        """List accounts, newest first, optionally filtered."""
        query = select(Account)
        if vendor_id is not None:
            query = query.where(Account.vendor_id == vendor_id)
        if is_active is not None:
            query = query.where(Account.is_active == is_active)

        accounts = self.db.execute(
            query.order_by(Account.created_at.desc())
        ).scalars().all()
        return list(accounts)

    def get_account(self, account_id: uuid.UUID) -> Account:
        return self._get_owner(account_id)

    def update_account(
        self, uow: UnitOfWork, account_id: uuid.UUID, request: AccountUpdate
    ) -> Account:
        """Change the descriptive fields an AccountUpdate allows."""
        with uow:
            account = self.lock_owner(uow.session, account_id)
            if request.account_name is not None:
                account.account_name = request.account_name
            if request.account_type is not None:
                account.account_type = request.account_type
            if request.is_active is not None:
                account.is_active = request.is_active
            uow.commit()
        return account

    def remove_account(self, uow: UnitOfWork, account_id: uuid.UUID) -> None:
        """
        Delete an account that was never used.

        Accounts holding money, or with any ledger history, are
        kept; deactivate them instead.
        """
        with uow:
            account = self.lock_owner(uow.session, account_id)
            if account.balance != 0:
                raise NonZeroBalanceError(account.id, to_money(account.balance))

            entry_count = self.count_entries(account_id)
            if entry_count:
                raise AccountReferencedError(account.id, entry_count)

            uow.session.delete(account)
            uow.commit()

        logger.info("account_removed", extra={"account_id": str(account_id)})

    def get_vendor_total_balance(self, vendor_id: uuid.UUID) -> Decimal:
        """Sum of the balances of a vendor's active accounts."""
        total = self.db.execute(
            select(func.coalesce(func.sum(Account.balance), 0)).where(
                Account.vendor_id == vendor_id,
                Account.is_active.is_(True),
            )
        ).scalar()
        return to_money(total)
