"""
Transfer service — moves money between two ledgers.

Each transfer:
1. Validates the request (positive amount, two distinct accounts)
2. Locks both accounts in a fixed order
3. Checks both are active and the source can cover the amount
4. Stages a DEBIT on the source and a CREDIT on the destination,
   each pointing at the other account in its metadata
5. Commits both balances and both entries together

If any step fails, neither account changes.
"""

import time
import uuid
from dataclasses import dataclass
from decimal import Decimal

from pharmacy_ledger.exceptions import (
    InactiveAccountError,
    InsufficientBalanceError,
    SameAccountError,
)
from pharmacy_ledger.logging_config import get_logger
from pharmacy_ledger.models.base import UnitOfWork
from pharmacy_ledger.models.enums import Direction, TransactionCategory
from pharmacy_ledger.services.ledger_store import LedgerStore

logger = get_logger("transfer")


@dataclass(frozen=True)
class TransferResult:
    source_entry: object
    destination_entry: object


class TransferCoordinator:

    def __init__(self, store: LedgerStore):
        self.store = store

    def transfer(
        self,
        uow: UnitOfWork,
        from_account_id: uuid.UUID,
        to_account_id: uuid.UUID,
        amount: Decimal,
        description: str | None = None,
        reference: str | None = None,
    ) -> TransferResult:
        """
        Transfer an amount from one account to another.

        The source balance is checked against its locked,
        pre-transfer value, so two concurrent transfers can never
        both spend the same money.
        """
        amount = self.store.validate_amount(amount)

        if from_account_id == to_account_id:
            raise SameAccountError(from_account_id)

        with uow:
            locked = self.store.lock_owners(
                uow.session, [from_account_id, to_account_id]
            )
            source = locked[from_account_id]
            destination = locked[to_account_id]

            for account in (source, destination):
                if not account.is_active:
                    raise InactiveAccountError(account.id)

            if source.balance < amount:
                raise InsufficientBalanceError(
                    source.id, source.balance, amount
                )

            reference = reference or f"TRANSFER-{int(time.time() * 1000)}"
            description = description or (
                f"Transfer from {source.display_name} "
                f"to {destination.display_name}"
            )

            source_entry = self.store.stage_entry(
                uow.session,
                source,
                Direction.DEBIT,
                amount,
                TransactionCategory.TRANSFER,
                description,
                reference,
                {
                    "to_account_id": str(destination.id),
                    "to_account_name": destination.display_name,
                },
            )
            destination_entry = self.store.stage_entry(
                uow.session,
                destination,
                Direction.CREDIT,
                amount,
                TransactionCategory.TRANSFER,
                description,
                reference,
                {
                    "from_account_id": str(source.id),
                    "from_account_name": source.display_name,
                },
            )
            uow.commit()

        logger.info(
            "ledger_transfer_completed",
            extra={
                "from_account_id": str(from_account_id),
                "to_account_id": str(to_account_id),
                "amount": str(amount),
                "reference": reference,
            },
        )
        return TransferResult(
            source_entry=source_entry,
            destination_entry=destination_entry,
        )
