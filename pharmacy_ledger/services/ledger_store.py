"""
Ledger store — the core of the ledger.

This service enforces the fundamental rules:
1. A balance only changes together with a new log entry
   recording the change and the resulting balance
2. Entries are immutable (append-only)
3. A debit never drives a balance below zero
4. The stored balance always equals the replay of the log

Vendor accounts and clients keep their ledgers with exactly
the same rules, so the logic lives here once. Concrete services
name the owner model, the entry model, and the foreign key
linking them.
"""

import uuid
from collections.abc import Iterator
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any

from sqlalchemy import select, func, case
from sqlalchemy.orm import Session

from pharmacy_ledger.config import get_settings
from pharmacy_ledger.exceptions import (
    InsufficientBalanceError,
    InvalidAmountError,
    NotFoundError,
)
from pharmacy_ledger.logging_config import get_logger
from pharmacy_ledger.models.base import UnitOfWork
from pharmacy_ledger.models.enums import Direction, TransactionCategory

logger = get_logger("ledger")

TWO_PLACES = Decimal("0.01")
ZERO = Decimal("0.00")


def to_money(value) -> Decimal:
    """Convert to a 2-decimal-place Decimal, rounding half up."""
    return Decimal(str(value)).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class ReconcileResult:
    """Stored balance versus the balance rebuilt from the log."""
    calculated: Decimal
    current: Decimal
    difference: Decimal

    @property
    def is_balanced(self) -> bool:
        return self.difference == 0


@dataclass(frozen=True)
class LedgerSummary:
    total_credits: Decimal
    total_debits: Decimal
    transaction_count: int
    opening_balance: Decimal
    closing_balance: Decimal


@dataclass(frozen=True)
class HistoryPage:
    entries: list
    total: int
    limit: int
    offset: int


class LedgerStore:
    """
    Balance mutation and log queries for one kind of ledger owner.

    Reads use the session given to the constructor. Writes take
    an explicit UnitOfWork: the store enters it, locks the rows it
    touches, stages the balance change and the entry, and commits.
    Any error before the commit leaves nothing behind.
    """

    owner_model: type = None
    entry_model: type = None
    owner_fk: str = None
    owner_kind: str = "Account"

    def __init__(self, db: Session):
        self.db = db
        self.settings = get_settings()

    # --- Helpers ---

    @property
    def _owner_column(self):
        return getattr(self.entry_model, self.owner_fk)

    def _get_owner(self, owner_id: uuid.UUID):
        owner = self.db.get(
            self.owner_model, owner_id, populate_existing=True
        )
        if not owner:
            raise NotFoundError(self.owner_kind, owner_id)
        return owner

    def lock_owner(self, session: Session, owner_id: uuid.UUID):
        """
        Load an owner row with a write lock held until commit.

        populate_existing makes sure the balance comes from the
        database, not from an object already in the session.
        """
        owner = session.execute(
            select(self.owner_model)
            .where(self.owner_model.id == owner_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()
        if not owner:
            raise NotFoundError(self.owner_kind, owner_id)
        return owner

    def lock_owners(
        self, session: Session, owner_ids: list[uuid.UUID]
    ) -> dict:
        """
        Lock several owners, always in ascending id order.

        Two transfers running in opposite directions between the
        same pair then wait on each other instead of deadlocking.
        """
        return {
            owner_id: self.lock_owner(session, owner_id)
            for owner_id in sorted(set(owner_ids), key=str)
        }

    @staticmethod
    def validate_amount(amount) -> Decimal:
        try:
            amount = to_money(amount)
        except (InvalidOperation, TypeError, ValueError):
            raise InvalidAmountError(amount) from None
        if not amount.is_finite() or amount <= 0:
            raise InvalidAmountError(amount)
        return amount

    def stage_entry(
        self,
        session: Session,
        owner,
        direction: Direction,
        amount: Decimal,
        category: TransactionCategory = TransactionCategory.OTHER,
        description: str | None = None,
        reference: str | None = None,
        metadata: dict[str, Any] | None = None,
    ):
        """
        Apply one signed change to a locked owner and add its entry.

        Nothing is committed here; the caller owns the unit of work.
        Raises InsufficientBalanceError before touching anything if
        a debit would overdraw.
        """
        current = to_money(owner.balance)
        if direction == Direction.CREDIT:
            new_balance = current + amount
        else:
            new_balance = current - amount
            if new_balance < 0:
                logger.info(
                    "ledger_debit_rejected",
                    extra={
                        "owner_kind": self.owner_kind,
                        "owner_id": str(owner.id),
                        "available": str(current),
                        "requested": str(amount),
                    },
                )
                raise InsufficientBalanceError(owner.id, current, amount)

        # The owner row is locked, so its counter hands out the next seq
        owner.last_seq = (owner.last_seq or 0) + 1

        entry = self.entry_model(
            **{self.owner_fk: owner.id},
            seq=owner.last_seq,
            direction=direction,
            category=category,
            amount=amount,
            balance_after=new_balance,
            description=description,
            reference=reference,
            extra=metadata,
        )
        owner.balance = new_balance
        session.add(entry)
        return entry

    # --- Mutations ---

    def apply_transaction(
        self,
        uow: UnitOfWork,
        owner_id: uuid.UUID,
        direction: Direction,
        amount: Decimal,
        category: TransactionCategory = TransactionCategory.OTHER,
        description: str | None = None,
        reference: str | None = None,
        metadata: dict[str, Any] | None = None,
    ):
        """
        Credit or debit one ledger and record the entry.

        The balance update and the entry insert are committed as
        one unit. Returns the persisted entry, whose balance_after
        is the owner's new balance.
        """
        amount = self.validate_amount(amount)

        with uow:
            owner = self.lock_owner(uow.session, owner_id)
            entry = self.stage_entry(
                uow.session,
                owner,
                direction,
                amount,
                category,
                description,
                reference,
                metadata,
            )
            uow.commit()

        logger.info(
            "ledger_transaction_applied",
            extra={
                "owner_kind": self.owner_kind,
                "owner_id": str(owner_id),
                "entry_id": str(entry.id),
                "direction": direction.value,
                "amount": str(amount),
                "balance_after": str(entry.balance_after),
            },
        )
        return entry

    # --- Queries ---

    def get_balance(self, owner_id: uuid.UUID) -> Decimal:
        """Return the stored balance of an owner."""
        return to_money(self._get_owner(owner_id).balance)

    def count_entries(self, owner_id: uuid.UUID) -> int:
        return self.db.execute(
            select(func.count())
            .select_from(self.entry_model)
            .where(self._owner_column == owner_id)
        ).scalar_one()

    def reconcile(self, owner_id: uuid.UUID) -> ReconcileResult:
        """
        Rebuild the balance from the log and compare.

        A non-zero difference means a balance was committed without
        its entry or the other way round. It is reported, never
        corrected here.
        """
        owner = self._get_owner(owner_id)
        entry = self.entry_model

        signed_amount = case(
            (entry.direction == Direction.CREDIT, entry.amount),
            else_=-entry.amount,
        )
        calculated = self.db.execute(
            select(func.coalesce(func.sum(signed_amount), 0))
            .where(self._owner_column == owner_id)
        ).scalar()

        calculated = to_money(calculated)
        current = to_money(owner.balance)
        result = ReconcileResult(
            calculated=calculated,
            current=current,
            difference=current - calculated,
        )

        if not result.is_balanced:
            logger.warning(
                "ledger_reconciliation_mismatch",
                extra={
                    "owner_kind": self.owner_kind,
                    "owner_id": str(owner_id),
                    "calculated": str(calculated),
                    "current": str(current),
                    "difference": str(result.difference),
                },
            )
        return result

    def _window(
        self,
        owner_id: uuid.UUID,
        from_time: datetime | None,
        to_time: datetime | None,
    ) -> list:
        conditions = [self._owner_column == owner_id]
        if from_time is not None:
            conditions.append(self.entry_model.created_at >= from_time)
        if to_time is not None:
            conditions.append(self.entry_model.created_at <= to_time)
        return conditions

    def history(
        self,
        owner_id: uuid.UUID,
        from_time: datetime | None = None,
        to_time: datetime | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> HistoryPage:
        """
        Return one page of entries, newest first.

        The window filters on created_at; the order is the log
        sequence, so ties and clock skew cannot reorder entries.
        """
        self._get_owner(owner_id)

        if limit is None:
            limit = self.settings.HISTORY_DEFAULT_LIMIT
        limit = max(1, min(limit, self.settings.HISTORY_MAX_LIMIT))
        offset = max(0, offset)

        conditions = self._window(owner_id, from_time, to_time)
        total = self.db.execute(
            select(func.count())
            .select_from(self.entry_model)
            .where(*conditions)
        ).scalar_one()

        entries = self.db.execute(
            select(self.entry_model)
            .where(*conditions)
            .order_by(self.entry_model.seq.desc())
            .limit(limit)
            .offset(offset)
        ).scalars().all()

        return HistoryPage(
            entries=list(entries), total=total, limit=limit, offset=offset
        )

    def iter_history(
        self,
        owner_id: uuid.UUID,
        from_time: datetime | None = None,
        to_time: datetime | None = None,
        page_size: int | None = None,
    ) -> Iterator:
        """
        Yield every entry in the window, newest first, page by page.

        Pages are fetched only as the caller consumes them. Calling
        again starts over from the newest entry.
        """
        offset = 0
        while True:
            page = self.history(
                owner_id, from_time, to_time, limit=page_size, offset=offset
            )
            yield from page.entries
            offset += len(page.entries)
            if len(page.entries) < page.limit or offset >= page.total:
                return

    def summary(
        self,
        owner_id: uuid.UUID,
        from_time: datetime | None = None,
        to_time: datetime | None = None,
    ) -> LedgerSummary:
        """
        Aggregate credits, debits and entry count over a window.

        The opening balance is the balance_after of the newest
        entry strictly before from_time, zero if there is none.
        The closing balance is the current stored balance.
        """
        owner = self._get_owner(owner_id)
        entry = self.entry_model

        credit_sum = func.coalesce(func.sum(case(
            (entry.direction == Direction.CREDIT, entry.amount), else_=0
        )), 0)
        debit_sum = func.coalesce(func.sum(case(
            (entry.direction == Direction.DEBIT, entry.amount), else_=0
        )), 0)

        row = self.db.execute(
            select(credit_sum, debit_sum, func.count(entry.id))
            .where(*self._window(owner_id, from_time, to_time))
        ).one()

        opening_balance = ZERO
        if from_time is not None:
            previous = self.db.execute(
                select(entry.balance_after)
                .where(
                    self._owner_column == owner_id,
                    entry.created_at < from_time,
                )
                .order_by(entry.seq.desc())
                .limit(1)
            ).scalar_one_or_none()
            if previous is not None:
                opening_balance = to_money(previous)

        return LedgerSummary(
            total_credits=to_money(row[0]),
            total_debits=to_money(row[1]),
            transaction_count=row[2],
            opening_balance=opening_balance,
            closing_balance=to_money(owner.balance),
        )
