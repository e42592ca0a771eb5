"""
Vendor account model and its transaction log.

An account holds a stored balance. Every change to that balance
is recorded as an AccountTransaction carrying the balance right
after the change, so the balance can always be rebuilt from the
log.
"""

import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    String, Boolean, DateTime, Integer, Numeric, Text, JSON, ForeignKey,
    UniqueConstraint, Enum as SAEnum, Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pharmacy_ledger.config import get_settings
from pharmacy_ledger.models.base import Base
from pharmacy_ledger.models.enums import (
    AccountType,
    Direction,
    TransactionCategory,
)


class Account(Base):
    """
    A vendor's money account (till, bank, mobile money...).

    Accounts with entries are never deleted, only deactivated
    via is_active=False. Inactive accounts cannot take part in
    transfers.
    """

    __tablename__ = "accounts"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4
    )
    vendor_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, nullable=False, index=True
    )
    account_name: Mapped[str] = mapped_column(String(255), nullable=False)
    account_type: Mapped[AccountType] = mapped_column(
        SAEnum(AccountType, name="account_type_enum", create_constraint=True),
        nullable=False,
    )
    balance: Mapped[Decimal] = mapped_column(
        Numeric(15, 2), nullable=False, default=Decimal("0.00")
    )
    currency: Mapped[str] = mapped_column(
        String(3),
        nullable=False,
        default=lambda: get_settings().DEFAULT_CURRENCY,
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True
    )
    # seq of the newest entry; the locked row hands out the next one
    last_seq: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    version: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    transactions: Mapped[list["AccountTransaction"]] = relationship(
        back_populates="account"
    )

    # Every UPDATE checks and bumps the version, so a write based on
    # a stale read fails instead of silently overwriting the balance.
    __mapper_args__ = {"version_id_col": version}

    @property
    def display_name(self) -> str:
        return self.account_name

    def __repr__(self) -> str:
        return (
            f"<Account {self.account_name} "
            f"{self.balance} {self.currency}>"
        )


class AccountTransaction(Base):
    """
    An immutable entry in an account's transaction log.

    Written once, in the same commit as the balance change it
    describes. Never updated, deleted, or moved to another account.
    """

    __tablename__ = "transactions"
    __table_args__ = (UniqueConstraint("account_id", "seq"),)

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4
    )
    account_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("accounts.id"), nullable=False, index=True
    )
    # Position in the account's log, 1-based, assigned under the row
    # lock. Commit order, unlike created_at.
    seq: Mapped[int] = mapped_column(Integer, nullable=False)
    direction: Mapped[Direction] = mapped_column(
        SAEnum(Direction, name="direction_enum"),
        nullable=False,
    )
    category: Mapped[TransactionCategory] = mapped_column(
        SAEnum(TransactionCategory, name="transaction_category_enum"),
        nullable=False,
        default=TransactionCategory.OTHER,
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False)
    balance_after: Mapped[Decimal] = mapped_column(
        Numeric(15, 2), nullable=False
    )
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    reference: Mapped[str | None] = mapped_column(String(255), nullable=True)
    # "metadata" is reserved on declarative classes
    extra: Mapped[dict | None] = mapped_column("metadata", JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow, index=True
    )

    account: Mapped["Account"] = relationship(back_populates="transactions")

    def __repr__(self) -> str:
        return (
            f"<AccountTransaction {self.direction.value} "
            f"{self.amount} -> {self.balance_after}>"
        )
