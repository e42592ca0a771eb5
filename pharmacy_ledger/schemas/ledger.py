"""
Pydantic schemas for ledger operations.

These define the API contract for balance changes, transfers
and the read-side views of a ledger (history, summary,
reconciliation). They are shared by vendor accounts and clients.
"""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import AliasChoices, BaseModel, Field

from pharmacy_ledger.models.enums import Direction, TransactionCategory


# --- Request Schemas ---

class TransactionCreate(BaseModel):
    """A single credit or debit against one ledger."""
    direction: Direction
    amount: Decimal = Field(gt=0, decimal_places=2)
    category: TransactionCategory = TransactionCategory.OTHER
    description: str | None = Field(default=None, max_length=1000)
    reference: str | None = Field(default=None, max_length=255)
    metadata: dict[str, Any] | None = None


class AccountTransactionCreate(TransactionCreate):
    account_id: uuid.UUID


class TransferRequest(BaseModel):
    """Move money from one vendor account to another."""
    from_account_id: uuid.UUID
    to_account_id: uuid.UUID
    amount: Decimal = Field(gt=0, decimal_places=2)
    description: str | None = Field(default=None, max_length=1000)
    reference: str | None = Field(default=None, max_length=255)


# --- Response Schemas ---

class LedgerEntryResponse(BaseModel):
    id: uuid.UUID
    direction: Direction
    category: TransactionCategory
    amount: Decimal
    balance_after: Decimal
    description: str | None
    reference: str | None
    # The ORM attribute is `extra`; the column and the API field are "metadata".
    metadata: dict[str, Any] | None = Field(
        default=None, validation_alias=AliasChoices("extra", "metadata")
    )
    created_at: datetime

    model_config = {"from_attributes": True}


class AccountEntryResponse(LedgerEntryResponse):
    account_id: uuid.UUID


class ClientEntryResponse(LedgerEntryResponse):
    client_id: uuid.UUID


class TransferResponse(BaseModel):
    source_entry: AccountEntryResponse
    destination_entry: AccountEntryResponse


class BalanceResponse(BaseModel):
    id: uuid.UUID
    balance: Decimal


class ReconcileResponse(BaseModel):
    calculated: Decimal
    current: Decimal
    difference: Decimal
    is_balanced: bool

    model_config = {"from_attributes": True}


class SummaryResponse(BaseModel):
    total_credits: Decimal
    total_debits: Decimal
    transaction_count: int
    opening_balance: Decimal
    closing_balance: Decimal

    model_config = {"from_attributes": True}


class AccountHistoryResponse(BaseModel):
    entries: list[AccountEntryResponse]
    total: int
    limit: int
    offset: int


class ClientHistoryResponse(BaseModel):
    entries: list[ClientEntryResponse]
    total: int
    limit: int
    offset: int
