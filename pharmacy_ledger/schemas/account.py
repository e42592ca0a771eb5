"""
Pydantic schemas for vendor account operations.
"""

import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from pharmacy_ledger.models.enums import AccountType


class AccountCreate(BaseModel):
    """Request to open a new vendor account."""
    vendor_id: uuid.UUID
    account_name: str = Field(min_length=1, max_length=255)
    account_type: AccountType
    currency: str | None = Field(default=None, min_length=3, max_length=3)
    opening_balance: Decimal = Field(default=Decimal("0"), ge=0, decimal_places=2)
    is_active: bool = True


class AccountUpdate(BaseModel):
    """
    The only account fields callers may change.

    Balance is moved exclusively through ledger transactions,
    so it is deliberately absent here.
    """
    account_name: str | None = Field(default=None, min_length=1, max_length=255)
    account_type: AccountType | None = None
    is_active: bool | None = None

    model_config = {"extra": "forbid"}


class AccountResponse(BaseModel):
    id: uuid.UUID
    vendor_id: uuid.UUID
    account_name: str
    account_type: AccountType
    balance: Decimal
    currency: str
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class VendorBalanceResponse(BaseModel):
    vendor_id: uuid.UUID
    total_balance: Decimal
