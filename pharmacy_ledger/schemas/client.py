"""
Pydantic schemas for client operations.
"""

import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field


class ClientCreate(BaseModel):
    vendor_id: uuid.UUID
    name: str = Field(min_length=1, max_length=255)
    email: str | None = Field(default=None, max_length=255)
    phone: str | None = Field(default=None, max_length=20)
    address: str | None = None
    city: str | None = Field(default=None, max_length=100)
    country: str | None = Field(default="Nigeria", max_length=100)
    tax_id: str | None = Field(default=None, max_length=50)
    contact_person: str | None = Field(default=None, max_length=255)
    notes: str | None = None
    is_active: bool = True


class ClientUpdate(BaseModel):
    """The only client fields callers may change. Balance is not one of them."""
    name: str | None = Field(default=None, min_length=1, max_length=255)
    email: str | None = Field(default=None, max_length=255)
    phone: str | None = Field(default=None, max_length=20)
    address: str | None = None
    city: str | None = Field(default=None, max_length=100)
    country: str | None = Field(default=None, max_length=100)
    tax_id: str | None = Field(default=None, max_length=50)
    contact_person: str | None = Field(default=None, max_length=255)
    notes: str | None = None
    is_active: bool | None = None

    model_config = {"extra": "forbid"}


class ClientResponse(BaseModel):
    id: uuid.UUID
    vendor_id: uuid.UUID
    name: str
    email: str | None
    phone: str | None
    address: str | None
    city: str | None
    country: str | None
    tax_id: str | None
    contact_person: str | None
    notes: str | None
    balance: Decimal
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ClientImportResponse(BaseModel):
    success: int
    failed: int
