"""
Accounting API endpoints.

The API layer is thin: it handles HTTP concerns (status codes,
response formatting), creates the unit of work for each write,
and delegates all ledger logic to AccountService and
TransferCoordinator.
"""

import uuid
from datetime import datetime

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from pharmacy_ledger.api.errors import to_http_exception
from pharmacy_ledger.config import get_settings
from pharmacy_ledger.exceptions import LedgerError
from pharmacy_ledger.models.base import get_db, UnitOfWork
from pharmacy_ledger.services.account_service import AccountService
from pharmacy_ledger.services.transfer_service import TransferCoordinator
from pharmacy_ledger.schemas.account import (
    AccountCreate,
    AccountUpdate,
    AccountResponse,
    VendorBalanceResponse,
)
from pharmacy_ledger.schemas.ledger import (
    AccountTransactionCreate,
    AccountEntryResponse,
    AccountHistoryResponse,
    BalanceResponse,
    ReconcileResponse,
    SummaryResponse,
    TransferRequest,
    TransferResponse,
)

router = APIRouter(prefix="/accounting", tags=["Accounting"])
settings = get_settings()


# --- Account Endpoints ---

@router.post("/accounts", response_model=AccountResponse, status_code=201)
def create_account(
    request: AccountCreate,
    db: Session = Depends(get_db),
):
    """
    Open a new vendor account.

    A positive opening_balance is recorded as the account's
    first ledger entry.
    """
    service = AccountService(db)
    try:
        return service.create_account(UnitOfWork(db), request)
    except LedgerError as e:
        raise to_http_exception(e)


@router.get("/accounts", response_model=list[AccountResponse])
def list_accounts(
    vendor_id: uuid.UUID | None = None,
    is_active: bool | None = None,
    db: Session = Depends(get_db),
):
    """List accounts, newest first."""
    return AccountService(db).list_accounts(vendor_id, is_active)


@router.get("/accounts/{account_id}", response_model=AccountResponse)
def get_account(
    account_id: uuid.UUID,
    db: Session = Depends(get_db),
):
    try:
        return AccountService(db).get_account(account_id)
    except LedgerError as e:
        raise to_http_exception(e)


@router.patch("/accounts/{account_id}", response_model=AccountResponse)
def update_account(
    account_id: uuid.UUID,
    request: AccountUpdate,
    db: Session = Depends(get_db),
):
    """
    Update an account's name, type, or active flag.

    Balances cannot be patched; use a transaction instead.
    """
    service = AccountService(db)
    try:
        return service.update_account(UnitOfWork(db), account_id, request)
    except LedgerError as e:
        raise to_http_exception(e)


@router.delete("/accounts/{account_id}", status_code=204)
def remove_account(
    account_id: uuid.UUID,
    db: Session = Depends(get_db),
):
    """Delete an account with zero balance and no ledger history."""
    service = AccountService(db)
    try:
        service.remove_account(UnitOfWork(db), account_id)
    except LedgerError as e:
        raise to_http_exception(e)


@router.get("/accounts/{account_id}/balance", response_model=BalanceResponse)
def get_account_balance(
    account_id: uuid.UUID,
    db: Session = Depends(get_db),
):
    try:
        balance = AccountService(db).get_balance(account_id)
    except LedgerError as e:
        raise to_http_exception(e)
    return BalanceResponse(id=account_id, balance=balance)


@router.get(
    "/accounts/{account_id}/reconcile",
    response_model=ReconcileResponse,
)
def reconcile_account(
    account_id: uuid.UUID,
    db: Session = Depends(get_db),
):
    """
    Rebuild the balance from the transaction log and compare.

    A non-zero difference is reported in the body, not as an error.
    """
    try:
        result = AccountService(db).reconcile(account_id)
    except LedgerError as e:
        raise to_http_exception(e)
    return ReconcileResponse.model_validate(result)


@router.get("/accounts/{account_id}/summary", response_model=SummaryResponse)
def get_account_summary(
    account_id: uuid.UUID,
    from_time: datetime | None = None,
    to_time: datetime | None = None,
    db: Session = Depends(get_db),
):
    try:
        result = AccountService(db).summary(account_id, from_time, to_time)
    except LedgerError as e:
        raise to_http_exception(e)
    return SummaryResponse.model_validate(result)


@router.get(
    "/accounts/{account_id}/transactions",
    response_model=AccountHistoryResponse,
)
def get_account_history(
    account_id: uuid.UUID,
    from_time: datetime | None = None,
    to_time: datetime | None = None,
    limit: int = Query(
        default=settings.HISTORY_DEFAULT_LIMIT,
        ge=1,
        le=settings.HISTORY_MAX_LIMIT,
    ),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
):
    """Get an account's transactions, newest first."""
    try:
        page = AccountService(db).history(
            account_id, from_time, to_time, limit, offset
        )
    except LedgerError as e:
        raise to_http_exception(e)
    return AccountHistoryResponse(
        entries=[AccountEntryResponse.model_validate(e) for e in page.entries],
        total=page.total,
        limit=page.limit,
        offset=page.offset,
    )


# --- Ledger Mutations ---

@router.post(
    "/transactions",
    response_model=AccountEntryResponse,
    status_code=201,
)
def create_transaction(
    request: AccountTransactionCreate,
    db: Session = Depends(get_db),
):
    """Credit or debit an account."""
    service = AccountService(db)
    try:
        entry = service.apply_transaction(
            UnitOfWork(db),
            request.account_id,
            request.direction,
            request.amount,
            request.category,
            request.description,
            request.reference,
            request.metadata,
        )
    except LedgerError as e:
        raise to_http_exception(e)
    return AccountEntryResponse.model_validate(entry)


@router.post("/transfers", response_model=TransferResponse, status_code=201)
def transfer(
    request: TransferRequest,
    db: Session = Depends(get_db),
):
    """Move money between two active accounts in one step."""
    coordinator = TransferCoordinator(AccountService(db))
    try:
        result = coordinator.transfer(
            UnitOfWork(db),
            request.from_account_id,
            request.to_account_id,
            request.amount,
            request.description,
            request.reference,
        )
    except LedgerError as e:
        raise to_http_exception(e)
    return TransferResponse(
        source_entry=AccountEntryResponse.model_validate(result.source_entry),
        destination_entry=AccountEntryResponse.model_validate(
            result.destination_entry
        ),
    )


@router.get(
    "/vendors/{vendor_id}/balance",
    response_model=VendorBalanceResponse,
)
def get_vendor_total_balance(
    vendor_id: uuid.UUID,
    db: Session = Depends(get_db),
):
    """Total balance across a vendor's active accounts."""
    total = AccountService(db).get_vendor_total_balance(vendor_id)
    return VendorBalanceResponse(vendor_id=vendor_id, total_balance=total)
