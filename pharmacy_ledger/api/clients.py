"""
Client API endpoints.
"""

import uuid
from datetime import datetime

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from pharmacy_ledger.api.errors import to_http_exception
from pharmacy_ledger.config import get_settings
from pharmacy_ledger.exceptions import LedgerError
from pharmacy_ledger.models.base import get_db, UnitOfWork
from pharmacy_ledger.services.client_service import ClientService
from pharmacy_ledger.schemas.client import (
    ClientCreate,
    ClientUpdate,
    ClientResponse,
    ClientImportResponse,
)
from pharmacy_ledger.schemas.ledger import (
    TransactionCreate,
    ClientEntryResponse,
    ClientHistoryResponse,
    BalanceResponse,
    ReconcileResponse,
    SummaryResponse,
)

router = APIRouter(prefix="/clients", tags=["Clients"])
settings = get_settings()


@router.post("", response_model=ClientResponse, status_code=201)
def create_client(
    request: ClientCreate,
    db: Session = Depends(get_db),
):
    service = ClientService(db)
    try:
        return service.create_client(UnitOfWork(db), request)
    except LedgerError as e:
        raise to_http_exception(e)


@router.get("", response_model=list[ClientResponse])
def list_clients(
    vendor_id: uuid.UUID | None = None,
    is_active: bool | None = None,
    db: Session = Depends(get_db),
):
    """List clients ordered by name."""
    return ClientService(db).list_clients(vendor_id, is_active)


@router.post("/import", response_model=ClientImportResponse)
def import_clients(
    requests: list[ClientCreate],
    db: Session = Depends(get_db),
):
    """Create many clients; failures are counted, not fatal."""
    result = ClientService(db).import_clients(UnitOfWork(db), requests)
    return ClientImportResponse(success=result.success, failed=result.failed)


@router.get("/export", response_model=list[ClientResponse])
def export_clients(
    vendor_id: uuid.UUID,
    db: Session = Depends(get_db),
):
    """Every client of one vendor, active or not."""
    return ClientService(db).list_clients(vendor_id)


@router.get("/{client_id}", response_model=ClientResponse)
def get_client(
    client_id: uuid.UUID,
    db: Session = Depends(get_db),
):
    try:
        return ClientService(db).get_client(client_id)
    except LedgerError as e:
        raise to_http_exception(e)


@router.patch("/{client_id}", response_model=ClientResponse)
def update_client(
    client_id: uuid.UUID,
    request: ClientUpdate,
    db: Session = Depends(get_db),
):
    service = ClientService(db)
    try:
        return service.update_client(UnitOfWork(db), client_id, request)
    except LedgerError as e:
        raise to_http_exception(e)


@router.delete("/{client_id}", status_code=204)
def remove_client(
    client_id: uuid.UUID,
    db: Session = Depends(get_db),
):
    service = ClientService(db)
    try:
        service.remove_client(UnitOfWork(db), client_id)
    except LedgerError as e:
        raise to_http_exception(e)


@router.post(
    "/{client_id}/transactions",
    response_model=ClientEntryResponse,
    status_code=201,
)
def add_transaction(
    client_id: uuid.UUID,
    request: TransactionCreate,
    db: Session = Depends(get_db),
):
    """Credit or debit a client's balance."""
    service = ClientService(db)
    try:
        entry = service.apply_transaction(
            UnitOfWork(db),
            client_id,
            request.direction,
            request.amount,
            request.category,
            request.description,
            request.reference,
            request.metadata,
        )
    except LedgerError as e:
        raise to_http_exception(e)
    return ClientEntryResponse.model_validate(entry)


@router.get(
    "/{client_id}/transactions",
    response_model=ClientHistoryResponse,
)
def get_transactions(
    client_id: uuid.UUID,
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
    try:
        page = ClientService(db).history(
            client_id, from_time, to_time, limit, offset
        )
    except LedgerError as e:
        raise to_http_exception(e)
    return ClientHistoryResponse(
        entries=[ClientEntryResponse.model_validate(e) for e in page.entries],
        total=page.total,
        limit=page.limit,
        offset=page.offset,
    )


@router.get("/{client_id}/balance", response_model=BalanceResponse)
def get_client_balance(
    client_id: uuid.UUID,
    db: Session = Depends(get_db),
):
    try:
        balance = ClientService(db).get_balance(client_id)
    except LedgerError as e:
        raise to_http_exception(e)
    return BalanceResponse(id=client_id, balance=balance)


@router.get("/{client_id}/reconcile", response_model=ReconcileResponse)
def reconcile_client(
    client_id: uuid.UUID,
    db: Session = Depends(get_db),
):
    try:
        result = ClientService(db).reconcile(client_id)
    except LedgerError as e:
        raise to_http_exception(e)
    return ReconcileResponse.model_validate(result)


@router.get("/{client_id}/summary", response_model=SummaryResponse)
def get_client_summary(
    client_id: uuid.UUID,
    from_time: datetime | None = None,
    to_time: datetime | None = None,
    db: Session = Depends(get_db),
):
    try:
        result = ClientService(db).summary(client_id, from_time, to_time)
    except LedgerError as e:
        raise to_http_exception(e)
    return SummaryResponse.model_validate(result)
