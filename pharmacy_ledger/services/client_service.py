"""
Client service — a vendor's customers and their running balances.
"""

import uuid
from dataclasses import dataclass

from sqlalchemy import select

from pharmacy_ledger.exceptions import (
    AccountReferencedError,
    LedgerError,
    NonZeroBalanceError,
)
from pharmacy_ledger.logging_config import get_logger
from pharmacy_ledger.models.base import UnitOfWork
from pharmacy_ledger.models.client import Client, ClientTransaction
from pharmacy_ledger.schemas.client import ClientCreate, ClientUpdate
from pharmacy_ledger.services.ledger_store import LedgerStore, to_money

logger = get_logger("clients")

# Fields a ClientUpdate may set, in the order they are applied.
UPDATABLE_FIELDS = (
    "name",
    "email",
    "phone",
    "address",
    "city",
    "country",
    "tax_id",
    "contact_person",
    "notes",
    "is_active",
)


@dataclass(frozen=True)
class ImportResult:
    success: int
    failed: int


class ClientService(LedgerStore):

    owner_model = Client
    entry_model = ClientTransaction
    owner_fk = "client_id"
    owner_kind = "Client"

    def create_client(self, uow: UnitOfWork, request: ClientCreate) -> Client:
        with uow:
            client = Client(
                vendor_id=request.vendor_id,
                name=request.name,
                email=request.email,
                phone=request.phone,
                address=request.address,
                city=request.city,
                country=request.country,
                tax_id=request.tax_id,
                contact_person=request.contact_person,
                notes=request.notes,
                is_active=request.is_active,
            )
            uow.session.add(client)
            uow.commit()
        return client

    def list_clients(
        self,
        vendor_id: uuid.UUID | None = None,
        is_active: bool | None = None,
    ) -> list[Client]:
        """List clients by name, optionally filtered."""
        query = select(Client)
        if vendor_id is not None:
            query = query.where(Client.vendor_id == vendor_id)
        if is_active is not None:
            query = query.where(Client.is_active == is_active)

        clients = self.db.execute(query.order_by(Client.name.asc())).scalars().all()
        return list(clients)

    def get_client(self, client_id: uuid.UUID) -> Client:
        return self._get_owner(client_id)

    def update_client(
        self, uow: UnitOfWork, client_id: uuid.UUID, request: ClientUpdate
    ) -> Client:
        """
        Change the contact fields a ClientUpdate allows.

        Only fields the caller actually sent are touched, so an
        optional field can be cleared by sending null explicitly.
        """
        sent = request.model_fields_set
        with uow:
            client = self.lock_owner(uow.session, client_id)
            for field in UPDATABLE_FIELDS:
                if field not in sent:
                    continue
                value = getattr(request, field)
                if field in ("name", "is_active") and value is None:
                    continue
                setattr(client, field, value)
            uow.commit()
        return client

    def remove_client(self, uow: UnitOfWork, client_id: uuid.UUID) -> None:
        with uow:
            client = self.lock_owner(uow.session, client_id)
            if client.balance != 0:
                raise NonZeroBalanceError(client.id, to_money(client.balance))

            entry_count = self.count_entries(client_id)
            if entry_count:
                raise AccountReferencedError(client.id, entry_count)

            uow.session.delete(client)
            uow.commit()

        logger.info("client_removed", extra={"client_id": str(client_id)})

    def import_clients(
        self, uow: UnitOfWork, requests: list[ClientCreate]
    ) -> ImportResult:
        """
        Create clients one at a time, counting what went wrong.

        One bad row does not stop the import; each client is its
        own commit.
        """
        success = 0
        failed = 0
        for index, request in enumerate(requests):
            try:
                self.create_client(uow, request)
                success += 1
            except LedgerError as e:
                failed += 1
                logger.warning(
                    "client_import_row_failed",
                    extra={
                        "row": index,
                        "client_name": request.name,
                        "error": str(e),
                    },
                )

        logger.info(
            "client_import_finished",
            extra={"success": success, "failed": failed},
        )
        return ImportResult(success=success, failed=failed)
