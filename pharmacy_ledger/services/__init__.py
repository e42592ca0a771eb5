"""Business logic services."""

from pharmacy_ledger.services.ledger_store import LedgerStore
from pharmacy_ledger.services.account_service import AccountService
from pharmacy_ledger.services.client_service import ClientService
from pharmacy_ledger.services.transfer_service import TransferCoordinator

__all__ = ["LedgerStore", "AccountService", "ClientService", "TransferCoordinator"]
