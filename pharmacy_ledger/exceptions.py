"""
Typed exceptions for the ledger.

Every error has its own class, a machine-readable `code`, and the
HTTP status the API layer answers with. The values that caused the
error are kept as attributes so callers never parse messages.

    LedgerError
    +-- NotFoundError
    +-- InvalidAmountError
    +-- InsufficientBalanceError
    +-- InactiveAccountError
    +-- SameAccountError
    +-- NonZeroBalanceError
    +-- AccountReferencedError
    +-- PersistenceError
        +-- ConcurrencyError

Everything except PersistenceError is detected before anything is
written, so the caller can correct the input and try again.
"""

from decimal import Decimal


class LedgerError(Exception):
    """Base exception for all ledger errors."""

    code: str = "LEDGER_ERROR"
    status_code: int = 400


class NotFoundError(LedgerError):
    """A referenced account, client, or entry does not exist."""

    code: str = "NOT_FOUND"
    status_code: int = 404

    def __init__(self, kind: str, entity_id):
        self.kind = kind
        self.entity_id = entity_id
        super().__init__(f"{kind} with ID {entity_id} not found")


class InvalidAmountError(LedgerError):
    code: str = "INVALID_AMOUNT"

    def __init__(self, amount):
        self.amount = amount
        super().__init__(f"Amount must be positive, got {amount}")


class InsufficientBalanceError(LedgerError):
    """A debit or transfer would drive a balance below zero."""

    code: str = "INSUFFICIENT_BALANCE"

    def __init__(self, entity_id, available: Decimal, requested: Decimal):
        self.entity_id = entity_id
        self.available = available
        self.requested = requested
        super().__init__(
            f"Insufficient balance: available={available}, "
            f"requested={requested}"
        )


class InactiveAccountError(LedgerError):
    code: str = "ACCOUNT_INACTIVE"

    def __init__(self, entity_id):
        self.entity_id = entity_id
        super().__init__(f"Account {entity_id} is not active")


class SameAccountError(LedgerError):
    code: str = "SAME_ACCOUNT"

    def __init__(self, entity_id):
        self.entity_id = entity_id
        super().__init__("Cannot transfer to the same account")


class NonZeroBalanceError(LedgerError):
    code: str = "NON_ZERO_BALANCE"

    def __init__(self, entity_id, balance: Decimal):
        self.entity_id = entity_id
        self.balance = balance
        super().__init__(
            f"Cannot delete {entity_id} with non-zero balance ({balance})"
        )


class AccountReferencedError(LedgerError):
    """The owner has ledger entries, and entries are never deleted."""

    code: str = "ACCOUNT_REFERENCED"
    status_code: int = 409

    def __init__(self, entity_id, entry_count: int):
        self.entity_id = entity_id
        self.entry_count = entry_count
        super().__init__(
            f"Cannot delete {entity_id}: it has {entry_count} ledger "
            f"entries, deactivate it instead"
        )


class PersistenceError(LedgerError):
    """The storage layer failed while committing. Nothing was written."""

    code: str = "PERSISTENCE_ERROR"
    status_code: int = 500


class ConcurrencyError(PersistenceError):
    """Another writer changed the same row first."""

    code: str = "CONCURRENCY_CONFLICT"
    status_code: int = 409
