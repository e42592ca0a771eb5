"""
Database models package.

All models must be imported here so that Base.metadata knows
every table when create_all() runs.
"""

from pharmacy_ledger.models.base import Base, UnitOfWork
from pharmacy_ledger.models.enums import (
    AccountType,
    Direction,
    TransactionCategory,
)
from pharmacy_ledger.models.account import Account, AccountTransaction
from pharmacy_ledger.models.client import Client, ClientTransaction

__all__ = [
    "Base",
    "UnitOfWork",
    "AccountType",
    "Direction",
    "TransactionCategory",
    "Account",
    "AccountTransaction",
    "Client",
    "ClientTransaction",
]
