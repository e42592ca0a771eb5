"""
Shared enumerations for database models.

Python enums mapped to database enums ensure that only valid
values can be stored.
"""

import enum


class AccountType(str, enum.Enum):
    """Kind of money a vendor account holds."""
    CASH = "CASH"
    BANK = "BANK"
    MOBILE_MONEY = "MOBILE_MONEY"
    CREDIT_CARD = "CREDIT_CARD"
    SAVINGS = "SAVINGS"
    INVESTMENT = "INVESTMENT"
    OTHER = "OTHER"


class Direction(str, enum.Enum):
    """Direction of a ledger entry. CREDIT adds, DEBIT subtracts."""
    CREDIT = "CREDIT"
    DEBIT = "DEBIT"


class TransactionCategory(str, enum.Enum):
    """Descriptive tag on an entry. Has no effect on the arithmetic."""
    SALE = "SALE"
    PURCHASE = "PURCHASE"
    EXPENSE = "EXPENSE"
    TRANSFER = "TRANSFER"
    REFUND = "REFUND"
    SALARY = "SALARY"
    LOAN = "LOAN"
    DEPOSIT = "DEPOSIT"
    WITHDRAWAL = "WITHDRAWAL"
    OTHER = "OTHER"
