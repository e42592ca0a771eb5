"""
Tests for transfers between two vendor accounts.

Both legs must commit together or not at all, and every
failure must leave both balances untouched.
"""

import uuid
from decimal import Decimal

import pytest

from pharmacy_ledger.exceptions import (
    InactiveAccountError,
    InsufficientBalanceError,
    InvalidAmountError,
    NotFoundError,
    SameAccountError,
)
from pharmacy_ledger.models.enums import Direction, TransactionCategory
from pharmacy_ledger.services.account_service import AccountService
from pharmacy_ledger.services.transfer_service import TransferCoordinator


@pytest.fixture
def service(db_session):
    return AccountService(db_session)


@pytest.fixture
def coordinator(service):
    return TransferCoordinator(service)


class TestTransfer:

    def test_moves_money_between_accounts(
        self, service, coordinator, uow, make_account
    ):
        till = make_account(name="Till", balance="1000.00")
        bank = make_account(name="Bank", balance="200.00")

        result = coordinator.transfer(uow, till.id, bank.id, Decimal("300.00"))

        assert service.get_balance(till.id) == Decimal("700.00")
        assert service.get_balance(bank.id) == Decimal("500.00")

        source, destination = result.source_entry, result.destination_entry
        assert source.direction == Direction.DEBIT
        assert source.balance_after == Decimal("700.00")
        assert destination.direction == Direction.CREDIT
        assert destination.balance_after == Decimal("500.00")
        assert source.category == TransactionCategory.TRANSFER
        assert destination.category == TransactionCategory.TRANSFER

    def test_entries_point_at_each_other(
        self, coordinator, uow, make_account
    ):
        till = make_account(name="Till", balance="100.00")
        bank = make_account(name="Bank")

        result = coordinator.transfer(uow, till.id, bank.id, Decimal("40.00"))

        assert result.source_entry.extra == {
            "to_account_id": str(bank.id),
            "to_account_name": "Bank",
        }
        assert result.destination_entry.extra == {
            "from_account_id": str(till.id),
            "from_account_name": "Till",
        }

    def test_default_reference_and_description(
        self, coordinator, uow, make_account
    ):
        till = make_account(name="Till", balance="100.00")
        bank = make_account(name="Bank")

        result = coordinator.transfer(uow, till.id, bank.id, Decimal("10.00"))

        source, destination = result.source_entry, result.destination_entry
        assert source.reference.startswith("TRANSFER-")
        assert source.reference[len("TRANSFER-"):].isdigit()
        assert destination.reference == source.reference
        assert source.description == "Transfer from Till to Bank"
        assert destination.description == source.description

    def test_caller_reference_and_description_kept(
        self, coordinator, uow, make_account
    ):
        till = make_account(name="Till", balance="100.00")
        bank = make_account(name="Bank")

        result = coordinator.transfer(
            uow, till.id, bank.id, Decimal("10.00"),
            description="End of day banking", reference="EOD-2024-01-31",
        )

        assert result.source_entry.reference == "EOD-2024-01-31"
        assert result.destination_entry.description == "End of day banking"

    def test_transfer_entire_balance(
        self, service, coordinator, uow, make_account
    ):
        till = make_account(name="Till", balance="250.00")
        bank = make_account(name="Bank")

        coordinator.transfer(uow, till.id, bank.id, Decimal("250.00"))

        assert service.get_balance(till.id) == Decimal("0.00")
        assert service.get_balance(bank.id) == Decimal("250.00")

    def test_back_and_forth_restores_balances(
        self, service, coordinator, uow, make_account
    ):
        till = make_account(name="Till", balance="500.00")
        bank = make_account(name="Bank", balance="80.00")

        coordinator.transfer(uow, till.id, bank.id, Decimal("123.45"))
        coordinator.transfer(uow, bank.id, till.id, Decimal("123.45"))

        assert service.get_balance(till.id) == Decimal("500.00")
        assert service.get_balance(bank.id) == Decimal("80.00")
        # Opening entry plus two transfer legs each
        assert service.count_entries(till.id) == 3
        assert service.count_entries(bank.id) == 3

    def test_both_ledgers_reconcile(
        self, service, coordinator, uow, make_account
    ):
        till = make_account(name="Till", balance="1000.00")
        bank = make_account(name="Bank", balance="200.00")

        coordinator.transfer(uow, till.id, bank.id, Decimal("300.00"))

        assert service.reconcile(till.id).is_balanced is True
        assert service.reconcile(bank.id).is_balanced is True


class TestTransferRejected:

    def _assert_untouched(self, service, accounts):
        for account, balance in accounts:
            assert service.get_balance(account.id) == Decimal(balance)
            assert service.reconcile(account.id).is_balanced is True

    def test_insufficient_balance(
        self, service, coordinator, uow, make_account
    ):
        till = make_account(name="Till", balance="100.00")
        bank = make_account(name="Bank", balance="50.00")

        with pytest.raises(InsufficientBalanceError) as exc_info:
            coordinator.transfer(uow, till.id, bank.id, Decimal("100.01"))

        assert exc_info.value.entity_id == till.id
        self._assert_untouched(service, [(till, "100.00"), (bank, "50.00")])

    def test_same_account(self, service, coordinator, uow, make_account):
        till = make_account(name="Till", balance="100.00")

        with pytest.raises(SameAccountError):
            coordinator.transfer(uow, till.id, till.id, Decimal("10.00"))

        self._assert_untouched(service, [(till, "100.00")])

    @pytest.mark.parametrize("inactive", ["source", "destination"])
    def test_inactive_account(
        self, service, coordinator, uow, make_account, inactive
    ):
        till = make_account(
            name="Till", balance="100.00", is_active=inactive != "source"
        )
        bank = make_account(
            name="Bank", balance="20.00", is_active=inactive != "destination"
        )

        with pytest.raises(InactiveAccountError) as exc_info:
            coordinator.transfer(uow, till.id, bank.id, Decimal("10.00"))

        expected = till if inactive == "source" else bank
        assert exc_info.value.entity_id == expected.id
        self._assert_untouched(service, [(till, "100.00"), (bank, "20.00")])

    def test_missing_destination(self, service, coordinator, uow, make_account):
        till = make_account(name="Till", balance="100.00")

        with pytest.raises(NotFoundError):
            coordinator.transfer(uow, till.id, uuid.uuid4(), Decimal("10.00"))

        self._assert_untouched(service, [(till, "100.00")])

    @pytest.mark.parametrize("amount", ["0", "-10.00"])
    def test_non_positive_amount(
        self, service, coordinator, uow, make_account, amount
    ):
        till = make_account(name="Till", balance="100.00")
        bank = make_account(name="Bank")

        with pytest.raises(InvalidAmountError):
            coordinator.transfer(uow, till.id, bank.id, Decimal(amount))

        self._assert_untouched(service, [(till, "100.00"), (bank, "0.00")])

    def test_amount_checked_before_accounts(self, coordinator, uow):
        # Neither account exists; the amount is still rejected first
        with pytest.raises(InvalidAmountError):
            coordinator.transfer(uow, uuid.uuid4(), uuid.uuid4(), Decimal("0"))
