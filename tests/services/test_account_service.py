"""
Tests for the vendor account lifecycle.
"""

import uuid
from decimal import Decimal

import pytest
from pydantic import ValidationError

from pharmacy_ledger.exceptions import (
    AccountReferencedError,
    NonZeroBalanceError,
    NotFoundError,
)
from pharmacy_ledger.models.enums import (
    AccountType,
    Direction,
    TransactionCategory,
)
from pharmacy_ledger.schemas.account import AccountCreate, AccountUpdate
from pharmacy_ledger.services.account_service import AccountService


@pytest.fixture
def service(db_session):
    return AccountService(db_session)


class TestCreateAccount:

    def test_starts_at_zero_without_entries(self, service, make_account):
        account = make_account()

        assert account.balance == Decimal("0.00")
        assert account.currency == "NGN"
        assert account.is_active is True
        assert service.count_entries(account.id) == 0

    def test_opening_balance_posted_as_deposit(self, service, make_account):
        account = make_account(balance="1000.00")

        page = service.history(account.id)
        assert page.total == 1
        opening = page.entries[0]
        assert opening.direction == Direction.CREDIT
        assert opening.category == TransactionCategory.DEPOSIT
        assert opening.amount == Decimal("1000.00")
        assert opening.balance_after == Decimal("1000.00")
        assert opening.description == "Opening balance"
        assert service.get_balance(account.id) == Decimal("1000.00")

    def test_explicit_currency(self, service, uow, vendor_id):
        account = service.create_account(uow, AccountCreate(
            vendor_id=vendor_id,
            account_name="Dollar account",
            account_type=AccountType.BANK,
            currency="USD",
        ))

        assert account.currency == "USD"
        assert account.account_type == AccountType.BANK

    def test_negative_opening_balance_rejected(self, vendor_id):
        with pytest.raises(ValidationError):
            AccountCreate(
                vendor_id=vendor_id,
                account_name="Till",
                account_type=AccountType.CASH,
                opening_balance=Decimal("-1.00"),
            )


class TestListAccounts:

    def test_filters_by_vendor_and_status(
        self, service, uow, make_account
    ):
        active = make_account(name="Till")
        inactive = make_account(name="Old till", is_active=False)
        service.create_account(uow, AccountCreate(
            vendor_id=uuid.uuid4(),
            account_name="Someone else's",
            account_type=AccountType.CASH,
        ))

        mine = service.list_accounts(vendor_id=active.vendor_id)
        assert {a.id for a in mine} == {active.id, inactive.id}

        only_active = service.list_accounts(
            vendor_id=active.vendor_id, is_active=True
        )
        assert [a.id for a in only_active] == [active.id]

        assert len(service.list_accounts()) == 3

    def test_newest_first(self, service, make_account):
        first = make_account(name="First")
        second = make_account(name="Second")

        assert [a.id for a in service.list_accounts()] == [second.id, first.id]


class TestUpdateAccount:

    def test_changes_descriptive_fields(self, service, uow, make_account):
        account = make_account(name="Till", balance="50.00")

        updated = service.update_account(uow, account.id, AccountUpdate(
            account_name="Front till",
            account_type=AccountType.MOBILE_MONEY,
            is_active=False,
        ))

        assert updated.account_name == "Front till"
        assert updated.account_type == AccountType.MOBILE_MONEY
        assert updated.is_active is False
        assert updated.balance == Decimal("50.00")

    def test_unset_fields_left_alone(self, service, uow, make_account):
        account = make_account(name="Till")

        updated = service.update_account(
            uow, account.id, AccountUpdate(is_active=False)
        )

        assert updated.account_name == "Till"
        assert updated.account_type == AccountType.CASH

    def test_balance_cannot_be_updated(self):
        with pytest.raises(ValidationError):
            AccountUpdate(balance=Decimal("1000000.00"))

    def test_missing_account(self, service, uow):
        with pytest.raises(NotFoundError):
            service.update_account(
                uow, uuid.uuid4(), AccountUpdate(account_name="Ghost")
            )


class TestRemoveAccount:

    def test_unused_account_removed(self, service, uow, make_account):
        account = make_account()

        service.remove_account(uow, account.id)

        with pytest.raises(NotFoundError):
            service.get_account(account.id)

    def test_account_with_money_kept(self, service, uow, make_account):
        account = make_account(balance="10.00")

        with pytest.raises(NonZeroBalanceError) as exc_info:
            service.remove_account(uow, account.id)

        assert exc_info.value.balance == Decimal("10.00")
        assert service.get_account(account.id).balance == Decimal("10.00")

    def test_account_with_history_kept(self, service, uow, make_account):
        account = make_account(balance="10.00")
        service.apply_transaction(
            uow, account.id, Direction.DEBIT, Decimal("10.00")
        )

        with pytest.raises(AccountReferencedError) as exc_info:
            service.remove_account(uow, account.id)

        assert exc_info.value.entry_count == 2
        assert service.get_account(account.id) is not None


class TestVendorTotal:

    def test_sums_active_accounts_only(self, service, uow, make_account):
        till = make_account(name="Till", balance="150.25")
        make_account(name="Bank", balance="849.75")
        make_account(name="Closed", balance="500.00", is_active=False)

        assert service.get_vendor_total_balance(till.vendor_id) == Decimal("1000.00")

    def test_vendor_without_accounts(self, service):
        assert service.get_vendor_total_balance(uuid.uuid4()) == Decimal("0.00")
