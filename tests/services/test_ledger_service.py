"""
Comprehensive tests for the LedgerService.
"""

import uuid
from decimal import Decimal

import pytest
from sqlalchemy.exc import OperationalError

from banking_service.config import get_settings
from banking_service.exceptions import (
    InvalidAmount,
    AccountNotFound,
    InsufficientFunds,
    TransactionNotFound,
    StorageFailure,
)
from banking_service.models.enums import TransactionType
from banking_service.services.account_store import AccountStore
from banking_service.services.ledger_service import LedgerService
from banking_service.services.transaction_log import TransactionLog


def disk_error(*args, **kwargs):
    raise OperationalError("UPDATE accounts", {}, Exception("disk I/O error"))


# --- Deposit Tests ---

class TestDeposit:

    def test_first_deposit_opens_account(self, db_session):
        service = LedgerService(db_session, get_settings())

        txn = service.deposit("alice", Decimal("100.00"), "salary")

        assert txn.type == TransactionType.DEPOSIT
        assert txn.amount == Decimal("100.00")
        assert txn.balance_before == Decimal("0.00")
        assert txn.balance_after == Decimal("100.00")
        assert txn.user_id == "alice"
        assert service.get_balance("alice") == Decimal("100.00")
        assert len(service.list_accounts()) == 1

    def test_deposit_links_transaction_to_account(self, db_session):
        service = LedgerService(db_session, get_settings())
        txn = service.deposit("alice", Decimal("5.00"), "coins")

        account = service.get_account("alice")
        assert txn.account_id == account.id
        assert account.updated_at == txn.created_at

    def test_deposits_accumulate(self, db_session):
        service = LedgerService(db_session, get_settings())
        service.deposit("alice", Decimal("0.10"), "a")
        service.deposit("alice", Decimal("0.20"), "b")

        # 0.1 + 0.2 is exactly 0.3 in decimal arithmetic
        assert service.get_balance("alice") == Decimal("0.30")

    @pytest.mark.parametrize("amount", [Decimal("10.005"), Decimal("0.005")])
    def test_fraction_of_a_cent_is_rejected(self, db_session, amount):
        service = LedgerService(db_session, get_settings())

        with pytest.raises(InvalidAmount):
            service.deposit("alice", amount, "sub-cent")

        assert service.list_accounts() == []

    def test_trailing_zeros_are_whole_cents(self, db_session):
        service = LedgerService(db_session, get_settings())
        txn = service.deposit("alice", Decimal("10.500"), "padded")

        assert txn.amount == Decimal("10.50")

    def test_float_amount_is_converted_exactly(self, db_session):
        service = LedgerService(db_session, get_settings())
        txn = service.deposit("alice", 19.99, "float input")

        assert txn.amount == Decimal("19.99")

    def test_largest_column_value_is_accepted(self, db_session):
        service = LedgerService(db_session, get_settings())
        txn = service.deposit("alice", Decimal("9999999999999.99"), "max")

        assert txn.amount == Decimal("9999999999999.99")

    @pytest.mark.parametrize("amount", [
        Decimal("0"), Decimal("-5.00"), Decimal("0.001"), "NaN", "abc",
        "Infinity", Decimal("10000000000000.00"), Decimal("1e30"),
    ])
    def test_invalid_amount_rejected_without_side_effects(
        self, db_session, amount
    ):
        service = LedgerService(db_session, get_settings())

        with pytest.raises(InvalidAmount):
            service.deposit("alice", amount, "bad")

        assert service.list_accounts() == []
        assert service.count_transactions("alice") == 0


# --- Withdrawal Tests ---

class TestWithdrawal:

    def test_withdrawal_succeeds(self, db_session):
        service = LedgerService(db_session, get_settings())
        service.deposit("alice", Decimal("100.00"), "salary")

        txn = service.withdraw("alice", Decimal("30.00"), "atm")

        assert txn.type == TransactionType.WITHDRAWAL
        assert txn.balance_before == Decimal("100.00")
        assert txn.balance_after == Decimal("70.00")
        assert service.get_balance("alice") == Decimal("70.00")

    def test_withdraw_entire_balance(self, db_session):
        service = LedgerService(db_session, get_settings())
        service.deposit("alice", Decimal("25.00"), "in")

        service.withdraw("alice", Decimal("25.00"), "out")

        assert service.get_balance("alice") == Decimal("0.00")

    def test_withdrawal_without_account_rejected(self, db_session):
        service = LedgerService(db_session, get_settings())

        with pytest.raises(AccountNotFound):
            service.withdraw("alice", Decimal("10.00"), "atm")

        # Withdrawal never opens an account
        assert service.list_accounts() == []

    def test_insufficient_funds_rejected(self, db_session):
        service = LedgerService(db_session, get_settings())
        service.deposit("alice", Decimal("70.00"), "in")

        with pytest.raises(InsufficientFunds) as exc_info:
            service.withdraw("alice", Decimal("1000.00"), "x")

        assert exc_info.value.requested == Decimal("1000.00")
        assert exc_info.value.available == Decimal("70.00")
        assert service.get_balance("alice") == Decimal("70.00")
        assert service.count_transactions("alice") == 1

    @pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-1.00")])
    def test_invalid_amount_rejected(self, db_session, amount):
        service = LedgerService(db_session, get_settings())
        service.deposit("alice", Decimal("50.00"), "in")

        with pytest.raises(InvalidAmount):
            service.withdraw("alice", amount, "bad")

        assert service.get_balance("alice") == Decimal("50.00")
        assert service.count_transactions("alice") == 1


# --- End-to-end scenarios ---

class TestScenarios:

    def test_salary_atm_and_overdraft(self, db_session):
        service = LedgerService(db_session, get_settings())

        dep = service.deposit("alice", Decimal("100.00"), "salary")
        assert (dep.balance_before, dep.balance_after) == (
            Decimal("0.00"), Decimal("100.00")
        )

        wd = service.withdraw("alice", Decimal("30.00"), "atm")
        assert (wd.balance_before, wd.balance_after) == (
            Decimal("100.00"), Decimal("70.00")
        )

        with pytest.raises(InsufficientFunds) as exc_info:
            service.withdraw("alice", Decimal("1000.00"), "x")
        assert exc_info.value.requested == Decimal("1000.00")
        assert exc_info.value.available == Decimal("70.00")

        assert service.get_balance("alice") == Decimal("70.00")
        assert service.count_transactions("alice") == 2

    def test_withdraw_before_deposit_then_deposit(self, db_session):
        service = LedgerService(db_session, get_settings())

        with pytest.raises(AccountNotFound):
            service.withdraw("bob", Decimal("5.00"), "too early")

        service.deposit("bob", Decimal("5.00"), "first")

        assert service.get_balance("bob") == Decimal("5.00")
        assert service.count_transactions("bob") == 1

    def test_balance_conservation_and_chain(self, db_session):
        service = LedgerService(db_session, get_settings())
        operations = [
            ("deposit", "120.00"), ("withdraw", "20.50"),
            ("deposit", "0.75"), ("withdraw", "100.25"),
            ("deposit", "33.33"), ("withdraw", "1000.00"),
            ("withdraw", "34.00"),
        ]

        expected = Decimal("0.00")
        accepted = 0
        for kind, value in operations:
            amount = Decimal(value)
            try:
                if kind == "deposit":
                    service.deposit("alice", amount, kind)
                    expected += amount
                else:
                    service.withdraw("alice", amount, kind)
                    expected -= amount
                accepted += 1
            except InsufficientFunds:
                pass
            assert service.get_balance("alice") >= 0

        assert service.get_balance("alice") == expected
        assert service.count_transactions("alice") == accepted

        history = service.list_transactions("alice")
        stamps = [t.created_at for t in history]
        assert stamps == sorted(stamps, reverse=True)

        chronological = list(reversed(history))
        assert chronological[0].balance_before == Decimal("0.00")
        for earlier, later in zip(chronological, chronological[1:]):
            assert earlier.balance_after == later.balance_before
        assert chronological[-1].balance_after == expected


# --- Unit of work ---

class TestAtomicity:

    def test_failed_balance_update_leaves_no_record(
        self, db_session, monkeypatch
    ):
        service = LedgerService(db_session, get_settings())
        service.deposit("alice", Decimal("100.00"), "in")

        monkeypatch.setattr(AccountStore, "update_balance", disk_error)

        with pytest.raises(StorageFailure) as exc_info:
            service.deposit("alice", Decimal("50.00"), "lost?")
        assert isinstance(exc_info.value.cause, OperationalError)

        monkeypatch.undo()
        assert service.get_balance("alice") == Decimal("100.00")
        assert service.count_transactions("alice") == 1

    def test_failed_append_leaves_balance_unchanged(
        self, db_session, monkeypatch
    ):
        service = LedgerService(db_session, get_settings())
        service.deposit("alice", Decimal("100.00"), "in")

        monkeypatch.setattr(TransactionLog, "append", disk_error)

        with pytest.raises(StorageFailure):
            service.withdraw("alice", Decimal("40.00"), "atm")

        monkeypatch.undo()
        assert service.get_balance("alice") == Decimal("100.00")
        assert service.count_transactions("alice") == 1

    def test_failed_commit_is_reported(self, db_session, monkeypatch):
        service = LedgerService(db_session, get_settings())
        service.deposit("alice", Decimal("100.00"), "in")

        monkeypatch.setattr(db_session, "commit", disk_error)

        with pytest.raises(StorageFailure):
            service.withdraw("alice", Decimal("40.00"), "atm")

        monkeypatch.undo()
        assert service.get_balance("alice") == Decimal("100.00")
        assert service.count_transactions("alice") == 1

    def test_failed_first_deposit_leaves_no_account(
        self, db_session, monkeypatch
    ):
        service = LedgerService(db_session, get_settings())
        monkeypatch.setattr(TransactionLog, "append", disk_error)

        with pytest.raises(StorageFailure):
            service.deposit("alice", Decimal("10.00"), "in")

        monkeypatch.undo()
        with pytest.raises(AccountNotFound):
            service.get_balance("alice")


# --- Reads ---

class TestReads:

    def test_get_balance_without_account(self, db_session):
        with pytest.raises(AccountNotFound):
            LedgerService(db_session, get_settings()).get_balance("nobody")

    def test_get_transaction(self, db_session):
        service = LedgerService(db_session, get_settings())
        txn = service.deposit("alice", Decimal("10.00"), "in")

        found = service.get_transaction(txn.id)
        assert found.id == txn.id
        assert found.description == "in"

    def test_get_transaction_missing(self, db_session):
        with pytest.raises(TransactionNotFound):
            service = LedgerService(db_session, get_settings())
            service.get_transaction(uuid.uuid4())

    def test_get_transaction_does_not_check_owner(self, db_session):
        service = LedgerService(db_session, get_settings())
        txn = service.deposit("alice", Decimal("10.00"), "in")

        # Any caller can read it here; ownership is an API concern
        assert service.get_transaction(txn.id).user_id == "alice"

    def test_history_is_per_user(self, db_session):
        service = LedgerService(db_session, get_settings())
        service.deposit("alice", Decimal("10.00"), "a1")
        service.deposit("bob", Decimal("20.00"), "b1")
        service.deposit("alice", Decimal("30.00"), "a2")

        history = service.list_transactions("alice")
        assert [t.description for t in history] == ["a2", "a1"]

    def test_history_pagination(self, db_session):
        service = LedgerService(db_session, get_settings())
        for i in range(5):
            service.deposit("alice", Decimal("1.00"), f"d{i}")

        page = service.list_transactions("alice", limit=2, offset=1)
        assert [t.description for t in page] == ["d3", "d2"]

    def test_list_account_transactions(self, db_session):
        service = LedgerService(db_session, get_settings())
        service.deposit("alice", Decimal("10.00"), "a1")
        service.deposit("bob", Decimal("20.00"), "b1")
        account = service.get_account("bob")

        records = service.list_account_transactions(account.id)
        assert [t.description for t in records] == ["b1"]

    def test_list_account_transactions_unknown_account(self, db_session):
        with pytest.raises(AccountNotFound):
            service = LedgerService(db_session, get_settings())
            service.list_account_transactions(uuid.uuid4())

    def test_list_all_transactions(self, db_session):
        service = LedgerService(db_session, get_settings())
        service.deposit("alice", Decimal("10.00"), "a1")
        service.deposit("bob", Decimal("20.00"), "b1")

        records = service.list_all_transactions()
        assert [t.description for t in records] == ["b1", "a1"]


class TestPageBounds:

    @pytest.mark.parametrize("limit, offset, expected", [
        (None, None, (50, 0)),
        (0, 0, (50, 0)),
        (-3, -1, (50, 0)),
        (10, 5, (10, 5)),
        (200, 0, (200, 0)),
        (5000, 0, (200, 0)),
    ])
    def test_user_defaults_and_cap(self, db_session, limit, offset, expected):
        service = LedgerService(db_session, get_settings())
        assert service.page_bounds(limit, offset) == expected

    def test_admin_default(self, db_session):
        service = LedgerService(db_session, get_settings())
        assert service.page_bounds(None, None, 100) == (100, 0)
