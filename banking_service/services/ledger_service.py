"""
Ledger service: the core of the banking service.

This service enforces the fundamental rules:
1. Amounts are strictly positive, in whole cents
2. A balance never goes below zero
3. Every balance change is explained by exactly one transaction
   record, committed in the same database transaction
4. Transaction records are immutable (append-only)

No other code writes balances or transaction records.
All financial operations go through this service.
"""

import logging
import uuid
from contextlib import contextmanager
from datetime import datetime, timedelta
from decimal import Decimal, InvalidOperation

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from banking_service.config import Settings
from banking_service.exceptions import (
    LedgerError,
    InvalidAmount,
    AccountNotFound,
    InsufficientFunds,
    TransactionNotFound,
    StorageFailure,
)
from banking_service.models.account import Account
from banking_service.models.enums import TransactionType
from banking_service.models.transaction import Transaction
from banking_service.services.account_store import AccountStore
from banking_service.services.locks import AccountLocks, account_locks
from banking_service.services.transaction_log import TransactionLog

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
# Largest value a Numeric(15, 2) column holds
MAX_AMOUNT = Decimal("9999999999999.99")


class LedgerService:
    """
    All balance changes pass through this service.

    Unlike the stores, the service owns the unit of work: deposit()
    and withdraw() commit before they return and roll back on any
    failure. A caller never has to commit after them.
    """

    def __init__(
        self,
        db: Session,
        settings: Settings,
        locks: AccountLocks | None = None,
    ):
        self.db = db
        self.settings = settings
        self.locks = locks or account_locks
        self.accounts = AccountStore(db)
        self.transactions = TransactionLog(db)

    # --- Writes ---

    def deposit(
        self, user_id: str, amount: Decimal, description: str
    ) -> Transaction:
        """
        Credit a user's account, opening it on first deposit.

        Raises InvalidAmount before touching storage, and
        StorageFailure if the unit of work could not be committed.
        """
        amount = self._validate_amount(amount)

        with self.locks.hold(user_id), self._guard("deposit", user_id):
            account = self.accounts.get_or_create(user_id, for_update=True)
            return self._post(
                account, TransactionType.DEPOSIT, amount, description
            )

    def withdraw(
        self, user_id: str, amount: Decimal, description: str
    ) -> Transaction:
        """
        Debit a user's account.

        Never opens an account: a user who has never deposited gets
        AccountNotFound. A withdrawal larger than the balance gets
        InsufficientFunds and writes nothing.
        """
        amount = self._validate_amount(amount)

        with self.locks.hold(user_id), self._guard("withdrawal", user_id):
            account = self.accounts.get_by_owner(user_id, for_update=True)
            if not account:
                raise AccountNotFound(user_id)

            if account.balance < amount:
                raise InsufficientFunds(
                    requested=amount, available=account.balance
                )

            return self._post(
                account, TransactionType.WITHDRAWAL, amount, description
            )

    # --- Reads ---

    def get_account(self, user_id: str) -> Account:
        with self._guard("account lookup", user_id):
            account = self.accounts.get_by_owner(user_id)
        if not account:
            raise AccountNotFound(user_id)
        return account

    def get_balance(self, user_id: str) -> Decimal:
        return self.get_account(user_id).balance

    def list_transactions(
        self,
        user_id: str,
        limit: int | None = None,
        offset: int | None = None,
    ) -> list[Transaction]:
        """Return a page of the user's history, most recent first."""
        limit, offset = self.page_bounds(limit, offset)
        with self._guard("transaction listing", user_id):
            return self.transactions.list_by_user(user_id, limit, offset)

    def count_transactions(self, user_id: str) -> int:
        with self._guard("transaction count", user_id):
            return self.transactions.count_by_user(user_id)

    def get_transaction(self, transaction_id: uuid.UUID) -> Transaction:
        """
        Get a transaction by id.

        This does not check who owns the transaction. Callers
        serving a user must compare transaction.user_id themselves.
        """
        with self._guard("transaction lookup", transaction_id):
            txn = self.transactions.get_by_id(transaction_id)
        if not txn:
            raise TransactionNotFound(transaction_id)
        return txn

    # --- Admin reads ---

    def list_accounts(self) -> list[Account]:
        with self._guard("account listing", "admin"):
            return self.accounts.get_all()

    def list_all_transactions(
        self, limit: int | None = None, offset: int | None = None
    ) -> list[Transaction]:
        limit, offset = self.page_bounds(
            limit, offset, self.settings.ADMIN_TRANSACTIONS_DEFAULT_LIMIT
        )
        with self._guard("transaction listing", "admin"):
            return self.transactions.list_all(limit, offset)

    def list_account_transactions(
        self,
        account_id: uuid.UUID,
        limit: int | None = None,
        offset: int | None = None,
    ) -> list[Transaction]:
        limit, offset = self.page_bounds(
            limit, offset, self.settings.ADMIN_TRANSACTIONS_DEFAULT_LIMIT
        )
        with self._guard("transaction listing", account_id):
            if not self.accounts.get(account_id):
                raise AccountNotFound(account_id)
            return self.transactions.list_by_account(account_id, limit, offset)

    def page_bounds(
        self,
        limit: int | None,
        offset: int | None,
        default_limit: int | None = None,
    ) -> tuple[int, int]:
        """
        Normalize pagination parameters.

        A missing or non-positive limit falls back to the default,
        and any limit is capped at TRANSACTIONS_MAX_LIMIT. A missing
        or negative offset becomes 0.
        """
        if default_limit is None:
            default_limit = self.settings.TRANSACTIONS_DEFAULT_LIMIT
        if limit is None or limit <= 0:
            limit = default_limit
        limit = min(limit, self.settings.TRANSACTIONS_MAX_LIMIT)
        if offset is None or offset < 0:
            offset = 0
        return limit, offset

    # --- Internals ---

    def _post(
        self,
        account: Account,
        txn_type: TransactionType,
        amount: Decimal,
        description: str,
    ) -> Transaction:
        """
        Record the transaction, move the balance, and commit.

        Must be called with the account's lock held and the row
        read in this session, so balance_before is current.
        """
        owner = account.user_id
        balance_before = account.balance
        if txn_type == TransactionType.DEPOSIT:
            balance_after = balance_before + amount
        else:
            balance_after = balance_before - amount

        created_at = self._next_timestamp(account)

        txn = Transaction(
            id=uuid.uuid4(),
            account_id=account.id,
            user_id=owner,
            type=txn_type,
            amount=amount,
            balance_before=balance_before,
            balance_after=balance_after,
            description=description,
            created_at=created_at,
        )
        self.transactions.append(txn)
        self.accounts.update_balance(
            account.id, balance_after, updated_at=created_at
        )
        self.db.commit()

        logger.info(
            "%s of %s for user %s: balance %s -> %s",
            txn_type.value, amount, owner,
            balance_before, balance_after,
        )
        return txn

    @staticmethod
    def _next_timestamp(account: Account) -> datetime:
        # History is ordered by created_at alone, so a new record is
        # always stamped after the account's previous change.
        now = datetime.utcnow()
        if account.updated_at and now <= account.updated_at:
            now = account.updated_at + timedelta(microseconds=1)
        return now

    @staticmethod
    def _validate_amount(amount) -> Decimal:
        """Return the amount in whole cents, or raise InvalidAmount."""
        try:
            value = Decimal(str(amount))
            if not value.is_finite() or value <= 0 or value > MAX_AMOUNT:
                raise InvalidAmount(amount)
            # Fractions of a cent are refused, never rounded
            if value != value.quantize(CENT):
                raise InvalidAmount(amount)
        except InvalidOperation as e:
            raise InvalidAmount(amount) from e
        return value.quantize(CENT)

    @contextmanager
    def _guard(self, operation: str, subject):
        """
        Roll back on any failure and wrap database errors.

        Business rejections (LedgerError) pass through unchanged.
        Anything raised by SQLAlchemy becomes StorageFailure.
        """
        try:
            yield
        except LedgerError as e:
            self.db.rollback()
            logger.warning("%s rejected for %s: %s", operation, subject, e)
            raise
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception("%s failed for %s", operation, subject)
            raise StorageFailure(f"Failed to process {operation}", e) from e
