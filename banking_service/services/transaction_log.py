"""
Transaction log: append-only storage of transaction records.

The log persists what it is given. Ids, balances and
timestamps are filled in by the LedgerService before append();
nothing here generates or validates them.
"""

import uuid

from sqlalchemy import select, func
from sqlalchemy.orm import Session

from banking_service.models.transaction import Transaction


class TransactionLog:

    def __init__(self, db: Session):
        self.db = db

    def append(self, transaction: Transaction) -> Transaction:
        """
        Add a record to the log.

        Flushed immediately so later reads in the same session see
        it; durable once the caller commits.
        """
        self.db.add(transaction)
        self.db.flush()
        return transaction

    def get_by_id(self, transaction_id: uuid.UUID) -> Transaction | None:
        return self.db.get(Transaction, transaction_id)

    def list_by_user(
        self, user_id: str, limit: int, offset: int
    ) -> list[Transaction]:
        """Return a user's transactions, newest first."""
        return self._page(
            select(Transaction).where(Transaction.user_id == user_id),
            limit,
            offset,
        )

    def list_by_account(
        self, account_id: uuid.UUID, limit: int, offset: int
    ) -> list[Transaction]:
        """Return an account's transactions, newest first."""
        return self._page(
            select(Transaction).where(Transaction.account_id == account_id),
            limit,
            offset,
        )

    def list_all(self, limit: int, offset: int) -> list[Transaction]:
        """Return all transactions, newest first. Admin use."""
        return self._page(select(Transaction), limit, offset)

    def count_by_user(self, user_id: str) -> int:
        return self.db.execute(
            select(func.count(Transaction.id)).where(
                Transaction.user_id == user_id
            )
        ).scalar_one()

    def _page(self, query, limit: int, offset: int) -> list[Transaction]:
        transactions = self.db.execute(
            query.order_by(
                Transaction.created_at.desc(), Transaction.id.desc()
            )
            .limit(limit)
            .offset(offset)
        ).scalars().all()
        return list(transactions)
