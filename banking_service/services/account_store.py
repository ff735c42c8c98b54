"""
Account store: keyed storage of one account per user.

The store flushes but never commits. The LedgerService owns the
unit of work and decides when the balance change is committed
together with its transaction record.
"""

import logging
import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from banking_service.exceptions import AccountConflict, AccountNotFound
from banking_service.models.account import Account

logger = logging.getLogger(__name__)


class AccountStore:

    def __init__(self, db: Session):
        self.db = db

    def get_by_owner(
        self, user_id: str, for_update: bool = False
    ) -> Account | None:
        """
        Return the user's account, or None if they have none yet.

        With for_update=True the row is locked until the session
        commits or rolls back (PostgreSQL; SQLite ignores it), and
        the balance is re-read even if the session already holds
        the object.
        """
        query = select(Account).where(Account.user_id == user_id)
        if for_update:
            query = query.with_for_update().execution_options(
                populate_existing=True
            )
        return self.db.execute(query).scalar_one_or_none()

    def get(self, account_id: uuid.UUID) -> Account | None:
        return self.db.get(Account, account_id)

    def create(self, user_id: str) -> Account:
        """
        Create an empty account for a user.

        The unique constraint on user_id decides who wins when two
        requests create the same user's account at once. The loser
        gets AccountConflict; its session has been rolled back, so
        this must be the first write of the unit of work.
        """
        account = Account(user_id=user_id, balance=Decimal("0.00"))
        self.db.add(account)
        try:
            self.db.flush()
        except IntegrityError as e:
            self.db.rollback()
            raise AccountConflict(user_id) from e

        logger.info("Created account %s for user %s", account.id, user_id)
        return account

    def get_or_create(self, user_id: str, for_update: bool = False) -> Account:
        """Fetch the user's account, creating it on first use."""
        account = self.get_by_owner(user_id, for_update=for_update)
        if account:
            return account

        try:
            return self.create(user_id)
        except AccountConflict:
            logger.info(
                "Account for user %s was created concurrently, re-fetching",
                user_id,
            )

        account = self.get_by_owner(user_id, for_update=for_update)
        if not account:
            raise AccountNotFound(user_id)
        return account

    def update_balance(
        self,
        account_id: uuid.UUID,
        new_balance: Decimal,
        updated_at: datetime | None = None,
    ) -> None:
        """
        Overwrite the stored balance.

        No arithmetic happens here: the caller computed new_balance
        from a balance it read while holding the account's lock.
        """
        result = self.db.execute(
            update(Account)
            .where(Account.id == account_id)
            .values(
                balance=new_balance,
                updated_at=updated_at or datetime.utcnow(),
            )
        )
        if result.rowcount == 0:
            raise AccountNotFound(account_id)

    def get_all(self) -> list[Account]:
        """Return every account, oldest first."""
        accounts = self.db.execute(
            select(Account).order_by(Account.created_at, Account.id)
        ).scalars().all()
        return list(accounts)
