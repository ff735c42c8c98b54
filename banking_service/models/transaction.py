"""
Transaction model.

An immutable record of one deposit or withdrawal, carrying the
balance before and after it was applied. Records are appended
by the LedgerService and never updated or deleted.

Ordered by created_at, the records of one account form a chain:
each record's balance_after is the next record's balance_before.
"""

import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    String, DateTime, Numeric, ForeignKey, CheckConstraint,
    Enum as SAEnum, Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from banking_service.models.base import Base
from banking_service.models.enums import TransactionType


class Transaction(Base):
    __tablename__ = "transactions"
    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_transactions_amount_positive"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4
    )
    account_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("accounts.id"), nullable=False, index=True
    )
    # Denormalized from the account for per-user history queries
    user_id: Mapped[str] = mapped_column(
        String(64), nullable=False, index=True
    )
    type: Mapped[TransactionType] = mapped_column(
        SAEnum(
            TransactionType,
            name="transaction_type_enum",
            values_callable=lambda e: [member.value for member in e],
            create_constraint=True,
        ),
        nullable=False,
        index=True,
    )
    amount: Mapped[Decimal] = mapped_column(
        Numeric(15, 2), nullable=False
    )
    balance_before: Mapped[Decimal] = mapped_column(
        Numeric(15, 2), nullable=False
    )
    balance_after: Mapped[Decimal] = mapped_column(
        Numeric(15, 2), nullable=False
    )
    description: Mapped[str] = mapped_column(
        String(255), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow, index=True
    )

    account: Mapped["Account"] = relationship(back_populates="transactions")

    def __repr__(self) -> str:
        return (
            f"<Transaction {self.type.value} {self.amount} "
            f"({self.balance_before} -> {self.balance_after})>"
        )
