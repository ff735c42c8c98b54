"""
Database models package.

All models must be imported here so that Alembic can discover
them through Base.metadata when generating migrations.
"""

from banking_service.models.base import Base
from banking_service.models.enums import TransactionType
from banking_service.models.account import Account
from banking_service.models.transaction import Transaction

__all__ = [
    "Base",
    "TransactionType",
    "Account",
    "Transaction",
]
