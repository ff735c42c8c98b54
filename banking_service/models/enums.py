"""
Shared enumerations for database models.

Mapped to a database enum with a CHECK constraint, so an
unknown transaction type is rejected by the database as well
as by Python.
"""

import enum


class TransactionType(str, enum.Enum):
    """Kind of ledger operation. Closed set."""
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
