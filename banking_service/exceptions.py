"""
Ledger error taxonomy.

Services raise these; the API layer maps each one to an HTTP
status and a machine-readable error code. Nothing in here knows
about HTTP.
"""

from decimal import Decimal


class LedgerError(Exception):
    """Base class for every error raised by the ledger services."""


class InvalidAmount(LedgerError):
    """Amount is zero or negative. Raised before any storage access."""

    def __init__(self, amount):
        self.amount = amount
        super().__init__(f"Amount must be greater than zero, got {amount}")


class AccountNotFound(LedgerError):

    def __init__(self, key):
        self.key = key
        super().__init__(f"Account for {key} not found")


class InsufficientFunds(LedgerError):
    """Withdrawal exceeds the current balance. Nothing was written."""

    def __init__(self, requested: Decimal, available: Decimal):
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient funds: requested={requested}, "
            f"available={available}"
        )


class TransactionNotFound(LedgerError):

    def __init__(self, transaction_id):
        self.transaction_id = transaction_id
        super().__init__(f"Transaction {transaction_id} not found")


class AccountConflict(LedgerError):
    """
    Another writer created the owner's account first.

    Only raised by AccountStore.create(); get_or_create() absorbs
    it by re-fetching, so callers of the ledger never see it.
    """

    def __init__(self, user_id: str):
        self.user_id = user_id
        super().__init__(f"Account for user {user_id} already exists")


class StorageFailure(LedgerError):
    """
    A persistence step failed and the unit of work was rolled back.

    The original database error is kept on `cause` (and as
    __cause__ via `raise ... from`).
    """

    def __init__(self, message: str, cause: Exception | None = None):
        self.cause = cause
        super().__init__(message)
