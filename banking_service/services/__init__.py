"""Business logic services."""

from banking_service.services.account_store import AccountStore
from banking_service.services.transaction_log import TransactionLog
from banking_service.services.ledger_service import LedgerService

__all__ = ["AccountStore", "TransactionLog", "LedgerService"]
