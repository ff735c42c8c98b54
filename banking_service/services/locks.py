"""
Per-account mutual exclusion.

Request handlers run concurrently on the server threadpool.
Two deposits for the same user must not both read the same
balance and overwrite each other's result, so the ledger holds
the owner's lock across read -> compute -> write -> commit.

This covers one process. Across processes the row lock taken
by SELECT ... FOR UPDATE does the same job on PostgreSQL.
"""

import threading
from contextlib import contextmanager


class _Entry:
    __slots__ = ("lock", "holders")

    def __init__(self):
        self.lock = threading.Lock()
        self.holders = 0


class AccountLocks:
    """
    A registry of one lock per account owner.

    An entry lives only while some thread holds or waits on it,
    so the registry stays as small as the number of owners with
    an operation in flight.
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: dict[str, _Entry] = {}

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)

    def _acquire_entry(self, user_id: str) -> _Entry:
        with self._guard:
            entry = self._locks.get(user_id)
            if entry is None:
                entry = _Entry()
                self._locks[user_id] = entry
            entry.holders += 1
            return entry

    def _release_entry(self, user_id: str, entry: _Entry) -> None:
        with self._guard:
            entry.holders -= 1
            if entry.holders == 0:
                del self._locks[user_id]

    @contextmanager
    def hold(self, user_id: str):
        entry = self._acquire_entry(user_id)
        try:
            with entry.lock:
                yield
        finally:
            self._release_entry(user_id, entry)


# Shared by every LedgerService in this process
account_locks = AccountLocks()
