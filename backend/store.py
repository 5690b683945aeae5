"""In-memory transaction dataset shared by all requests."""

import threading
from typing import Iterable, List, Optional

from models import Transaction


class TransactionStore:
    """
    Owns the demo dataset.

    Reads return copies so callers never observe a half-applied prepend.
    The list is kept most-recent-first: generated data arrives sorted and
    uploaded batches are sorted before being placed in front.
    """

    def __init__(self, transactions: Optional[Iterable[Transaction]] = None):
        self._lock = threading.Lock()
        self._transactions: List[Transaction] = list(transactions or [])

    def __len__(self) -> int:
        with self._lock:
            return len(self._transactions)

    def all(self) -> List[Transaction]:
        """Snapshot of every transaction in current order."""
        with self._lock:
            return list(self._transactions)

    def head(self, limit: int) -> List[Transaction]:
        """The first ``limit`` transactions in current order."""
        with self._lock:
            return self._transactions[:limit]

    def replace(self, transactions: Iterable[Transaction]) -> None:
        """Swap in a freshly generated dataset."""
        new_data = sorted(transactions, key=lambda t: t.date, reverse=True)
        with self._lock:
            self._transactions = new_data

    def prepend(self, transactions: Iterable[Transaction]) -> int:
        """
        Place a batch in front of the existing data.

        Returns:
            Dataset size after the prepend.
        """
        batch = sorted(transactions, key=lambda t: t.date, reverse=True)
        with self._lock:
            self._transactions = batch + self._transactions
            return len(self._transactions)
