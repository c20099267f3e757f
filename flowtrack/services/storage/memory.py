"""
In-Memory Storage Implementation

Keeps the same keyed-collection contract as LocalFileStorage but holds
serialized strings in a dict. Values are stored encoded, so a reload
goes through the same codec as a real restart.
"""

from typing import Optional

from flowtrack.models.transaction import Transaction
from flowtrack.services.storage.codec import decode_transactions, encode_transactions
from flowtrack.services.storage.interface import LedgerStorageInterface


DEFAULT_KEY = "flowtrack-transactions"


class InMemoryStorage(LedgerStorageInterface):
    """Dict-backed ledger storage for tests and throwaway sessions."""

    def __init__(
        self,
        key: str = DEFAULT_KEY,
        items: Optional[dict[str, str]] = None,
    ):
        """
        Args:
            key: Key the ledger is stored under
            items: Pre-existing raw entries, e.g. to simulate a corrupt store
        """
        self._key = key
        self.items: dict[str, str] = dict(items) if items else {}
        self.save_count = 0

    @property
    def key(self) -> str:
        return self._key

    async def load(self) -> Optional[list[Transaction]]:
        payload = self.items.get(self._key)
        if payload is None:
            return None
        return decode_transactions(payload)

    async def save_all(self, transactions: list[Transaction]) -> None:
        self.items[self._key] = encode_transactions(transactions)
        self.save_count += 1

    async def clear(self) -> None:
        self.items.pop(self._key, None)
