"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for ledger persistence.
This allows us to:
1. Keep the ledger on a local JSON file today
2. Use in-memory storage for testing
3. Keep ledger logic decoupled from where bytes end up

The interface is intentionally tiny. The ledger always hands over the
complete list; adapters never see partial updates.
"""

from abc import ABC, abstractmethod
from typing import Optional

from flowtrack.models.transaction import Transaction


class LedgerStorageInterface(ABC):
    """
    Abstract interface for ledger persistence.

    Any storage implementation (local file, in-memory, etc.)
    must implement these methods.
    """

    @abstractmethod
    async def load(self) -> Optional[list[Transaction]]:
        """
        Read the persisted transaction list.

        Returns:
            The stored list in persisted order, or None if nothing
            has been stored yet

        Raises:
            StorageReadError: If the storage cannot be read
            CorruptDataError: If the stored data cannot be decoded
        """
        pass

    @abstractmethod
    async def save_all(self, transactions: list[Transaction]) -> None:
        """
        Replace the persisted list with the given one.

        Args:
            transactions: The complete ordered list to persist

        Raises:
            StorageWriteError: If the write fails
        """
        pass

    @abstractmethod
    async def clear(self) -> None:
        """
        Remove the persisted entry entirely.

        Clearing storage that holds nothing is a no-op.

        Raises:
            StorageWriteError: If the removal fails
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class StorageReadError(StorageError):
    """Persisted data could not be read."""
    pass


class CorruptDataError(StorageReadError):
    """Persisted data was read but could not be decoded."""
    pass


class StorageWriteError(StorageError):
    """Persisted data could not be written (e.g. disk full, read-only)."""
    pass
