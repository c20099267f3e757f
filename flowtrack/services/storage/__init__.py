"""
Storage Services Package

Provides the abstract ledger storage interface and concrete implementations.
Currently implements a local JSON file as the backend, plus an in-memory
store for tests.
"""

from flowtrack.services.storage.interface import (
    CorruptDataError,
    LedgerStorageInterface,
    StorageError,
    StorageReadError,
    StorageWriteError,
)
from flowtrack.services.storage.codec import (
    decode_transactions,
    dump_transactions,
    encode_transactions,
    parse_transactions,
)
from flowtrack.services.storage.local_file import LocalFileStorage
from flowtrack.services.storage.memory import InMemoryStorage

__all__ = [
    # Interfaces
    "LedgerStorageInterface",
    # Exceptions
    "CorruptDataError",
    "StorageError",
    "StorageReadError",
    "StorageWriteError",
    # Codec
    "decode_transactions",
    "dump_transactions",
    "encode_transactions",
    "parse_transactions",
    # Implementations
    "InMemoryStorage",
    "LocalFileStorage",
]
