"""
Services Package

Infrastructure the ledger depends on. FlowTrack has no network services;
the only service is local persistence.
"""

from flowtrack.services.storage import (
    CorruptDataError,
    InMemoryStorage,
    LedgerStorageInterface,
    LocalFileStorage,
    StorageError,
    StorageReadError,
    StorageWriteError,
)

__all__ = [
    "CorruptDataError",
    "InMemoryStorage",
    "LedgerStorageInterface",
    "LocalFileStorage",
    "StorageError",
    "StorageReadError",
    "StorageWriteError",
]
