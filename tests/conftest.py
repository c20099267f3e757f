"""
Shared fixtures.

Every test runs in its own temporary working directory with the storage
path pointed inside it, so no test can touch a real ledger or pick up a
developer's .env file.
"""

import os
import time
from datetime import date
from decimal import Decimal
from pathlib import Path

import pytest

from flowtrack.config import AppSettings, get_settings
from flowtrack.ledger import LedgerStore
from flowtrack.models.transaction import TransactionDraft, TransactionType
from flowtrack.services.storage import InMemoryStorage
from flowtrack.validation import TransactionValidator


@pytest.fixture(autouse=True)
def _isolate_settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("FLOWTRACK_STORAGE_PATH", str(tmp_path / "storage.json"))
    monkeypatch.delenv("FLOWTRACK_STORAGE_BACKEND", raising=False)
    monkeypatch.delenv("FLOWTRACK_STORAGE_KEY", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def app_settings() -> AppSettings:
    return AppSettings()


@pytest.fixture
def validator(app_settings: AppSettings) -> TransactionValidator:
    return TransactionValidator(app_settings)


@pytest.fixture
def memory_storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture
def store(memory_storage: InMemoryStorage, validator: TransactionValidator) -> LedgerStore:
    """A ledger over in-memory storage. Tests must await store.load() first."""
    return LedgerStore(memory_storage, validator=validator)


@pytest.fixture
def stock_in_draft() -> TransactionDraft:
    return TransactionDraft(
        type=TransactionType.STOCK_IN,
        name="Acme",
        item="Widget",
        quantity=10,
        date=date(2024, 1, 5),
    )


@pytest.fixture
def expense_draft() -> TransactionDraft:
    return TransactionDraft(
        type=TransactionType.EXPENSE,
        name="Rent",
        amount=Decimal("500.00"),
        date=date(2024, 1, 6),
    )


@pytest.fixture
def local_timezone():
    """Pin the process time zone. Call the returned setter with a TZ name."""
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset is not available on this platform")
    original = os.environ.get("TZ")

    def _set(name: str) -> None:
        os.environ["TZ"] = name
        time.tzset()

    yield _set
    if original is None:
        os.environ.pop("TZ", None)
    else:
        os.environ["TZ"] = original
    time.tzset()
