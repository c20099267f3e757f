"""Tests for LedgerStore against in-memory storage."""

import itertools
import pytest
from datetime import date
from decimal import Decimal

from flowtrack.ledger import LedgerStore
from flowtrack.models.transaction import (
    ExpenseTransaction,
    StockInTransaction,
    TransactionDraft,
    TransactionType,
)
from flowtrack.services.storage import (
    InMemoryStorage,
    LocalFileStorage,
    StorageWriteError,
)
from flowtrack.validation import TransactionValidationError


class FailingStorage(InMemoryStorage):
    """In-memory storage whose writes can be switched off."""

    def __init__(self):
        super().__init__()
        self.fail_writes = False

    async def save_all(self, transactions):
        if self.fail_writes:
            raise StorageWriteError("quota exceeded")
        await super().save_all(transactions)

    async def clear(self):
        if self.fail_writes:
            raise StorageWriteError("quota exceeded")
        await super().clear()


def _draft(tx_type: TransactionType, name: str = "Someone", **fields) -> TransactionDraft:
    if tx_type.is_stock:
        fields.setdefault("item", "Widget")
        fields.setdefault("quantity", 1)
    else:
        fields.setdefault("amount", Decimal("1.00"))
    fields.setdefault("date", date(2024, 1, 1))
    return TransactionDraft(type=tx_type, name=name, **fields)


async def _reloaded(storage, validator) -> LedgerStore:
    fresh = LedgerStore(storage, validator=validator)
    await fresh.load()
    return fresh


class TestExampleScenario:
    """The walk-through from the ledger's documentation."""

    @pytest.mark.asyncio
    async def test_scenario(self, store, stock_in_draft, expense_draft):
        await store.load()

        stock = await store.add(stock_in_draft)
        (only,) = store.list_all()
        assert only == stock
        assert isinstance(stock, StockInTransaction)
        assert (stock.name, stock.item, stock.quantity) == ("Acme", "Widget", 10)
        assert stock.date == date(2024, 1, 5)
        assert stock.id

        expense = await store.add(expense_draft)
        assert [tx.id for tx in store.list_all()] == [expense.id, stock.id]
        assert isinstance(expense, ExpenseTransaction)
        assert expense.amount == Decimal("500.00")

        assert store.list_by_type("expense") == [expense]

        assert await store.delete(stock.id) is True
        assert store.list_all() == [expense]


class TestAdd:
    """Tests for LedgerStore.add."""

    @pytest.mark.asyncio
    async def test_new_record_is_first(self, store):
        await store.load()
        for tx_type in TransactionType:
            created = await store.add(_draft(tx_type))
            assert store.list_all()[0] == created

    @pytest.mark.asyncio
    async def test_optional_fields_preserved(self, store):
        await store.load()
        with_empty = await store.add(_draft(TransactionType.STOCK_OUT, notes=""))
        without = await store.add(_draft(TransactionType.INCOME))
        with_text = await store.add(_draft(TransactionType.EXPENSE, notes="paid in cash"))

        assert with_empty.notes == ""
        assert without.notes is None
        assert with_text.notes == "paid in cash"

    @pytest.mark.asyncio
    async def test_order_is_by_insertion_not_date(self, store):
        await store.load()
        older = await store.add(_draft(TransactionType.INCOME, date=date(2020, 1, 1)))
        newer = await store.add(_draft(TransactionType.INCOME, date=date(2024, 1, 1)))
        backdated = await store.add(_draft(TransactionType.INCOME, date=date(2019, 1, 1)))
        assert [tx.id for tx in store.list_all()] == [backdated.id, newer.id, older.id]

    @pytest.mark.asyncio
    async def test_add_persists_full_list(self, store, memory_storage, validator):
        await store.load()
        await store.add(_draft(TransactionType.STOCK_IN))
        await store.add(_draft(TransactionType.EXPENSE))
        assert memory_storage.save_count == 2

        fresh = await _reloaded(memory_storage, validator)
        assert fresh.list_all() == store.list_all()

    @pytest.mark.asyncio
    async def test_invalid_draft_leaves_store_untouched(self, store, memory_storage):
        await store.load()
        existing = await store.add(_draft(TransactionType.INCOME))

        with pytest.raises(TransactionValidationError) as exc_info:
            await store.add(_draft(TransactionType.EXPENSE, name=""))

        assert exc_info.value.result.error_fields == ["name"]
        assert store.list_all() == [existing]
        assert memory_storage.save_count == 1

    @pytest.mark.asyncio
    async def test_missing_category_fields_rejected(self, store):
        await store.load()
        draft = TransactionDraft(type=TransactionType.STOCK_IN, name="Acme", date=date(2024, 1, 1))
        with pytest.raises(TransactionValidationError):
            await store.add(draft)
        assert store.list_all() == []

    @pytest.mark.asyncio
    async def test_generated_ids_are_unique(self, store):
        await store.load()
        for _ in range(20):
            await store.add(_draft(TransactionType.INCOME))
        ids = [tx.id for tx in store.list_all()]
        assert len(set(ids)) == 20

    @pytest.mark.asyncio
    async def test_id_collision_regenerates(self, memory_storage, validator):
        ids = iter(["a", "a", "b"])
        store = LedgerStore(memory_storage, validator=validator, id_factory=lambda: next(ids))
        await store.load()
        first = await store.add(_draft(TransactionType.INCOME))
        second = await store.add(_draft(TransactionType.INCOME))
        assert (first.id, second.id) == ("a", "b")

    @pytest.mark.asyncio
    async def test_id_factory_exhausted(self, memory_storage, validator):
        store = LedgerStore(memory_storage, validator=validator, id_factory=lambda: "same")
        await store.load()
        await store.add(_draft(TransactionType.INCOME))
        with pytest.raises(RuntimeError):
            await store.add(_draft(TransactionType.INCOME))
        assert len(store) == 1


class TestDelete:
    """Tests for LedgerStore.delete."""

    @pytest.mark.asyncio
    async def test_delete_removes_record(self, store):
        await store.load()
        keep = await store.add(_draft(TransactionType.STOCK_IN))
        gone = await store.add(_draft(TransactionType.STOCK_OUT))

        assert await store.delete(gone.id) is True
        assert gone.id not in store
        assert store.list_all() == [keep]

    @pytest.mark.asyncio
    async def test_delete_unknown_id_is_noop(self, store, memory_storage):
        await store.load()
        await store.add(_draft(TransactionType.INCOME))
        before = store.list_all()
        saves = memory_storage.save_count

        assert await store.delete("does-not-exist") is False
        assert store.list_all() == before
        assert memory_storage.save_count == saves

    @pytest.mark.asyncio
    async def test_delete_last_clears_storage(self, store, memory_storage, validator):
        await store.load()
        only = await store.add(_draft(TransactionType.EXPENSE))

        await store.delete(only.id)

        assert memory_storage.key not in memory_storage.items
        fresh = await _reloaded(memory_storage, validator)
        assert fresh.list_all() == []

    @pytest.mark.asyncio
    async def test_delete_last_removes_file(self, tmp_path, validator):
        path = tmp_path / "ledger.json"
        storage = LocalFileStorage(path=path, key="tx")
        store = LedgerStore(storage, validator=validator)
        await store.load()
        only = await store.add(_draft(TransactionType.STOCK_IN))
        assert path.exists()

        await store.delete(only.id)

        assert not path.exists()
        assert (await _reloaded(storage, validator)).list_all() == []


class TestListing:
    """Tests for list_all and list_by_type."""

    @pytest.mark.asyncio
    async def test_all_filter_equals_list_all(self, store):
        await store.load()
        assert store.list_by_type("all") == store.list_all() == []
        await store.add(_draft(TransactionType.INCOME))
        await store.add(_draft(TransactionType.STOCK_IN))
        assert store.list_by_type("all") == store.list_all()

    @pytest.mark.asyncio
    async def test_type_filter_preserves_order(self, store):
        await store.load()
        types = itertools.islice(itertools.cycle(list(TransactionType)), 10)
        for i, tx_type in enumerate(types):
            await store.add(_draft(tx_type, name=f"entry {i}"))

        everything = store.list_all()
        for tx_type in TransactionType:
            filtered = store.list_by_type(tx_type)
            assert filtered
            assert all(tx.type == tx_type for tx in filtered)
            assert filtered == [tx for tx in everything if tx.type == tx_type]
            assert store.list_by_type(tx_type.value) == filtered

    @pytest.mark.asyncio
    async def test_unknown_filter_raises(self, store):
        await store.load()
        with pytest.raises(ValueError):
            store.list_by_type("transfers")

    @pytest.mark.asyncio
    async def test_list_all_returns_copy(self, store):
        await store.load()
        await store.add(_draft(TransactionType.INCOME))
        listing = store.list_all()
        listing.clear()
        assert len(store.list_all()) == 1

    @pytest.mark.asyncio
    async def test_get_and_counts(self, store):
        await store.load()
        stock = await store.add(_draft(TransactionType.STOCK_IN))
        await store.add(_draft(TransactionType.STOCK_IN))
        await store.add(_draft(TransactionType.EXPENSE))

        assert store.get(stock.id) == stock
        assert store.get("missing") is None
        assert store.count_by_type() == {
            TransactionType.STOCK_IN: 2,
            TransactionType.STOCK_OUT: 0,
            TransactionType.INCOME: 0,
            TransactionType.EXPENSE: 1,
        }


class TestLoad:
    """Tests for LedgerStore.load."""

    @pytest.mark.asyncio
    async def test_first_run_is_empty(self, store):
        assert await store.load() == []

    @pytest.mark.asyncio
    async def test_round_trip(self, store, memory_storage, validator):
        await store.load()
        await store.add(_draft(TransactionType.STOCK_IN, notes="", date=date(2024, 3, 1)))
        await store.add(_draft(TransactionType.INCOME, amount=Decimal("19.99")))
        await store.add(_draft(TransactionType.STOCK_OUT, quantity=7))
        await store.add(_draft(TransactionType.EXPENSE, notes="fuel"))

        fresh = await _reloaded(memory_storage, validator)
        before, after = store.list_all(), fresh.list_all()
        assert after == before
        for old, new in zip(before, after):
            assert new.date == old.date
            assert (new.notes is None) == (old.notes is None)
            assert isinstance(new.date, date)

    @pytest.mark.asyncio
    async def test_corrupt_storage_gives_empty_store(self, validator):
        storage = InMemoryStorage(items={"flowtrack-transactions": "[{broken"})
        store = LedgerStore(storage, validator=validator)
        assert await store.load() == []

        # The store is still usable and the next write replaces the bad data
        created = await store.add(_draft(TransactionType.INCOME))
        assert (await _reloaded(storage, validator)).list_all() == [created]

    @pytest.mark.asyncio
    async def test_corrupt_file_gives_empty_store(self, tmp_path, validator):
        path = tmp_path / "ledger.json"
        path.write_text("definitely not json", encoding="utf-8")
        store = LedgerStore(LocalFileStorage(path=path, key="tx"), validator=validator)
        assert await store.load() == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("content", [b"\xff\xfe", b'{"tx": "\xff\xfe"}'])
    async def test_undecodable_file_gives_empty_store(self, tmp_path, validator, content):
        path = tmp_path / "ledger.json"
        path.write_bytes(content)
        storage = LocalFileStorage(path=path, key="tx")
        store = LedgerStore(storage, validator=validator)
        assert await store.load() == []

        created = await store.add(_draft(TransactionType.INCOME))
        assert store.has_unsaved_changes is False
        assert (await _reloaded(storage, validator)).list_all() == [created]

    @pytest.mark.asyncio
    async def test_duplicate_ids_keep_first(self, validator):
        storage = InMemoryStorage(items={"flowtrack-transactions": (
            '[{"id": "1", "type": "income", "name": "first", "amount": "1", "date": "2024-01-01"},'
            ' {"id": "1", "type": "expense", "name": "second", "amount": "2", "date": "2024-01-02"}]'
        )})
        store = LedgerStore(storage, validator=validator)
        (only,) = await store.load()
        assert only.name == "first"

    @pytest.mark.asyncio
    async def test_legacy_records_load(self, validator, local_timezone):
        local_timezone("UTC")
        storage = InMemoryStorage(items={"flowtrack-transactions": (
            '[{"id": "1704450600000", "type": "stock-out", "name": "Shop", "item": "Widget",'
            ' "quantity": 3, "notes": "", "date": "2024-01-05T10:30:00.000Z"}]'
        )})
        store = LedgerStore(storage, validator=validator)
        (tx,) = await store.load()
        assert tx.id == "1704450600000"
        assert tx.date == date(2024, 1, 5)


class TestWriteFailures:
    """A failed write keeps memory ahead of disk and says so."""

    @pytest.mark.asyncio
    async def test_add_survives_write_failure(self, validator):
        storage = FailingStorage()
        store = LedgerStore(storage, validator=validator)
        await store.load()

        storage.fail_writes = True
        created = await store.add(_draft(TransactionType.INCOME))

        assert store.list_all() == [created]
        assert store.has_unsaved_changes is True
        assert await storage.load() is None

    @pytest.mark.asyncio
    async def test_next_successful_write_catches_up(self, validator):
        storage = FailingStorage()
        store = LedgerStore(storage, validator=validator)
        await store.load()

        storage.fail_writes = True
        first = await store.add(_draft(TransactionType.INCOME))
        storage.fail_writes = False
        second = await store.add(_draft(TransactionType.EXPENSE))

        assert store.has_unsaved_changes is False
        assert (await _reloaded(storage, validator)).list_all() == [second, first]

    @pytest.mark.asyncio
    async def test_delete_survives_clear_failure(self, validator):
        storage = FailingStorage()
        store = LedgerStore(storage, validator=validator)
        await store.load()
        only = await store.add(_draft(TransactionType.INCOME))

        storage.fail_writes = True
        assert await store.delete(only.id) is True
        assert store.list_all() == []
        assert store.has_unsaved_changes is True
