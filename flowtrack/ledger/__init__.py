"""Transaction ledger package."""

from flowtrack.ledger.store import LedgerStore, generate_transaction_id

__all__ = ["LedgerStore", "generate_transaction_id"]
