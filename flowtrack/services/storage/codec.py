"""
Transaction list codec shared by every storage adapter.

The persisted form is a JSON array with one object per transaction.
Absent optional fields are omitted rather than written as null, so a
record without notes and a record with notes="" stay distinguishable.
Dates are ISO calendar dates and amounts are decimal strings.
"""

import json
from typing import Any

from pydantic import TypeAdapter, ValidationError

from flowtrack.models.transaction import Transaction
from flowtrack.services.storage.interface import CorruptDataError


TRANSACTION_LIST_ADAPTER = TypeAdapter(list[Transaction])


def dump_transactions(transactions: list[Transaction]) -> list[dict[str, Any]]:
    """Convert transactions to JSON-compatible dicts."""
    return [tx.model_dump(mode="json", exclude_none=True) for tx in transactions]


def parse_transactions(raw: Any) -> list[Transaction]:
    """
    Rebuild transactions from their JSON-compatible form.

    Raises:
        CorruptDataError: If the data is not a list of valid records
    """
    if not isinstance(raw, list):
        raise CorruptDataError(
            f"Expected a list of transactions, got {type(raw).__name__}"
        )
    try:
        return TRANSACTION_LIST_ADAPTER.validate_python(raw)
    except ValidationError as e:
        raise CorruptDataError(
            f"Stored transactions failed validation ({e.error_count()} errors): {e}"
        ) from e


def encode_transactions(transactions: list[Transaction]) -> str:
    """Serialize transactions to a JSON string."""
    return json.dumps(dump_transactions(transactions), ensure_ascii=False)


def decode_transactions(payload: str) -> list[Transaction]:
    """
    Deserialize transactions from a JSON string.

    Raises:
        CorruptDataError: If the payload is not valid JSON or not a valid list
    """
    try:
        raw = json.loads(payload)
    except json.JSONDecodeError as e:
        raise CorruptDataError(f"Stored transactions are not valid JSON: {e}") from e
    return parse_transactions(raw)
