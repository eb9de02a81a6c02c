"""Identity helpers for active records.

Records are never mutated in place; every helper that changes a
payload returns a new dict.
"""

from collections.abc import Mapping
from typing import Any

IDENTITY_KEYS = ("id", "_id")


def read_field(record: Any, key: str) -> Any:
    """Read a key from a mapping or an attribute from an object."""
    if record is None:
        return None
    if isinstance(record, Mapping):
        return record.get(key)
    return getattr(record, key, None)


def extract_record_id(record: Any) -> Any:
    """Return the record identity, checking ``id`` then ``_id``.

    Args:
        record: A record mapping or object, or a bare id value.

    Returns:
        The first non-null identity value, or None.
    """
    if isinstance(record, (str, int)) and not isinstance(record, bool):
        return record
    for key in IDENTITY_KEYS:
        value = read_field(record, key)
        if value is not None:
            return value
    return None


def as_dict(record: Any) -> dict[str, Any]:
    """Return a shallow dict copy of a record."""
    if record is None:
        return {}
    if isinstance(record, Mapping):
        return dict(record)
    if hasattr(record, "model_dump"):
        return record.model_dump()
    return dict(vars(record))


def with_identity(payload: Any, record: Any) -> Any:
    """Inject the record's ``id`` into the payload when it is absent.

    Non-mapping payloads are returned untouched.
    """
    if not isinstance(payload, Mapping):
        return payload
    if payload.get("id") is not None:
        return payload
    record_id = read_field(record, "id")
    if record_id is None:
        return payload
    return {**payload, "id": record_id}


def merge_record(record: Any, payload: Any) -> Any:
    """Overlay the form payload on a copy of the record."""
    if not isinstance(payload, Mapping) or record is None:
        return payload
    return {**as_dict(record), **payload}
