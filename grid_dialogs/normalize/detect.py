"""Structural detection of validation error archetypes.

Detection is duck-typed: it looks at the shape of the value (mapping
keys or object attributes), never at class identity, so errors raised
by any validation library or wrapper are classified the same way.
"""

from collections.abc import Mapping
from enum import Enum
from typing import Any

_MISSING = object()


class ErrorArchetype(str, Enum):
    """Structural families of validation error values."""

    ZOD = "zod"  # issues: [{path: [...], message}]
    YUP = "yup"  # inner: [{path: "a.b", message}]
    JOI = "joi"  # details: [{path: [...], message}]
    FIELD_MESSAGE = "field_message"  # nested field -> message | {message}


def is_structured(value: Any) -> bool:
    """Whether a value can carry error fields (not a scalar or string)."""
    if value is None or isinstance(value, (str, bytes, int, float, bool)):
        return False
    return True


def get_member(value: Any, name: str, default: Any = None) -> Any:
    """Read a mapping key or an object attribute."""
    if isinstance(value, Mapping):
        return value.get(name, default)
    if isinstance(value, (str, bytes)):
        return default
    return getattr(value, name, default)


def has_member(value: Any, name: str) -> bool:
    """Whether a mapping key or object attribute exists."""
    return get_member(value, name, _MISSING) is not _MISSING


def _is_issue_list(value: Any) -> bool:
    if not isinstance(value, list) or not value:
        return False
    return all(is_structured(entry) and has_member(entry, "path") for entry in value)


def is_zod_like(value: Any) -> bool:
    """ZodLike: an ``issues`` list, a wrapped ``zodError``, an issue-shaped
    ``errors`` list, or a ``format()`` method."""
    if not is_structured(value):
        return False
    if isinstance(get_member(value, "issues"), list):
        return True
    if has_member(value, "zodError") or has_member(value, "zod_error"):
        return True
    if _is_issue_list(get_member(value, "errors")):
        return True
    return callable(get_member(value, "format"))


def is_yup_like(value: Any) -> bool:
    """YupLike: an ``inner`` list of path/message entries."""
    return is_structured(value) and isinstance(get_member(value, "inner"), list)


def is_joi_like(value: Any) -> bool:
    """JoiLike: a ``details`` list of path-array/message entries."""
    return is_structured(value) and isinstance(get_member(value, "details"), list)


def detect_archetype(value: Any) -> ErrorArchetype:
    """Classify an error value, first match wins: Zod, Yup, Joi, generic.

    Args:
        value: Anything raised or returned as a validation error.

    Returns:
        The detected ErrorArchetype.
    """
    if is_zod_like(value):
        return ErrorArchetype.ZOD
    if is_yup_like(value):
        return ErrorArchetype.YUP
    if is_joi_like(value):
        return ErrorArchetype.JOI
    return ErrorArchetype.FIELD_MESSAGE


def top_level_message(value: Any) -> str | None:
    """Return the top-level message of an error value, if it has one."""
    if isinstance(value, str):
        return value or None
    if isinstance(value, BaseException):
        message = getattr(value, "message", None)
        if isinstance(message, str) and message:
            return message
        text = str(value)
        return text or None
    message = get_member(value, "message") if is_structured(value) else None
    if message is None or message == "":
        return None
    return str(message)
