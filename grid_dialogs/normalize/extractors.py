"""Per-archetype extractors producing field -> message mappings.

Each extractor returns a possibly empty dict; the normalizer applies
the form-level fallback when nothing could be extracted.
"""

from collections.abc import Mapping, Sequence
from typing import Any

from grid_dialogs.core.models import NormalizedErrors
from grid_dialogs.normalize.detect import get_member, is_structured

INVALID_VALUE = "Invalid value"


def _as_message(message: Any) -> str:
    if message is None or message == "":
        return INVALID_VALUE
    return message if isinstance(message, str) else str(message)


def path_to_key(path: Any) -> str:
    """Join path segments into a field key.

    String segments are joined with dots, integer segments after the
    first are rendered as ``[n]``: ``["items", 0, "name"]`` becomes
    ``items[0].name``.
    """
    if path is None:
        return ""
    if isinstance(path, str):
        return path
    if not isinstance(path, Sequence):
        return str(path)

    key = ""
    for index, segment in enumerate(path):
        if index == 0:
            key = str(segment)
        elif isinstance(segment, int) and not isinstance(segment, bool):
            key = f"{key}[{segment}]"
        else:
            key = f"{key}.{segment}"
    return key


def _zod_issues(error: Any) -> list[Any]:
    issues = get_member(error, "issues")
    if isinstance(issues, list):
        return issues
    errors = get_member(error, "errors")
    if isinstance(errors, list):
        return errors
    for wrapper in ("zodError", "zod_error"):
        nested = get_member(error, wrapper)
        if is_structured(nested) and isinstance(get_member(nested, "issues"), list):
            return get_member(nested, "issues")
    return []


def _walk_formatted(node: Mapping, parent: str, error_key: str, result: NormalizedErrors) -> None:
    for key, value in node.items():
        path = f"{parent}.{key}" if parent else str(key)
        if key == "_errors" and isinstance(value, list) and value:
            result[parent or error_key] = _as_message(value[0])
        elif isinstance(value, Mapping):
            _walk_formatted(value, parent if key == "_errors" else path, error_key, result)


def extract_zod(error: Any, error_key: str) -> NormalizedErrors:
    """Extract ZodLike ``issues`` (or a ``format()`` tree)."""
    result: NormalizedErrors = {}

    for issue in _zod_issues(error):
        if not is_structured(issue):
            continue
        key = path_to_key(get_member(issue, "path") or [])
        result[key or error_key] = _as_message(get_member(issue, "message"))

    formatter = get_member(error, "format")
    if not result and callable(formatter):
        formatted = formatter()
        if isinstance(formatted, Mapping):
            _walk_formatted(formatted, "", error_key, result)

    return result


def extract_yup(error: Any, error_key: str) -> NormalizedErrors:
    """Extract YupLike ``inner`` entries; entries without a path are skipped."""
    result: NormalizedErrors = {}
    for entry in get_member(error, "inner") or []:
        if not is_structured(entry):
            continue
        path = get_member(entry, "path")
        if path:
            result[path_to_key(path)] = _as_message(get_member(entry, "message"))
    return result


def extract_joi(error: Any, error_key: str) -> NormalizedErrors:
    """Extract JoiLike ``details``; an empty path is a form-level error."""
    result: NormalizedErrors = {}
    for detail in get_member(error, "details") or []:
        if not is_structured(detail):
            continue
        path = get_member(detail, "path") or []
        if isinstance(path, str):
            key = path
        else:
            key = ".".join(str(segment) for segment in path)
        result[key or error_key] = _as_message(get_member(detail, "message"))
    return result


class _FieldMessageWalker:
    """Recursive walk over nested field -> message structures."""

    def __init__(self, error_key: str) -> None:
        self.error_key = error_key
        self.result: NormalizedErrors = {}
        self._seen: set[int] = set()

    def walk(self, node: Any, path: str = "") -> None:
        if id(node) in self._seen:
            return
        if isinstance(node, Mapping):
            self._seen.add(id(node))
            self._walk_mapping(node, path)
        elif isinstance(node, list):
            self._seen.add(id(node))
            for index, item in enumerate(node):
                self._walk_value(item, f"{path}[{index}]" if path else f"[{index}]")

    def _walk_mapping(self, node: Mapping, path: str) -> None:
        message = node.get("message")
        if isinstance(message, str) and isinstance(node.get("type"), str):
            # Field error shape {type, message}
            self.result[path or self.error_key] = message
            return

        for key, value in node.items():
            if key == "errors" and isinstance(value, Mapping):
                self.walk(value, path)
                continue
            current = f"{path}.{key}" if path else str(key)
            self._walk_value(value, current)

    def _walk_value(self, value: Any, current: str) -> None:
        if isinstance(value, str):
            if value:
                self.result[current] = value
        elif isinstance(value, Mapping):
            nested_errors = value.get("errors")
            if isinstance(nested_errors, Mapping):
                self.walk(nested_errors, current)
            elif isinstance(value.get("message"), str):
                self.result[current] = value["message"]
            elif value.get("error"):
                error = value["error"]
                self.result[current] = error if isinstance(error, str) else INVALID_VALUE
            else:
                self.walk(value, current)
        elif isinstance(value, list):
            self.walk(value, current)


def extract_field_messages(error: Any, error_key: str) -> NormalizedErrors:
    """Extract generic nested field -> message structures.

    Mappings and lists are walked directly. Exceptions and other objects
    contribute only their ``errors`` attribute; their message is left for
    the form-level fallback.
    """
    walker = _FieldMessageWalker(error_key)
    if isinstance(error, (Mapping, list)):
        walker.walk(error)
    elif is_structured(error):
        nested = get_member(error, "errors")
        if isinstance(nested, (Mapping, list)):
            walker.walk(nested)
    return walker.result
