"""Validation error normalizer.

Collapses the error values of any supported validation library into
one ``field -> message`` mapping. Normalization never raises and never
returns an empty mapping: when nothing recognizable is found, the
result is a single form-level entry.
"""

import json
from collections.abc import Callable, Mapping
from typing import Any

from grid_dialogs.core.errors import FormInvalid
from grid_dialogs.core.models import FORM_ERROR_KEY, NormalizedErrors
from grid_dialogs.logs import get_logger
from grid_dialogs.normalize.detect import (
    ErrorArchetype,
    detect_archetype,
    get_member,
    is_structured,
    top_level_message,
)
from grid_dialogs.normalize.extractors import (
    extract_field_messages,
    extract_joi,
    extract_yup,
    extract_zod,
)

logger = get_logger(__name__)

DEFAULT_FALLBACK_MESSAGE = "Validation failed"

Extractor = Callable[[Any, str], NormalizedErrors]

_EXTRACTORS: dict[ErrorArchetype, Extractor] = {
    ErrorArchetype.ZOD: extract_zod,
    ErrorArchetype.YUP: extract_yup,
    ErrorArchetype.JOI: extract_joi,
    ErrorArchetype.FIELD_MESSAGE: extract_field_messages,
}


class ErrorNormalizer:
    """Normalizes validation error values into NormalizedErrors."""

    def __init__(
        self,
        error_key: str = FORM_ERROR_KEY,
        fallback_message: str = DEFAULT_FALLBACK_MESSAGE,
    ) -> None:
        """Initialize the normalizer.

        Args:
            error_key: Sentinel key for form-level errors.
            fallback_message: Message used when the value carries none.
        """
        self.error_key = error_key
        self.fallback_message = fallback_message

    def normalize(self, error: Any) -> NormalizedErrors:
        """Normalize an error value.

        Args:
            error: A mapping, exception or attribute-bearing object in any
                of the Zod, Yup, Joi or nested field-message shapes, or a
                plain message string.

        Returns:
            Non-empty mapping of dot-path field name to message string.
        """
        if isinstance(error, str):
            return {self.error_key: error or self.fallback_message}

        archetype: ErrorArchetype | None = None
        try:
            archetype = detect_archetype(error)
            result = _EXTRACTORS[archetype](error, self.error_key)
        except Exception:
            # A misbehaving error object (e.g. a raising property or
            # format()) must not break error display
            logger.warning(
                "error_extraction_failed",
                archetype=archetype.value if archetype is not None else None,
                exc_info=True,
            )
            result = {}

        if not result:
            result = {self.error_key: self._top_level_message(error)}

        logger.debug(
            "errors_normalized",
            archetype=archetype.value if archetype is not None else None,
            fields=sorted(result),
        )
        return result

    def _top_level_message(self, error: Any) -> str:
        try:
            message = top_level_message(error)
        except Exception:
            logger.warning("error_message_unreadable", exc_info=True)
            message = None
        return message or self.fallback_message


_default_normalizer = ErrorNormalizer()


def normalize_errors(error: Any) -> NormalizedErrors:
    """Normalize an error value with the default settings."""
    return _default_normalizer.normalize(error)


def extract_error_message(error: Any) -> str:
    """Return one human-readable message for any error value.

    Args:
        error: Any error value.

    Returns:
        A message string; empty for falsy values.
    """
    if error is None or error == "":
        return ""
    if isinstance(error, str):
        return error
    if isinstance(error, BaseException) and not is_structured_error(error):
        return top_level_message(error) or "An error occurred"

    if is_structured(error):
        error_type = get_member(error, "type")
        if isinstance(error_type, str) and get_member(error, "ref") is not None:
            message = get_member(error, "message")
            return message if isinstance(message, str) else f"Field validation failed: {error_type}"

        message = get_member(error, "message")
        if isinstance(message, str) and message:
            return message

        for collection in ("issues", "inner", "details"):
            entries = get_member(error, collection)
            if isinstance(entries, list) and entries:
                first = get_member(entries[0], "message")
                return str(first) if first else DEFAULT_FALLBACK_MESSAGE

    if isinstance(error, BaseException):
        return top_level_message(error) or "An error occurred"

    try:
        return json.dumps(error, default=str)
    except (TypeError, ValueError):
        return "An unknown error occurred"


def is_structured_error(error: BaseException) -> bool:
    """Whether an exception carries archetype-shaped error data."""
    return any(
        get_member(error, name) is not None for name in ("issues", "inner", "details", "errors")
    )


def first_error_message(error: Any) -> str | None:
    """Return the first normalized message, or None for falsy values."""
    if not error:
        return None
    return next(iter(normalize_errors(error).values()), None)


def get_field_error(error: Any, field: str) -> str | None:
    """Return the normalized message for one field, if any."""
    if not error:
        return None
    return normalize_errors(error).get(field)


def create_validation_error(field_errors: Mapping[str, str]) -> FormInvalid:
    """Build an error the normalizer maps back to ``field_errors``."""
    return FormInvalid(dict(field_errors))
