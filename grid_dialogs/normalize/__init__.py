"""Validation error normalization.

Collapses Zod-, Yup-, Joi-shaped and nested field-message error values
into one flat ``field -> message`` mapping.
"""

from grid_dialogs.normalize.detect import (
    ErrorArchetype,
    detect_archetype,
    is_joi_like,
    is_yup_like,
    is_zod_like,
)
from grid_dialogs.normalize.extractors import path_to_key
from grid_dialogs.normalize.normalizer import (
    DEFAULT_FALLBACK_MESSAGE,
    ErrorNormalizer,
    create_validation_error,
    extract_error_message,
    first_error_message,
    get_field_error,
    normalize_errors,
)

__all__ = [
    # Detection
    "ErrorArchetype",
    "detect_archetype",
    "is_joi_like",
    "is_yup_like",
    "is_zod_like",
    # Normalization
    "DEFAULT_FALLBACK_MESSAGE",
    "ErrorNormalizer",
    "normalize_errors",
    "path_to_key",
    # Helpers
    "create_validation_error",
    "extract_error_message",
    "first_error_message",
    "get_field_error",
]
