"""Split normalized errors between field displays and the summary."""

from collections.abc import Iterable

from grid_dialogs.core.models import NormalizedErrors


def _matches(key: str, fields: set[str]) -> bool:
    if key in fields:
        return True
    # Nested keys ("address.city", "items[0]") render beside their root field
    root = key.split(".", 1)[0].split("[", 1)[0]
    return root in fields


def split_errors(
    errors: NormalizedErrors, fields: Iterable[str]
) -> tuple[NormalizedErrors, NormalizedErrors]:
    """Split errors into ``(field_errors, summary_errors)``.

    Keys naming a known field (or nested under one) are field errors;
    everything else, including the form-level key, goes to the summary.
    """
    known = set(fields)
    field_errors: NormalizedErrors = {}
    summary_errors: NormalizedErrors = {}
    for key, message in errors.items():
        if _matches(key, known):
            field_errors[key] = message
        else:
            summary_errors[key] = message
    return field_errors, summary_errors
