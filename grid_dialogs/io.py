"""Reading raw error values and writing normalized errors as JSON/JSONL."""

import json
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import Any

from grid_dialogs.core.models import ErrorValue, NormalizedErrors


def read_json(path: Path | str) -> Any:
    """Read one JSON document (an error value, form values or a schema).

    Raises:
        ValueError: If the file is not valid JSON.
    """
    with open(path, encoding="utf-8") as f:
        try:
            return json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in {path}: {e}") from e


def read_error_values(path: Path | str) -> Iterator[ErrorValue]:
    """Yield the raw error values of a JSONL batch, one per non-blank line.

    Raises:
        ValueError: On the first line that is not valid JSON.
    """
    with open(path, encoding="utf-8") as f:
        for line_num, line in enumerate(f, 1):
            if not line.strip():
                continue
            try:
                yield json.loads(line)
            except json.JSONDecodeError as e:
                raise ValueError(f"Invalid error value on line {line_num} of {path}: {e}") from e


def write_normalized_errors(path: Path | str, results: Iterable[NormalizedErrors]) -> int:
    """Write one normalized error map per line; returns the number written."""
    count = 0
    with open(path, "w", encoding="utf-8") as f:
        for errors in results:
            f.write(json.dumps(errors, ensure_ascii=False, sort_keys=True) + "\n")
            count += 1
    return count
