"""NDJSON read/write module.

Persists pending memos as NDJSON (Newline Delimited JSON): one pydantic model
per line, appended on insert and rewritten when a recipient is drained.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterable, TypeVar

from pydantic import BaseModel, ValidationError

T = TypeVar("T", bound=BaseModel)
logger = logging.getLogger(__name__)


def ndjson_append(path: Path, obj: BaseModel) -> None:
    """Serialize a Pydantic model to JSON and append as one line.

    Creates the file and parent directories if they don't exist.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "a", encoding="utf-8") as f:
        f.write(obj.model_dump_json() + "\n")


def ndjson_write(path: Path, objs: Iterable[BaseModel]) -> None:
    """Replace the file contents with the given models, one per line.

    Writes to a sibling temp file first and renames it over the target.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_name(path.name + ".tmp")
    with open(tmp, "w", encoding="utf-8") as f:
        for obj in objs:
            f.write(obj.model_dump_json() + "\n")
    os.replace(tmp, path)


def ndjson_read(path: Path, model_class: type[T]) -> list[T]:
    """Load every valid model from ``path`` (missing file -> empty list).

    Lines that fail validation, such as a half-written last line after a
    crash, are dropped and reported in one warning.
    """
    if not path.exists():
        return []

    results: list[T] = []
    bad_lines: list[int] = []
    with open(path, "r", encoding="utf-8", errors="replace") as f:
        for lineno, line in enumerate(f, 1):
            if not line.strip():
                continue
            try:
                results.append(model_class.model_validate_json(line))
            except ValidationError:
                bad_lines.append(lineno)
    if bad_lines:
        logger.warning(
            "Dropped %d unreadable %s record(s) from %s (lines %s)",
            len(bad_lines), model_class.__name__, path, ", ".join(map(str, bad_lines[:10])),
        )
    return results
