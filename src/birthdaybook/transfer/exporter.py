"""Flatten characters into portable spreadsheet rows."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable

from birthdaybook.models import EXPORT_COLUMNS, Character
from birthdaybook.transfer import codec


def to_export_rows(characters: Iterable[Character]) -> list[dict[str, str]]:
    """Rows without id and image, keyed by the import column names."""
    return [c.to_row() for c in characters]


def export_file(characters: Iterable[Character], path: Path) -> int:
    """Write characters to ``path``. Nothing is written when there are none."""
    rows = to_export_rows(characters)
    if not rows:
        return 0
    return codec.write_rows(path, rows, EXPORT_COLUMNS)
