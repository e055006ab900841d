"""Tabular file codec: .xlsx via openpyxl, .csv via the csv module.

The first row is the header. Rows come back as loosely typed dicts keyed by
header name; cell values are whatever the file holds (str, int, date, None).
"""

from __future__ import annotations

import csv
import logging
from pathlib import Path
from typing import Any, Iterable, Sequence

from openpyxl import Workbook, load_workbook

from birthdaybook.errors import PersistenceFailure, ValidationError

logger = logging.getLogger(__name__)

SHEET_TITLE = "角色生日列表"
SUPPORTED_SUFFIXES = (".xlsx", ".csv")


def _check_suffix(path: Path) -> str:
    suffix = path.suffix.lower()
    if suffix not in SUPPORTED_SUFFIXES:
        raise ValidationError("path", str(path), f"unsupported file type (use {', '.join(SUPPORTED_SUFFIXES)})")
    return suffix


def read_rows(path: Path) -> list[dict[str, Any]]:
    """Decode the first sheet (or the CSV) into header-keyed rows."""
    suffix = _check_suffix(path)
    try:
        if suffix == ".csv":
            with path.open("r", encoding="utf-8-sig", newline="") as f:
                reader = csv.DictReader(f)
                if reader.fieldnames:
                    reader.fieldnames = [(h or "").strip() for h in reader.fieldnames]
                return [dict(row) for row in reader]
        return _read_xlsx(path)
    except OSError as e:
        raise PersistenceFailure("read", path, e) from e


def _read_xlsx(path: Path) -> list[dict[str, Any]]:
    wb = load_workbook(path, read_only=True, data_only=True)
    try:
        ws = wb.worksheets[0]
        it = ws.iter_rows(values_only=True)
        header_row = next(it, None)
        if header_row is None:
            return []
        header = [str(h).strip() if h is not None else "" for h in header_row]
        rows: list[dict[str, Any]] = []
        for values in it:
            if values is None or all(v is None or v == "" for v in values):
                continue
            rows.append({h: v for h, v in zip(header, values) if h})
        logger.debug("Read %d rows from %s", len(rows), path)
        return rows
    finally:
        wb.close()


def write_rows(path: Path, rows: Iterable[dict[str, Any]], columns: Sequence[str]) -> int:
    """Encode rows with a header row naming ``columns``. Returns the row count."""
    suffix = _check_suffix(path)
    rows = list(rows)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        if suffix == ".csv":
            with path.open("w", encoding="utf-8", newline="") as f:
                writer = csv.DictWriter(f, fieldnames=list(columns))
                writer.writeheader()
                for row in rows:
                    writer.writerow({c: row.get(c, "") for c in columns})
        else:
            wb = Workbook()
            ws = wb.active
            ws.title = SHEET_TITLE
            ws.append(list(columns))
            for row in rows:
                ws.append([row.get(c, "") for c in columns])
            wb.save(path)
    except OSError as e:
        raise PersistenceFailure("write", path, e) from e
    logger.info("Wrote %d rows to %s", len(rows), path)
    return len(rows)
