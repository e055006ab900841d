"""Validate and normalize spreadsheet rows into characters.

Each row is checked on its own; a bad row is logged and skipped without
blocking its siblings. Accepted rows are bulk-created best-effort.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import TYPE_CHECKING, Any, Iterable, Mapping

from birthdaybook.errors import ValidationError
from birthdaybook.models import LOOSE_BIRTHDAY, CharacterDraft, normalize_birthday

if TYPE_CHECKING:
    from birthdaybook.store import CharacterStore

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("name", "birthday", "userBirthdayMessage")


@dataclass(frozen=True)
class RowRejection:
    index: int
    reason: str
    row: Mapping[str, Any]


@dataclass
class ImportPlan:
    accepted: list[CharacterDraft] = field(default_factory=list)
    rejected: list[RowRejection] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.accepted) + len(self.rejected)


@dataclass
class ImportReport:
    """Aggregate outcome of an import."""

    total: int = 0
    created: list[str] = field(default_factory=list)
    rejected: list[RowRejection] = field(default_factory=list)
    failed: list[tuple[CharacterDraft, str]] = field(default_factory=list)

    @property
    def accepted(self) -> int:
        return len(self.created)

    @property
    def is_empty_source(self) -> bool:
        """The file had no data rows at all."""
        return self.total == 0

    @property
    def nothing_accepted(self) -> bool:
        """The file had rows, but none made it into the store."""
        return self.total > 0 and not self.created

    def summary(self) -> str:
        if self.is_empty_source:
            return "The file contains no data."
        if self.nothing_accepted:
            return (
                f"No valid characters found in {self.total} row(s); "
                "check the column names and the birthday format (MM-DD)."
            )
        parts = [f"Imported {self.accepted} of {self.total} row(s)"]
        if self.rejected:
            parts.append(f"{len(self.rejected)} rejected")
        if self.failed:
            parts.append(f"{len(self.failed)} failed to save")
        return ", ".join(parts) + "."


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _birthday_text(value: Any) -> str:
    # Spreadsheet apps like to turn "5-5" into a real date cell.
    if isinstance(value, (date, datetime)):
        return f"{value.month}-{value.day}"
    return _text(value).strip()


def draft_from_row(row: Mapping[str, Any]) -> CharacterDraft:
    """Convert one loosely typed row into a normalized draft, or raise ValidationError."""
    for column in REQUIRED_COLUMNS:
        if not _text(row.get(column)).strip():
            raise ValidationError(column, row.get(column), "required field is empty")

    birthday = _birthday_text(row.get("birthday"))
    if not LOOSE_BIRTHDAY.match(birthday):
        raise ValidationError("birthday", birthday, "expected MM-DD")

    return CharacterDraft(
        name=_text(row.get("name")).strip(),
        birthday=normalize_birthday(birthday),
        source=_text(row.get("source")).strip(),
        user_birthday_message=_text(row.get("userBirthdayMessage")),
        image="",
    )


def reconcile(rows: Iterable[Mapping[str, Any]]) -> ImportPlan:
    """Split rows into accepted drafts and rejections."""
    plan = ImportPlan()
    for index, row in enumerate(rows, start=1):
        try:
            plan.accepted.append(draft_from_row(row))
        except ValidationError as e:
            logger.warning("Skipping row %d (%s): %s", index, e.reason, dict(row))
            plan.rejected.append(RowRejection(index=index, reason=str(e), row=row))
    return plan


def import_rows(store: CharacterStore, rows: Iterable[Mapping[str, Any]]) -> ImportReport:
    """Reconcile rows and bulk-create the accepted subset."""
    plan = reconcile(rows)
    report = ImportReport(total=plan.total, rejected=plan.rejected)
    if not plan.accepted:
        return report
    result = store.bulk_create(plan.accepted)
    report.created = result.created
    report.failed = result.failures
    logger.info(
        "Import finished: %d created, %d rejected, %d failed",
        len(report.created),
        len(report.rejected),
        len(report.failed),
    )
    return report
