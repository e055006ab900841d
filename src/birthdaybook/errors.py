"""Error kinds shared across the birthday book."""

from __future__ import annotations

from pathlib import Path


class BirthdayBookError(Exception):
    """Base class for all birthday book errors."""


class ValidationError(BirthdayBookError):
    """A field failed validation (missing value, malformed birthday)."""

    def __init__(self, field: str, value: object, reason: str) -> None:
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"{field}={value!r}: {reason}")


class NotFound(BirthdayBookError):
    """An operation referenced a record id that does not exist."""

    def __init__(self, record_id: str) -> None:
        self.record_id = record_id
        super().__init__(f"Character {record_id!r} not found")


class PersistenceFailure(BirthdayBookError):
    """The storage backend failed to read or write."""

    def __init__(self, op: str, path: Path, cause: Exception | None = None) -> None:
        self.op = op
        self.path = path
        self.cause = cause
        detail = f": {cause}" if cause else ""
        super().__init__(f"{op} failed for {path}{detail}")


class SinkUnavailable(BirthdayBookError):
    """A notification sink cannot deliver (missing package, denied, API error).

    Raised by sinks only; the notifier always swallows it.
    """

    def __init__(self, sink: str, reason: str = "") -> None:
        self.sink = sink
        self.reason = reason
        super().__init__(f"Sink {sink} unavailable{': ' + reason if reason else ''}")
