"""Local-calendar "today" keys.

All matching uses the local day and month, never UTC. Clocks are plain
callables returning a ``date`` so tests can pin "today".
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import Callable

Clock = Callable[[], date]


def system_clock() -> date:
    """Today's date in local time."""
    return date.today()


class FixedClock:
    """A clock frozen at a given date. Used in tests and the ``--today`` flag."""

    def __init__(self, today: date) -> None:
        self.today = today

    def __call__(self) -> date:
        return self.today

    def advance(self, days: int = 1) -> None:
        self.today = self.today + timedelta(days=days)


def day_key(d: date) -> str:
    """Zero-padded ``MM-DD`` for a date."""
    return f"{d.month:02d}-{d.day:02d}"


def today_key(clock: Clock | None = None) -> str:
    """Canonical birthday key for today according to ``clock``."""
    return day_key((clock or system_clock)())
