"""Shared fixtures."""

from __future__ import annotations

from datetime import date
from pathlib import Path

import pytest

from birthdaybook.clock import FixedClock
from birthdaybook.notify.base import Notification
from birthdaybook.store import CharacterStore


class RecordingSink:
    name = "recording"

    def __init__(self) -> None:
        self.sent: list[Notification] = []

    def send(self, notification: Notification) -> None:
        self.sent.append(notification)


@pytest.fixture
def store(tmp_path: Path) -> CharacterStore:
    return CharacterStore(tmp_path / "data")


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(date(2026, 6, 15))


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()
