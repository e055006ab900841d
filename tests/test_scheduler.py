"""Tests for the day-rollover scheduler and the daemon."""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from birthdaybook.config import BookConfig, SchedulerConfig
from birthdaybook.core import BirthdayBook
from birthdaybook.daemon import BirthdayDaemon
from birthdaybook.models import CharacterDraft
from birthdaybook.scheduler.jobs import Scheduler


@pytest.fixture
def config(tmp_path: Path) -> BookConfig:
    return BookConfig(
        data_dir=tmp_path / "data",
        pid_file=tmp_path / "birthdaybook.pid",
        scheduler=SchedulerConfig(check_interval=1, keep_versions=5),
    )


@pytest.fixture
def book(store, clock, sink) -> BirthdayBook:
    book = BirthdayBook(store, sinks=[sink], clock=clock)
    book.add_or_update(CharacterDraft(name="Tomorrow", birthday="06-16"))
    return book


class TestScheduler:
    @pytest.mark.asyncio
    async def test_same_day_does_nothing(self, book, config, sink):
        scheduler = Scheduler(book, config, last_key="06-15")
        assert await scheduler.tick() is False
        assert sink.sent == []

    @pytest.mark.asyncio
    async def test_rollover_runs_check(self, book, config, clock, sink):
        scheduler = Scheduler(book, config, last_key="06-15")
        clock.advance()
        assert await scheduler.tick() is True
        assert scheduler.last_key == "06-16"
        assert [n.body for n in sink.sent] == ["今天是 Tomorrow 的生日喔！"]
        # Only once per day
        assert await scheduler.tick() is False
        assert len(sink.sent) == 1

    @pytest.mark.asyncio
    async def test_first_tick_without_last_key(self, book, config):
        scheduler = Scheduler(book, config)
        assert await scheduler.tick() is True
        assert scheduler.last_key == "06-15"

    @pytest.mark.asyncio
    async def test_start_stops_on_shutdown(self, book, config):
        scheduler = Scheduler(book, config, last_key="06-15")
        event = asyncio.Event()
        event.set()
        await asyncio.wait_for(scheduler.start(event), timeout=2)


class TestDaemon:
    def test_stale_pid_removed(self, config):
        config.pid_file.write_text("not-a-pid")
        daemon = BirthdayDaemon(config)
        daemon._check_existing()
        assert not config.pid_file.exists()

    @pytest.mark.asyncio
    async def test_run_checks_then_stops(self, config, clock, sink, monkeypatch):
        book = BirthdayBook.from_config(config, sinks=[sink], clock=clock)
        book.add_or_update(CharacterDraft(name="Today", birthday="06-15"))
        daemon = BirthdayDaemon(config, book=book)
        monkeypatch.setattr(daemon, "_setup_signals", lambda: None)
        daemon.stop()
        await asyncio.wait_for(daemon.run(), timeout=5)
        assert [n.body for n in sink.sent] == ["今天是 Today 的生日喔！"]
        assert not config.pid_file.exists()
