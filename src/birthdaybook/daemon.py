"""Daemon process — always-on reminder mode.

Usage: python -m birthdaybook serve

Manages:
- Birthday check at startup, then at every local-midnight rollover
- PID file (prevent duplicate instances)
- Graceful shutdown (SIGTERM/SIGINT)
"""

from __future__ import annotations

import asyncio
import logging
import os
import signal
import sys

from birthdaybook.clock import today_key
from birthdaybook.config import BookConfig, load_config
from birthdaybook.core import BirthdayBook
from birthdaybook.scheduler.jobs import Scheduler

logger = logging.getLogger(__name__)


class BirthdayDaemon:
    """Always-on daemon process."""

    def __init__(self, config: BookConfig | None = None, book: BirthdayBook | None = None) -> None:
        self.config = config or load_config()
        self._book = book
        self._shutdown_event = asyncio.Event()

    # ── PID file management ──────────────────────────────────

    def _write_pid(self) -> None:
        self.config.pid_file.parent.mkdir(parents=True, exist_ok=True)
        self.config.pid_file.write_text(str(os.getpid()))
        logger.info("PID file written: %s (pid=%d)", self.config.pid_file, os.getpid())

    def _remove_pid(self) -> None:
        if self.config.pid_file.exists():
            self.config.pid_file.unlink()

    def _check_existing(self) -> None:
        if not self.config.pid_file.exists():
            return
        try:
            pid = int(self.config.pid_file.read_text().strip())
            os.kill(pid, 0)  # Check if process exists
            print(f"Birthday daemon already running (pid={pid}). Exiting.", file=sys.stderr)
            sys.exit(1)
        except (ProcessLookupError, ValueError):
            # Stale PID file — remove it
            self._remove_pid()

    # ── Signal handling ──────────────────────────────────────

    def _setup_signals(self) -> None:
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGTERM, signal.SIGINT):
            loop.add_signal_handler(sig, self._handle_signal, sig)

    def _handle_signal(self, sig: signal.Signals) -> None:
        logger.info("Received %s, shutting down...", sig.name)
        self._shutdown_event.set()

    def stop(self) -> None:
        self._shutdown_event.set()

    # ── Main run loop ────────────────────────────────────────

    @property
    def book(self) -> BirthdayBook:
        if self._book is None:
            self._book = BirthdayBook.from_config(self.config)
        return self._book

    async def run(self) -> None:
        self._check_existing()
        self._write_pid()
        self._setup_signals()

        book = self.book
        key = today_key(book.clock)
        await asyncio.to_thread(book.check_birthdays, key)

        scheduler = Scheduler(book, self.config, last_key=key)
        logger.info("Birthday daemon started (data=%s)", self.config.data_dir)

        try:
            await scheduler.start(self._shutdown_event)
        except asyncio.CancelledError:
            pass
        finally:
            self._remove_pid()
            logger.info("Birthday daemon stopped.")
