"""Scheduler for the daily birthday check using pure asyncio.

Jobs:
- Birthday check: re-run the notifier whenever the local day rolls over
- Cleanup: prune old version backups, once per day
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from birthdaybook.clock import today_key

if TYPE_CHECKING:
    from birthdaybook.config import BookConfig
    from birthdaybook.core import BirthdayBook

logger = logging.getLogger(__name__)


class Scheduler:
    """Polls the clock and fires the birthday check at local midnight."""

    def __init__(self, book: BirthdayBook, config: BookConfig, last_key: str | None = None) -> None:
        self._book = book
        self._interval = config.scheduler.check_interval
        self._keep_versions = config.scheduler.keep_versions
        self.last_key = last_key

    async def start(self, shutdown_event: asyncio.Event) -> None:
        """Run scheduled jobs until shutdown_event is set."""
        logger.info("Scheduler started (interval=%ds, last=%s)", self._interval, self.last_key)

        while not shutdown_event.is_set():
            try:
                await asyncio.wait_for(shutdown_event.wait(), timeout=self._interval)
                break  # shutdown requested
            except asyncio.TimeoutError:
                pass  # interval elapsed — run jobs

            await self.tick()

        logger.info("Scheduler stopped.")

    async def tick(self) -> bool:
        """Run the daily jobs if the day key changed. Returns True when they ran."""
        key = today_key(self._book.clock)
        if key == self.last_key:
            return False
        logger.info("Day rolled over to %s", key)
        await self._check_birthdays(key)
        await self._cleanup()
        self.last_key = key
        return True

    async def _check_birthdays(self, key: str) -> None:
        try:
            await asyncio.to_thread(self._book.check_birthdays, key)
        except Exception as e:
            logger.error("Birthday check failed: %s", e)

    async def _cleanup(self) -> None:
        """Remove old version files."""
        try:
            removed = self._book.store.cleanup_old_versions(keep=self._keep_versions)
        except OSError as e:
            logger.warning("Version cleanup failed: %s", e)
            return
        if removed:
            logger.info("Cleanup: removed %d old versions", removed)
