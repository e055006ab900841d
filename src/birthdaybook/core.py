"""Birthday book application service — the hub every front end talks to.

Responsibilities:
1. Validate form input and route commands to the store
2. After each mutation: recompute categories, reconcile the filter, re-project the view
3. Bulk import/export through the tabular codec
4. Owner birthday setting and birthday checks
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, Iterable, Mapping, Sequence

from birthdaybook.clock import Clock, today_key
from birthdaybook.config import DEFAULT_GREETING, BookConfig, NotifyConfig
from birthdaybook.models import (
    OWNER_BIRTHDAY_KEY,
    Character,
    CharacterDraft,
    normalize_birthday,
    validate_draft,
)
from birthdaybook.notifier import BirthdayEvent, BirthdayNotifier
from birthdaybook.store import CharacterStore
from birthdaybook.transfer import codec, exporter, importer
from birthdaybook.views import ViewResult, ViewState, project, reconcile_filter

if TYPE_CHECKING:
    from birthdaybook.notify.base import NotificationSink
    from birthdaybook.transfer.importer import ImportReport

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommandResult:
    """The refreshed view after a command, plus what the command produced."""

    view: ViewResult
    record: Character | None = None
    changed: bool = True
    report: ImportReport | None = None
    events: tuple[BirthdayEvent, ...] = field(default_factory=tuple)


def build_sinks(config: NotifyConfig) -> list[NotificationSink]:
    """Instantiate the sinks enabled in config. Unavailable optional sinks are skipped."""
    from birthdaybook.notify.console import ConsoleSink

    sinks: list[NotificationSink] = []
    if config.console:
        sinks.append(ConsoleSink())
    if config.feishu.app_id:
        try:
            from birthdaybook.notify.feishu import FeishuSink

            sinks.append(FeishuSink(config.feishu))
        except ImportError:
            logger.warning("Feishu sink unavailable (install 'birthdaybook[feishu]')")
    return sinks


class BirthdayBook:
    """Commands over the character store. Front ends hold the ViewState."""

    def __init__(
        self,
        store: CharacterStore,
        sinks: Sequence[NotificationSink] = (),
        clock: Clock | None = None,
        default_greeting: str = DEFAULT_GREETING,
    ) -> None:
        self.store = store
        self.clock = clock
        self.notifier = BirthdayNotifier(
            store, sinks, clock=clock, default_greeting=default_greeting
        )

    @classmethod
    def from_config(
        cls,
        config: BookConfig,
        sinks: Sequence[NotificationSink] | None = None,
        clock: Clock | None = None,
    ) -> BirthdayBook:
        return cls(
            CharacterStore(config.data_dir),
            sinks=build_sinks(config.notify) if sinks is None else sinks,
            clock=clock,
            default_greeting=config.notify.default_greeting,
        )

    # ── Views ─────────────────────────────────────────────────

    def render(self, state: ViewState = ViewState()) -> ViewResult:
        """Project the store through ``state`` as given. Unknown categories match nothing."""
        return project(
            self.store.list(), state, today_key(self.clock), categories=self.store.categories()
        )

    def _refresh(self, state: ViewState) -> ViewResult:
        """After a mutation: recompute categories, reconcile the filter, then project."""
        categories = self.store.categories()
        state = reconcile_filter(state, categories)
        return project(self.store.list(), state, today_key(self.clock), categories=categories)

    def categories(self) -> list[str]:
        return self.store.categories()

    # ── Character commands ────────────────────────────────────

    def add_or_update(
        self,
        draft: CharacterDraft,
        record_id: str | None = None,
        state: ViewState = ViewState(),
    ) -> CommandResult:
        """Create a character, or fully replace an existing one's fields.

        On update, ``draft.image=None`` keeps the stored image.
        """
        clean = validate_draft(draft)
        if record_id:
            record = self.store.update(record_id, clean)
        else:
            record = self.store.get(self.store.create(clean))
        return CommandResult(view=self._refresh(state), record=record)

    def delete(self, record_id: str, state: ViewState = ViewState()) -> CommandResult:
        """Delete a character. Unknown ids leave the store untouched (``changed=False``)."""
        changed = self.store.delete(record_id)
        return CommandResult(view=self._refresh(state), changed=changed)

    def get(self, record_id: str) -> Character:
        return self.store.get(record_id)

    # ── Import / export ───────────────────────────────────────

    def import_rows(
        self, rows: Iterable[Mapping[str, Any]], state: ViewState = ViewState()
    ) -> CommandResult:
        report = importer.import_rows(self.store, rows)
        return CommandResult(view=self._refresh(state), changed=bool(report.created), report=report)

    def import_file(self, path: Path, state: ViewState = ViewState()) -> CommandResult:
        logger.info("Importing characters from %s", path)
        return self.import_rows(codec.read_rows(path), state)

    def export_file(self, path: Path) -> int:
        """Write every character to ``path``. Returns 0 (and writes nothing) when empty."""
        count = exporter.export_file(self.store.list(), path)
        if not count:
            logger.info("Nothing to export")
        return count

    # ── Owner birthday & checks ───────────────────────────────

    def save_owner_birthday(self, value: str) -> str:
        key = normalize_birthday(value)
        self.store.put_setting(OWNER_BIRTHDAY_KEY, key)
        return key

    def owner_birthday(self) -> str | None:
        return self.store.get_setting(OWNER_BIRTHDAY_KEY)

    def check_birthdays(self, today: str | None = None) -> list[BirthdayEvent]:
        """Run one notifier activation: emit and deliver today's events."""
        return self.notifier.run(today)
