"""Birthday matching and reminder dispatch.

Two independent triggers are evaluated against the same "today" key:
1. a character's birthday is today -> one CharacterBirthday per character
2. the owner's birthday is today   -> one OwnerBirthdayGreeting per character

Both can fire in the same pass. Delivery failures never reach the caller.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Sequence, Union

from birthdaybook.clock import Clock, today_key
from birthdaybook.config import DEFAULT_GREETING
from birthdaybook.errors import SinkUnavailable
from birthdaybook.models import OWNER_BIRTHDAY_KEY
from birthdaybook.notify.base import Notification

if TYPE_CHECKING:
    from birthdaybook.notify.base import NotificationSink
    from birthdaybook.store import CharacterStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CharacterBirthday:
    character_id: str
    name: str
    image: str

    def to_notification(self) -> Notification:
        return Notification(
            title="角色生日提醒",
            body=f"今天是 {self.name} 的生日喔！",
            image=self.image or None,
        )


@dataclass(frozen=True)
class OwnerBirthdayGreeting:
    character_id: str
    name: str
    message: str
    image: str

    def to_notification(self) -> Notification:
        return Notification(
            title=f"來自 {self.name} 的祝福",
            body=self.message,
            image=self.image or None,
        )


BirthdayEvent = Union[CharacterBirthday, OwnerBirthdayGreeting]


class BirthdayNotifier:
    """Compares every birthday against today and emits reminder events."""

    def __init__(
        self,
        store: CharacterStore,
        sinks: Sequence[NotificationSink] = (),
        clock: Clock | None = None,
        default_greeting: str = DEFAULT_GREETING,
    ) -> None:
        self._store = store
        self._sinks = list(sinks)
        self._clock = clock
        self._default_greeting = default_greeting

    def check(self, today: str | None = None) -> list[BirthdayEvent]:
        """Return the events for ``today`` (defaults to the clock's key)."""
        today = today or today_key(self._clock)
        events: list[BirthdayEvent] = [
            CharacterBirthday(character_id=c.id, name=c.name, image=c.image)
            for c in self._store.find_by_birthday(today)
        ]

        owner = self._store.get_setting(OWNER_BIRTHDAY_KEY)
        if owner and owner == today:
            for c in self._store.list():
                events.append(
                    OwnerBirthdayGreeting(
                        character_id=c.id,
                        name=c.name,
                        message=c.user_birthday_message or self._default_greeting,
                        image=c.image,
                    )
                )

        logger.info("Birthday check for %s: %d event(s)", today, len(events))
        return events

    def dispatch(self, events: Sequence[BirthdayEvent]) -> int:
        """Deliver events to every sink. Returns the number of successful deliveries."""
        delivered = 0
        for event in events:
            notification = event.to_notification()
            for sink in self._sinks:
                try:
                    sink.send(notification)
                    delivered += 1
                except SinkUnavailable as e:
                    logger.debug("Notification dropped: %s", e)
                except Exception as e:
                    logger.warning("Sink %s failed: %s", getattr(sink, "name", sink), e)
        return delivered

    def run(self, today: str | None = None) -> list[BirthdayEvent]:
        """One activation: check, then dispatch."""
        events = self.check(today)
        self.dispatch(events)
        return events
