"""Terminal notification sink."""

from __future__ import annotations

import sys
from typing import TextIO

from birthdaybook.errors import SinkUnavailable
from birthdaybook.notify.base import Notification


class ConsoleSink:
    """Prints reminders to stdout."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream

    @property
    def name(self) -> str:
        return "console"

    def send(self, notification: Notification) -> None:
        stream = self._stream or sys.stdout
        try:
            print(f"🔔 {notification.title}", file=stream)
            print(f"   {notification.body}", file=stream)
            if notification.image:
                print("   [image attached]", file=stream)
            stream.flush()
        except (OSError, ValueError) as e:
            # ValueError: writing to a closed stream
            raise SinkUnavailable(self.name, str(e)) from e
