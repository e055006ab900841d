"""Notification sink protocol and shared types."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@dataclass(frozen=True)
class Notification:
    """A reminder to show the user."""

    title: str
    body: str
    image: str | None = None


@runtime_checkable
class NotificationSink(Protocol):
    """Protocol that all notification sinks must implement."""

    @property
    def name(self) -> str: ...

    def send(self, notification: Notification) -> None:
        """Best-effort delivery. Raise SinkUnavailable when delivery is impossible."""
        ...
