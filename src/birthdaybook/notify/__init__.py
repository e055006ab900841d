"""Notification sinks: where birthday reminders are delivered."""

from birthdaybook.notify.base import Notification, NotificationSink

__all__ = ["Notification", "NotificationSink"]
