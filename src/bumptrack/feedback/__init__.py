"""Feedback adapters (notifications, console status)."""

from bumptrack.feedback.notifications import ConsoleNotifier, Notification, NotificationLevel, Notifier

__all__ = ["ConsoleNotifier", "Notification", "NotificationLevel", "Notifier"]
