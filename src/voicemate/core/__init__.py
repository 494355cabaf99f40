"""Functional core - pure business logic with no I/O."""

from .capture import ClassificationResult, EntryKind, KeywordRules, Priority, classify
from .notifications import (
    InvalidNotificationError,
    Repeat,
    ScheduledNotification,
    new_notification_id,
    roll_forward,
)
from .retry import RetryPolicy
from .tasks import DiaryEntry, ScheduleItem, Task

__all__ = [
    # Capture
    "ClassificationResult",
    "EntryKind",
    "KeywordRules",
    "Priority",
    "classify",
    # Notifications
    "InvalidNotificationError",
    "Repeat",
    "ScheduledNotification",
    "new_notification_id",
    "roll_forward",
    # Retry
    "RetryPolicy",
    # Tasks
    "Task",
    "ScheduleItem",
    "DiaryEntry",
]
