"""Scheduled notification model and recurrence rules - no I/O."""

from dataclasses import dataclass, replace
from datetime import datetime, timedelta, tzinfo
from enum import Enum
from uuid import uuid4


class InvalidNotificationError(ValueError):
    """Raised when a notification is missing required fields or malformed."""

    pass


class Repeat(Enum):
    """How often a notification recurs."""

    NONE = "none"
    DAILY = "daily"
    WEEKLY = "weekly"

    @property
    def period(self) -> timedelta | None:
        return _PERIODS.get(self)


_PERIODS = {
    Repeat.DAILY: timedelta(days=1),
    Repeat.WEEKLY: timedelta(days=7),
}


@dataclass
class ScheduledNotification:
    """A one-shot or recurring reminder."""

    id: str
    title: str
    scheduled_time: datetime
    repeat: Repeat = Repeat.NONE
    body: str | None = None
    task_id: int | str | None = None
    schedule_id: int | str | None = None

    @property
    def is_recurring(self) -> bool:
        return self.repeat != Repeat.NONE

    def validate(self) -> None:
        """Raise InvalidNotificationError unless id, title and time are usable."""
        if not isinstance(self.id, str) or not self.id.strip():
            raise InvalidNotificationError("Notification id must be a non-empty string")
        if not isinstance(self.title, str) or not self.title.strip():
            raise InvalidNotificationError(f"Notification {self.id!r} needs a title")
        if not isinstance(self.scheduled_time, datetime):
            raise InvalidNotificationError(
                f"Notification {self.id!r} has no valid scheduled time: {self.scheduled_time!r}"
            )
        if not isinstance(self.repeat, Repeat):
            raise InvalidNotificationError(f"Notification {self.id!r} has invalid repeat: {self.repeat!r}")

    def localized(self, tz: tzinfo) -> "ScheduledNotification":
        """Copy with scheduled_time expressed in `tz` (naive times are taken as `tz`)."""
        if self.scheduled_time.tzinfo is None:
            when = self.scheduled_time.replace(tzinfo=tz)
        else:
            when = self.scheduled_time.astimezone(tz)
        return replace(self, scheduled_time=when)

    def next_occurrence(self) -> datetime | None:
        """Next fire time after the current one, or None for one-shot entries."""
        period = self.repeat.period
        if period is None:
            return None
        # Aware datetime arithmetic keeps the wall-clock time across DST changes
        return self.scheduled_time + period

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "body": self.body,
            "scheduled_time": self.scheduled_time.isoformat(),
            "repeat": self.repeat.value,
            "task_id": self.task_id,
            "schedule_id": self.schedule_id,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ScheduledNotification":
        """Create from persisted or user-supplied data, validating it."""
        if not isinstance(data, dict):
            raise InvalidNotificationError(f"Expected an object, got {type(data).__name__}")

        raw_time = data.get("scheduled_time") or data.get("scheduledTime")
        try:
            scheduled_time = datetime.fromisoformat(raw_time) if isinstance(raw_time, str) else raw_time
        except ValueError:
            raise InvalidNotificationError(f"Invalid scheduled time: {raw_time!r}")

        try:
            repeat = Repeat(data.get("repeat") or "none")
        except ValueError:
            raise InvalidNotificationError(f"Invalid repeat value: {data.get('repeat')!r}")

        notification = cls(
            id=data.get("id", ""),
            title=data.get("title", ""),
            scheduled_time=scheduled_time,
            repeat=repeat,
            body=data.get("body") or None,
            task_id=data.get("task_id", data.get("taskId")),
            schedule_id=data.get("schedule_id", data.get("scheduleId")),
        )
        notification.validate()
        return notification


def new_notification_id() -> str:
    """Generate an id for a user-created reminder."""
    return f"custom-{uuid4().hex[:12]}"


def task_notification_id(task_id: int | str) -> str:
    """Deterministic id so re-deriving a task's reminder replaces it."""
    return f"task-{task_id}"


def schedule_notification_id(schedule_id: int | str, weekday: str | None = None) -> str:
    if weekday:
        return f"schedule-{schedule_id}-{weekday}"
    return f"schedule-{schedule_id}"


def roll_forward(notification: ScheduledNotification, now: datetime) -> tuple[datetime, int]:
    """
    Move a recurring notification's time strictly past `now`.

    Returns (new_time, skipped) where skipped counts the missed occurrences.
    One-shot notifications are returned unchanged with skipped=0.
    """
    period = notification.repeat.period
    when = notification.scheduled_time
    if period is None or when > now:
        return when, 0

    skipped = 0
    while when <= now:
        when = when + period
        skipped += 1
    return when, skipped
