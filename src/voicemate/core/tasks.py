"""Pure task board, timetable and diary domain logic - no I/O dependencies."""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, tzinfo

WEEKDAY_NAMES = ("mon", "tue", "wed", "thu", "fri", "sat", "sun")


def _parse_datetime(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        # Backends emit a trailing "Z" for UTC timestamps
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def _parse_date(value: str | None) -> date | None:
    if not value:
        return None
    try:
        return date.fromisoformat(value.split("T")[0])
    except ValueError:
        return None


def parse_clock(value: str) -> time:
    """Parse an HH:MM string. Raises ValueError if malformed."""
    hours, _, minutes = value.strip().partition(":")
    return time(int(hours), int(minutes or 0))


@dataclass
class Task:
    """A card on the kanban task board."""

    id: int | str
    title: str
    status: str = "not_started"
    priority: str = "medium"
    description: str | None = None
    due_date: date | None = None
    reminder_at: datetime | None = None
    created_at: datetime | None = None
    completed_at: datetime | None = None

    @property
    def is_completed(self) -> bool:
        return self.status == "completed"

    def reminder_time(self, default_time: time, tz: tzinfo) -> datetime | None:
        """
        When this task should remind its owner.

        An explicit reminder time wins; otherwise the due date at the default
        reminder time. None if the task has neither.
        """
        if self.reminder_at:
            if self.reminder_at.tzinfo is None:
                return self.reminder_at.replace(tzinfo=tz)
            return self.reminder_at.astimezone(tz)
        if self.due_date:
            return datetime.combine(self.due_date, default_time, tzinfo=tz)
        return None

    @classmethod
    def from_api(cls, data: dict) -> "Task":
        """Create Task from a Voice Mate API response."""
        return cls(
            id=data["id"],
            title=data["title"],
            status=data.get("status") or "not_started",
            priority=data.get("priority") or "medium",
            description=data.get("description") or None,
            due_date=_parse_date(data.get("dueDate")),
            reminder_at=_parse_datetime(data.get("reminderAt") or data.get("reminderTime")),
            created_at=_parse_datetime(data.get("createdAt")),
            completed_at=_parse_datetime(data.get("completedAt")),
        )


@dataclass
class ScheduleItem:
    """A recurring timetable slot."""

    id: int | str
    title: str
    time: str
    repeat_pattern: str = "daily"
    description: str | None = None
    is_active: bool = True
    color: str = "#FF69B4"

    def weekdays(self) -> list[int]:
        """Weekday numbers (Monday=0) this item occurs on; empty for custom patterns."""
        match self.repeat_pattern:
            case "daily":
                return list(range(7))
            case "weekdays":
                return list(range(5))
            case "weekends":
                return [5, 6]
            case _:
                return []

    @classmethod
    def from_api(cls, data: dict) -> "ScheduleItem":
        """Create ScheduleItem from a Voice Mate API response."""
        return cls(
            id=data["id"],
            title=data["title"],
            time=data["time"],
            repeat_pattern=data.get("repeatPattern") or "daily",
            description=data.get("description") or None,
            is_active=data.get("isActive", True),
            color=data.get("color") or "#FF69B4",
        )


@dataclass
class DiaryEntry:
    """A diary entry captured for a given day."""

    id: int | str
    content: str
    date: date
    timestamp: datetime | None = None

    @classmethod
    def from_api(cls, data: dict) -> "DiaryEntry":
        return cls(
            id=data["id"],
            content=data["content"],
            date=date.fromisoformat(data["date"]),
            timestamp=_parse_datetime(data.get("timestamp")),
        )


def next_at(clock: time, as_of: datetime, weekday: int | None = None) -> datetime:
    """
    Next datetime strictly after `as_of` at wall-clock `clock`.

    With `weekday` (Monday=0) the result also falls on that weekday.
    """
    candidate = datetime.combine(as_of.date(), clock, tzinfo=as_of.tzinfo)
    if weekday is not None:
        candidate += timedelta(days=(weekday - candidate.weekday()) % 7)
        if candidate <= as_of:
            candidate += timedelta(days=7)
        return candidate
    if candidate <= as_of:
        candidate += timedelta(days=1)
    return candidate
