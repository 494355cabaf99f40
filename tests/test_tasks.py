"""Tests for core task board, timetable and diary logic."""

from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from voicemate.core.tasks import DiaryEntry, ScheduleItem, Task, next_at, parse_clock

UTC = ZoneInfo("UTC")
BERLIN = ZoneInfo("Europe/Berlin")


# Fixtures
@pytest.fixture
def now():
    # Wednesday
    return datetime(2025, 1, 15, 8, 0, tzinfo=UTC)


class TestTaskFromApi:
    def test_full_payload(self):
        task = Task.from_api(
            {
                "id": 12,
                "title": "Submit report",
                "description": "Q4 numbers",
                "status": "progress",
                "priority": "high",
                "dueDate": "2025-01-20",
                "reminderAt": "2025-01-19T17:00:00Z",
                "createdAt": "2025-01-10T08:00:00.000Z",
            }
        )

        assert task.id == 12
        assert task.status == "progress"
        assert task.priority == "high"
        assert task.due_date == date(2025, 1, 20)
        assert task.reminder_at == datetime(2025, 1, 19, 17, 0, tzinfo=timezone.utc)
        assert task.created_at.year == 2025
        assert task.completed_at is None

    def test_minimal_payload_uses_defaults(self):
        task = Task.from_api({"id": 1, "title": "Call mom", "description": ""})

        assert task.status == "not_started"
        assert task.priority == "medium"
        assert task.description is None
        assert task.due_date is None

    def test_due_date_with_time_part(self):
        task = Task.from_api({"id": 1, "title": "x", "dueDate": "2025-01-20T00:00:00.000Z"})
        assert task.due_date == date(2025, 1, 20)

    def test_unparseable_dates_are_none(self):
        task = Task.from_api({"id": 1, "title": "x", "dueDate": "soon", "reminderAt": "later"})
        assert task.due_date is None
        assert task.reminder_at is None

    def test_completed(self):
        assert Task.from_api({"id": 1, "title": "x", "status": "completed"}).is_completed


class TestReminderTime:
    def test_reminder_at_wins(self):
        task = Task(
            id=1,
            title="x",
            due_date=date(2025, 1, 20),
            reminder_at=datetime(2025, 1, 19, 17, 0, tzinfo=UTC),
        )
        when = task.reminder_time(time(9, 0), BERLIN)
        assert when == datetime(2025, 1, 19, 18, 0, tzinfo=BERLIN)

    def test_naive_reminder_at_in_local_timezone(self):
        task = Task(id=1, title="x", reminder_at=datetime(2025, 1, 19, 17, 0))
        assert task.reminder_time(time(9, 0), BERLIN) == datetime(2025, 1, 19, 17, 0, tzinfo=BERLIN)

    def test_due_date_at_default_time(self):
        task = Task(id=1, title="x", due_date=date(2025, 1, 20))
        assert task.reminder_time(time(8, 30), BERLIN) == datetime(2025, 1, 20, 8, 30, tzinfo=BERLIN)

    def test_neither(self):
        assert Task(id=1, title="x").reminder_time(time(9, 0), UTC) is None


class TestScheduleItem:
    @pytest.mark.parametrize(
        "pattern,days",
        [
            ("daily", [0, 1, 2, 3, 4, 5, 6]),
            ("weekdays", [0, 1, 2, 3, 4]),
            ("weekends", [5, 6]),
            ("custom", []),
        ],
    )
    def test_weekdays(self, pattern, days):
        item = ScheduleItem(id=1, title="x", time="09:00", repeat_pattern=pattern)
        assert item.weekdays() == days

    def test_from_api(self):
        item = ScheduleItem.from_api(
            {
                "id": 3,
                "title": "Gym",
                "time": "18:00",
                "repeatPattern": "weekends",
                "isActive": False,
                "color": "#00FF00",
            }
        )

        assert item.repeat_pattern == "weekends"
        assert item.is_active is False
        assert item.color == "#00FF00"
        assert item.description is None

    def test_from_api_defaults(self):
        item = ScheduleItem.from_api({"id": 3, "title": "Gym", "time": "18:00"})
        assert item.repeat_pattern == "daily"
        assert item.is_active is True


class TestDiaryEntry:
    def test_from_api(self):
        entry = DiaryEntry.from_api(
            {
                "id": 9,
                "content": "Walked by the river.",
                "date": "2025-01-15",
                "timestamp": "2025-01-15T19:42:00Z",
            }
        )

        assert entry.date == date(2025, 1, 15)
        assert entry.timestamp.hour == 19


class TestParseClock:
    def test_hours_and_minutes(self):
        assert parse_clock("07:05") == time(7, 5)

    def test_hours_only(self):
        assert parse_clock(" 18 ") == time(18, 0)

    @pytest.mark.parametrize("value", ["7pm", "25:00", "12:61", ""])
    def test_invalid(self, value):
        with pytest.raises(ValueError):
            parse_clock(value)


class TestNextAt:
    def test_later_today(self, now):
        assert next_at(time(9, 0), now) == datetime(2025, 1, 15, 9, 0, tzinfo=UTC)

    def test_passed_rolls_to_tomorrow(self, now):
        assert next_at(time(7, 0), now) == datetime(2025, 1, 16, 7, 0, tzinfo=UTC)

    def test_exactly_now_rolls_to_tomorrow(self, now):
        assert next_at(time(8, 0), now) == now + timedelta(days=1)

    def test_weekday_later_this_week(self, now):
        assert next_at(time(9, 0), now, weekday=4) == datetime(2025, 1, 17, 9, 0, tzinfo=UTC)

    def test_same_weekday_passed_is_next_week(self, now):
        assert next_at(time(7, 0), now, weekday=2) == datetime(2025, 1, 22, 7, 0, tzinfo=UTC)

    def test_keeps_timezone(self):
        as_of = datetime(2025, 1, 15, 8, 0, tzinfo=BERLIN)
        assert next_at(time(9, 0), as_of).tzinfo is BERLIN
