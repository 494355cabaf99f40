"""Task board / timetable / diary repository interface."""

from datetime import date
from typing import Protocol

from voicemate.core.tasks import DiaryEntry, ScheduleItem, Task


class TaskRepository(Protocol):
    """Interface for the Voice Mate task, schedule and diary stores."""

    def fetch_tasks(self) -> list[Task]:
        """Fetch all tasks on the board."""
        ...

    def fetch_schedule(self) -> list[ScheduleItem]:
        """Fetch all timetable items."""
        ...

    def fetch_diary(self, target_date: date) -> list[DiaryEntry]:
        """Fetch diary entries for a date."""
        ...

    def create_task(self, payload: dict) -> Task:
        """Create a task from a request body."""
        ...

    def create_diary_entry(self, payload: dict) -> DiaryEntry:
        """Create a diary entry from a request body."""
        ...
