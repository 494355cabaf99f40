"""Shared fakes for scheduler and workflow tests."""

from datetime import datetime
from zoneinfo import ZoneInfo

import pytest

from voicemate.core.notifications import ScheduledNotification
from voicemate.ports.notification_store import StoreError
from voicemate.scheduler import NotificationScheduler

UTC = ZoneInfo("UTC")

# A Wednesday
START = datetime(2025, 1, 15, 8, 0, tzinfo=UTC)


class FakeTimers:
    """TimerService with a hand-driven clock."""

    def __init__(self, now: datetime):
        self.clock = now
        self.armed = {}
        self.started = False

    def now(self) -> datetime:
        return self.clock

    def arm(self, job_id, run_at, callback):
        self.armed[job_id] = (run_at, callback)

    def disarm(self, job_id):
        self.armed.pop(job_id, None)

    def start(self):
        self.started = True

    def shutdown(self):
        self.started = False

    def run_times(self) -> list[datetime]:
        return sorted(run_at for run_at, _ in self.armed.values())

    def advance(self, to: datetime) -> None:
        """Move the clock to `to`, firing due timers in time order."""
        while True:
            due = [(run_at, job_id) for job_id, (run_at, _) in self.armed.items() if run_at <= to]
            if not due:
                break
            run_at, job_id = min(due)
            _, callback = self.armed.pop(job_id)
            self.clock = max(self.clock, run_at)
            callback()
        self.clock = to


class RecordingPresenter:
    def __init__(self):
        self.presented = []
        self.error = None
        self.permitted = True

    def present(self, title, body=None, tag=None, require_interaction=False):
        if self.error is not None:
            raise self.error
        self.presented.append(
            {"title": title, "body": body, "tag": tag, "require_interaction": require_interaction}
        )

    def request_permission(self):
        return self.permitted


class MemoryStore:
    """NotificationStore that round-trips through the persisted dict form."""

    def __init__(self):
        self.records = []
        self.saves = 0
        self.fail_load = False
        self.fail_save = False

    def load(self):
        if self.fail_load:
            raise StoreError("disk unreadable")
        return [ScheduledNotification.from_dict(r) for r in self.records]

    def save(self, notifications):
        if self.fail_save:
            raise StoreError("disk full")
        self.saves += 1
        self.records = [n.to_dict() for n in notifications]

    def update(self, upserts, removed_ids=None):
        if self.fail_save:
            raise StoreError("disk full")
        self.saves += 1
        records = {r["id"]: r for r in self.records}
        for notification_id in removed_ids or []:
            records.pop(notification_id, None)
        for n in upserts:
            records[n.id] = n.to_dict()
        self.records = list(records.values())

    @property
    def ids(self) -> set[str]:
        return {r["id"] for r in self.records}


@pytest.fixture
def timers():
    return FakeTimers(START)


@pytest.fixture
def presenter():
    return RecordingPresenter()


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def scheduler(timers, store, presenter):
    return NotificationScheduler(timers=timers, store=store, presenter=presenter, tz=UTC)


@pytest.fixture
def make_scheduler(store):
    """Another scheduler over the same store, as after a restart or in another process."""

    def make(now=START, store=store):
        return NotificationScheduler(
            timers=FakeTimers(now), store=store, presenter=RecordingPresenter(), tz=UTC
        )

    return make
