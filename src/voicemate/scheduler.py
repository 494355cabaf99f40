"""Notification scheduler - owns scheduled reminders and their timers.

Each entry moves Armed -> Fired -> Retired (one-shot) or back to Armed at its
next occurrence (daily/weekly). Every change is written to the store for the
changed ids only, so several processes can share one store, and restore()
re-arms the stored entries on startup. Before firing, a due entry is checked
against the store: cancelled elsewhere means it is dropped, moved elsewhere
means it is re-armed at the stored time.

Overdue entries (scheduled time already passed when armed):
- one-shot entries fire on the next tick, and the late delivery is logged;
- recurring entries roll forward past every missed occurrence.
"""

import itertools
import logging
import threading
from dataclasses import dataclass, replace
from datetime import datetime, time, tzinfo
from functools import partial

from .core.notifications import (
    Repeat,
    ScheduledNotification,
    roll_forward,
    schedule_notification_id,
    task_notification_id,
)
from .core.tasks import WEEKDAY_NAMES, ScheduleItem, Task, next_at, parse_clock
from .ports.notification_store import NotificationStore, StoreError
from .ports.presenter import NotificationPresenter, PresentationUnavailable
from .ports.timer_service import TimerService

logger = logging.getLogger(__name__)


@dataclass
class _Armed:
    """A tracked entry and the id of the timer currently armed for it."""

    entry: ScheduledNotification
    job_id: str


class NotificationScheduler:
    """Tracks scheduled notifications, arms their timers and fires them."""

    def __init__(
        self,
        timers: TimerService,
        store: NotificationStore,
        presenter: NotificationPresenter,
        tz: tzinfo | None = None,
        default_reminder_time: time = time(9, 0),
    ):
        self.timers = timers
        self.store = store
        self.presenter = presenter
        self.tz = tz or timers.now().tzinfo
        self.default_reminder_time = default_reminder_time
        self._entries: dict[str, _Armed] = {}
        self._generations = itertools.count(1)
        # Ids whose latest change has not reached the store
        self._unsaved: set[str] = set()
        # Serializes schedule/cancel/fire; timers fire on worker threads
        self._lock = threading.RLock()

    def now(self) -> datetime:
        return self.timers.now()

    # ============== Public operations ==============

    def schedule(self, notification: ScheduledNotification) -> ScheduledNotification:
        """
        Insert or replace a notification by id and arm its timer.

        Raises InvalidNotificationError for a missing id/title or bad time.
        Returns a copy of the entry as tracked (overdue times already applied).
        """
        notification.validate()
        entry = notification.localized(self.tz)

        with self._lock:
            self._disarm(entry.id)
            self._arm(entry)
            self._persist(entry.id)
            logger.info(
                f"Scheduled {entry.id} ({entry.title!r}) for "
                f"{entry.scheduled_time.isoformat()}, repeat={entry.repeat.value}"
            )
            return replace(entry)

    def cancel(self, notification_id: str) -> bool:
        """Remove a notification and its timer. Returns False if it was not tracked."""
        with self._lock:
            armed = self._entries.pop(notification_id, None)
            if armed is None:
                return False
            self.timers.disarm(armed.job_id)
            self._persist(notification_id)
        logger.info(f"Cancelled {notification_id}")
        return True

    def restore(self) -> int:
        """
        Replace tracked notifications with the persisted ones and re-arm them.

        Returns how many were restored. If loading fails the current entries
        are kept (empty on first start). Entries whose latest change never
        reached the store are kept too, and written again.
        """
        try:
            loaded = self.store.load()
        except StoreError as e:
            logger.error(f"Could not load scheduled notifications: {e}")
            return 0

        with self._lock:
            loaded_ids = {n.id for n in loaded}
            for notification_id in list(self._entries):
                if notification_id not in loaded_ids and notification_id not in self._unsaved:
                    self.timers.disarm(self._entries.pop(notification_id).job_id)
            rolled = []
            for notification in loaded:
                if notification.id in self._unsaved:
                    continue
                entry = notification.localized(self.tz)
                stored_time = entry.scheduled_time
                self._disarm(entry.id)
                self._arm(entry)
                if entry.scheduled_time != stored_time:
                    rolled.append(entry.id)
            if rolled or self._unsaved:
                self._persist(*rolled, *self._unsaved)

        logger.info(f"Restored {len(loaded)} scheduled notification(s)")
        return len(loaded)

    def derive_from_task(self, task: Task) -> ScheduledNotification | None:
        """
        Schedule a one-shot reminder for a task with a due date or reminder time.

        Tasks with neither are skipped (returns None). The id is derived from
        the task id, so deriving again replaces the earlier reminder.
        """
        when = task.reminder_time(self.default_reminder_time, self.tz)
        if when is None:
            logger.debug(f"Task {task.id} has no due date or reminder time, nothing to schedule")
            return None

        return self.schedule(
            ScheduledNotification(
                id=task_notification_id(task.id),
                title=task.title,
                body=task.description,
                scheduled_time=when,
                repeat=Repeat.NONE,
                task_id=task.id,
            )
        )

    def derive_from_schedule_item(self, item: ScheduleItem) -> list[ScheduledNotification]:
        """
        Schedule recurring reminders for a timetable item.

        Daily items get one daily reminder; weekday/weekend items get one weekly
        reminder per day. Inactive and custom-pattern items end up with none.
        """
        candidate_ids = [schedule_notification_id(item.id)] + [
            schedule_notification_id(item.id, day) for day in WEEKDAY_NAMES
        ]

        desired: list[ScheduledNotification] = []
        if not item.is_active:
            logger.debug(f"Schedule item {item.id} is inactive")
        else:
            try:
                clock = parse_clock(item.time)
            except ValueError:
                logger.warning(f"Schedule item {item.id} has invalid time {item.time!r}, skipping")
                clock = None
            if clock is not None:
                desired = self._schedule_item_entries(item, clock)

        with self._lock:
            keep = {n.id for n in desired}
            for notification_id in candidate_ids:
                if notification_id not in keep:
                    self.cancel(notification_id)
            return [self.schedule(n) for n in desired]

    def start(self) -> None:
        self.timers.start()

    def shutdown(self) -> None:
        self.timers.shutdown()

    # ============== Timer handling ==============

    def _schedule_item_entries(self, item: ScheduleItem, clock: time) -> list[ScheduledNotification]:
        days = item.weekdays()
        if not days:
            logger.info(
                f"Schedule item {item.id} uses {item.repeat_pattern!r} repeat, "
                "which has no reminder equivalent; skipping"
            )
            return []

        now = self.now()
        if len(days) == 7:
            return [
                ScheduledNotification(
                    id=schedule_notification_id(item.id),
                    title=item.title,
                    body=item.description,
                    scheduled_time=next_at(clock, now),
                    repeat=Repeat.DAILY,
                    schedule_id=item.id,
                )
            ]
        return [
            ScheduledNotification(
                id=schedule_notification_id(item.id, WEEKDAY_NAMES[day]),
                title=item.title,
                body=item.description,
                scheduled_time=next_at(clock, now, weekday=day),
                repeat=Repeat.WEEKLY,
                schedule_id=item.id,
            )
            for day in days
        ]

    def _arm(self, entry: ScheduledNotification) -> None:
        """Track `entry` and arm a fresh timer for it. Caller holds the lock."""
        now = self.now()
        run_at = entry.scheduled_time

        if run_at <= now:
            if entry.is_recurring:
                entry.scheduled_time, skipped = roll_forward(entry, now)
                run_at = entry.scheduled_time
                logger.info(
                    f"{entry.id} was overdue; skipped {skipped} missed occurrence(s), "
                    f"next at {run_at.isoformat()}"
                )
            else:
                logger.warning(
                    f"{entry.id} is overdue by {now - run_at}; delivering on the next tick"
                )
                run_at = now

        job_id = f"{entry.id}@{next(self._generations)}"
        self._entries[entry.id] = _Armed(entry=entry, job_id=job_id)
        self.timers.arm(job_id, run_at, partial(self._fire, entry.id, job_id))

    def _disarm(self, notification_id: str) -> None:
        armed = self._entries.get(notification_id)
        if armed is not None:
            self.timers.disarm(armed.job_id)

    def _fire(self, notification_id: str, job_id: str) -> None:
        """Timer callback: present the notification, then retire or re-arm it."""
        with self._lock:
            armed = self._entries.get(notification_id)
            if armed is None or armed.job_id != job_id:
                # Superseded by a cancel or reschedule after this timer was armed
                logger.debug(f"Ignoring stale timer {job_id}")
                return
            if not self._reconcile(armed):
                return

            entry = armed.entry
            fired = replace(entry)
            next_time = entry.next_occurrence()
            if next_time is None:
                del self._entries[notification_id]
                logger.info(f"Fired {notification_id}, retired")
            else:
                entry.scheduled_time = next_time
                self._arm(entry)
                logger.info(f"Fired {notification_id}, next at {entry.scheduled_time.isoformat()}")
            self._persist(notification_id)

        self._present(fired)

    def _reconcile(self, armed: _Armed) -> bool:
        """
        Adopt changes another process made to a due entry. Caller holds the lock.

        Returns False when the entry should not fire now: it was cancelled in
        the store, or moved to a later time (and has been re-armed for it).
        """
        notification_id = armed.entry.id
        if notification_id in self._unsaved:
            return True
        try:
            stored = {n.id: n for n in self.store.load()}.get(notification_id)
        except StoreError as e:
            logger.warning(f"Could not re-check {notification_id} before firing: {e}")
            return True

        if stored is None:
            del self._entries[notification_id]
            logger.info(f"{notification_id} was cancelled elsewhere, not firing")
            return False

        stored = stored.localized(self.tz)
        if stored == armed.entry:
            return True
        if stored.scheduled_time > self.now():
            self._arm(stored)
            logger.info(f"{notification_id} was moved elsewhere to {stored.scheduled_time.isoformat()}")
            return False
        armed.entry = stored
        return True

    def _present(self, notification: ScheduledNotification) -> None:
        try:
            self.presenter.present(
                notification.title,
                notification.body,
                tag=notification.id,
                require_interaction=True,
            )
        except PresentationUnavailable as e:
            logger.warning(f"Notification {notification.id} not shown: {e}")
        except Exception as e:
            logger.error(f"Failed to present notification {notification.id}: {e}")

    def _persist(self, *notification_ids: str) -> None:
        """
        Write the current state of `notification_ids` to the store.

        Tracked ids are upserted, untracked ones removed; other stored entries
        are left alone. Failures are logged and the ids stay in memory as the
        authoritative copy until a later write succeeds.
        """
        upserts = []
        removed = []
        for notification_id in notification_ids:
            armed = self._entries.get(notification_id)
            if armed is None:
                removed.append(notification_id)
            else:
                upserts.append(replace(armed.entry))

        try:
            self.store.update(upserts, removed)
        except StoreError as e:
            self._unsaved.update(notification_ids)
            logger.error(f"Failed to persist scheduled notifications: {e}")
            return
        self._unsaved.difference_update(notification_ids)

    # ============== Queries ==============
    # Keep last: `list` shadows the builtin in annotations that follow it

    def get(self, notification_id: str) -> ScheduledNotification | None:
        with self._lock:
            armed = self._entries.get(notification_id)
            return replace(armed.entry) if armed else None

    def list(self) -> list[ScheduledNotification]:
        """Snapshot of all tracked notifications, soonest first."""
        with self._lock:
            entries = [replace(a.entry) for a in self._entries.values()]
        return sorted(entries, key=lambda n: n.scheduled_time)
