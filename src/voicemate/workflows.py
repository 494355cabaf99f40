"""Shared workflow layer behind the CLI.

Wires adapters from config, files captured utterances and keeps reminders
in sync with the task board and timetable.
"""

import logging
from dataclasses import dataclass
from datetime import date, time

from .adapters.apscheduler_timers import APSchedulerTimers
from .adapters.console_presenter import ConsolePresenter
from .adapters.json_store import JsonNotificationStore
from .adapters.retrying_presenter import RetryingPresenter
from .adapters.telegram_presenter import TelegramPresenter
from .config import Config
from .core.capture import ClassificationResult, KeywordRules, classify
from .core.notifications import schedule_notification_id, task_notification_id
from .core.retry import RetryPolicy
from .core.tasks import parse_clock
from .ports.presenter import NotificationPresenter
from .ports.task_repo import TaskRepository
from .ports.timer_service import TimerService
from .scheduler import NotificationScheduler

logger = logging.getLogger(__name__)


def keyword_rules(config: Config) -> KeywordRules:
    """Classifier rules with any keyword overrides from config."""
    return KeywordRules.from_lists(
        config.task_keywords,
        config.high_priority_keywords,
        config.low_priority_keywords,
    )


def build_presenter(config: Config) -> NotificationPresenter:
    """Presenter named in config, wrapped in the configured retry policy."""
    match config.presenter:
        case "telegram":
            presenter = TelegramPresenter(config.telegram_bot_token, config.telegram_chat_ids)
        case "console":
            presenter = ConsolePresenter()
        case other:
            logger.warning(f"Unknown presenter {other!r}, using console")
            presenter = ConsolePresenter()

    policy = RetryPolicy(
        max_attempts=max(config.retry_max_attempts, 1),
        backoff=tuple(config.retry_backoff),
    )
    return RetryingPresenter(presenter, policy)


def default_reminder_time(config: Config) -> time:
    try:
        return parse_clock(config.default_reminder_time)
    except ValueError:
        logger.warning(f"Invalid DEFAULT_REMINDER_TIME {config.default_reminder_time!r}, using 09:00")
        return time(9, 0)


def build_scheduler(
    config: Config,
    timers: TimerService | None = None,
    presenter: NotificationPresenter | None = None,
) -> NotificationScheduler:
    """Notification scheduler backed by the JSON store and APScheduler timers."""
    tz = config.tz
    return NotificationScheduler(
        timers=timers or APSchedulerTimers(timezone=tz),
        store=JsonNotificationStore(config.notifications_path),
        presenter=presenter or build_presenter(config),
        tz=tz,
        default_reminder_time=default_reminder_time(config),
    )


# ============== Capture ==============


@dataclass
class CaptureOutcome:
    """What a captured utterance became."""

    result: ClassificationResult
    record_id: int | str | None = None


def capture_utterance(
    text: str,
    repo: TaskRepository,
    rules: KeywordRules,
    today: date | None = None,
) -> CaptureOutcome | None:
    """
    Classify an utterance and file it as a task (due today) or a diary entry.

    Empty or whitespace-only text is ignored (returns None).
    """
    text = text.strip()
    if not text:
        return None

    today = today or date.today()
    result = classify(text, rules)

    if result.is_task:
        task = repo.create_task(result.to_task_payload(due_date=today))
        logger.info(f"Captured task {task.id}: {result.title!r}")
        return CaptureOutcome(result=result, record_id=task.id)

    entry = repo.create_diary_entry(result.to_diary_payload(today))
    logger.info(f"Captured diary entry {entry.id}")
    return CaptureOutcome(result=result, record_id=entry.id)


# ============== Reminder sync ==============


@dataclass
class SyncReport:
    scheduled: int = 0
    cancelled: int = 0
    skipped: int = 0


def sync_reminders(scheduler: NotificationScheduler, repo: TaskRepository) -> SyncReport:
    """
    Bring task and timetable reminders in line with the API.

    Open tasks with an upcoming due/reminder time get a reminder; completed
    or deleted tasks lose theirs and past-due ones are left alone. Timetable
    items are re-derived and reminders for deleted items are cancelled.
    """
    report = SyncReport()
    now = scheduler.now()

    live_task_ids = set()
    for task in repo.fetch_tasks():
        notification_id = task_notification_id(task.id)
        when = task.reminder_time(scheduler.default_reminder_time, scheduler.tz)
        if task.is_completed or when is None:
            if scheduler.cancel(notification_id):
                report.cancelled += 1
            continue
        live_task_ids.add(notification_id)
        if when <= now:
            # Past due: leave any pending overdue reminder, never re-create one
            report.skipped += 1
            continue
        scheduler.derive_from_task(task)
        report.scheduled += 1

    items = repo.fetch_schedule()
    live_schedule_ids = set()
    for item in items:
        for notification in scheduler.derive_from_schedule_item(item):
            live_schedule_ids.add(notification.id)
            report.scheduled += 1

    # Reminders whose task or timetable item no longer exists
    for notification in scheduler.list():
        if notification.task_id is not None and notification.id not in live_task_ids:
            stale = notification.id == task_notification_id(notification.task_id)
        elif notification.schedule_id is not None and notification.id not in live_schedule_ids:
            stale = notification.id.startswith(schedule_notification_id(notification.schedule_id))
        else:
            stale = False
        if stale and scheduler.cancel(notification.id):
            report.cancelled += 1

    logger.info(
        f"Reminder sync: {report.scheduled} scheduled, {report.cancelled} cancelled, "
        f"{report.skipped} skipped"
    )
    return report
