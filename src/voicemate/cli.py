"""Voice Mate CLI - smart capture and reminders."""

import json
import logging
import sys
import threading
from datetime import date, datetime

import click

from .adapters.apscheduler_timers import APSchedulerTimers
from .adapters.voicemate_api import ApiError, VoiceMateAPI
from .config import load_config
from .core.capture import classify
from .core.notifications import (
    InvalidNotificationError,
    Repeat,
    ScheduledNotification,
    new_notification_id,
)
from .core.tasks import next_at, parse_clock
from .workflows import build_presenter, build_scheduler, capture_utterance, keyword_rules, sync_reminders

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _setup_logging(debug: bool) -> None:
    logging.basicConfig(format=LOG_FORMAT, level=logging.DEBUG if debug else logging.INFO)
    # APScheduler logs every job execution at INFO
    logging.getLogger("apscheduler").setLevel(logging.INFO if debug else logging.WARNING)


def _read_text(text: str | None) -> str:
    """Text argument, or stdin when omitted or '-' (e.g. piped from speech-to-text)."""
    if text is None or text == "-":
        return sys.stdin.read()
    return text


def _parse_when(value: str, now: datetime) -> datetime:
    """
    Parse --at as HH:MM or an ISO datetime.

    HH:MM means the next time the clock shows it, so a time already passed
    today is tomorrow.
    """
    try:
        return next_at(parse_clock(value), now)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        raise InvalidNotificationError(f"Invalid time {value!r}. Use HH:MM or YYYY-MM-DDTHH:MM")


@click.group()
@click.version_option()
@click.option("--debug", is_flag=True, help="Enable debug logging")
def main(debug: bool):
    """Voice Mate - voice diary, task capture and reminders."""
    _setup_logging(debug)


@main.command("classify")
@click.argument("text", required=False)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def classify_cmd(text: str | None, as_json: bool):
    """Show whether TEXT would be filed as a task or a diary entry."""
    text = _read_text(text).strip()
    if not text:
        click.echo("Error: nothing to classify", err=True)
        sys.exit(1)

    config = load_config()
    result = classify(text, keyword_rules(config))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
        return

    if result.is_task:
        click.echo(f"Task [{result.priority.value}] {result.title}")
        if result.description:
            click.echo(f"  {result.description}")
    else:
        click.echo(f"Diary entry: {result.title}")


@main.command()
@click.argument("text", required=False)
@click.option("--dry-run", is_flag=True, help="Classify only, do not file")
def capture(text: str | None, dry_run: bool):
    """Classify TEXT and file it as a task or diary entry."""
    text = _read_text(text)
    config = load_config()
    rules = keyword_rules(config)

    if dry_run:
        if not text.strip():
            click.echo("Nothing to capture.")
            return
        result = classify(text.strip(), rules)
        kind = "task" if result.is_task else "diary entry"
        click.echo(f"Would file as {kind}: {result.title}")
        return

    try:
        outcome = capture_utterance(text, VoiceMateAPI(config), rules, today=date.today())
    except ApiError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if outcome is None:
        click.echo("Nothing to capture.")
        return

    result = outcome.result
    if result.is_task:
        click.echo(f"✓ Task #{outcome.record_id}: {result.title} ({result.priority.value})")
    else:
        click.echo(f"✓ Diary entry #{outcome.record_id} saved for {date.today().isoformat()}")


@main.group()
def remind():
    """Manage scheduled reminders."""
    pass


@remind.command("add")
@click.argument("title")
@click.option("--at", "at", required=True, help="HH:MM (next occurrence) or ISO datetime")
@click.option("--body", default=None, help="Optional message")
@click.option(
    "--repeat",
    type=click.Choice([r.value for r in Repeat]),
    default=Repeat.NONE.value,
    show_default=True,
)
@click.option("--id", "notification_id", default=None, help="Reuse an id to replace a reminder")
def remind_add(title: str, at: str, body: str | None, repeat: str, notification_id: str | None):
    """Schedule a reminder."""
    config = load_config()
    scheduler = build_scheduler(config)
    scheduler.restore()

    try:
        when = _parse_when(at, scheduler.now())
        entry = scheduler.schedule(
            ScheduledNotification(
                id=notification_id or new_notification_id(),
                title=title,
                body=body,
                scheduled_time=when,
                repeat=Repeat(repeat),
            )
        )
    except InvalidNotificationError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    suffix = f" ({entry.repeat.value})" if entry.is_recurring else ""
    click.echo(f"✓ {entry.id}: \"{entry.title}\" at {entry.scheduled_time.strftime('%Y-%m-%d %H:%M')}{suffix}")


@remind.command("list")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def remind_list(as_json: bool):
    """List scheduled reminders."""
    config = load_config()
    scheduler = build_scheduler(config)
    scheduler.restore()
    notifications = scheduler.list()

    if as_json:
        click.echo(json.dumps([n.to_dict() for n in notifications], indent=2, ensure_ascii=False))
        return

    if not notifications:
        click.echo("No reminders scheduled.")
        return

    for n in notifications:
        when = n.scheduled_time.strftime("%a %b %d %H:%M")
        repeat = f" ({n.repeat.value})" if n.is_recurring else ""
        click.echo(f"  {when}  {n.title}{repeat}  [{n.id}]")


@remind.command("cancel")
@click.argument("notification_id")
def remind_cancel(notification_id: str):
    """Cancel a reminder by id."""
    config = load_config()
    scheduler = build_scheduler(config)
    scheduler.restore()

    if scheduler.cancel(notification_id):
        click.echo(f"✓ Cancelled {notification_id}")
    else:
        click.echo(f"No reminder with id {notification_id}.")


@main.command()
def sync():
    """Derive reminders from the task board and timetable."""
    config = load_config()
    scheduler = build_scheduler(config)
    scheduler.restore()

    try:
        report = sync_reminders(scheduler, VoiceMateAPI(config))
    except ApiError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo(f"Scheduled {report.scheduled}, cancelled {report.cancelled}, skipped {report.skipped}.")


@main.command()
def permission():
    """Ask for permission to show notifications."""
    config = load_config()
    presenter = build_presenter(config)

    if presenter.request_permission():
        click.echo(f"✓ Notifications allowed ({config.presenter}).")
    else:
        click.echo(
            f"Notification permission denied ({config.presenter}). "
            "Reminders will be tracked but not shown until this is fixed.",
            err=True,
        )
        sys.exit(1)


@main.command()
@click.option("--no-sync", is_flag=True, help="Do not pull reminders from the API")
def run(no_sync: bool):
    """Run the reminder scheduler until interrupted."""
    config = load_config()
    timers = APSchedulerTimers(timezone=config.tz)
    scheduler = build_scheduler(config, timers=timers)
    presenter = scheduler.presenter

    if not presenter.request_permission():
        logger.warning("Notification permission denied; reminders will be tracked but not shown")

    restored = scheduler.restore()
    click.echo(f"Restored {restored} reminder(s).")

    api = None if no_sync else VoiceMateAPI(config)

    def refresh():
        # Pick up edits made from other voicemate commands
        scheduler.restore()
        if api is None:
            return
        try:
            sync_reminders(scheduler, api)
        except ApiError as e:
            logger.error(f"Reminder sync failed: {e}")

    refresh()
    timers.every("voicemate-refresh", config.sync_interval_minutes, refresh)
    scheduler.start()

    click.echo("Voice Mate reminders running. Press Ctrl+C to stop")
    try:
        threading.Event().wait()
    except KeyboardInterrupt:
        click.echo("\nStopped.")
    finally:
        scheduler.shutdown()


if __name__ == "__main__":
    main()
