"""File-based notification storage adapter."""

import fcntl
import json
import logging
from contextlib import contextmanager
from pathlib import Path

from voicemate.core.notifications import InvalidNotificationError, ScheduledNotification
from voicemate.ports.notification_store import StoreError

logger = logging.getLogger(__name__)


class JsonNotificationStore:
    """
    JSON file notification storage.

    Implements NotificationStore protocol. The whole collection lives in one
    file shared by every voicemate process. Writers take an exclusive lock on
    a sidecar `.lock` file and re-read the collection before changing it, so
    concurrent processes only ever replace the entries they changed.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path).expanduser()
        self.lock_path = self.path.with_suffix(self.path.suffix + ".lock")

    def load(self) -> list[ScheduledNotification]:
        """Load all persisted notifications. A missing file means none."""
        if not self.path.exists():
            return []

        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            # ValueError covers both bad JSON and bytes that are not UTF-8
            raise StoreError(f"Failed to read {self.path}: {e}") from e

        if not isinstance(data, list):
            raise StoreError(f"Expected a list in {self.path}, got {type(data).__name__}")

        notifications = []
        for item in data:
            try:
                notifications.append(ScheduledNotification.from_dict(item))
            except InvalidNotificationError as e:
                logger.warning(f"Skipping invalid stored notification: {e}")
        return notifications

    def save(self, notifications: list[ScheduledNotification]) -> None:
        """Replace the persisted notifications."""
        with self._locked():
            self._write(notifications)

    def update(
        self,
        upserts: list[ScheduledNotification],
        removed_ids: list[str] | None = None,
    ) -> None:
        """Insert/replace `upserts` and drop `removed_ids`, keeping every other stored entry."""
        with self._locked():
            current = {n.id: n for n in self.load()}
            for notification_id in removed_ids or []:
                current.pop(notification_id, None)
            for notification in upserts:
                current[notification.id] = notification
            self._write(list(current.values()))

    @contextmanager
    def _locked(self):
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            handle = open(self.lock_path, "a")
        except OSError as e:
            raise StoreError(f"Failed to lock {self.path}: {e}") from e

        with handle:
            fcntl.flock(handle, fcntl.LOCK_EX)
            try:
                yield
            finally:
                fcntl.flock(handle, fcntl.LOCK_UN)

    def _write(self, notifications: list[ScheduledNotification]) -> None:
        payload = json.dumps([n.to_dict() for n in notifications], indent=2)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            tmp_path.write_text(payload, encoding="utf-8")
            tmp_path.replace(self.path)
        except OSError as e:
            raise StoreError(f"Failed to write {self.path}: {e}") from e
