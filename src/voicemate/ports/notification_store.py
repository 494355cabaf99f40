"""Scheduled notification persistence interface."""

from typing import Protocol

from voicemate.core.notifications import ScheduledNotification


class StoreError(Exception):
    """Raised when notifications cannot be loaded or saved."""

    pass


class NotificationStore(Protocol):
    """Interface for persisting scheduled notifications shared between processes."""

    def load(self) -> list[ScheduledNotification]:
        """Load all persisted notifications."""
        ...

    def save(self, notifications: list[ScheduledNotification]) -> None:
        """Replace the persisted notifications with `notifications`."""
        ...

    def update(
        self,
        upserts: list[ScheduledNotification],
        removed_ids: list[str] | None = None,
    ) -> None:
        """Atomically insert/replace `upserts` and drop `removed_ids`; other entries are kept."""
        ...
