"""Notification presentation interface."""

from typing import Protocol


class PresentationUnavailable(Exception):
    """Raised when notifications are unsupported or permission was denied."""

    pass


class TransientPresentationError(Exception):
    """Raised for failures worth retrying (network hiccups, timeouts)."""

    pass


class NotificationPresenter(Protocol):
    """Interface for showing a notification to the user."""

    def present(
        self,
        title: str,
        body: str | None = None,
        tag: str | None = None,
        require_interaction: bool = False,
    ) -> None:
        """Show a notification. Raises PresentationUnavailable if it cannot."""
        ...

    def request_permission(self) -> bool:
        """Ask for permission to present notifications. Returns True if granted."""
        ...
