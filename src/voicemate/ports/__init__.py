"""Ports - interfaces/protocols for external dependencies."""

from .presenter import NotificationPresenter, PresentationUnavailable, TransientPresentationError
from .notification_store import NotificationStore, StoreError
from .timer_service import TimerService
from .task_repo import TaskRepository

__all__ = [
    "NotificationPresenter",
    "PresentationUnavailable",
    "TransientPresentationError",
    "NotificationStore",
    "StoreError",
    "TimerService",
    "TaskRepository",
]
