"""Adapters - I/O implementations of ports."""

from .apscheduler_timers import APSchedulerTimers
from .console_presenter import ConsolePresenter
from .json_store import JsonNotificationStore
from .retrying_presenter import RetryingPresenter
from .telegram_presenter import TelegramPresenter
from .voicemate_api import ApiError, AuthenticationError, VoiceMateAPI

__all__ = [
    "APSchedulerTimers",
    "ConsolePresenter",
    "JsonNotificationStore",
    "RetryingPresenter",
    "TelegramPresenter",
    "ApiError",
    "AuthenticationError",
    "VoiceMateAPI",
]
