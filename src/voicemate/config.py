"""Configuration management for Voice Mate."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)

VOICEMATE_HOME = Path(os.environ.get("VOICEMATE_HOME", Path.home() / "voicemate"))
CONFIG_FILE = VOICEMATE_HOME / "config" / "voicemate.conf"
DATA_DIR = VOICEMATE_HOME / "data"


@dataclass
class Config:
    """Voice Mate configuration."""

    api_base_url: str = "http://localhost:5000"
    api_username: str = ""
    api_password: str = ""
    timezone: str = "UTC"
    default_reminder_time: str = "09:00"
    # Notification delivery
    presenter: str = "console"
    telegram_bot_token: str = ""
    telegram_chat_ids: list[int] = field(default_factory=list)
    retry_max_attempts: int = 3
    retry_backoff: list[float] = field(default_factory=lambda: [1.0, 2.0, 4.0])
    sync_interval_minutes: int = 15
    notifications_file: str = ""
    # Classifier keyword overrides (empty = built-in defaults)
    task_keywords: list[str] = field(default_factory=list)
    high_priority_keywords: list[str] = field(default_factory=list)
    low_priority_keywords: list[str] = field(default_factory=list)

    @property
    def tz(self) -> ZoneInfo:
        """Configured timezone, falling back to UTC if unknown."""
        try:
            return ZoneInfo(self.timezone or "UTC")
        except (ZoneInfoNotFoundError, ValueError):
            logger.warning(f"Unknown timezone {self.timezone!r}, using UTC")
            return ZoneInfo("UTC")

    @property
    def notifications_path(self) -> Path:
        if self.notifications_file:
            return Path(self.notifications_file).expanduser()
        return DATA_DIR / "notifications.json"


def _split_list(value: str) -> list[str]:
    return [v.strip() for v in value.split(",") if v.strip()]


def _unquote(value: str) -> str:
    """Strip quotes, or an inline comment from unquoted values."""
    # Handle quoted values with inline comments: "value" # comment
    if value.startswith('"') or value.startswith("'"):
        quote = value[0]
        end_quote = value.find(quote, 1)
        if end_quote != -1:
            return value[1:end_quote]
        return value[1:]
    if "#" in value:
        return value.split("#")[0].strip()
    return value


def load_config(path: Path | None = None) -> Config:
    """Load configuration from voicemate.conf file."""
    config = Config()
    config_file = path or CONFIG_FILE

    if not config_file.exists():
        return config

    for line in config_file.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        if "=" not in line:
            continue

        key, _, value = line.partition("=")
        key = key.strip().lower()
        value = _unquote(value.strip())

        try:
            match key:
                case "api_base_url":
                    config.api_base_url = value.rstrip("/")
                case "api_username":
                    config.api_username = value
                case "api_password":
                    config.api_password = value
                case "timezone":
                    config.timezone = value
                case "default_reminder_time":
                    config.default_reminder_time = value
                case "presenter":
                    config.presenter = value.lower()
                case "telegram_bot_token":
                    config.telegram_bot_token = value
                case "telegram_chat_ids":
                    config.telegram_chat_ids = [int(c) for c in _split_list(value)]
                case "retry_max_attempts":
                    config.retry_max_attempts = int(value)
                case "retry_backoff":
                    config.retry_backoff = [float(d) for d in _split_list(value)]
                case "sync_interval_minutes":
                    config.sync_interval_minutes = int(value)
                case "notifications_file":
                    config.notifications_file = value
                case "task_keywords":
                    config.task_keywords = _split_list(value)
                case "high_priority_keywords":
                    config.high_priority_keywords = _split_list(value)
                case "low_priority_keywords":
                    config.low_priority_keywords = _split_list(value)
        except ValueError as e:
            logger.warning(f"Ignoring invalid value for {key.upper()}: {e}")

    return config
