"""Timer interface used by the notification scheduler."""

from datetime import datetime
from typing import Callable, Protocol


class TimerService(Protocol):
    """Interface for one-shot timers keyed by job id."""

    def now(self) -> datetime:
        """Current time, timezone-aware."""
        ...

    def arm(self, job_id: str, run_at: datetime, callback: Callable[[], None]) -> None:
        """Run `callback` once at `run_at`."""
        ...

    def disarm(self, job_id: str) -> None:
        """Cancel a pending timer. Unknown ids are ignored."""
        ...

    def start(self) -> None:
        ...

    def shutdown(self) -> None:
        ...
