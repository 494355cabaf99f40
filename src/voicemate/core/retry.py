"""Bounded retry policy for transient presentation failures."""

from dataclasses import dataclass


@dataclass(frozen=True)
class RetryPolicy:
    """
    How many times to attempt an operation and how long to wait in between.

    `backoff` lists the delays (seconds) before the 2nd, 3rd, ... attempt;
    the last delay repeats when there are more retries than entries.
    """

    max_attempts: int = 3
    backoff: tuple[float, ...] = (1.0, 2.0, 4.0)

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {self.max_attempts}")
        if any(delay < 0 for delay in self.backoff):
            raise ValueError(f"backoff delays must be non-negative, got {self.backoff}")

    def delay_before(self, attempt: int) -> float:
        """Delay before 1-based `attempt`. The first attempt never waits."""
        if attempt <= 1 or not self.backoff:
            return 0.0
        index = min(attempt - 2, len(self.backoff) - 1)
        return self.backoff[index]

    @classmethod
    def no_retry(cls) -> "RetryPolicy":
        return cls(max_attempts=1, backoff=())
