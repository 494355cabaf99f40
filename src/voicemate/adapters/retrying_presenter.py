"""Retry wrapper for notification presenters."""

import logging
import time
from typing import Callable

from voicemate.core.retry import RetryPolicy
from voicemate.ports.presenter import NotificationPresenter, TransientPresentationError

logger = logging.getLogger(__name__)


class RetryingPresenter:
    """
    Retries transient presentation failures according to a RetryPolicy.

    Implements NotificationPresenter protocol. PresentationUnavailable and any
    other error pass straight through; only TransientPresentationError is
    retried, and the last one is re-raised once attempts run out.
    """

    def __init__(
        self,
        presenter: NotificationPresenter,
        policy: RetryPolicy | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.presenter = presenter
        self.policy = policy or RetryPolicy()
        self._sleep = sleep

    def request_permission(self) -> bool:
        return self.presenter.request_permission()

    def present(
        self,
        title: str,
        body: str | None = None,
        tag: str | None = None,
        require_interaction: bool = False,
    ) -> None:
        for attempt in range(1, self.policy.max_attempts + 1):
            delay = self.policy.delay_before(attempt)
            if delay:
                self._sleep(delay)
            try:
                self.presenter.present(title, body, tag=tag, require_interaction=require_interaction)
                return
            except TransientPresentationError as e:
                if attempt >= self.policy.max_attempts:
                    raise
                logger.warning(
                    f"Presenting {tag or title!r} failed (attempt {attempt}/{self.policy.max_attempts}): {e}"
                )
