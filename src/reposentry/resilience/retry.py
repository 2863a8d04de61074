"""Retry helpers for provider calls."""

from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass, field
from typing import Callable, TypeVar

T = TypeVar("T")
LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetryPolicy:
    """Retry/backoff policy."""

    max_attempts: int
    backoff_seconds: float
    jitter_seconds: float = 0.2
    retry_on: tuple[type[BaseException], ...] = field(default=(Exception,))


class RetryExecutor:
    """Execute callables with retries on a whitelist of exception types."""

    def __init__(
        self,
        policy: RetryPolicy,
        *,
        sleep_fn: Callable[[float], None] = time.sleep,
        jitter_fn: Callable[[float, float], float] = random.uniform,
    ) -> None:
        if policy.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        self.policy = policy
        self._sleep = sleep_fn
        self._jitter = jitter_fn

    def run(self, operation: Callable[[], T], *, operation_name: str) -> T:
        """Run operation, retrying only exceptions listed in ``retry_on``.

        The last exception is re-raised unchanged once attempts run out, so
        callers keep handling the same exception types they would without
        retries.
        """
        for attempt in range(1, self.policy.max_attempts + 1):
            try:
                return operation()
            except self.policy.retry_on as exc:
                if attempt >= self.policy.max_attempts:
                    raise
                delay = self._backoff_delay(attempt)
                LOGGER.debug(
                    "%s failed on attempt %d/%d (%s); retrying in %.2fs",
                    operation_name,
                    attempt,
                    self.policy.max_attempts,
                    exc,
                    delay,
                )
                self._sleep(delay)
        raise AssertionError("unreachable")

    def _backoff_delay(self, attempt: int) -> float:
        base_delay = self.policy.backoff_seconds * (2 ** (attempt - 1))
        jitter = self._jitter(0.0, self.policy.jitter_seconds)
        return max(0.0, base_delay + jitter)
