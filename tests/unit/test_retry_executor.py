"""Retry executor tests."""

from __future__ import annotations

import pytest

from reposentry.resilience.retry import RetryExecutor, RetryPolicy


def test_retry_executor_retries_then_succeeds() -> None:
    """Executor should retry failed attempts and eventually return success."""
    attempts = {"count": 0}
    slept: list[float] = []

    def operation() -> str:
        attempts["count"] += 1
        if attempts["count"] < 3:
            raise ConnectionError("temporary failure")
        return "ok"

    executor = RetryExecutor(
        RetryPolicy(max_attempts=3, backoff_seconds=0.1, jitter_seconds=0.0),
        sleep_fn=slept.append,
        jitter_fn=lambda _a, _b: 0.0,
    )
    result = executor.run(operation, operation_name="retry-test")
    assert result == "ok"
    assert attempts["count"] == 3
    assert slept == [0.1, 0.2]


def test_last_exception_is_reraised_unchanged() -> None:
    """Exhausted retries surface the original exception type."""
    executor = RetryExecutor(
        RetryPolicy(max_attempts=2, backoff_seconds=0.0, jitter_seconds=0.0),
        sleep_fn=lambda _delay: None,
    )

    def operation() -> None:
        raise TimeoutError("still down")

    with pytest.raises(TimeoutError, match="still down"):
        executor.run(operation, operation_name="exhausted")


def test_non_whitelisted_exceptions_are_not_retried() -> None:
    """Only exception types listed in retry_on trigger another attempt."""
    attempts = {"count": 0}

    def operation() -> None:
        attempts["count"] += 1
        raise KeyError("bad payload")

    executor = RetryExecutor(
        RetryPolicy(
            max_attempts=5,
            backoff_seconds=0.0,
            jitter_seconds=0.0,
            retry_on=(ConnectionError,),
        ),
        sleep_fn=lambda _delay: None,
    )
    with pytest.raises(KeyError):
        executor.run(operation, operation_name="no-retry")
    assert attempts["count"] == 1


def test_zero_attempts_is_invalid() -> None:
    """A policy must allow at least one attempt."""
    with pytest.raises(ValueError):
        RetryExecutor(RetryPolicy(max_attempts=0, backoff_seconds=0.0))
