"""Bounded retry executor.

The executor knows nothing about HTTP or metrics: it runs an operation up to
`max_attempts` times and reports progress through injected listeners.

Usage:
    listeners = RetryListeners(
        on_retry=lambda error, attempt: console.warning(f"attempt {attempt}: {error}"),
        on_exhausted=lambda error: console.error(str(error)),
    )
    result = execute_with_retry(lambda: sender.send(payload), 5, listeners)
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from time import sleep as _sleep
from typing import Generic, TypeVar

from gitmeta.core.result import Err, Ok, Result

__all__ = ["RetryListeners", "execute_with_retry"]

T = TypeVar("T")
E = TypeVar("E")


def _ignore_retry(error: object, attempt: int) -> None:
    del error, attempt


def _ignore_error(error: object) -> None:
    del error


def _ignore() -> None:
    return None


def _always(error: object) -> bool:
    del error
    return True


@dataclass(frozen=True, slots=True)
class RetryListeners(Generic[E]):
    """Observability hooks for one retried operation.

    Attributes:
        on_retry: Called with (error, attempt) after a failed attempt that
            will be retried. `attempt` is the 1-based number of the attempt
            that just failed.
        on_exhausted: Called once with the last error when no attempt is left
            or the error is not retryable.
        on_success: Called once when an attempt succeeds.
    """

    on_retry: Callable[[E, int], None] = _ignore_retry
    on_exhausted: Callable[[E], None] = _ignore_error
    on_success: Callable[[], None] = _ignore


def execute_with_retry(
    operation: Callable[[], Result[T, E]],
    max_attempts: int,
    listeners: RetryListeners[E] | None = None,
    *,
    is_retryable: Callable[[E], bool] = _always,
    delay_seconds: float = 0.0,
    sleep: Callable[[float], None] = _sleep,
) -> Result[T, E]:
    """Run `operation` until it succeeds or attempts run out.

    Attempts are strictly sequential. Between attempts the executor waits
    `delay_seconds * attempt` (nothing by default), so the sender's own
    backoff is never stacked with a second one unless asked for.

    Args:
        operation: One send of a fixed payload
        max_attempts: Total attempts, values below 1 count as 1
        listeners: Retry/exhausted/success hooks
        is_retryable: Errors for which it returns False end the loop at once
        delay_seconds: Linear backoff step
        sleep: Injected for tests

    Returns:
        The first Ok, or the Err of the last attempt.
    """
    hooks: RetryListeners[E] = listeners or RetryListeners()
    attempts = max(1, max_attempts)

    attempt = 1
    while True:
        result = operation()
        match result:
            case Ok(_):
                hooks.on_success()
                return result
            case Err(error):
                if attempt >= attempts or not is_retryable(error):
                    hooks.on_exhausted(error)
                    return result
                hooks.on_retry(error, attempt)
                if delay_seconds > 0:
                    sleep(delay_seconds * attempt)
                attempt += 1
