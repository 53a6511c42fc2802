"""Bounded retry for async calls.

The policy is deliberately small: a fixed number of attempts and a delay
that grows by `backoff_factor` after each failure (factor 1 = fixed).
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, TypeVar

from core.config import ClientSettings

T = TypeVar("T")

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetryConfig:
    """
    Retry policy.

    - max_attempts counts the initial attempt (max_attempts=3 => 1 try + 2 retries).
    - delay_seconds is the wait after the first failure.
    - backoff_factor multiplies the wait after each further failure.
    """

    max_attempts: int = 3
    delay_seconds: float = 1.0
    backoff_factor: float = 1.0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if self.delay_seconds < 0:
            raise ValueError("delay_seconds must be >= 0")
        if self.backoff_factor < 1:
            raise ValueError("backoff_factor must be >= 1")

    @classmethod
    def from_settings(cls, settings: ClientSettings) -> "RetryConfig":
        return cls(
            max_attempts=settings.max_attempts,
            delay_seconds=settings.retry_delay_seconds,
            backoff_factor=settings.retry_backoff_factor,
        )

    def delay_for(self, failure_attempt: int) -> float:
        # failure_attempt=1 => base delay.
        exponent = max(0, int(failure_attempt) - 1)
        return max(0.0, float(self.delay_seconds * (self.backoff_factor**exponent)))


IsRetryableFn = Callable[[BaseException], bool]
SleepFn = Callable[[float], Awaitable[None]]


async def call_with_retries(
    fn: Callable[[], Awaitable[T]],
    *,
    cfg: RetryConfig,
    is_retryable: IsRetryableFn,
    operation: str,
    sleep_fn: SleepFn | None = None,
) -> T:
    """
    Await fn() with retries on retryable failures.

    The last error is re-raised unchanged once attempts run out or the
    error is not retryable.
    """
    op = (operation or "").strip() or "operation"
    sleeper = sleep_fn or asyncio.sleep

    for attempt in range(1, int(cfg.max_attempts) + 1):
        try:
            return await fn()
        except Exception as exc:
            if not is_retryable(exc) or attempt >= int(cfg.max_attempts):
                raise

            delay = cfg.delay_for(attempt)
            logger.warning(
                "%s: attempt %d/%d failed (%s: %s), retrying in %.2fs",
                op,
                attempt,
                cfg.max_attempts,
                type(exc).__name__,
                exc,
                delay,
            )
            if delay > 0:
                await sleeper(delay)

    # Unreachable, but keeps typing happy.
    raise RuntimeError(f"Retry loop exited unexpectedly for operation={op}")
