from __future__ import annotations

import pytest

from core.retry import RetryConfig, call_with_retries


class Flaky:
    def __init__(self, failures: int, exc: Exception | None = None) -> None:
        self.failures = failures
        self.exc = exc or ConnectionError("down")
        self.calls = 0

    async def __call__(self) -> str:
        self.calls += 1
        if self.calls <= self.failures:
            raise self.exc
        return "ok"


class Sleeps:
    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.mark.asyncio
async def test_succeeds_on_third_attempt():
    fn = Flaky(failures=2)
    sleeps = Sleeps()

    result = await call_with_retries(
        fn,
        cfg=RetryConfig(max_attempts=3, delay_seconds=1.0),
        is_retryable=lambda exc: True,
        operation="test",
        sleep_fn=sleeps,
    )

    assert result == "ok"
    assert fn.calls == 3
    assert sleeps.delays == [1.0, 1.0]


@pytest.mark.asyncio
async def test_last_error_surfaces_after_exhaustion():
    fn = Flaky(failures=5)

    with pytest.raises(ConnectionError):
        await call_with_retries(
            fn,
            cfg=RetryConfig(max_attempts=3, delay_seconds=0),
            is_retryable=lambda exc: True,
            operation="test",
        )
    assert fn.calls == 3


@pytest.mark.asyncio
async def test_non_retryable_error_raises_immediately():
    fn = Flaky(failures=1, exc=ValueError("bad"))

    with pytest.raises(ValueError):
        await call_with_retries(
            fn,
            cfg=RetryConfig(max_attempts=3, delay_seconds=0),
            is_retryable=lambda exc: not isinstance(exc, ValueError),
            operation="test",
        )
    assert fn.calls == 1


@pytest.mark.asyncio
async def test_backoff_factor_grows_delay():
    sleeps = Sleeps()

    await call_with_retries(
        Flaky(failures=3),
        cfg=RetryConfig(max_attempts=4, delay_seconds=0.5, backoff_factor=2.0),
        is_retryable=lambda exc: True,
        operation="test",
        sleep_fn=sleeps,
    )

    assert sleeps.delays == [0.5, 1.0, 2.0]


@pytest.mark.parametrize(
    "kwargs",
    [{"max_attempts": 0}, {"delay_seconds": -1}, {"backoff_factor": 0.5}],
)
def test_invalid_config_rejected(kwargs):
    with pytest.raises(ValueError):
        RetryConfig(**kwargs)
