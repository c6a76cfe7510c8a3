"""Policies that wrap an asynchronous action: retry, timeout, rate limit,
circuit breaker and protection.

An action is an argument-less callable returning an awaitable; it reports
failure by raising. Every policy returns a new action of the same shape.
"""

from __future__ import annotations

import asyncio
import math
import threading
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import timedelta

Action = Callable[[], Awaitable[None]]
Duration = float | timedelta
Backoff = Callable[[int], Duration]


def _seconds(duration: Duration) -> float:
    if isinstance(duration, timedelta):
        return duration.total_seconds()
    return float(duration)


async def _noop() -> None:
    """Yield to the event loop once and finish successfully."""
    await asyncio.sleep(0)


class CircuitOpenError(RuntimeError):
    """The circuit is open and the action is not called."""

    def __init__(self) -> None:
        super().__init__("circuit open")


class InvalidRateLimitError(ValueError):
    """The rate limit is not a positive number."""

    def __init__(self) -> None:
        super().__init__("invalid rate limit")


class WaitRateLimitError(RuntimeError):
    """Waiting for the rate limiter failed."""

    def __init__(self, err: BaseException) -> None:
        super().__init__(f"wait rate limit: {err}")
        self.err = err


def circuit_breaker(
    max_failures: int, reset_timeout: Duration, effector: Action | None
) -> Action:
    """Stop calling the action after max_failures failures in a row, until
    reset_timeout has passed since the last failure."""
    if effector is None:
        return _noop
    reset = _seconds(reset_timeout)
    failures = 0
    last_failure = -math.inf

    async def run() -> None:
        nonlocal failures, last_failure
        if failures >= max_failures and time.monotonic() - last_failure < reset:
            raise CircuitOpenError()
        try:
            await effector()
        except Exception as exc:
            failures += 1
            last_failure = time.monotonic()
            if failures >= max_failures:
                raise CircuitOpenError() from exc
            raise
        failures = 0

    return run


def protector(effector: Action | None) -> Action:
    """Catch whatever the action raises and raise it as an ExceptionGroup.

    Callers then only ever see one kind of error from a protected action.
    Cancellation is not caught.
    """
    if effector is None:
        return _noop

    async def run() -> None:
        try:
            await effector()
        except Exception as exc:
            raise ExceptionGroup("recovered from failure", [exc]) from None

    return run


class _TokenBucket:
    """Token bucket holding at most one token, refilled at a fixed rate."""

    def __init__(self, rate: float) -> None:
        self._rate = rate
        self._tokens = 1.0
        self._last = time.monotonic()
        self._lock = threading.Lock()

    def _take(self) -> float:
        with self._lock:
            if math.isinf(self._rate):
                return 0.0
            now = time.monotonic()
            self._tokens = min(1.0, self._tokens + (now - self._last) * self._rate)
            self._last = now
            self._tokens -= 1.0
            if self._tokens >= 0:
                return 0.0
            return -self._tokens / self._rate

    def _give_back(self) -> None:
        with self._lock:
            self._tokens = min(1.0, self._tokens + 1.0)

    async def wait(self) -> None:
        delay = self._take()
        if delay <= 0:
            return
        try:
            await asyncio.sleep(delay)
        except asyncio.CancelledError:
            self._give_back()
            raise


def rate_limiter(rate: float, effector: Action | None) -> Action:
    """Call the action at most `rate` times per second, with a burst of one.

    A rate of zero or less makes every call fail with InvalidRateLimitError.
    """
    if effector is None:
        return _noop
    bucket = _TokenBucket(float(rate)) if rate > 0 else None

    async def run() -> None:
        if bucket is None:
            raise InvalidRateLimitError()
        try:
            await bucket.wait()
        except Exception as exc:
            raise WaitRateLimitError(exc) from exc
        await effector()

    return run


def default_backoff(retries: int) -> float:
    """Seconds to wait before the next try: 2 to the power of retries."""
    return float(1 << retries)


@dataclass
class Retrier:
    """Calls an action up to max_retries times, waiting between tries."""

    max_retries: int = 0
    backoff: Backoff | None = None

    def retry(self, effector: Action | None) -> Action:
        """Wrap the action; without a backoff the default one is used."""
        if effector is None:
            return _noop
        if self.backoff is None:
            self.backoff = default_backoff

        async def run() -> None:
            error: Exception | None = None
            for attempt in range(self.max_retries):
                try:
                    await effector()
                    return
                except Exception as exc:
                    error = exc
                backoff = self.backoff or default_backoff
                await asyncio.sleep(_seconds(backoff(attempt)))
            if error is not None:
                raise error

        return run


DEFAULT_RETRIER = Retrier(max_retries=3, backoff=default_backoff)


def retry(effector: Action | None) -> Action:
    """Wrap the action with the default retrier."""
    return DEFAULT_RETRIER.retry(effector)


def set_max_retries(maximum: int) -> None:
    """Set how many tries the default retrier makes."""
    DEFAULT_RETRIER.max_retries = maximum


def set_backoff(backoff: Backoff | None) -> None:
    """Set the backoff of the default retrier."""
    DEFAULT_RETRIER.backoff = backoff


def timeouter(timeout: Duration, effector: Action | None) -> Action:
    """Cancel the action and raise TimeoutError if it runs longer than timeout.

    A timeout of zero or less fails at once without calling the action.
    """
    if effector is None:
        return _noop
    seconds = _seconds(timeout)

    async def run() -> None:
        if seconds <= 0:
            raise TimeoutError("deadline exceeded")
        async with asyncio.timeout(seconds):
            await effector()

    return run