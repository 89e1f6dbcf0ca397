"""Per-provider call serialization and pacing."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable
from typing import Callable
from typing import TypeVar

from fixturecast.config.settings import DEFAULT_MAX_ATTEMPTS
from fixturecast.config.settings import DEFAULT_MAX_WAIT_MS
from fixturecast.core.clock import Clock
from fixturecast.core.clock import SystemClock
from fixturecast.core.limiter import RateLimiter
from fixturecast.errors.types import RateLimitedError
from fixturecast.models import format_wait

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CallSerializer:
    """Runs at most one call per provider at a time, spaced by min_interval_ms.

    Each provider gets its own asyncio.Lock. Waiters on an asyncio.Lock are
    woken in the order they arrived, which gives FIFO ordering per provider.
    Providers are independent of each other.
    """

    def __init__(
        self,
        limiter: RateLimiter,
        clock: Clock | None = None,
        *,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        max_wait_ms: float = DEFAULT_MAX_WAIT_MS,
    ) -> None:
        self._limiter = limiter
        self._clock = clock or SystemClock()
        self.max_attempts = max(1, max_attempts)
        # Admission needs one pass to enter a block and one to wait it out
        self.admission_passes = max(2, self.max_attempts)
        self.max_wait_ms = max_wait_ms
        self._locks: dict[str, asyncio.Lock] = {}
        self._last_call_at: dict[str, float] = {}

    def _lock_for(self, provider: str) -> asyncio.Lock:
        if provider not in self._locks:
            self._locks[provider] = asyncio.Lock()
        return self._locks[provider]

    def last_call_at(self, provider: str) -> float | None:
        """Completion time (epoch ms) of the provider's last dispatched call."""
        return self._last_call_at.get(provider)

    def is_busy(self, provider: str) -> bool:
        """Check whether a call for `provider` currently holds the queue."""
        lock = self._locks.get(provider)
        return lock is not None and lock.locked()

    async def run(self, provider: str, fn: Callable[[], Awaitable[T]]) -> T:
        """Queue `fn` behind earlier calls to `provider` and run it in turn.

        Raises:
            RateLimitedError: If the provider cannot be admitted, or it kept
                throttling us, within the configured attempts and wait
            Exception: Any other error from `fn`, unchanged
        """
        async with self._lock_for(provider):
            return await self._run_turn(provider, fn)

    async def _run_turn(self, provider: str, fn: Callable[[], Awaitable[T]]) -> T:
        for attempt in range(1, self.max_attempts + 1):
            await self._wait_for_interval(provider)
            await self._wait_for_admission(provider)

            self._limiter.record_success(provider)
            logger.debug("%s call in flight (attempt %d)", provider, attempt)
            try:
                result = await fn()
            except RateLimitedError as e:
                e.provider = e.provider or provider
                e.wait_ms = self._limiter.classify_and_backoff(provider, e)
                if attempt >= self.max_attempts or e.wait_ms > self.max_wait_ms:
                    raise
                logger.info(
                    "%s throttled on attempt %d/%d, retrying in %s",
                    provider,
                    attempt,
                    self.max_attempts,
                    format_wait(e.wait_ms),
                )
                if self._limiter.config_for(provider) is None:
                    # No limiter block to wait on, so back off here
                    await self._clock.sleep_ms(e.wait_ms)
                continue
            finally:
                self._last_call_at[provider] = self._clock.now_ms()

            logger.debug("%s call succeeded (attempt %d)", provider, attempt)
            return result

        # Unreachable: the final attempt either returns or raises
        raise RateLimitedError(f"{provider} failed after {self.max_attempts} attempts", provider)

    async def _wait_for_interval(self, provider: str) -> None:
        config = self._limiter.config_for(provider)
        last = self._last_call_at.get(provider)
        if config is None or last is None:
            return

        remaining = last + config.effective_min_interval_ms - self._clock.now_ms()
        if remaining > 0:
            logger.debug("%s pacing for %.0fms", provider, remaining)
            await self._clock.sleep_ms(remaining)

    async def _wait_for_admission(self, provider: str) -> None:
        """Sleep out block windows until the limiter admits the call.

        Fails fast when the required wait exceeds max_wait_ms (e.g. the daily
        quota is spent) so callers can report a retry window instead.
        """
        for _ in range(self.admission_passes):
            wait_ms = self._limiter.status(provider).wait_time_ms
            if wait_ms > self.max_wait_ms:
                raise RateLimitedError(
                    f"{provider} rate limit exceeded. Please try again later.",
                    provider,
                    wait_ms=wait_ms,
                )
            if wait_ms > 0:
                logger.info(
                    "Waiting %s for %s availability", format_wait(wait_ms), provider
                )
                await self._clock.sleep_ms(wait_ms)

            if self._limiter.can_admit(provider):
                return

        raise RateLimitedError(
            f"{provider} rate limit exceeded. Please try again later.",
            provider,
            wait_ms=self._limiter.status(provider).wait_time_ms,
        )
