"""Per-provider request quotas with block windows and backoff."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Mapping

import msgspec

from fixturecast.config.settings import RateLimitConfig
from fixturecast.core.clock import Clock
from fixturecast.core.clock import SystemClock
from fixturecast.errors.types import RateLimitedError
from fixturecast.models import RateLimitStatus
from fixturecast.models import format_wait

logger = logging.getLogger(__name__)

# Window and block constants
MINUTE_MS = 60_000
DAY_MS = 24 * 60 * 60 * 1000
# Backoff used for providers without a registered config
UNCONFIGURED_BACKOFF_MS = 5_000


@dataclass
class RateLimitState:
    """Mutable counters and block window for one provider.

    Never persisted; a restart starts from zero.
    """

    window_started_at: float
    daily_window_date: date
    request_count_this_minute: int = 0
    daily_count: int = 0
    is_blocked: bool = False
    blocked_until: float = 0


class RateLimiter:
    """Decides admission, records usage and computes backoff per provider.

    State for each provider is owned here; nothing else mutates it. All
    mutations are synchronous, so callers on one event loop cannot interleave
    inside an update.
    """

    def __init__(
        self,
        configs: Mapping[str, RateLimitConfig],
        clock: Clock | None = None,
    ) -> None:
        self._clock = clock or SystemClock()
        self._configs: dict[str, RateLimitConfig] = dict(configs)
        self._states: dict[str, RateLimitState] = {}
        self._warned: set[str] = set()
        for provider in self._configs:
            self.reset(provider)

    @property
    def providers(self) -> list[str]:
        """Providers with a registered config."""
        return list(self._configs)

    def config_for(self, provider: str) -> RateLimitConfig | None:
        return self._configs.get(provider)

    def state_for(self, provider: str) -> RateLimitState | None:
        return self._states.get(provider)

    def reset(self, provider: str) -> None:
        """Reset a provider's counters and clear any block."""
        self._states[provider] = RateLimitState(
            window_started_at=self._clock.now_ms(),
            daily_window_date=self._clock.today(),
        )

    def update_limits(self, provider: str, **overrides: int) -> RateLimitConfig | None:
        """Adjust a configured provider's limits at runtime.

        Returns the new config, or None when the provider is unknown.
        """
        existing = self._configs.get(provider)
        if existing is None:
            return None
        updated = msgspec.structs.replace(existing, **overrides)
        self._configs[provider] = updated
        logger.info("Updated rate limits for %s: %s", provider, updated)
        return updated

    def _unconfigured(self, provider: str) -> bool:
        if provider in self._configs:
            return False
        if provider not in self._warned:
            self._warned.add(provider)
            logger.warning("No rate limit config for %s; allowing requests", provider)
        return True

    def _roll_windows(self, state: RateLimitState, now: float) -> None:
        today = self._clock.today()
        if state.daily_window_date != today:
            state.daily_count = 0
            state.daily_window_date = today
            logger.info("Daily request counter reset")

        if now - state.window_started_at >= MINUTE_MS:
            state.request_count_this_minute = 0
            state.window_started_at = now

    def _block(self, provider: str, state: RateLimitState, duration_ms: float) -> None:
        state.is_blocked = True
        state.blocked_until = self._clock.now_ms() + duration_ms
        logger.info("%s blocked for %s", provider, format_wait(duration_ms))

    def can_admit(self, provider: str) -> bool:
        """Check whether a call to `provider` may be dispatched now.

        Rolls expired windows forward and enters a block when a cap is hit.
        Counters are otherwise untouched.
        """
        if self._unconfigured(provider):
            return True

        config = self._configs[provider]
        state = self._states[provider]
        now = self._clock.now_ms()

        self._roll_windows(state, now)

        if state.is_blocked:
            if now < state.blocked_until:
                logger.debug(
                    "%s blocked, wait %s",
                    provider,
                    format_wait(state.blocked_until - now),
                )
                return False
            state.is_blocked = False
            state.blocked_until = 0

        if state.daily_count >= config.max_requests_per_day:
            logger.warning(
                "%s daily limit reached (%d)", provider, config.max_requests_per_day
            )
            self._block(provider, state, DAY_MS)
            return False

        if state.request_count_this_minute >= config.max_requests_per_minute:
            logger.info(
                "%s per-minute limit reached (%d)",
                provider,
                config.max_requests_per_minute,
            )
            self._block(provider, state, MINUTE_MS)
            return False

        return True

    def record_success(self, provider: str) -> None:
        """Count an admitted call. Called once per call, right before dispatch."""
        state = self._states.get(provider)
        if state is None:
            return
        state.request_count_this_minute += 1
        state.daily_count += 1
        logger.debug(
            "%s requests: %d/min, %d/day",
            provider,
            state.request_count_this_minute,
            state.daily_count,
        )

    def classify_and_backoff(self, provider: str, error: RateLimitedError) -> float:
        """Block a provider after it throttled us and return the wait in ms.

        A provider-supplied retry-after wins. Without one, exhausted quotas
        block for a day; anything else backs off exponentially, using the
        number of requests counted this minute as the attempt number.
        """
        config = self._configs.get(provider)
        if config is None:
            return UNCONFIGURED_BACKOFF_MS

        state = self._states[provider]
        if error.retry_after_ms is not None:
            wait_ms = error.retry_after_ms
        elif error.quota_exhausted:
            wait_ms = DAY_MS
        else:
            attempt = max(state.request_count_this_minute, 1)
            wait_ms = min(
                config.base_backoff_ms * 2 ** (attempt - 1),
                config.max_backoff_ms,
            )

        logger.warning("%s rate limit error: %s", provider, error.message)
        self._block(provider, state, wait_ms)
        return wait_ms

    def _effective_counts(self, state: RateLimitState, now: float) -> tuple[int, int]:
        minute = state.request_count_this_minute
        if now - state.window_started_at >= MINUTE_MS:
            minute = 0
        daily = state.daily_count
        if state.daily_window_date != self._clock.today():
            daily = 0
        return minute, daily

    def status(self, provider: str) -> RateLimitStatus:
        """Snapshot of a provider's quota usage. Has no side effects."""
        config = self._configs.get(provider)
        state = self._states.get(provider)
        if config is None or state is None:
            return RateLimitStatus(can_admit=True)

        now = self._clock.now_ms()
        minute, daily = self._effective_counts(state, now)
        blocked = state.is_blocked and now < state.blocked_until
        wait_time_ms = state.blocked_until - now if blocked else 0

        admissible = (
            not blocked
            and daily < config.max_requests_per_day
            and minute < config.max_requests_per_minute
        )
        return RateLimitStatus(
            can_admit=admissible,
            requests_this_minute=minute,
            requests_today=daily,
            blocked_until=state.blocked_until if blocked else None,
            wait_time_ms=wait_time_ms,
        )

    def status_all(self) -> dict[str, RateLimitStatus]:
        """Status for every configured provider."""
        return {provider: self.status(provider) for provider in self._configs}
