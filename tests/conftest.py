"""Pytest configuration and shared fixtures for fixturecast tests."""

from __future__ import annotations

import asyncio
from datetime import UTC
from datetime import date
from datetime import datetime
from pathlib import Path
from typing import Generator

import pytest

from fixturecast.config import settings
from fixturecast.config.settings import RateLimitConfig
from fixturecast.core.limiter import RateLimiter
from fixturecast.core.orchestrator import Orchestrator
from fixturecast.core.serializer import CallSerializer
from fixturecast.models import BTTSPrediction
from fixturecast.models import GoalLinePrediction
from fixturecast.models import Prediction
from fixturecast.models import PredictionRequest


class FakeClock:
    """Deterministic clock: sleeping advances time instead of waiting."""

    def __init__(self, start: datetime) -> None:
        self.now = start.timestamp() * 1000
        self.sleeps: list[float] = []

    def now_ms(self) -> float:
        return self.now

    def today(self) -> date:
        return datetime.fromtimestamp(self.now / 1000, UTC).date()

    def advance(self, ms: float) -> None:
        self.now += ms

    async def sleep_ms(self, ms: float) -> None:
        self.sleeps.append(ms)
        if ms > 0:
            self.now += ms
        # Let other tasks run, like a real sleep would
        await asyncio.sleep(0)


class FakeAdapter:
    """Stand-in provider adapter that records when it was called.

    `outcomes` is consumed one per call: an exception is raised, a Prediction
    is returned. Once exhausted, `default` is returned.
    """

    def __init__(
        self,
        provider_id: str,
        clock: FakeClock,
        default: Prediction | None = None,
        outcomes: list | None = None,
        name: str | None = None,
    ) -> None:
        self.id = provider_id
        self.name = name or provider_id.capitalize()
        self.clock = clock
        self.default = default
        self.outcomes = list(outcomes or [])
        self.calls: list[float] = []
        self.requests: list[PredictionRequest] = []

    def is_available(self) -> bool:
        return True

    async def predict(self, request: PredictionRequest) -> Prediction:
        self.calls.append(self.clock.now_ms())
        self.requests.append(request)
        outcome = self.outcomes.pop(0) if self.outcomes else self.default
        if isinstance(outcome, BaseException):
            raise outcome
        if outcome is None:
            raise RuntimeError("no prediction configured")
        return outcome


@pytest.fixture(autouse=True)
def isolated_config(tmp_path: Path, monkeypatch) -> Generator[Path, None, None]:
    """Point config at a temp directory and drop any cached config."""
    config_dir = tmp_path / "config"
    monkeypatch.setenv("FIXTURECAST_CONFIG_DIR", str(config_dir))
    for var in ("GEMINI_API_KEY", "GOOGLE_API_KEY", "DEEPSEEK_API_KEY"):
        monkeypatch.delenv(var, raising=False)
    settings._config = None
    yield config_dir
    settings._config = None


@pytest.fixture
def utc_now() -> datetime:
    """Fixed UTC datetime for consistent testing."""
    return datetime(2025, 1, 15, 12, 0, 0, tzinfo=UTC)


@pytest.fixture
def clock(utc_now: datetime) -> FakeClock:
    return FakeClock(utc_now)


@pytest.fixture
def fast_limits() -> dict[str, RateLimitConfig]:
    """Generous limits with 1s spacing, so only pacing shapes call timing."""
    limits = RateLimitConfig(
        max_requests_per_minute=60,
        max_requests_per_day=1000,
        base_backoff_ms=1000,
        max_backoff_ms=30_000,
        min_interval_ms=1000,
    )
    return {"gemini": limits, "deepseek": limits}


@pytest.fixture
def limiter(fast_limits, clock) -> RateLimiter:
    return RateLimiter(fast_limits, clock)


@pytest.fixture
def serializer(limiter, clock) -> CallSerializer:
    return CallSerializer(limiter, clock)


@pytest.fixture
def sample_request() -> PredictionRequest:
    return PredictionRequest(
        key="fixture-1001",
        prompt="Predict Arsenal vs Chelsea",
        label="Arsenal vs Chelsea",
        context={"form": "Arsenal WWDWL, Chelsea LDWWW"},
    )


@pytest.fixture
def sample_prediction() -> Prediction:
    return Prediction(
        home_win_probability=50,
        draw_probability=25,
        away_win_probability=25,
        predicted_scoreline="2-1",
        confidence="medium",
        btts=BTTSPrediction(yes_probability=60, no_probability=40),
        goal_line=GoalLinePrediction(over_probability=55, under_probability=45),
    )


@pytest.fixture
def close_prediction() -> Prediction:
    """Within 5 points of sample_prediction on every market."""
    return Prediction(
        home_win_probability=47,
        draw_probability=28,
        away_win_probability=25,
        predicted_scoreline="2-1",
        confidence="medium",
        btts=BTTSPrediction(yes_probability=57, no_probability=43),
        goal_line=GoalLinePrediction(over_probability=52, under_probability=48),
    )


@pytest.fixture
def away_prediction() -> Prediction:
    return Prediction(
        home_win_probability=20,
        draw_probability=25,
        away_win_probability=55,
        predicted_scoreline="0-2",
        confidence="high",
    )


@pytest.fixture
def gemini_adapter(clock, sample_prediction) -> FakeAdapter:
    return FakeAdapter("gemini", clock, default=sample_prediction)


@pytest.fixture
def deepseek_adapter(clock, close_prediction) -> FakeAdapter:
    return FakeAdapter("deepseek", clock, default=close_prediction, name="DeepSeek")


@pytest.fixture
def orchestrator(gemini_adapter, deepseek_adapter, limiter, serializer, clock) -> Orchestrator:
    return Orchestrator(
        {"gemini": gemini_adapter, "deepseek": deepseek_adapter},
        limiter,
        serializer,
        clock=clock,
    )
