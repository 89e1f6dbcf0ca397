"""Data models for fixturecast.

Defines the structures exchanged between the orchestrator, provider adapters
and callers. Prediction payloads use camelCase on the wire, matching the
response schema the providers are asked to fill in.
"""

from __future__ import annotations

from datetime import timedelta
from enum import StrEnum

import msgspec


class Outcome(StrEnum):
    """Full-time match outcome (1X2)."""

    HOME = "home"
    DRAW = "draw"
    AWAY = "away"


class PredictionRequest(msgspec.Struct, frozen=True):
    """A single logical prediction request.

    The orchestrator never looks inside; only adapters read `prompt` and
    `context`.
    """

    key: str  # Identifying key (e.g. fixture id)
    prompt: str = ""  # Provider-facing prompt text
    label: str | None = None  # Display name (e.g. "Arsenal vs Chelsea")
    context: dict[str, str] | None = None  # Extra context snippets

    @property
    def display_name(self) -> str:
        return self.label or self.key


class BTTSPrediction(msgspec.Struct, frozen=True, rename="camel"):
    """Both teams to score market."""

    yes_probability: float
    no_probability: float


class GoalLinePrediction(msgspec.Struct, frozen=True, rename="camel"):
    """Over/under goals market (2.5 by default)."""

    over_probability: float
    under_probability: float
    line: float = 2.5


class KeyFactor(msgspec.Struct, frozen=True):
    """A reason the model gave for its prediction."""

    category: str
    points: list[str] = []


class Prediction(msgspec.Struct, frozen=True, rename="camel", omit_defaults=True):
    """Structured match prediction returned by a provider."""

    home_win_probability: float
    draw_probability: float
    away_win_probability: float
    predicted_scoreline: str = ""
    confidence: str = ""
    key_factors: list[KeyFactor] | None = None
    btts: BTTSPrediction | None = None
    goal_line: GoalLinePrediction | None = None

    def top_outcome(self) -> Outcome:
        """Return the most likely full-time outcome.

        Ties resolve in home, draw, away order.
        """
        ranked = [
            (self.home_win_probability, Outcome.HOME),
            (self.draw_probability, Outcome.DRAW),
            (self.away_win_probability, Outcome.AWAY),
        ]
        best_probability, best = ranked[0]
        for probability, outcome in ranked[1:]:
            if probability > best_probability:
                best_probability, best = probability, outcome
        return best

    def normalized(self) -> Prediction:
        """Return a copy whose 1X2 probabilities sum to 100.

        BTTS and goal-line pairs are normalized the same way when present.
        """
        total = (
            self.home_win_probability
            + self.draw_probability
            + self.away_win_probability
        )
        if total <= 0:
            return self

        home = round(self.home_win_probability / total * 100)
        away = round(self.away_win_probability / total * 100)
        changes: dict = {
            "home_win_probability": home,
            "away_win_probability": away,
            "draw_probability": 100 - home - away,
        }

        if self.btts is not None:
            btts_total = self.btts.yes_probability + self.btts.no_probability
            if btts_total > 0:
                yes = round(self.btts.yes_probability / btts_total * 100)
                changes["btts"] = BTTSPrediction(
                    yes_probability=yes, no_probability=100 - yes
                )

        if self.goal_line is not None:
            line_total = (
                self.goal_line.over_probability + self.goal_line.under_probability
            )
            if line_total > 0:
                over = round(self.goal_line.over_probability / line_total * 100)
                changes["goal_line"] = GoalLinePrediction(
                    over_probability=over,
                    under_probability=100 - over,
                    line=self.goal_line.line,
                )

        return msgspec.structs.replace(self, **changes)


def is_prediction_complete(prediction: Prediction | dict | None) -> bool:
    """Check that a stored prediction carries all three 1X2 probabilities.

    Accepts raw decoded JSON (camelCase keys) as well as Prediction structs.
    """
    if prediction is None:
        return False
    if isinstance(prediction, Prediction):
        return True

    for key in ("homeWinProbability", "drawProbability", "awayWinProbability"):
        value = prediction.get(key)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return False
    return True


class ModelPredictionResult(msgspec.Struct, frozen=True, omit_defaults=True):
    """Outcome of one provider call."""

    provider: str
    prediction: Prediction | None = None
    error: str | None = None
    error_category: str | None = None
    response_time_ms: float = 0

    @property
    def success(self) -> bool:
        return self.prediction is not None


class ComparisonSummary(msgspec.Struct, frozen=True):
    """Reconciliation of two providers' predictions for the same request."""

    agrees_within_tolerance: bool
    differences: list[str] = []


class UnifiedResult(msgspec.Struct, frozen=True, omit_defaults=True):
    """Aggregated result of a single or dual provider prediction."""

    primary: ModelPredictionResult | None = None
    secondary: ModelPredictionResult | None = None
    comparison: ComparisonSummary | None = None

    def results(self) -> list[ModelPredictionResult]:
        """Return the provider results that were produced."""
        return [r for r in (self.primary, self.secondary) if r is not None]


class RateLimitStatus(msgspec.Struct, frozen=True, omit_defaults=True):
    """Read-only snapshot of a provider's rate limit state."""

    can_admit: bool
    requests_this_minute: int = 0
    requests_today: int = 0
    blocked_until: float | None = None  # Epoch milliseconds
    wait_time_ms: float = 0


def format_wait(wait_ms: float | None) -> str:
    """Format a wait in milliseconds as a short countdown string."""
    if not wait_ms or wait_ms <= 0:
        return "now"

    total_seconds = int(timedelta(milliseconds=wait_ms).total_seconds())
    if total_seconds < 60:
        return f"{max(total_seconds, 1)}s"

    hours, remainder = divmod(total_seconds, 3600)
    minutes, seconds = divmod(remainder, 60)
    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m {seconds}s"
