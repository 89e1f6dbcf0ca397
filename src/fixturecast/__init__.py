"""fixturecast: Rate-limited football match predictions from LLM providers."""

from __future__ import annotations

__version__ = "0.1.0"

from fixturecast.models import ComparisonSummary
from fixturecast.models import ModelPredictionResult
from fixturecast.models import Outcome
from fixturecast.models import Prediction
from fixturecast.models import PredictionRequest
from fixturecast.models import RateLimitStatus
from fixturecast.models import UnifiedResult
from fixturecast.models import format_wait
from fixturecast.models import is_prediction_complete

__all__ = [
    "__version__",
    "Outcome",
    "PredictionRequest",
    "Prediction",
    "ModelPredictionResult",
    "ComparisonSummary",
    "UnifiedResult",
    "RateLimitStatus",
    "format_wait",
    "is_prediction_complete",
]


def main() -> None:
    """Entry point for the fixturecast CLI."""
    from fixturecast.cli.app import run_app

    run_app()
