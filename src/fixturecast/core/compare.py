"""Reconciliation of two providers' predictions."""

from __future__ import annotations

from fixturecast.config.settings import DEFAULT_OUTCOME_TOLERANCE
from fixturecast.models import ComparisonSummary
from fixturecast.models import Prediction

# Side markets (BTTS, over/under) tolerate a wider spread than 1X2
MARKET_TOLERANCE = 15.0
# Predictions still count as agreeing with this many side-market differences
MAX_MINOR_DIFFERENCES = 2


def _fmt(value: float) -> str:
    return f"{value:g}%"


def compare_predictions(
    first: Prediction,
    second: Prediction,
    outcome_tolerance: float = DEFAULT_OUTCOME_TOLERANCE,
) -> ComparisonSummary:
    """Compare two predictions for the same match.

    The predictions agree when their 1X2 probabilities are each within
    `outcome_tolerance` points, they pick the same most likely outcome, and
    no more than MAX_MINOR_DIFFERENCES other differences were found.
    """
    differences: list[str] = []
    outcome_disagreement = False

    for label, a, b in (
        ("Home win", first.home_win_probability, second.home_win_probability),
        ("Draw", first.draw_probability, second.draw_probability),
        ("Away win", first.away_win_probability, second.away_win_probability),
    ):
        if abs(a - b) > outcome_tolerance:
            differences.append(f"{label} probabilities differ: {_fmt(a)} vs {_fmt(b)}")
            outcome_disagreement = True

    first_top, second_top = first.top_outcome(), second.top_outcome()
    if first_top != second_top:
        differences.append(
            f"Different predicted outcome: {first_top.value} vs {second_top.value}"
        )
        outcome_disagreement = True

    if first.predicted_scoreline != second.predicted_scoreline:
        differences.append(
            "Different predicted scorelines: "
            f"{first.predicted_scoreline} vs {second.predicted_scoreline}"
        )

    if first.confidence != second.confidence:
        differences.append(
            f"Different confidence levels: {first.confidence} vs {second.confidence}"
        )

    if first.btts is not None and second.btts is not None:
        a, b = first.btts.yes_probability, second.btts.yes_probability
        if abs(a - b) > MARKET_TOLERANCE:
            differences.append(f"BTTS predictions differ: {_fmt(a)} vs {_fmt(b)}")

    if first.goal_line is not None and second.goal_line is not None:
        a, b = first.goal_line.over_probability, second.goal_line.over_probability
        if abs(a - b) > MARKET_TOLERANCE:
            differences.append(
                f"Over/Under predictions differ: {_fmt(a)} vs {_fmt(b)}"
            )

    agrees = not outcome_disagreement and len(differences) <= MAX_MINOR_DIFFERENCES
    return ComparisonSummary(agrees_within_tolerance=agrees, differences=differences)
