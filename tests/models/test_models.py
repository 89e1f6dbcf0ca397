"""Tests for data models."""

import msgspec
import pytest

from fixturecast.models import BTTSPrediction
from fixturecast.models import ComparisonSummary
from fixturecast.models import GoalLinePrediction
from fixturecast.models import ModelPredictionResult
from fixturecast.models import Outcome
from fixturecast.models import Prediction
from fixturecast.models import PredictionRequest
from fixturecast.models import RateLimitStatus
from fixturecast.models import UnifiedResult
from fixturecast.models import format_wait
from fixturecast.models import is_prediction_complete


class TestPredictionRequest:
    """Tests for PredictionRequest."""

    def test_display_name_prefers_label(self):
        request = PredictionRequest(key="fixture-1", label="Arsenal vs Chelsea")

        assert request.display_name == "Arsenal vs Chelsea"

    def test_display_name_falls_back_to_key(self):
        assert PredictionRequest(key="fixture-1").display_name == "fixture-1"

    def test_decode_list(self):
        data = b'[{"key": "a", "prompt": "p"}, {"key": "b", "context": {"x": "y"}}]'

        requests = msgspec.json.decode(data, type=list[PredictionRequest])

        assert [r.key for r in requests] == ["a", "b"]
        assert requests[1].context == {"x": "y"}


class TestPrediction:
    """Tests for Prediction."""

    def test_camel_case_wire_format(self, sample_prediction):
        data = msgspec.to_builtins(sample_prediction)

        assert data["homeWinProbability"] == 50
        assert data["predictedScoreline"] == "2-1"
        assert data["btts"] == {"yesProbability": 60, "noProbability": 40}
        assert data["goalLine"]["overProbability"] == 55
        assert "keyFactors" not in data

    @pytest.mark.parametrize(
        "home,draw,away,expected",
        [
            (50, 25, 25, Outcome.HOME),
            (20, 45, 35, Outcome.DRAW),
            (20, 25, 55, Outcome.AWAY),
            (40, 40, 20, Outcome.HOME),
            (20, 40, 40, Outcome.DRAW),
            (34, 33, 34, Outcome.HOME),
        ],
    )
    def test_top_outcome(self, home, draw, away, expected):
        prediction = Prediction(
            home_win_probability=home, draw_probability=draw, away_win_probability=away
        )

        assert prediction.top_outcome() == expected

    def test_normalized_sums_to_100(self):
        prediction = Prediction(
            home_win_probability=45.5,
            draw_probability=30.2,
            away_win_probability=30.1,
        )

        normalized = prediction.normalized()

        total = (
            normalized.home_win_probability
            + normalized.draw_probability
            + normalized.away_win_probability
        )
        assert total == 100
        assert normalized.home_win_probability == 43

    def test_normalized_side_markets(self):
        prediction = Prediction(
            home_win_probability=50,
            draw_probability=25,
            away_win_probability=25,
            btts=BTTSPrediction(yes_probability=0.6, no_probability=0.4),
            goal_line=GoalLinePrediction(over_probability=3, under_probability=1, line=3.5),
        )

        normalized = prediction.normalized()

        assert normalized.btts == BTTSPrediction(yes_probability=60, no_probability=40)
        assert normalized.goal_line == GoalLinePrediction(
            over_probability=75, under_probability=25, line=3.5
        )

    def test_normalized_all_zero_is_unchanged(self):
        prediction = Prediction(
            home_win_probability=0, draw_probability=0, away_win_probability=0
        )

        assert prediction.normalized() is prediction


class TestIsPredictionComplete:
    """Tests for is_prediction_complete."""

    def test_none(self):
        assert is_prediction_complete(None) is False

    def test_struct(self, sample_prediction):
        assert is_prediction_complete(sample_prediction) is True

    def test_complete_dict(self):
        data = {"homeWinProbability": 50, "drawProbability": 25.5, "awayWinProbability": 24.5}

        assert is_prediction_complete(data) is True

    def test_missing_field(self):
        assert is_prediction_complete({"homeWinProbability": 50, "drawProbability": 25}) is False

    def test_wrong_types(self):
        assert (
            is_prediction_complete(
                {"homeWinProbability": "50", "drawProbability": 25, "awayWinProbability": 25}
            )
            is False
        )
        assert (
            is_prediction_complete(
                {"homeWinProbability": True, "drawProbability": 25, "awayWinProbability": 25}
            )
            is False
        )


class TestResults:
    """Tests for result structures."""

    def test_success(self, sample_prediction):
        assert ModelPredictionResult(provider="gemini", prediction=sample_prediction).success
        assert not ModelPredictionResult(provider="gemini", error="down").success

    def test_unified_results(self, sample_prediction):
        primary = ModelPredictionResult(provider="gemini", prediction=sample_prediction)

        assert UnifiedResult(primary=primary).results() == [primary]
        assert UnifiedResult().results() == []

    def test_unified_result_json(self, sample_prediction):
        result = UnifiedResult(
            primary=ModelPredictionResult(provider="gemini", prediction=sample_prediction),
            comparison=ComparisonSummary(agrees_within_tolerance=True),
        )

        data = msgspec.to_builtins(result)

        assert "secondary" not in data
        assert data["primary"]["prediction"]["homeWinProbability"] == 50
        assert data["comparison"] == {"agrees_within_tolerance": True, "differences": []}

    def test_rate_limit_status_defaults(self):
        status = RateLimitStatus(can_admit=True)

        assert status.wait_time_ms == 0
        assert status.blocked_until is None


class TestFormatWait:
    """Tests for format_wait."""

    @pytest.mark.parametrize(
        "wait_ms,expected",
        [
            (None, "now"),
            (0, "now"),
            (-5, "now"),
            (400, "1s"),
            (45_000, "45s"),
            (90_000, "1m 30s"),
            (3_600_000, "1h 0m"),
            (86_400_000, "24h 0m"),
        ],
    )
    def test_format(self, wait_ms, expected):
        assert format_wait(wait_ms) == expected
