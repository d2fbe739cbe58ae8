"""Unit tests for proficiency, confidence and trend calculations."""

import pytest

from masterycore.modules.mastery.config import MasteryConfig
from masterycore.modules.mastery.scoring import (
    clamp,
    confidence,
    new_proficiency,
    regression_slope,
    time_multiplier,
    trend,
    weighted_score,
)
from masterycore.shared.exceptions import InvalidDifficultyError
from masterycore.shared.models import Difficulty, Trend


class TestTimeMultiplier:
    """Tests for answer-time adjustments."""

    def test_fast_correct_answer_gets_bonus(self):
        # 0.7 * 90s = 63s
        assert time_multiplier(True, 62999) == 1.2

    def test_normal_time_is_neutral(self):
        assert time_multiplier(True, 63000) == 1.0
        assert time_multiplier(True, 180000) == 1.0

    def test_slow_correct_answer_is_penalized(self):
        assert time_multiplier(True, 180001) == 0.8

    def test_incorrect_answers_ignore_timing(self):
        assert time_multiplier(False, 1000) == 1.0
        assert time_multiplier(False, 500000) == 1.0

    def test_uses_configured_optimal_time(self):
        config = MasteryConfig(time_weights={"optimal_time": 10})
        assert time_multiplier(True, 8000, config) == 1.0
        assert time_multiplier(True, 21000, config) == 0.8


class TestWeightedScore:
    """Tests for the per-attempt observation."""

    def test_incorrect_scores_zero(self):
        assert weighted_score(False, Difficulty.HARD, 60000) == 0.0

    def test_combines_difficulty_and_time(self):
        assert weighted_score(True, Difficulty.MED, 100000) == pytest.approx(1.25)
        assert weighted_score(True, Difficulty.HARD, 1000) == pytest.approx(1.8)

    def test_accepts_difficulty_strings(self):
        assert weighted_score(True, "easy", 100000) == pytest.approx(1.0)

    def test_rejects_unknown_difficulty(self):
        with pytest.raises(InvalidDifficultyError):
            weighted_score(True, "expert", 1000)


class TestNewProficiency:
    """Tests for the confidence-scaled EWMA update."""

    def test_correct_answer_increases_proficiency(self):
        result = new_proficiency(0.5, True, Difficulty.MED, 60000, 1)
        assert result > 0.5
        assert result == pytest.approx(0.53)

    def test_incorrect_answer_decreases_proficiency(self):
        result = new_proficiency(0.7, False, Difficulty.EASY, 120000, 5)
        assert result < 0.7
        assert result == pytest.approx(0.595)

    def test_hard_correct_beats_easy_correct(self):
        hard = new_proficiency(0.5, True, Difficulty.HARD, 60000, 1)
        easy = new_proficiency(0.5, True, Difficulty.EASY, 60000, 1)
        assert hard > easy

    def test_correct_never_below_incorrect(self):
        for difficulty in Difficulty:
            correct = new_proficiency(0.6, True, difficulty, 300000, 4)
            incorrect = new_proficiency(0.6, False, difficulty, 300000, 4)
            assert correct >= incorrect

    def test_no_prior_attempts_leaves_proficiency_unchanged(self):
        assert new_proficiency(0.42, True, Difficulty.HARD, 1000, 0) == 0.42
        assert new_proficiency(0.42, False, Difficulty.HARD, 1000, 0) == 0.42

    def test_result_is_clamped_to_one(self):
        assert new_proficiency(1.0, True, Difficulty.HARD, 1000, 50) == 1.0

    def test_result_stays_non_negative(self):
        assert new_proficiency(0.0, False, Difficulty.EASY, 1000, 50) == 0.0

    def test_alpha_saturates_at_confidence_threshold(self):
        at_threshold = new_proficiency(0.5, True, Difficulty.EASY, 100000, 10)
        beyond = new_proficiency(0.5, True, Difficulty.EASY, 100000, 100)
        assert at_threshold == pytest.approx(beyond)
        assert at_threshold == pytest.approx(0.65)


class TestConfidence:
    """Tests for statistical confidence."""

    def test_more_attempts_more_confidence(self):
        assert confidence(3, 0.7) < confidence(20, 0.7)

    def test_extreme_proficiency_reduces_confidence(self):
        assert confidence(10, 0.5) > confidence(10, 0.1)

    def test_values(self):
        assert confidence(10, 0.5) == pytest.approx(1.0)
        assert confidence(5, 0.5) == pytest.approx(0.5)
        assert confidence(3, 0.7) == pytest.approx(0.252)

    def test_zero_attempts_has_no_confidence(self):
        assert confidence(0, 0.5) == 0.0

    def test_extremes_have_no_confidence(self):
        assert confidence(20, 0.0) == 0.0
        assert confidence(20, 1.0) == 0.0


class TestTrend:
    """Tests for trend detection over proficiency snapshots."""

    def test_improving(self):
        assert trend([0.3, 0.4, 0.5, 0.6, 0.7]) == Trend.IMPROVING

    def test_declining(self):
        assert trend([0.8, 0.7, 0.6, 0.5, 0.4]) == Trend.DECLINING

    def test_stable(self):
        assert trend([0.7, 0.71, 0.69, 0.7, 0.72]) == Trend.STABLE

    def test_insufficient_data(self):
        assert trend([0.5, 0.6]) == Trend.UNKNOWN
        assert trend([]) == Trend.UNKNOWN

    def test_only_recent_window_counts(self):
        # Long decline followed by a recent climb
        history = [0.9, 0.8, 0.7, 0.6, 0.5, 0.4, 0.5, 0.6, 0.7]
        assert trend(history, window=4) == Trend.IMPROVING
        assert trend(history) == Trend.DECLINING

    def test_window_smaller_than_three_is_unknown(self):
        assert trend([0.1, 0.2, 0.3, 0.4], window=2) == Trend.UNKNOWN

    def test_regression_slope(self):
        assert regression_slope([0.3, 0.4, 0.5]) == pytest.approx(0.1)
        assert regression_slope([0.5]) == 0.0


def test_clamp():
    assert clamp(1.5) == 1.0
    assert clamp(-0.2) == 0.0
    assert clamp(0.3) == 0.3
