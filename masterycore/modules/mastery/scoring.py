"""Proficiency, confidence and trend calculations.

Pure functions over plain numbers; the active MasteryConfig is passed in
explicitly.
"""

from typing import Sequence

from masterycore.modules.mastery.config import DEFAULT_MASTERY_CONFIG, MasteryConfig
from masterycore.modules.mastery.interface import coerce_difficulty
from masterycore.shared.constants import (
    DEFAULT_TREND_WINDOW,
    FAST_ANSWER_RATIO,
    MIN_TREND_POINTS,
    MS_PER_SECOND,
    SLOW_ANSWER_RATIO,
    STABLE_SLOPE_EPSILON,
)
from masterycore.shared.models import Difficulty, Trend


def clamp(value: float, lower: float = 0.0, upper: float = 1.0) -> float:
    return max(lower, min(upper, value))


def time_multiplier(
    is_correct: bool,
    time_spent_ms: float,
    config: MasteryConfig = DEFAULT_MASTERY_CONFIG,
) -> float:
    """Bonus for fast correct answers, penalty for very slow ones.

    Misses are never adjusted for timing.
    """
    if not is_correct:
        return 1.0

    weights = config.time_weights
    optimal_ms = weights.optimal_time * MS_PER_SECOND
    if time_spent_ms < optimal_ms * FAST_ANSWER_RATIO:
        return weights.fast_bonus
    if time_spent_ms > optimal_ms * SLOW_ANSWER_RATIO:
        return weights.slow_penalty
    return 1.0


def weighted_score(
    is_correct: bool,
    difficulty: Difficulty,
    time_spent_ms: float,
    config: MasteryConfig = DEFAULT_MASTERY_CONFIG,
) -> float:
    """Observation fed into the moving average for a single attempt."""
    base_score = 1.0 if is_correct else 0.0
    difficulty_weight = config.difficulty_weights.for_tier(coerce_difficulty(difficulty))
    return base_score * difficulty_weight * time_multiplier(is_correct, time_spent_ms, config)


def new_proficiency(
    current: float,
    is_correct: bool,
    difficulty: Difficulty,
    time_spent_ms: float,
    total_attempts: int,
    config: MasteryConfig = DEFAULT_MASTERY_CONFIG,
) -> float:
    """Calculate new proficiency using a confidence-scaled EWMA.

    The smoothing rate grows with the number of prior attempts, so a topic
    with no history does not move on its first answer.

    Args:
        current: Proficiency before this attempt
        is_correct: Whether the answer was correct
        difficulty: Difficulty tier of the question
        time_spent_ms: Answer time in milliseconds
        total_attempts: Attempts recorded before this one
        config: Active engine configuration

    Returns:
        Updated proficiency clamped to [0, 1]
    """
    score = weighted_score(is_correct, difficulty, time_spent_ms, config)

    confidence_weight = min(1.0, total_attempts / config.confidence_threshold)
    effective_alpha = config.ewma_alpha * confidence_weight

    return clamp(effective_alpha * score + (1 - effective_alpha) * current)


def confidence(
    total_attempts: int,
    proficiency: float,
    config: MasteryConfig = DEFAULT_MASTERY_CONFIG,
) -> float:
    """Statistical confidence in a proficiency score.

    Grows with sample size and is reduced near the extremes, where the same
    number of observations says less.
    """
    if total_attempts <= 0:
        return 0.0

    sample_confidence = min(1.0, total_attempts / config.confidence_threshold)
    # Peaks at 0.5, drops to 0 at either extreme
    extremeness_penalty = 4 * proficiency * (1 - proficiency)

    return clamp(sample_confidence * extremeness_penalty)


def regression_slope(values: Sequence[float]) -> float:
    """Least-squares slope of values against their index positions."""
    n = len(values)
    sum_x = n * (n - 1) / 2
    sum_y = sum(values)
    sum_xy = sum(i * y for i, y in enumerate(values))
    sum_xx = sum(i * i for i in range(n))

    denominator = n * sum_xx - sum_x * sum_x
    if denominator == 0:
        return 0.0
    return (n * sum_xy - sum_x * sum_y) / denominator


def trend(history: Sequence[float], window: int = DEFAULT_TREND_WINDOW) -> Trend:
    """Determine trend from recent proficiency snapshots (oldest first)."""
    if len(history) < MIN_TREND_POINTS or window < MIN_TREND_POINTS:
        return Trend.UNKNOWN

    recent = list(history)[-window:]
    if len(recent) < MIN_TREND_POINTS:
        return Trend.UNKNOWN

    slope = regression_slope(recent)
    if abs(slope) < STABLE_SLOPE_EPSILON:
        return Trend.STABLE
    return Trend.IMPROVING if slope > 0 else Trend.DECLINING
