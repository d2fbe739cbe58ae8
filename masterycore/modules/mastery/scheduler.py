"""Spaced-repetition scheduling.

Review intervals grow with proficiency and double with every consecutive
correct answer, up to a fixed cap.
"""

from datetime import datetime

from masterycore.modules.mastery.config import DEFAULT_MASTERY_CONFIG, MasteryConfig
from masterycore.shared.constants import MAX_STREAK_DOUBLINGS, MIN_PROFICIENCY_MULTIPLIER
from masterycore.shared.datetime_utils import add_days


def review_interval_days(
    proficiency: float,
    consecutive_correct: int,
    config: MasteryConfig = DEFAULT_MASTERY_CONFIG,
) -> float:
    """Days until the next review."""
    proficiency_multiplier = max(MIN_PROFICIENCY_MULTIPLIER, proficiency)
    streak_multiplier = 2 ** min(max(consecutive_correct, 0), MAX_STREAK_DOUBLINGS)

    return min(
        config.max_spaced_interval,
        config.spaced_repetition_base * proficiency_multiplier * streak_multiplier,
    )


def next_review_date(
    proficiency: float,
    consecutive_correct: int,
    last_practiced: datetime,
    config: MasteryConfig = DEFAULT_MASTERY_CONFIG,
) -> datetime:
    """Calculate next review date using spaced repetition."""
    return add_days(last_practiced, review_interval_days(proficiency, consecutive_correct, config))
