"""Attempt processing: turns one answered question into per-topic updates."""

import logging
from datetime import datetime, timedelta
from typing import Mapping

from masterycore.modules.mastery.config import DEFAULT_MASTERY_CONFIG, MasteryConfig
from masterycore.modules.mastery.interface import (
    DifficultyBreakdown,
    ProficiencyUpdate,
    QuestionAttempt,
    TopicProficiency,
)
from masterycore.modules.mastery.scheduler import next_review_date
from masterycore.modules.mastery.scoring import confidence, new_proficiency
from masterycore.shared.constants import (
    DEFAULT_CONFIDENCE,
    DEFAULT_PROFICIENCY,
    ERROR_PRONE_STREAK,
)
from masterycore.shared.datetime_utils import ensure_utc, utc_now
from masterycore.shared.models import Trend

logger = logging.getLogger(__name__)


def default_proficiency(topic_id: str, now: datetime | None = None) -> TopicProficiency:
    """Neutral record for a topic that has never been attempted.

    Starts at 0.5 proficiency with no confidence, flagged for review
    tomorrow.
    """
    now = ensure_utc(now) if now is not None else utc_now()
    return TopicProficiency(
        topic_id=topic_id,
        proficiency=DEFAULT_PROFICIENCY,
        confidence=DEFAULT_CONFIDENCE,
        total_attempts=0,
        correct_attempts=0,
        last_practiced=now,
        consecutive_correct=0,
        consecutive_incorrect=0,
        average_time_spent=0.0,
        difficulty_breakdown=DifficultyBreakdown(),
        trend=Trend.UNKNOWN,
        needs_review=True,
        next_review_date=now + timedelta(days=1),
    )


def update_topic(
    record: TopicProficiency,
    attempt: QuestionAttempt,
    config: MasteryConfig = DEFAULT_MASTERY_CONFIG,
    now: datetime | None = None,
) -> ProficiencyUpdate:
    """Apply one attempt to a single topic record."""
    now = ensure_utc(now) if now is not None else attempt.attempt_date

    proficiency = new_proficiency(
        record.proficiency,
        attempt.is_correct,
        attempt.difficulty,
        attempt.time_spent_ms,
        record.total_attempts,
        config,
    )

    if attempt.is_correct:
        consecutive_correct = record.consecutive_correct + 1
        consecutive_incorrect = 0
    else:
        consecutive_correct = 0
        consecutive_incorrect = record.consecutive_incorrect + 1

    breakdown = record.difficulty_breakdown
    tier = breakdown.get(attempt.difficulty).record(attempt.is_correct, attempt.time_spent_ms)
    breakdown = breakdown.with_tier(attempt.difficulty, tier)

    total_attempts = record.total_attempts + 1
    correct_attempts = record.correct_attempts + (1 if attempt.is_correct else 0)
    average_time_spent = (
        record.average_time_spent * record.total_attempts + attempt.time_spent_ms
    ) / total_attempts

    needs_review = (
        proficiency < config.proficiency_threshold
        or consecutive_incorrect >= ERROR_PRONE_STREAK
    )

    return ProficiencyUpdate(
        topic_id=record.topic_id,
        proficiency=proficiency,
        confidence=confidence(total_attempts, proficiency, config),
        total_attempts=total_attempts,
        correct_attempts=correct_attempts,
        last_practiced=now,
        consecutive_correct=consecutive_correct,
        consecutive_incorrect=consecutive_incorrect,
        average_time_spent=average_time_spent,
        difficulty_breakdown=breakdown,
        needs_review=needs_review,
        next_review_date=next_review_date(proficiency, consecutive_correct, now, config),
    )


def process_attempt(
    attempt: QuestionAttempt,
    current_records: Mapping[str, TopicProficiency] | None = None,
    config: MasteryConfig = DEFAULT_MASTERY_CONFIG,
    now: datetime | None = None,
) -> list[ProficiencyUpdate]:
    """Process a completed question attempt.

    Each tagged topic is updated independently from the caller's snapshot;
    topics without a record start from default_proficiency(). The caller
    persists the returned updates.

    Args:
        attempt: The validated attempt
        current_records: Current record per topic id, if any
        config: Active engine configuration
        now: Practice time to record (defaults to the attempt date)

    Returns:
        One update per tagged topic, in tag order
    """
    now = ensure_utc(now) if now is not None else attempt.attempt_date
    current_records = current_records or {}
    updates: list[ProficiencyUpdate] = []

    for topic_id in attempt.topic_ids:
        record = current_records.get(topic_id)
        if record is None:
            record = default_proficiency(topic_id, now)
        updates.append(update_topic(record, attempt, config, now))

    logger.debug(
        f"Processed attempt {attempt.question_id} "
        f"({'correct' if attempt.is_correct else 'incorrect'}, {attempt.difficulty.value}) "
        f"across {len(updates)} topics"
    )
    return updates
