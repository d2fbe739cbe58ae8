"""Practice recommendation generation.

Up to three independently gated batches are produced: weak-area
remediation, spaced review of mastered material, and a challenge set for
strong topics.
"""

import logging
from datetime import datetime
from typing import Sequence

from masterycore.modules.mastery.analyzer import detect_weak_areas
from masterycore.modules.mastery.config import DEFAULT_MASTERY_CONFIG, MasteryConfig
from masterycore.modules.mastery.interface import (
    ExpectedImpact,
    LearningSession,
    PracticeRecommendation,
    TopicProficiency,
    WeakArea,
)
from masterycore.shared.constants import (
    CHALLENGE_DURATION_MINUTES,
    CHALLENGE_MAX_TOPICS,
    CHALLENGE_MIN_CONFIDENCE,
    CHALLENGE_MIN_PROFICIENCY,
    CHALLENGE_MIN_TOPICS,
    CHALLENGE_PRIORITY,
    CHALLENGE_PROFICIENCY_GAIN,
    CHALLENGE_QUESTION_COUNT,
    MAX_WEAK_AREAS_PER_RECOMMENDATION,
    SPACED_REVIEW_MINUTES_PER_TOPIC,
    SPACED_REVIEW_PRIORITY,
    SPACED_REVIEW_PROFICIENCY_GAIN,
    SPACED_REVIEW_QUESTIONS_PER_TOPIC,
    WEAK_AREAS_PRIORITY,
    WEAK_AREAS_PROFICIENCY_GAIN,
)
from masterycore.shared.datetime_utils import datetime_to_ms, ensure_utc, utc_now
from masterycore.shared.models import RecommendationType, TargetDifficulty

logger = logging.getLogger(__name__)


def _recommendation_id(kind: RecommendationType, now: datetime) -> str:
    return f"{kind.value}_{datetime_to_ms(now)}"


def weak_areas_recommendation(
    weak_areas: Sequence[WeakArea],
    config: MasteryConfig,
    now: datetime,
) -> PracticeRecommendation | None:
    """Remediation batch over the most urgent weak areas."""
    if not weak_areas:
        return None

    top = list(weak_areas[:MAX_WEAK_AREAS_PER_RECOMMENDATION])
    threshold_pct = round(config.proficiency_threshold * 100)
    return PracticeRecommendation(
        id=_recommendation_id(RecommendationType.WEAK_AREAS, now),
        type=RecommendationType.WEAK_AREAS,
        title="Focus on Weak Areas",
        description=f"Practice {len(top)} topics where you need improvement",
        topic_ids=tuple(wa.topic_id for wa in top),
        question_count=sum(wa.recommended_questions for wa in top),
        estimated_duration=sum(wa.estimated_study_time for wa in top),
        difficulty=TargetDifficulty.ADAPTIVE,
        priority=WEAK_AREAS_PRIORITY,
        reasoning=f"You have {len(weak_areas)} areas below {threshold_pct}% proficiency",
        expected_impact=ExpectedImpact(
            proficiency_gain=WEAK_AREAS_PROFICIENCY_GAIN,
            weak_areas_addressed=len(top),
        ),
    )


def due_for_spaced_review(
    records: Sequence[TopicProficiency],
    config: MasteryConfig,
    now: datetime,
) -> list[TopicProficiency]:
    """Mastered topics whose review date has passed."""
    return [
        r for r in records
        if r.needs_review
        and now > ensure_utc(r.next_review_date)
        and r.proficiency >= config.proficiency_threshold
    ]


def spaced_review_recommendation(
    records: Sequence[TopicProficiency],
    config: MasteryConfig,
    now: datetime,
) -> PracticeRecommendation | None:
    """Refresh batch for mastered material that has come due."""
    review_topics = due_for_spaced_review(records, config, now)
    if not review_topics:
        return None

    count = len(review_topics)
    return PracticeRecommendation(
        id=_recommendation_id(RecommendationType.SPACED_REVIEW, now),
        type=RecommendationType.SPACED_REVIEW,
        title="Spaced Review",
        description=f"Review {count} topics to maintain your knowledge",
        topic_ids=tuple(r.topic_id for r in review_topics),
        question_count=count * SPACED_REVIEW_QUESTIONS_PER_TOPIC,
        estimated_duration=count * SPACED_REVIEW_MINUTES_PER_TOPIC,
        difficulty=TargetDifficulty.MED,
        priority=SPACED_REVIEW_PRIORITY,
        reasoning="These topics are due for spaced repetition review",
        expected_impact=ExpectedImpact(
            proficiency_gain=SPACED_REVIEW_PROFICIENCY_GAIN,
            weak_areas_addressed=0,
        ),
    )


def challenge_recommendation(
    records: Sequence[TopicProficiency],
    now: datetime,
) -> PracticeRecommendation | None:
    """Hard-question set for topics that are both strong and well measured."""
    strong_topics = [
        r for r in records
        if r.proficiency >= CHALLENGE_MIN_PROFICIENCY and r.confidence >= CHALLENGE_MIN_CONFIDENCE
    ]
    if len(strong_topics) < CHALLENGE_MIN_TOPICS:
        return None

    return PracticeRecommendation(
        id=_recommendation_id(RecommendationType.CHALLENGE, now),
        type=RecommendationType.CHALLENGE,
        title="Challenge Mode",
        description="Test your mastery with difficult questions",
        topic_ids=tuple(r.topic_id for r in strong_topics[:CHALLENGE_MAX_TOPICS]),
        question_count=CHALLENGE_QUESTION_COUNT,
        estimated_duration=CHALLENGE_DURATION_MINUTES,
        difficulty=TargetDifficulty.HARD,
        priority=CHALLENGE_PRIORITY,
        reasoning="Challenge yourself with harder questions in your strong areas",
        expected_impact=ExpectedImpact(
            proficiency_gain=CHALLENGE_PROFICIENCY_GAIN,
            weak_areas_addressed=0,
        ),
    )


def generate_recommendations(
    records: Sequence[TopicProficiency],
    recent_sessions: Sequence[LearningSession] = (),
    config: MasteryConfig = DEFAULT_MASTERY_CONFIG,
    now: datetime | None = None,
) -> list[PracticeRecommendation]:
    """Generate personalized practice recommendations.

    Args:
        records: Current proficiency record for every topic
        recent_sessions: Recent learning sessions (accepted for callers that
            track them; not used in ranking)
        config: Active engine configuration
        now: Evaluation time (defaults to utc_now())

    Returns:
        Recommendations sorted by priority, highest first
    """
    now = ensure_utc(now) if now is not None else utc_now()
    weak_areas = detect_weak_areas(records, config, now)

    candidates = (
        weak_areas_recommendation(weak_areas, config, now),
        spaced_review_recommendation(records, config, now),
        challenge_recommendation(records, now),
    )
    recommendations = [rec for rec in candidates if rec is not None]

    logger.debug(
        f"Generated {len(recommendations)} recommendations from {len(records)} topics "
        f"({len(weak_areas)} weak areas, {len(recent_sessions)} recent sessions)"
    )

    # Stable sort keeps generation order for equal priorities
    return sorted(recommendations, key=lambda rec: rec.priority, reverse=True)
