"""Progress analytics: mastery bands, milestones, dashboard stats and feedback."""

import math
from datetime import date, timedelta
from typing import Mapping, Sequence

from masterycore.modules.mastery.config import DEFAULT_MASTERY_CONFIG, MasteryConfig
from masterycore.modules.mastery.interface import (
    LearningSession,
    MasteryStats,
    Milestone,
    TopicProficiency,
)
from masterycore.shared.constants import MASTERED_PROFICIENCY
from masterycore.shared.datetime_utils import utc_date, utc_now
from masterycore.shared.models import MasteryLevel

# Lower bound of each band, highest first
_LEVEL_FLOORS: tuple[tuple[float, MasteryLevel], ...] = (
    (0.9, MasteryLevel.EXPERT),
    (0.8, MasteryLevel.ADVANCED),
    (0.7, MasteryLevel.PROFICIENT),
    (0.5, MasteryLevel.DEVELOPING),
)

_MILESTONES: tuple[Milestone, ...] = (
    Milestone(0.5, "Developing"),
    Milestone(0.7, "Proficient"),
    Milestone(0.8, "Advanced"),
    Milestone(0.9, "Expert"),
)
_FINAL_MILESTONE = Milestone(1.0, "Master")

# Misses on a tagged topic below this point at that topic
_FEEDBACK_WEAK_TOPIC = 0.6


def mastery_level(proficiency: float) -> MasteryLevel:
    for floor, level in _LEVEL_FLOORS:
        if proficiency >= floor:
            return level
    return MasteryLevel.NOVICE


def next_milestone(proficiency: float) -> Milestone:
    for milestone in _MILESTONES:
        if proficiency < milestone.target:
            return milestone
    return _FINAL_MILESTONE


def practice_streak(sessions: Sequence[LearningSession], today: date | None = None) -> int:
    """Consecutive practice days ending today.

    Only sessions with at least one answered question count. Days are
    taken from each session's UTC start time.
    """
    today = today or utc_date(utc_now())
    practice_days = {
        utc_date(s.start_time) for s in sessions if s.questions_answered > 0
    }

    streak = 0
    while today - timedelta(days=streak) in practice_days:
        streak += 1
    return streak


def overall_stats(
    records: Sequence[TopicProficiency],
    sessions: Sequence[LearningSession] = (),
    config: MasteryConfig = DEFAULT_MASTERY_CONFIG,
    today: date | None = None,
) -> MasteryStats:
    """Dashboard summary over all topic records and sessions."""
    total = len(records)
    average = sum(r.proficiency for r in records) / total if total else 0.0

    return MasteryStats(
        total_topics=total,
        mastered_topics=sum(1 for r in records if r.proficiency >= MASTERED_PROFICIENCY),
        weak_areas=sum(1 for r in records if r.proficiency < config.proficiency_threshold),
        average_proficiency=average,
        total_practice_time=sum(s.time_spent for s in sessions),
        streak=practice_streak(sessions, today),
    )


def _percent(value: float) -> int:
    return math.floor(value * 100 + 0.5)


def attempt_feedback(
    records: Mapping[str, TopicProficiency],
    topic_ids: Sequence[str],
    is_correct: bool,
    topic_names: Mapping[str, str] | None = None,
) -> str:
    """Encouragement message shown after answering a question.

    Correct answers get a message for the mastery band of the tagged
    topics' average proficiency. Misses point at the weakest tagged topic
    when it is below 0.6.

    Args:
        records: Current records keyed by topic id
        topic_ids: Topics tagged on the answered question
        is_correct: Whether the answer was correct
        topic_names: Optional display names keyed by topic id

    Returns:
        A single sentence of feedback
    """
    tagged = [records[t] for t in topic_ids if t in records]
    if not tagged:
        if is_correct:
            return "Great job! Keep practicing to build proficiency."
        return "Review the explanation to understand this concept better."

    if not is_correct:
        weakest = min(tagged, key=lambda r: r.proficiency)
        if weakest.proficiency < _FEEDBACK_WEAK_TOPIC:
            name = (topic_names or {}).get(weakest.topic_id, weakest.topic_id)
            return f"This topic needs more practice. Consider focusing on {name} concepts."
        return "Review the explanation carefully. Understanding mistakes helps build mastery."

    average = sum(r.proficiency for r in tagged) / len(tagged)
    level = mastery_level(average)

    if level == MasteryLevel.NOVICE:
        return "Good start! You're building foundational knowledge in this area."
    if level == MasteryLevel.DEVELOPING:
        return f"Nice progress! You're {_percent((average - 0.5) * 2)}% of the way to proficient level."
    if level == MasteryLevel.PROFICIENT:
        milestone = next_milestone(average)
        return (
            f"Well done! You're proficient in this topic. "
            f"{_percent(milestone.target - average)}% to {milestone.label}."
        )
    if level == MasteryLevel.ADVANCED:
        return "Excellent! You have advanced mastery of this topic."
    return "Outstanding! You have expert-level knowledge."
