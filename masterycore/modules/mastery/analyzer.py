"""Weak-area detection: scores and ranks topics by remediation urgency."""

import math
from datetime import datetime
from typing import Sequence

from masterycore.modules.mastery.config import DEFAULT_MASTERY_CONFIG, MasteryConfig
from masterycore.modules.mastery.interface import TopicProficiency, WeakArea
from masterycore.shared.constants import (
    BASE_RECOMMENDED_QUESTIONS,
    DECLINING_TREND_BOOST,
    EASY_FOCUS_RATE,
    ERROR_PRONE_BOOST_PER_MISS,
    ERROR_PRONE_STREAK,
    HARD_FOCUS_RATE,
    LOW_PROFICIENCY_CUTOFF,
    MAX_OVERDUE_BOOST,
    MAX_PRIORITY,
    MAX_RECOMMENDED_QUESTIONS,
    MED_FOCUS_RATE,
    MIN_RECOMMENDED_QUESTIONS,
    MINUTES_PER_QUESTION,
    OVERDUE_BOOST_PER_DAY,
    RECENT_PRACTICE_DAMPENER,
    WEAK_AREA_MIN_PRIORITY,
)
from masterycore.shared.datetime_utils import days_between, ensure_utc, utc_now
from masterycore.shared.models import DifficultyFocus, ReasonCode, Trend


def _is_overdue(record: TopicProficiency, now: datetime) -> bool:
    return now > ensure_utc(record.next_review_date)


def weak_area_priority(
    record: TopicProficiency,
    now: datetime,
    config: MasteryConfig = DEFAULT_MASTERY_CONFIG,
) -> float:
    """Urgency score in [0, 100] for one topic."""
    priority = 0.0

    # Base priority from low proficiency
    if record.proficiency < config.proficiency_threshold:
        priority += (config.proficiency_threshold - record.proficiency) * 100

    if record.trend == Trend.DECLINING:
        priority += DECLINING_TREND_BOOST

    if record.needs_review and _is_overdue(record, now):
        days_past_due = days_between(record.next_review_date, now)
        priority += min(MAX_OVERDUE_BOOST, days_past_due * OVERDUE_BOOST_PER_DAY)

    if record.consecutive_incorrect >= ERROR_PRONE_STREAK:
        priority += record.consecutive_incorrect * ERROR_PRONE_BOOST_PER_MISS

    # Recently practiced topics can wait
    if days_between(record.last_practiced, now) < 1:
        priority *= RECENT_PRACTICE_DAMPENER

    return min(MAX_PRIORITY, max(0.0, priority))


def weak_area_reason(record: TopicProficiency, now: datetime) -> ReasonCode:
    """First matching reason, in order of severity."""
    if record.proficiency < LOW_PROFICIENCY_CUTOFF:
        return ReasonCode.LOW_PROFICIENCY
    if record.trend == Trend.DECLINING:
        return ReasonCode.DECLINING_TREND
    if record.consecutive_incorrect >= ERROR_PRONE_STREAK:
        return ReasonCode.ERROR_PRONE
    if _is_overdue(record, now):
        return ReasonCode.NEEDS_PRACTICE
    return ReasonCode.LOW_PROFICIENCY


def recommended_questions(
    record: TopicProficiency,
    config: MasteryConfig = DEFAULT_MASTERY_CONFIG,
) -> int:
    """More questions for weaker, less certain topics; between 3 and 15."""
    proficiency_multiplier = 1 + (config.proficiency_threshold - record.proficiency)
    confidence_multiplier = 1 + (0.5 - record.confidence)

    recommended = BASE_RECOMMENDED_QUESTIONS * proficiency_multiplier * confidence_multiplier
    # Half-up rounding, not banker's rounding
    rounded = math.floor(recommended + 0.5)
    return max(MIN_RECOMMENDED_QUESTIONS, min(MAX_RECOMMENDED_QUESTIONS, rounded))


def difficulty_focus(record: TopicProficiency) -> DifficultyFocus:
    """Tier with the most problematic success rate.

    Empty tiers read as a 0% success rate, so an untried easy tier is
    always the focus. Rates are not weighted by sample size.
    """
    breakdown = record.difficulty_breakdown

    if breakdown.easy.success_rate < EASY_FOCUS_RATE:
        return DifficultyFocus.EASY
    if breakdown.med.success_rate < MED_FOCUS_RATE:
        return DifficultyFocus.MED
    if breakdown.hard.success_rate < HARD_FOCUS_RATE:
        return DifficultyFocus.HARD
    return DifficultyFocus.MIXED


def detect_weak_areas(
    records: Sequence[TopicProficiency],
    config: MasteryConfig = DEFAULT_MASTERY_CONFIG,
    now: datetime | None = None,
) -> list[WeakArea]:
    """Detect weak areas that need attention.

    Args:
        records: Current proficiency record for every topic
        config: Active engine configuration
        now: Evaluation time (defaults to utc_now())

    Returns:
        Topics with priority above 30, highest priority first. Ties keep
        input order.
    """
    now = ensure_utc(now) if now is not None else utc_now()
    weak_areas: list[WeakArea] = []

    for record in records:
        priority = weak_area_priority(record, now, config)
        if priority <= WEAK_AREA_MIN_PRIORITY:
            continue

        questions = recommended_questions(record, config)
        weak_areas.append(
            WeakArea(
                topic_id=record.topic_id,
                proficiency=record.proficiency,
                priority=priority,
                reason_code=weak_area_reason(record, now),
                recommended_questions=questions,
                estimated_study_time=questions * MINUTES_PER_QUESTION,
                difficulty_focus=difficulty_focus(record),
            )
        )

    # sorted() is stable, so equal priorities keep input order
    return sorted(weak_areas, key=lambda wa: wa.priority, reverse=True)
