"""Mastery Module - Proficiency tracking, weak areas and practice recommendations."""

import math
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Protocol, Sequence

from masterycore.shared.datetime_utils import ensure_utc, utc_now
from masterycore.shared.exceptions import InvalidAttemptError, InvalidDifficultyError
from masterycore.shared.models import (
    Difficulty,
    DifficultyFocus,
    MasteryLevel,
    ReasonCode,
    RecommendationType,
    TargetDifficulty,
    Trend,
)


def coerce_difficulty(value: Difficulty | str) -> Difficulty:
    """Parse a difficulty tier, rejecting anything outside easy/med/hard."""
    if isinstance(value, Difficulty):
        return value
    try:
        return Difficulty(value)
    except ValueError:
        raise InvalidDifficultyError(value) from None


@dataclass(frozen=True)
class DifficultyStats:
    """Attempt counts and mean answer time (ms) for one difficulty tier."""

    correct: int = 0
    total: int = 0
    avg_time: float = 0.0

    @property
    def success_rate(self) -> float:
        """Share of correct answers; an empty tier reads as 0."""
        return self.correct / self.total if self.total > 0 else 0.0

    def record(self, is_correct: bool, time_spent_ms: float) -> "DifficultyStats":
        """Return the tier after one more attempt."""
        total = self.total + 1
        return DifficultyStats(
            correct=self.correct + (1 if is_correct else 0),
            total=total,
            avg_time=(self.avg_time * self.total + time_spent_ms) / total,
        )


@dataclass(frozen=True)
class DifficultyBreakdown:
    """Per-tier statistics. Always holds exactly the three known tiers."""

    easy: DifficultyStats = field(default_factory=DifficultyStats)
    med: DifficultyStats = field(default_factory=DifficultyStats)
    hard: DifficultyStats = field(default_factory=DifficultyStats)

    def get(self, difficulty: Difficulty) -> DifficultyStats:
        if difficulty == Difficulty.EASY:
            return self.easy
        if difficulty == Difficulty.MED:
            return self.med
        if difficulty == Difficulty.HARD:
            return self.hard
        raise InvalidDifficultyError(difficulty)

    def with_tier(self, difficulty: Difficulty, stats: DifficultyStats) -> "DifficultyBreakdown":
        if difficulty == Difficulty.EASY:
            return replace(self, easy=stats)
        if difficulty == Difficulty.MED:
            return replace(self, med=stats)
        if difficulty == Difficulty.HARD:
            return replace(self, hard=stats)
        raise InvalidDifficultyError(difficulty)


@dataclass(frozen=True)
class TopicProficiency:
    """Stored proficiency state for one (user, topic)."""

    topic_id: str
    proficiency: float
    confidence: float
    total_attempts: int
    correct_attempts: int
    last_practiced: datetime
    consecutive_correct: int
    consecutive_incorrect: int
    average_time_spent: float  # milliseconds
    difficulty_breakdown: DifficultyBreakdown
    trend: Trend
    needs_review: bool
    next_review_date: datetime


@dataclass(frozen=True)
class ProficiencyUpdate:
    """Replacement values for one topic after an attempt.

    Carries every TopicProficiency field except trend, which the attempt
    processor does not recompute.
    """

    topic_id: str
    proficiency: float
    confidence: float
    total_attempts: int
    correct_attempts: int
    last_practiced: datetime
    consecutive_correct: int
    consecutive_incorrect: int
    average_time_spent: float
    difficulty_breakdown: DifficultyBreakdown
    needs_review: bool
    next_review_date: datetime

    def apply_to(self, record: TopicProficiency | None = None) -> TopicProficiency:
        """Build the full replacement record, keeping the previous trend."""
        trend = record.trend if record is not None else Trend.UNKNOWN
        return TopicProficiency(
            topic_id=self.topic_id,
            proficiency=self.proficiency,
            confidence=self.confidence,
            total_attempts=self.total_attempts,
            correct_attempts=self.correct_attempts,
            last_practiced=self.last_practiced,
            consecutive_correct=self.consecutive_correct,
            consecutive_incorrect=self.consecutive_incorrect,
            average_time_spent=self.average_time_spent,
            difficulty_breakdown=self.difficulty_breakdown,
            trend=trend,
            needs_review=self.needs_review,
            next_review_date=self.next_review_date,
        )


@dataclass(frozen=True)
class QuestionAttempt:
    """A completed answer to one question.

    Validated on construction: the scoring formulas assume a known tier and
    a non-negative, finite answer time.
    """

    question_id: str
    topic_ids: tuple[str, ...]
    is_correct: bool
    time_spent_ms: float
    difficulty: Difficulty
    attempt_date: datetime = field(default_factory=utc_now)

    def __post_init__(self) -> None:
        object.__setattr__(self, "topic_ids", tuple(self.topic_ids))
        object.__setattr__(self, "difficulty", coerce_difficulty(self.difficulty))
        object.__setattr__(self, "attempt_date", ensure_utc(self.attempt_date))

        if isinstance(self.time_spent_ms, bool) or not isinstance(self.time_spent_ms, (int, float)):
            raise InvalidAttemptError("time_spent_ms", self.time_spent_ms, "Time spent must be a number")
        if not math.isfinite(self.time_spent_ms):
            raise InvalidAttemptError("time_spent_ms", self.time_spent_ms, "Time spent must be finite")
        if self.time_spent_ms < 0:
            raise InvalidAttemptError("time_spent_ms", self.time_spent_ms, "Time spent cannot be negative")
        if any(not isinstance(t, str) or not t for t in self.topic_ids):
            raise InvalidAttemptError("topic_ids", self.topic_ids, "Topic ids must be non-empty strings")


@dataclass(frozen=True)
class WeakArea:
    """A topic flagged for remediation, ranked by urgency."""

    topic_id: str
    proficiency: float
    priority: float  # 0-100, higher = more urgent
    reason_code: ReasonCode
    recommended_questions: int
    estimated_study_time: int  # minutes
    difficulty_focus: DifficultyFocus


@dataclass(frozen=True)
class ExpectedImpact:
    """Rough benefit of following a recommendation."""

    proficiency_gain: float
    weak_areas_addressed: int


@dataclass(frozen=True)
class PracticeRecommendation:
    """A suggested practice batch."""

    id: str
    type: RecommendationType
    title: str
    description: str
    topic_ids: tuple[str, ...]
    question_count: int
    estimated_duration: int  # minutes
    difficulty: TargetDifficulty
    priority: int  # 0-100
    reasoning: str
    expected_impact: ExpectedImpact


@dataclass(frozen=True)
class LearningSession:
    """Summary of one practice session, supplied by the caller."""

    id: str
    start_time: datetime
    end_time: datetime | None = None
    topics_studied: tuple[str, ...] = ()
    questions_answered: int = 0
    correct_answers: int = 0
    time_spent: float = 0  # minutes
    proficiency_changes: dict[str, tuple[float, float]] = field(default_factory=dict)
    weak_areas_improved: tuple[str, ...] = ()
    recommendation_followed: str | None = None


@dataclass(frozen=True)
class Milestone:
    """Next proficiency target and its label."""

    target: float
    label: str


@dataclass(frozen=True)
class MasteryStats:
    """Dashboard summary over all topic records."""

    total_topics: int
    mastered_topics: int
    weak_areas: int
    average_proficiency: float
    total_practice_time: float
    streak: int


class IMasteryEngine(Protocol):
    """Interface for the mastery engine.

    All operations are synchronous and side-effect free except
    update_config, which persists the merged configuration.
    """

    def new_proficiency(
        self,
        current: float,
        is_correct: bool,
        difficulty: Difficulty,
        time_spent_ms: float,
        total_attempts: int,
    ) -> float:
        """EWMA proficiency after one attempt, in [0, 1]."""
        ...

    def confidence(self, total_attempts: int, proficiency: float) -> float:
        """Statistical trust in a proficiency estimate, in [0, 1]."""
        ...

    def trend(self, history: Sequence[float], window: int = 10) -> Trend:
        """Direction of the most recent proficiency snapshots."""
        ...

    def next_review_date(
        self,
        proficiency: float,
        consecutive_correct: int,
        last_practiced: datetime,
    ) -> datetime:
        """When the topic is next due for spaced review."""
        ...

    def weak_areas(
        self,
        records: Sequence[TopicProficiency],
        now: datetime | None = None,
    ) -> list[WeakArea]:
        """Topics needing remediation, most urgent first."""
        ...

    def recommendations(
        self,
        records: Sequence[TopicProficiency],
        recent_sessions: Sequence[LearningSession] = (),
        now: datetime | None = None,
    ) -> list[PracticeRecommendation]:
        """Practice batches ordered by priority."""
        ...

    def process_attempt(
        self,
        attempt: QuestionAttempt,
        current_records: dict[str, TopicProficiency] | None = None,
        now: datetime | None = None,
    ) -> list[ProficiencyUpdate]:
        """One update per topic tagged on the attempt."""
        ...

    def overall_stats(
        self,
        records: Sequence[TopicProficiency],
        sessions: Sequence[LearningSession] = (),
    ) -> MasteryStats:
        """Dashboard summary."""
        ...

    def mastery_level(self, proficiency: float) -> MasteryLevel:
        """Coarse mastery band for a proficiency value."""
        ...
