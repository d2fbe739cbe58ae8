"""Pydantic schemas for reading and writing mastery data as JSON.

Records use camelCase keys on the wire; snake_case is accepted on input.
Timestamps may be epoch milliseconds or ISO 8601 strings and are always
written back as ISO 8601 UTC.
"""

from datetime import datetime
from typing import Annotated, Any, Sequence

from pydantic import AfterValidator, AliasChoices, BeforeValidator, Field, TypeAdapter, model_validator

from masterycore.modules.mastery.interface import (
    DifficultyBreakdown,
    DifficultyStats,
    LearningSession,
    ProficiencyUpdate,
    QuestionAttempt,
    TopicProficiency,
)
from masterycore.shared.datetime_utils import ensure_utc, ms_to_datetime
from masterycore.shared.models import (
    BaseSchema,
    Difficulty,
    DifficultyFocus,
    MasteryLevel,
    ReasonCode,
    RecommendationType,
    TargetDifficulty,
    Trend,
)


def _parse_timestamp(value: Any) -> Any:
    """Epoch milliseconds become UTC datetimes; anything else is left to pydantic."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return ms_to_datetime(value)
    return value


Timestamp = Annotated[datetime, BeforeValidator(_parse_timestamp), AfterValidator(ensure_utc)]


# ==================
# Records
# ==================


class DifficultyStatsSchema(BaseSchema):
    correct: int = Field(default=0, ge=0)
    total: int = Field(default=0, ge=0)
    avg_time: float = Field(default=0.0, ge=0)

    @model_validator(mode="after")
    def _check_counts(self) -> "DifficultyStatsSchema":
        if self.correct > self.total:
            raise ValueError("correct cannot exceed total")
        return self


class DifficultyBreakdownSchema(BaseSchema):
    easy: DifficultyStatsSchema = Field(default_factory=DifficultyStatsSchema)
    med: DifficultyStatsSchema = Field(default_factory=DifficultyStatsSchema)
    hard: DifficultyStatsSchema = Field(default_factory=DifficultyStatsSchema)

    def to_domain(self) -> DifficultyBreakdown:
        return DifficultyBreakdown(
            easy=DifficultyStats(**self.easy.model_dump()),
            med=DifficultyStats(**self.med.model_dump()),
            hard=DifficultyStats(**self.hard.model_dump()),
        )


class TopicProficiencyRecord(BaseSchema):
    """Stored proficiency record for one topic."""

    topic_id: str = Field(..., min_length=1)
    proficiency: float = Field(..., ge=0, le=1)
    confidence: float = Field(default=0.0, ge=0, le=1)
    total_attempts: int = Field(default=0, ge=0)
    correct_attempts: int = Field(default=0, ge=0)
    last_practiced: Timestamp
    consecutive_correct: int = Field(default=0, ge=0)
    consecutive_incorrect: int = Field(default=0, ge=0)
    average_time_spent: float = Field(default=0.0, ge=0, description="Milliseconds")
    difficulty_breakdown: DifficultyBreakdownSchema = Field(default_factory=DifficultyBreakdownSchema)
    trend: Trend = Trend.UNKNOWN
    needs_review: bool = True
    next_review_date: Timestamp

    @model_validator(mode="after")
    def _check_counts(self) -> "TopicProficiencyRecord":
        if self.correct_attempts > self.total_attempts:
            raise ValueError("correctAttempts cannot exceed totalAttempts")
        return self

    def to_domain(self) -> TopicProficiency:
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
            difficulty_breakdown=self.difficulty_breakdown.to_domain(),
            trend=self.trend,
            needs_review=self.needs_review,
            next_review_date=self.next_review_date,
        )

    @classmethod
    def from_domain(cls, record: TopicProficiency) -> "TopicProficiencyRecord":
        return cls.model_validate(record)


class ProficiencyUpdateResponse(BaseSchema):
    """Processor output for one topic (no trend)."""

    topic_id: str
    proficiency: float
    confidence: float
    total_attempts: int
    correct_attempts: int
    last_practiced: Timestamp
    consecutive_correct: int
    consecutive_incorrect: int
    average_time_spent: float
    difficulty_breakdown: DifficultyBreakdownSchema
    needs_review: bool
    next_review_date: Timestamp

    @classmethod
    def from_domain(cls, update: ProficiencyUpdate) -> "ProficiencyUpdateResponse":
        return cls.model_validate(update)


class QuestionAttemptRecord(BaseSchema):
    """A completed answer as supplied by the caller."""

    question_id: str = Field(..., min_length=1)
    topic_ids: list[str] = Field(default_factory=list)
    is_correct: bool
    time_spent_ms: float = Field(
        ...,
        validation_alias=AliasChoices("timeSpentMs", "timeSpent", "time_spent_ms"),
        serialization_alias="timeSpentMs",
        ge=0,
        description="Milliseconds",
    )
    difficulty: Difficulty
    attempt_date: Timestamp | None = None

    def to_domain(self) -> QuestionAttempt:
        kwargs: dict[str, Any] = {}
        if self.attempt_date is not None:
            kwargs["attempt_date"] = self.attempt_date
        return QuestionAttempt(
            question_id=self.question_id,
            topic_ids=tuple(self.topic_ids),
            is_correct=self.is_correct,
            time_spent_ms=self.time_spent_ms,
            difficulty=self.difficulty,
            **kwargs,
        )


class LearningSessionRecord(BaseSchema):
    """Summary of one practice session."""

    id: str
    start_time: Timestamp
    end_time: Timestamp | None = None
    topics_studied: list[str] = Field(default_factory=list)
    questions_answered: int = Field(default=0, ge=0)
    correct_answers: int = Field(default=0, ge=0)
    time_spent: float = Field(default=0, ge=0, description="Minutes")
    proficiency_changes: dict[str, tuple[float, float]] = Field(default_factory=dict)
    weak_areas_improved: list[str] = Field(default_factory=list)
    recommendation_followed: str | None = None

    def to_domain(self) -> LearningSession:
        return LearningSession(
            id=self.id,
            start_time=self.start_time,
            end_time=self.end_time,
            topics_studied=tuple(self.topics_studied),
            questions_answered=self.questions_answered,
            correct_answers=self.correct_answers,
            time_spent=self.time_spent,
            proficiency_changes=dict(self.proficiency_changes),
            weak_areas_improved=tuple(self.weak_areas_improved),
            recommendation_followed=self.recommendation_followed,
        )


# ==================
# Derived Results
# ==================


class WeakAreaResponse(BaseSchema):
    topic_id: str
    proficiency: float
    priority: float
    reason_code: ReasonCode
    recommended_questions: int
    estimated_study_time: int
    difficulty_focus: DifficultyFocus


class ExpectedImpactResponse(BaseSchema):
    proficiency_gain: float
    weak_areas_addressed: int


class PracticeRecommendationResponse(BaseSchema):
    id: str
    type: RecommendationType
    title: str
    description: str
    topic_ids: list[str]
    question_count: int
    estimated_duration: int
    difficulty: TargetDifficulty
    priority: int
    reasoning: str
    expected_impact: ExpectedImpactResponse


class MasteryStatsResponse(BaseSchema):
    total_topics: int
    mastered_topics: int
    weak_areas: int
    average_proficiency: float
    total_practice_time: float
    streak: int
    level: MasteryLevel | None = None


# ==================
# Helpers
# ==================

_RECORD_LIST = TypeAdapter(list[TopicProficiencyRecord])
_SESSION_LIST = TypeAdapter(list[LearningSessionRecord])


def parse_records(data: Any) -> list[TopicProficiency]:
    """Validate a JSON list of topic records.

    Raises:
        pydantic.ValidationError: If any record is malformed
    """
    return [record.to_domain() for record in _RECORD_LIST.validate_python(data)]


def parse_sessions(data: Any) -> list[LearningSession]:
    return [session.to_domain() for session in _SESSION_LIST.validate_python(data)]


def dump_records(records: Sequence[TopicProficiency]) -> list[dict[str, Any]]:
    """Serialize records to camelCase JSON-ready dicts."""
    return [
        TopicProficiencyRecord.from_domain(r).model_dump(by_alias=True, mode="json")
        for r in records
    ]
