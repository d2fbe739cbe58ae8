"""Base models and common types used across modules."""

from enum import Enum

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class BaseSchema(BaseModel):
    """Base schema with common configuration.

    Field names are snake_case in Python and camelCase on the wire;
    either spelling is accepted on input.
    """

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )


# Common enums and types


class Difficulty(str, Enum):
    """Question difficulty tiers."""

    EASY = "easy"
    MED = "med"
    HARD = "hard"


class Trend(str, Enum):
    """Direction of recent proficiency movement."""

    IMPROVING = "improving"
    STABLE = "stable"
    DECLINING = "declining"
    UNKNOWN = "unknown"


class ReasonCode(str, Enum):
    """Why a topic was flagged as a weak area."""

    LOW_PROFICIENCY = "low_proficiency"
    DECLINING_TREND = "declining_trend"
    ERROR_PRONE = "error_prone"
    NEEDS_PRACTICE = "needs_practice"


class DifficultyFocus(str, Enum):
    """Tier a remediation session should concentrate on."""

    EASY = "easy"
    MED = "med"
    HARD = "hard"
    MIXED = "mixed"


class RecommendationType(str, Enum):
    """Kinds of practice recommendation."""

    WEAK_AREAS = "weak_areas"
    SPACED_REVIEW = "spaced_review"
    MAINTENANCE = "maintenance"
    CHALLENGE = "challenge"


class TargetDifficulty(str, Enum):
    """Difficulty hint attached to a recommendation."""

    EASY = "easy"
    MED = "med"
    HARD = "hard"
    ADAPTIVE = "adaptive"


class MasteryLevel(str, Enum):
    """Coarse mastery bands derived from proficiency."""

    NOVICE = "novice"
    DEVELOPING = "developing"
    PROFICIENT = "proficient"
    ADVANCED = "advanced"
    EXPERT = "expert"
