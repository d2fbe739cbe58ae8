"""Mastery module - Proficiency tracking, weak areas and practice recommendations.

Usage:
    from masterycore.modules.mastery import get_mastery_engine
    engine = get_mastery_engine()

    # Explicit store (tests, embedding applications)
    from masterycore.modules.mastery import MasteryEngine
"""

from masterycore.modules.mastery.config import (
    DEFAULT_MASTERY_CONFIG,
    ConfigRepository,
    DifficultyWeights,
    MasteryConfig,
    TimeWeights,
    merge_config,
)
from masterycore.modules.mastery.interface import (
    DifficultyBreakdown,
    DifficultyStats,
    ExpectedImpact,
    IMasteryEngine,
    LearningSession,
    MasteryStats,
    Milestone,
    PracticeRecommendation,
    ProficiencyUpdate,
    QuestionAttempt,
    TopicProficiency,
    WeakArea,
)
from masterycore.modules.mastery.processor import default_proficiency, process_attempt
from masterycore.modules.mastery.schemas import (
    LearningSessionRecord,
    MasteryStatsResponse,
    PracticeRecommendationResponse,
    ProficiencyUpdateResponse,
    QuestionAttemptRecord,
    TopicProficiencyRecord,
    WeakAreaResponse,
)
from masterycore.modules.mastery.service import (
    MasteryEngine,
    get_config_store,
    get_mastery_engine,
    reset_mastery_engine,
)

__all__ = [
    # Interface
    "IMasteryEngine",
    "TopicProficiency",
    "ProficiencyUpdate",
    "QuestionAttempt",
    "DifficultyBreakdown",
    "DifficultyStats",
    "WeakArea",
    "PracticeRecommendation",
    "ExpectedImpact",
    "LearningSession",
    "MasteryStats",
    "Milestone",
    # Config
    "MasteryConfig",
    "DifficultyWeights",
    "TimeWeights",
    "DEFAULT_MASTERY_CONFIG",
    "ConfigRepository",
    "merge_config",
    # Processing
    "default_proficiency",
    "process_attempt",
    # Service
    "MasteryEngine",
    "get_mastery_engine",
    "reset_mastery_engine",
    "get_config_store",
    # Schemas
    "TopicProficiencyRecord",
    "ProficiencyUpdateResponse",
    "QuestionAttemptRecord",
    "LearningSessionRecord",
    "WeakAreaResponse",
    "PracticeRecommendationResponse",
    "MasteryStatsResponse",
]
