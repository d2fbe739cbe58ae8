"""Shared utilities and common code."""

from masterycore.shared.config import Settings, get_settings
from masterycore.shared.exceptions import (
    ConfigPersistenceError,
    ConfigurationError,
    InvalidAttemptError,
    InvalidConfigurationError,
    InvalidDifficultyError,
    MasteryCoreException,
    StorageError,
    ValidationError,
)
from masterycore.shared.kv_store import InMemoryKeyValueStore, KeyValueStore, RedisKeyValueStore
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

__all__ = [
    # Config
    "Settings",
    "get_settings",
    # Exceptions
    "MasteryCoreException",
    "ValidationError",
    "InvalidAttemptError",
    "InvalidDifficultyError",
    "ConfigurationError",
    "InvalidConfigurationError",
    "StorageError",
    "ConfigPersistenceError",
    # Stores
    "KeyValueStore",
    "InMemoryKeyValueStore",
    "RedisKeyValueStore",
    # Models
    "BaseSchema",
    "Difficulty",
    "Trend",
    "ReasonCode",
    "DifficultyFocus",
    "RecommendationType",
    "TargetDifficulty",
    "MasteryLevel",
]
