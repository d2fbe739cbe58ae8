"""Mastery engine configuration: validated parameters plus load/merge/persist.

The configuration is a single JSON blob kept in a key-value store. Stored
blobs use camelCase keys (``ewmaAlpha``, ``difficultyWeights``...); either
spelling is accepted on input.
"""

import logging
from typing import Any, Mapping

from pydantic import ConfigDict, Field, ValidationError as PydanticValidationError
from pydantic.alias_generators import to_snake

from masterycore.shared.exceptions import (
    ConfigPersistenceError,
    InvalidConfigurationError,
    InvalidDifficultyError,
    StorageError,
)
from masterycore.shared.kv_store import KeyValueStore
from masterycore.shared.models import BaseSchema, Difficulty

logger = logging.getLogger(__name__)


class _FrozenSchema(BaseSchema):
    model_config = ConfigDict(frozen=True, extra="forbid")


class DifficultyWeights(_FrozenSchema):
    """Score multiplier per difficulty tier."""

    easy: float = Field(default=1.0, gt=0)
    med: float = Field(default=1.25, gt=0)
    hard: float = Field(default=1.5, gt=0)

    def for_tier(self, difficulty: Difficulty) -> float:
        if difficulty == Difficulty.EASY:
            return self.easy
        if difficulty == Difficulty.MED:
            return self.med
        if difficulty == Difficulty.HARD:
            return self.hard
        raise InvalidDifficultyError(difficulty)


class TimeWeights(_FrozenSchema):
    """Answer-time adjustments applied to correct answers."""

    fast_bonus: float = Field(default=1.2, gt=0)
    slow_penalty: float = Field(default=0.8, ge=0)
    optimal_time: float = Field(default=90, gt=0, description="Optimal seconds per question")


class MasteryConfig(_FrozenSchema):
    """Parameters for every formula in the engine."""

    ewma_alpha: float = Field(default=0.3, gt=0, le=1, description="EWMA learning rate")
    proficiency_threshold: float = Field(default=0.7, ge=0, le=1, description="Below this = weak area")
    confidence_threshold: float = Field(default=10, gt=0, description="Attempts for full confidence")
    spaced_repetition_base: float = Field(default=1, gt=0, description="Base interval in days")
    max_spaced_interval: float = Field(default=30, gt=0, description="Maximum interval in days")
    difficulty_weights: DifficultyWeights = Field(default_factory=DifficultyWeights)
    time_weights: TimeWeights = Field(default_factory=TimeWeights)

    def to_blob(self) -> dict[str, Any]:
        """Serialize for storage, using camelCase keys."""
        return self.model_dump(by_alias=True, mode="json")


DEFAULT_MASTERY_CONFIG = MasteryConfig()


def _normalize_keys(data: Mapping[str, Any]) -> dict[str, Any]:
    normalized: dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(value, Mapping):
            value = _normalize_keys(value)
        normalized[to_snake(str(key))] = value
    return normalized


def _deep_merge(base: dict[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def merge_config(base: MasteryConfig, override: Mapping[str, Any]) -> MasteryConfig:
    """Merge a partial override onto base, rejecting invalid values.

    Nested weight groups are merged key by key, so overriding
    ``difficultyWeights.hard`` keeps the other tiers.

    Raises:
        InvalidConfigurationError: If the merged result fails validation
    """
    merged = _deep_merge(base.model_dump(), _normalize_keys(override))
    try:
        return MasteryConfig.model_validate(merged)
    except PydanticValidationError as e:
        errors = e.errors(include_url=False, include_context=False, include_input=False)
        raise InvalidConfigurationError(errors) from e


def merge_config_lenient(base: MasteryConfig, override: Mapping[str, Any]) -> MasteryConfig:
    """Merge a possibly malformed override, dropping fields that fail validation.

    Used for blobs read back from storage, which must never prevent the
    engine from starting.
    """
    candidate = _normalize_keys(override)
    while True:
        try:
            return merge_config(base, candidate)
        except InvalidConfigurationError as e:
            bad = {to_snake(str(err["loc"][0])) for err in e.details["errors"] if err.get("loc")}
            bad &= set(candidate)
            if not bad:
                logger.warning(f"Ignoring stored mastery config: {e.message}")
                return base
            logger.warning(f"Ignoring invalid stored config fields: {sorted(bad)}")
            candidate = {k: v for k, v in candidate.items() if k not in bad}


class ConfigRepository:
    """Loads and persists the mastery configuration blob."""

    def __init__(self, store: KeyValueStore, key: str = "mastery_config") -> None:
        self._store = store
        self._key = key

    @property
    def key(self) -> str:
        return self._key

    def load(self) -> MasteryConfig:
        """Read the stored blob and merge it onto defaults.

        Missing, unreadable or malformed blobs fall back to defaults.
        """
        try:
            blob = self._store.get(self._key)
        except (StorageError, OSError, ValueError) as e:
            logger.warning(f"Failed to load mastery config '{self._key}': {e}")
            return DEFAULT_MASTERY_CONFIG

        if blob is None:
            logger.debug(f"No stored mastery config under '{self._key}', using defaults")
            return DEFAULT_MASTERY_CONFIG
        if not isinstance(blob, Mapping):
            logger.warning(f"Stored mastery config '{self._key}' is not an object, using defaults")
            return DEFAULT_MASTERY_CONFIG

        return merge_config_lenient(DEFAULT_MASTERY_CONFIG, blob)

    def save(self, config: MasteryConfig) -> None:
        """Persist the full configuration.

        Raises:
            ConfigPersistenceError: If the store rejects the write
        """
        try:
            self._store.set(self._key, config.to_blob())
        except (StorageError, OSError) as e:
            raise ConfigPersistenceError(self._key, str(e)) from e
