"""Mastery Engine - configuration owner and entry point for all operations.

Usage:
    from masterycore.modules.mastery import MasteryEngine
    from masterycore.shared.kv_store import InMemoryKeyValueStore

    engine = MasteryEngine(InMemoryKeyValueStore())
    updates = engine.process_attempt(attempt, current_records)

The engine loads its configuration from the key-value store once at
construction. Computations read an immutable snapshot of the config, so
only update_config needs the lock.
"""

import logging
import threading
from datetime import date, datetime
from typing import Any, Mapping, Sequence

from masterycore.modules.mastery import analyzer, processor, progress, recommendations, scheduler, scoring
from masterycore.modules.mastery.config import ConfigRepository, MasteryConfig, merge_config
from masterycore.modules.mastery.interface import (
    LearningSession,
    MasteryStats,
    Milestone,
    PracticeRecommendation,
    ProficiencyUpdate,
    QuestionAttempt,
    TopicProficiency,
    WeakArea,
)
from masterycore.shared.config import Settings, get_settings
from masterycore.shared.constants import DEFAULT_TREND_WINDOW
from masterycore.shared.exceptions import StorageError
from masterycore.shared.feature_flags import FeatureFlags, get_feature_flags
from masterycore.shared.kv_store import InMemoryKeyValueStore, KeyValueStore, RedisKeyValueStore
from masterycore.shared.models import Difficulty, MasteryLevel, Trend

logger = logging.getLogger(__name__)


class MasteryEngine:
    """Proficiency tracking and recommendation engine.

    Implements IMasteryEngine. Every operation is bound to the engine's
    current configuration.
    """

    def __init__(self, store: KeyValueStore, settings: Settings | None = None) -> None:
        settings = settings or get_settings()
        self._store = store
        self._repository = ConfigRepository(store, settings.mastery_config_key)
        self._lock = threading.Lock()
        self._config = self._repository.load()
        logger.debug(f"MasteryEngine initialized (config key '{self._repository.key}')")

    # ===================
    # Configuration
    # ===================

    @property
    def config(self) -> MasteryConfig:
        return self._config

    @property
    def store(self) -> KeyValueStore:
        return self._store

    @property
    def config_key(self) -> str:
        return self._repository.key

    def update_config(self, overrides: Mapping[str, Any]) -> MasteryConfig:
        """Merge a partial override into the active config and persist it.

        Args:
            overrides: Partial config, camelCase or snake_case keys

        Returns:
            The new active configuration

        Raises:
            InvalidConfigurationError: If the merged config is invalid; nothing changes
            ConfigPersistenceError: If saving fails; the in-memory config is
                already updated
        """
        with self._lock:
            updated = merge_config(self._config, overrides)
            self._config = updated
            logger.info(f"Mastery config updated: {sorted(overrides)}")
            self._repository.save(updated)
        return updated

    # ===================
    # Scoring
    # ===================

    def new_proficiency(
        self,
        current: float,
        is_correct: bool,
        difficulty: Difficulty,
        time_spent_ms: float,
        total_attempts: int,
    ) -> float:
        return scoring.new_proficiency(
            current, is_correct, difficulty, time_spent_ms, total_attempts, self._config
        )

    def confidence(self, total_attempts: int, proficiency: float) -> float:
        return scoring.confidence(total_attempts, proficiency, self._config)

    def trend(self, history: Sequence[float], window: int = DEFAULT_TREND_WINDOW) -> Trend:
        return scoring.trend(history, window)

    # ===================
    # Scheduling
    # ===================

    def review_interval_days(self, proficiency: float, consecutive_correct: int) -> float:
        return scheduler.review_interval_days(proficiency, consecutive_correct, self._config)

    def next_review_date(
        self,
        proficiency: float,
        consecutive_correct: int,
        last_practiced: datetime,
    ) -> datetime:
        return scheduler.next_review_date(
            proficiency, consecutive_correct, last_practiced, self._config
        )

    # ===================
    # Analysis
    # ===================

    def weak_areas(
        self,
        records: Sequence[TopicProficiency],
        now: datetime | None = None,
    ) -> list[WeakArea]:
        return analyzer.detect_weak_areas(records, self._config, now)

    def recommendations(
        self,
        records: Sequence[TopicProficiency],
        recent_sessions: Sequence[LearningSession] = (),
        now: datetime | None = None,
    ) -> list[PracticeRecommendation]:
        return recommendations.generate_recommendations(
            records, recent_sessions, self._config, now
        )

    # ===================
    # Attempt Processing
    # ===================

    def default_proficiency(self, topic_id: str, now: datetime | None = None) -> TopicProficiency:
        return processor.default_proficiency(topic_id, now)

    def process_attempt(
        self,
        attempt: QuestionAttempt,
        current_records: Mapping[str, TopicProficiency] | None = None,
        now: datetime | None = None,
    ) -> list[ProficiencyUpdate]:
        return processor.process_attempt(attempt, current_records, self._config, now)

    # ===================
    # Progress
    # ===================

    def overall_stats(
        self,
        records: Sequence[TopicProficiency],
        sessions: Sequence[LearningSession] = (),
        today: date | None = None,
    ) -> MasteryStats:
        return progress.overall_stats(records, sessions, self._config, today)

    def mastery_level(self, proficiency: float) -> MasteryLevel:
        return progress.mastery_level(proficiency)

    def next_milestone(self, proficiency: float) -> Milestone:
        return progress.next_milestone(proficiency)

    def attempt_feedback(
        self,
        records: Mapping[str, TopicProficiency],
        topic_ids: Sequence[str],
        is_correct: bool,
        topic_names: Mapping[str, str] | None = None,
    ) -> str:
        return progress.attempt_feedback(records, topic_ids, is_correct, topic_names)


def get_config_store() -> KeyValueStore:
    """Pick the config store from the FF_USE_REDIS_CONFIG_STORE flag.

    With the flag on, Redis is used even when unreachable: loading falls
    back to defaults and saving raises ConfigPersistenceError.
    """
    if not get_feature_flags().is_enabled(FeatureFlags.USE_REDIS_CONFIG_STORE):
        return InMemoryKeyValueStore()

    store = RedisKeyValueStore()
    try:
        store.ping()
    except StorageError as e:
        logger.warning(f"Redis config store unreachable: {e.message}")
    return store


# Singleton instance
_mastery_engine: MasteryEngine | None = None


def get_mastery_engine() -> MasteryEngine:
    """Get mastery engine singleton."""
    global _mastery_engine
    if _mastery_engine is None:
        _mastery_engine = MasteryEngine(get_config_store())
    return _mastery_engine


def reset_mastery_engine() -> None:
    """Drop the cached engine so the next call rebuilds it."""
    global _mastery_engine
    _mastery_engine = None
