"""Test configuration and fixtures."""

import sys
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from pathlib import Path

# Load environment variables before any imports that need them
from dotenv import load_dotenv
project_root = Path(__file__).parent.parent
load_dotenv(project_root / ".env")

# Ensure masterycore is importable without installation
sys.path.insert(0, str(project_root))

import pytest

from masterycore.modules.mastery.interface import (
    DifficultyBreakdown,
    DifficultyStats,
    QuestionAttempt,
    TopicProficiency,
)
from masterycore.modules.mastery.service import MasteryEngine, reset_mastery_engine
from masterycore.shared.config import Settings
from masterycore.shared.feature_flags import FeatureFlagManager, get_feature_flags
from masterycore.shared.kv_store import InMemoryKeyValueStore
from masterycore.shared.models import Difficulty, Trend


@pytest.fixture(autouse=True)
def reset_singletons():
    """Reset cached engine and feature flag overrides between tests."""
    reset_mastery_engine()
    FeatureFlagManager._instance = None
    get_feature_flags.cache_clear()
    yield
    reset_mastery_engine()
    FeatureFlagManager._instance = None
    get_feature_flags.cache_clear()


@pytest.fixture
def now():
    """Fixed evaluation time."""
    return datetime(2026, 3, 15, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def make_record(now):
    """Factory for topic records with sensible defaults.

    Defaults describe a stable, mid-level topic practiced two days ago that
    is not yet due for review.
    """

    def _make(topic_id: str = "topic1", **overrides) -> TopicProficiency:
        record = TopicProficiency(
            topic_id=topic_id,
            proficiency=0.6,
            confidence=0.5,
            total_attempts=6,
            correct_attempts=4,
            last_practiced=now - timedelta(days=2),
            consecutive_correct=1,
            consecutive_incorrect=0,
            average_time_spent=60000.0,
            difficulty_breakdown=DifficultyBreakdown(
                easy=DifficultyStats(correct=2, total=2, avg_time=45000.0),
                med=DifficultyStats(correct=2, total=3, avg_time=60000.0),
                hard=DifficultyStats(correct=0, total=1, avg_time=90000.0),
            ),
            trend=Trend.STABLE,
            needs_review=False,
            next_review_date=now + timedelta(days=1),
        )
        return replace(record, **overrides)

    return _make


@pytest.fixture
def make_attempt(now):
    """Factory for question attempts answered at the fixed time."""

    def _make(topic_ids=("topic1",), is_correct=True, difficulty=Difficulty.MED,
              time_spent_ms=60000, question_id="q1") -> QuestionAttempt:
        return QuestionAttempt(
            question_id=question_id,
            topic_ids=tuple(topic_ids),
            is_correct=is_correct,
            time_spent_ms=time_spent_ms,
            difficulty=difficulty,
            attempt_date=now,
        )

    return _make


@pytest.fixture
def settings():
    """Settings isolated from the developer's .env."""
    return Settings(_env_file=None, mastery_config_key="test_mastery_config")


@pytest.fixture
def memory_store():
    """Empty in-memory key-value store."""
    return InMemoryKeyValueStore()


@pytest.fixture
def engine(memory_store, settings):
    """Engine backed by an empty in-memory store."""
    return MasteryEngine(memory_store, settings)
