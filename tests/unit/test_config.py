"""Unit tests for engine configuration: defaults, merging and persistence."""

import logging
from unittest.mock import MagicMock, patch

import pytest

from masterycore.modules.mastery.config import (
    DEFAULT_MASTERY_CONFIG,
    ConfigRepository,
    MasteryConfig,
    merge_config,
    merge_config_lenient,
)
from masterycore.shared.config import Settings
from masterycore.shared.exceptions import ConfigPersistenceError, InvalidConfigurationError, StorageError
from masterycore.shared.kv_store import InMemoryKeyValueStore
from masterycore.shared.logging_config import setup_logging


class TestDefaults:
    """Tests for default values."""

    def test_defaults(self):
        assert DEFAULT_MASTERY_CONFIG.ewma_alpha == 0.3
        assert DEFAULT_MASTERY_CONFIG.proficiency_threshold == 0.7
        assert DEFAULT_MASTERY_CONFIG.confidence_threshold == 10
        assert DEFAULT_MASTERY_CONFIG.spaced_repetition_base == 1
        assert DEFAULT_MASTERY_CONFIG.max_spaced_interval == 30
        assert DEFAULT_MASTERY_CONFIG.difficulty_weights.hard > DEFAULT_MASTERY_CONFIG.difficulty_weights.easy
        assert DEFAULT_MASTERY_CONFIG.time_weights.optimal_time == 90

    def test_blob_uses_camel_case(self):
        blob = DEFAULT_MASTERY_CONFIG.to_blob()

        assert blob["ewmaAlpha"] == 0.3
        assert blob["proficiencyThreshold"] == 0.7
        assert blob["difficultyWeights"] == {"easy": 1.0, "med": 1.25, "hard": 1.5}
        assert blob["timeWeights"]["fastBonus"] == 1.2

    def test_config_is_immutable(self):
        with pytest.raises(Exception):
            DEFAULT_MASTERY_CONFIG.ewma_alpha = 0.5


class TestMergeConfig:
    """Tests for partial overrides."""

    def test_camel_case_override(self):
        merged = merge_config(DEFAULT_MASTERY_CONFIG, {"ewmaAlpha": 0.4, "proficiencyThreshold": 0.8})

        assert merged.ewma_alpha == 0.4
        assert merged.proficiency_threshold == 0.8
        assert merged.max_spaced_interval == 30

    def test_snake_case_override(self):
        assert merge_config(DEFAULT_MASTERY_CONFIG, {"ewma_alpha": 0.5}).ewma_alpha == 0.5

    def test_nested_override_keeps_siblings(self):
        merged = merge_config(DEFAULT_MASTERY_CONFIG, {"difficultyWeights": {"hard": 2.0}})

        assert merged.difficulty_weights.hard == 2.0
        assert merged.difficulty_weights.easy == 1.0
        assert merged.difficulty_weights.med == 1.25

    def test_base_is_not_modified(self):
        merge_config(DEFAULT_MASTERY_CONFIG, {"ewmaAlpha": 0.9})
        assert DEFAULT_MASTERY_CONFIG.ewma_alpha == 0.3

    @pytest.mark.parametrize("override", [
        {"ewmaAlpha": 0},
        {"ewmaAlpha": 1.5},
        {"proficiencyThreshold": -0.1},
        {"confidenceThreshold": 0},
        {"difficultyWeights": {"hard": "heavy"}},
        {"unknownSetting": 1},
    ])
    def test_invalid_override_rejected(self, override):
        with pytest.raises(InvalidConfigurationError) as exc_info:
            merge_config(DEFAULT_MASTERY_CONFIG, override)
        assert exc_info.value.details["errors"]

    def test_error_is_serializable(self):
        with pytest.raises(InvalidConfigurationError) as exc_info:
            merge_config(DEFAULT_MASTERY_CONFIG, {"ewmaAlpha": 2})
        payload = exc_info.value.to_dict()
        assert payload["error"] == "InvalidConfigurationError"
        assert "ewma_alpha" in payload["message"] or "ewmaAlpha" in payload["message"]


class TestMergeConfigLenient:
    """Tests for merging stored blobs."""

    def test_drops_only_invalid_fields(self):
        merged = merge_config_lenient(
            DEFAULT_MASTERY_CONFIG,
            {"ewmaAlpha": 7, "proficiencyThreshold": 0.6, "bogus": True},
        )

        assert merged.ewma_alpha == 0.3
        assert merged.proficiency_threshold == 0.6

    def test_drops_invalid_nested_group(self):
        merged = merge_config_lenient(DEFAULT_MASTERY_CONFIG, {"timeWeights": {"optimalTime": -5}})
        assert merged.time_weights == DEFAULT_MASTERY_CONFIG.time_weights


class TestConfigRepository:
    """Tests for loading and saving the blob."""

    def test_missing_blob_gives_defaults(self):
        repo = ConfigRepository(InMemoryKeyValueStore())
        assert repo.load() == DEFAULT_MASTERY_CONFIG

    def test_round_trip(self):
        store = InMemoryKeyValueStore()
        repo = ConfigRepository(store, key="cfg")
        config = MasteryConfig(ewma_alpha=0.45)

        repo.save(config)

        assert store.get("cfg")["ewmaAlpha"] == 0.45
        assert repo.load() == config

    def test_partial_blob_merged_onto_defaults(self):
        store = InMemoryKeyValueStore({"mastery_config": {"maxSpacedInterval": 60}})
        config = ConfigRepository(store).load()

        assert config.max_spaced_interval == 60
        assert config.ewma_alpha == 0.3

    def test_non_object_blob_gives_defaults(self):
        store = MagicMock()
        store.get.return_value = ["not", "a", "dict"]
        assert ConfigRepository(store).load() == DEFAULT_MASTERY_CONFIG

    def test_store_failure_on_load_gives_defaults(self):
        store = MagicMock()
        store.get.side_effect = StorageError("redis", "connection refused")
        assert ConfigRepository(store).load() == DEFAULT_MASTERY_CONFIG

    def test_store_failure_on_save_raises(self):
        store = MagicMock()
        store.set.side_effect = StorageError("redis", "read only replica")

        with pytest.raises(ConfigPersistenceError) as exc_info:
            ConfigRepository(store, key="cfg").save(DEFAULT_MASTERY_CONFIG)
        assert exc_info.value.details["key"] == "cfg"


class TestSettings:
    """Tests for environment-driven settings."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("MASTERY_CONFIG_KEY", raising=False)
        monkeypatch.delenv("ENVIRONMENT", raising=False)
        settings = Settings(_env_file=None)

        assert settings.mastery_config_key == "mastery_config"
        assert settings.is_development

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("MASTERY_CONFIG_KEY", "tenant_a_config")
        monkeypatch.setenv("ENVIRONMENT", "production")
        settings = Settings(_env_file=None)

        assert settings.mastery_config_key == "tenant_a_config"
        assert settings.is_production


class TestSetupLogging:
    """Tests for logging configuration."""

    @pytest.fixture(autouse=True)
    def restore_root_level(self):
        root = logging.getLogger()
        level = root.level
        yield
        root.setLevel(level)

    def test_explicit_level_overrides_setting(self):
        with patch(
            "masterycore.shared.logging_config.get_settings",
            return_value=Settings(_env_file=None, log_level="WARNING", environment="development"),
        ):
            setup_logging("debug")

        assert logging.getLogger().level == logging.DEBUG
        assert logging.getLogger("redis").level == logging.WARNING

    def test_unknown_level_falls_back_to_info(self):
        with patch(
            "masterycore.shared.logging_config.get_settings",
            return_value=Settings(_env_file=None, log_level="chatty", environment="production"),
        ):
            setup_logging()

        assert logging.getLogger().level == logging.INFO
