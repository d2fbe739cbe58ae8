"""Unit tests for the configuration key-value stores."""

import json
from unittest.mock import MagicMock

import pytest
import redis

from masterycore.shared.exceptions import StorageError
from masterycore.shared.kv_store import InMemoryKeyValueStore, RedisKeyValueStore


class TestInMemoryKeyValueStore:
    """Tests for the dict-backed store."""

    def test_get_missing_returns_none(self):
        assert InMemoryKeyValueStore().get("nope") is None

    def test_set_and_get(self):
        store = InMemoryKeyValueStore()
        store.set("cfg", {"ewmaAlpha": 0.4})
        assert store.get("cfg") == {"ewmaAlpha": 0.4}

    def test_initial_values(self):
        store = InMemoryKeyValueStore({"a": {"x": 1}, "b": {"y": 2}})
        assert sorted(store.keys()) == ["a", "b"]

    def test_stored_values_are_copies(self):
        store = InMemoryKeyValueStore()
        value = {"nested": {"x": 1}}
        store.set("k", value)

        value["nested"]["x"] = 99
        store.get("k")["nested"]["x"] = 42

        assert store.get("k") == {"nested": {"x": 1}}


class TestRedisKeyValueStore:
    """Tests for the Redis-backed store with a mocked client."""

    @pytest.fixture
    def client(self):
        return MagicMock(spec=redis.Redis)

    @pytest.fixture
    def store(self, client):
        return RedisKeyValueStore(client, namespace="test")

    def test_get_decodes_json(self, store, client):
        client.get.return_value = json.dumps({"ewmaAlpha": 0.4})

        assert store.get("mastery_config") == {"ewmaAlpha": 0.4}
        client.get.assert_called_once_with("test:mastery_config")

    def test_get_accepts_bytes(self, store, client):
        client.get.return_value = b'{"a": 1}'
        assert store.get("k") == {"a": 1}

    def test_get_missing(self, store, client):
        client.get.return_value = None
        assert store.get("k") is None

    def test_set_encodes_json(self, store, client):
        store.set("k", {"a": 1})
        client.set.assert_called_once_with("test:k", '{"a": 1}')

    def test_corrupt_json_raises_storage_error(self, store, client):
        client.get.return_value = "{not json"
        with pytest.raises(StorageError) as exc_info:
            store.get("k")
        assert exc_info.value.details["backend"] == "redis"

    def test_redis_errors_are_wrapped(self, store, client):
        client.get.side_effect = redis.ConnectionError("refused")
        client.set.side_effect = redis.TimeoutError("slow")

        with pytest.raises(StorageError):
            store.get("k")
        with pytest.raises(StorageError):
            store.set("k", {})

    def test_ping(self, store, client):
        client.ping.return_value = True
        assert store.ping() is True

        client.ping.side_effect = redis.ConnectionError("down")
        with pytest.raises(StorageError):
            store.ping()
