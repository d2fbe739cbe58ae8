"""Key-value stores for small JSON blobs such as the engine configuration.

The engine only needs ``get(key)`` and ``set(key, value)``. Two
implementations are provided: an in-process dict (tests, CLI default) and
a Redis-backed store.
"""

import json
import logging
import threading
from typing import Any, Protocol

import redis

from masterycore.shared.config import get_settings
from masterycore.shared.exceptions import StorageError

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    """Interface for the configuration blob store."""

    def get(self, key: str) -> dict[str, Any] | None:
        """Return the decoded blob stored under key, or None if absent."""
        ...

    def set(self, key: str, value: dict[str, Any]) -> None:
        """Store value under key, replacing any previous blob."""
        ...


class InMemoryKeyValueStore:
    """Dict-backed store, safe to share between threads."""

    def __init__(self, initial: dict[str, dict[str, Any]] | None = None) -> None:
        self._data: dict[str, str] = {}
        self._lock = threading.Lock()
        for key, value in (initial or {}).items():
            self.set(key, value)

    def get(self, key: str) -> dict[str, Any] | None:
        with self._lock:
            raw = self._data.get(key)
        return json.loads(raw) if raw is not None else None

    def set(self, key: str, value: dict[str, Any]) -> None:
        # Round-trip through JSON so callers cannot mutate stored state
        encoded = json.dumps(value)
        with self._lock:
            self._data[key] = encoded

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._data)


class RedisKeyValueStore:
    """Redis-backed store holding JSON-encoded blobs."""

    def __init__(
        self,
        client: redis.Redis | None = None,
        namespace: str = "masterycore",
    ) -> None:
        if client is None:
            settings = get_settings()
            client = redis.Redis.from_url(
                settings.redis_url,
                decode_responses=True,
                socket_timeout=settings.redis_socket_timeout,
            )
        self._client = client
        self._namespace = namespace

    def _key(self, key: str) -> str:
        return f"{self._namespace}:{key}"

    def get(self, key: str) -> dict[str, Any] | None:
        try:
            raw = self._client.get(self._key(key))
        except redis.RedisError as e:
            raise StorageError("redis", str(e)) from e

        if raw is None:
            return None
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise StorageError("redis", f"corrupt JSON under '{key}': {e}") from e

    def set(self, key: str, value: dict[str, Any]) -> None:
        try:
            self._client.set(self._key(key), json.dumps(value))
        except redis.RedisError as e:
            raise StorageError("redis", str(e)) from e

    def ping(self) -> bool:
        """Check connectivity; raises StorageError when Redis is unreachable."""
        try:
            return bool(self._client.ping())
        except redis.RedisError as e:
            raise StorageError("redis", str(e)) from e
