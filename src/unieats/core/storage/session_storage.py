"""Session storage interface and implementations.

Handshake state (``auth:*``) and user sessions (``user:*``) share one
key/value backend: Redis when configured and reachable, memory otherwise.
"""

from __future__ import annotations

import fnmatch
import json
import time
from abc import ABC, abstractmethod
from typing import Any, TypeVar

import redis.asyncio as redis
from loguru import logger
from pydantic import BaseModel, ValidationError
from redis.exceptions import RedisError

from src.unieats.runtime.config.config_data import RedisConfig

T = TypeVar("T", bound=BaseModel)


class SessionStorage(ABC):
    """Abstract interface for session storage backends."""

    @abstractmethod
    async def set(self, key: str, value: BaseModel, ttl_seconds: int) -> None:
        """Store a model under key for ttl_seconds."""

    @abstractmethod
    async def get(self, key: str, model_class: type[T]) -> T | None:
        """Return the stored model, or None if missing or expired."""

    @abstractmethod
    async def pop(self, key: str, model_class: type[T]) -> T | None:
        """Atomically read and remove key. Only one caller can receive the value."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove key. Deleting a missing key is not an error."""

    @abstractmethod
    async def exists(self, key: str) -> bool:
        """Check whether key is present and not expired."""

    @abstractmethod
    async def cleanup_expired(self) -> int:
        """Drop expired entries, returning how many were removed."""

    @abstractmethod
    async def list_keys(self, pattern: str) -> list[str]:
        """List live keys matching a glob pattern such as ``user:*``."""

    async def list_sessions(self, pattern: str, model_class: type[T]) -> list[T]:
        """Load every live entry whose key matches pattern."""
        sessions = []
        for key in await self.list_keys(pattern):
            session = await self.get(key, model_class)
            if session is not None:
                sessions.append(session)
        return sessions

    @abstractmethod
    def is_available(self) -> bool:
        """Check if storage backend is available."""


class InMemorySessionStorage(SessionStorage):
    """Process-local storage with TTL support."""

    def __init__(self) -> None:
        self._data: dict[str, dict[str, Any]] = {}

    def _live_entry(self, key: str) -> dict[str, Any] | None:
        entry = self._data.get(key)
        if entry is None:
            return None
        if time.time() > entry["expires_at"]:
            del self._data[key]
            return None
        return entry

    async def set(self, key: str, value: BaseModel, ttl_seconds: int) -> None:
        self._data[key] = {
            "data": json.loads(value.model_dump_json()),
            "expires_at": time.time() + ttl_seconds,
        }

    async def get(self, key: str, model_class: type[T]) -> T | None:
        entry = self._live_entry(key)
        if entry is None:
            return None

        try:
            return model_class.model_validate(entry["data"])
        except ValidationError:
            logger.warning("Discarding unreadable session entry {}", key)
            del self._data[key]
            return None

    async def pop(self, key: str, model_class: type[T]) -> T | None:
        if self._live_entry(key) is None:
            return None
        entry = self._data.pop(key)

        try:
            return model_class.model_validate(entry["data"])
        except ValidationError:
            logger.warning("Discarding unreadable session entry {}", key)
            return None

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)

    async def exists(self, key: str) -> bool:
        return self._live_entry(key) is not None

    async def cleanup_expired(self) -> int:
        now = time.time()
        expired_keys = [
            key for key, entry in self._data.items() if now > entry["expires_at"]
        ]
        for key in expired_keys:
            del self._data[key]
        return len(expired_keys)

    async def list_keys(self, pattern: str) -> list[str]:
        return [
            key
            for key in list(self._data)
            if fnmatch.fnmatch(key, pattern) and self._live_entry(key) is not None
        ]

    def is_available(self) -> bool:
        return True


class RedisSessionStorage(SessionStorage):
    """Redis-backed storage; expiry is delegated to Redis key TTLs."""

    def __init__(self, redis_client: redis.Redis) -> None:
        self._redis = redis_client
        self._available = True

    async def set(self, key: str, value: BaseModel, ttl_seconds: int) -> None:
        try:
            await self._redis.setex(key, max(1, ttl_seconds), value.model_dump_json())
            self._available = True
        except RedisError as e:
            self._available = False
            raise RuntimeError(f"Redis set failed: {e}") from e

    async def get(self, key: str, model_class: type[T]) -> T | None:
        try:
            data = await self._redis.get(key)
            self._available = True
        except RedisError as e:
            self._available = False
            raise RuntimeError(f"Redis get failed: {e}") from e

        model = self._load(key, data, model_class)
        if model is None and data is not None:
            await self.delete(key)
        return model

    async def pop(self, key: str, model_class: type[T]) -> T | None:
        try:
            # GETDEL needs Redis 6.2+
            data = await self._redis.getdel(key)
            self._available = True
        except RedisError as e:
            self._available = False
            raise RuntimeError(f"Redis getdel failed: {e}") from e

        return self._load(key, data, model_class)

    @staticmethod
    def _load(key: str, data: Any, model_class: type[T]) -> T | None:
        if data is None:
            return None
        if isinstance(data, bytes):
            data = data.decode("utf-8")

        try:
            return model_class.model_validate_json(data)
        except ValidationError:
            logger.warning("Discarding unreadable session entry {}", key)
            return None

    async def delete(self, key: str) -> None:
        try:
            await self._redis.delete(key)
            self._available = True
        except RedisError as e:
            self._available = False
            raise RuntimeError(f"Redis delete failed: {e}") from e

    async def exists(self, key: str) -> bool:
        try:
            result = await self._redis.exists(key)
            self._available = True
            return bool(result)
        except RedisError as e:
            self._available = False
            raise RuntimeError(f"Redis exists failed: {e}") from e

    async def cleanup_expired(self) -> int:
        return 0

    async def list_keys(self, pattern: str) -> list[str]:
        try:
            keys = []
            cursor = 0
            while True:
                cursor, batch = await self._redis.scan(cursor, match=pattern, count=100)
                keys.extend(batch)
                if cursor == 0:
                    break
            self._available = True
            return keys
        except RedisError as e:
            self._available = False
            raise RuntimeError(f"Redis scan failed: {e}") from e

    def is_available(self) -> bool:
        return self._available

    async def ping(self) -> bool:
        try:
            await self._redis.ping()
            self._available = True
        except RedisError:
            self._available = False
        return self._available

    async def close(self) -> None:
        await self._redis.aclose()


async def create_session_storage(config: RedisConfig) -> SessionStorage:
    """Build the storage backend for this process.

    Falls back to memory when Redis is disabled or does not answer a ping.
    """
    if not config.enabled or not config.url:
        logger.info("Session storage: in-memory (Redis not configured)")
        return InMemorySessionStorage()

    client = redis.from_url(
        config.connection_string,
        encoding="utf-8",
        decode_responses=config.decode_responses,
        socket_connect_timeout=2,
        socket_timeout=2,
    )
    storage = RedisSessionStorage(client)
    if await storage.ping():
        logger.info("Session storage: Redis connected")
        return storage

    logger.warning("Redis unavailable, using in-memory session storage")
    await storage.close()
    return InMemorySessionStorage()
