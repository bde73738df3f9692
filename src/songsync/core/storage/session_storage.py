"""Session record storage.

Records are pydantic models kept as JSON under ``auth:<id>`` (pending logins)
and ``user:<id>`` (signed-in browsers). Backends expire records themselves. A
record that no longer validates against the model it is read as is evicted on
that read, so a session missing a token reads the same as no session.
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from typing import TypeVar

import redis.asyncio as redis_asyncio
from loguru import logger
from pydantic import BaseModel, ValidationError
from redis.exceptions import RedisError

from src.songsync.runtime.context import get_config

T = TypeVar("T", bound=BaseModel)


class SessionStorage(ABC):
    """Keyed, expiring JSON store shared by the session services."""

    @abstractmethod
    async def _save(self, key: str, payload: str, ttl_seconds: int) -> None: ...

    @abstractmethod
    async def _load(self, key: str) -> str | bytes | None: ...

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove ``key``; a missing key is not an error."""

    async def set(self, key: str, value: BaseModel, ttl_seconds: int) -> None:
        await self._save(key, value.model_dump_json(), ttl_seconds)

    async def get(self, key: str, model_class: type[T]) -> T | None:
        """Read ``key`` as ``model_class``.

        Returns:
            The record, or None when it is missing, expired or no longer valid
        """
        payload = await self._load(key)
        if payload is None:
            return None

        try:
            return model_class.model_validate_json(payload)
        except ValidationError:
            kind = key.partition(":")[0]
            logger.warning("Evicting {} record that is not a valid {}", kind, model_class.__name__)
            await self.delete(key)
            return None

    async def cleanup_expired(self) -> int:
        """Drop expired records the backend does not expire by itself."""
        return 0

    def is_available(self) -> bool:
        return True


class InMemorySessionStorage(SessionStorage):
    """Single-process store. Sessions are lost on restart."""

    def __init__(self) -> None:
        self._records: dict[str, tuple[str, float]] = {}

    async def _save(self, key: str, payload: str, ttl_seconds: int) -> None:
        self._records[key] = (payload, time.monotonic() + ttl_seconds)

    async def _load(self, key: str) -> str | None:
        record = self._records.get(key)
        if record is None:
            return None

        payload, expires_at = record
        if expires_at <= time.monotonic():
            del self._records[key]
            return None
        return payload

    async def delete(self, key: str) -> None:
        self._records.pop(key, None)

    async def cleanup_expired(self) -> int:
        now = time.monotonic()
        expired = [key for key, (_, expires_at) in self._records.items() if expires_at <= now]
        for key in expired:
            del self._records[key]
        return len(expired)


class RedisSessionStorage(SessionStorage):
    """Redis-backed store; keys carry a Redis TTL.

    Every Redis failure surfaces as ``RuntimeError`` so callers can tell a
    store outage from a missing session.
    """

    def __init__(self, redis_client) -> None:
        self._redis = redis_client
        self._available = True

    async def _command(self, name: str, *args):
        try:
            result = await getattr(self._redis, name)(*args)
        except (RedisError, OSError) as e:
            self._available = False
            raise RuntimeError(f"Redis {name} failed: {e}") from e
        self._available = True
        return result

    async def _save(self, key: str, payload: str, ttl_seconds: int) -> None:
        await self._command("setex", key, ttl_seconds, payload)

    async def _load(self, key: str) -> str | bytes | None:
        return await self._command("get", key)

    async def delete(self, key: str) -> None:
        await self._command("delete", key)

    def is_available(self) -> bool:
        return self._available

    async def ping(self) -> bool:
        try:
            await self._command("ping")
        except RuntimeError:
            return False
        return True

    async def close(self) -> None:
        await self._redis.aclose()


_storage: SessionStorage | None = None


async def _open_storage() -> SessionStorage:
    config = get_config()
    if not (config.redis.enabled and config.redis.url):
        logger.info("Session storage: in-memory")
        return InMemorySessionStorage()

    storage = RedisSessionStorage(
        redis_asyncio.from_url(
            config.redis.connection_string,
            decode_responses=config.redis.decode_responses,
            socket_connect_timeout=2,
            socket_timeout=2,
        )
    )
    if await storage.ping():
        logger.info("Session storage: Redis")
        return storage

    if config.app.environment == "production":
        raise RuntimeError("Redis session storage is enabled but unreachable")
    logger.warning("Redis unreachable; sessions are kept in memory and lost on restart")
    return InMemorySessionStorage()


async def get_session_storage() -> SessionStorage:
    """The process-wide session store, opened on first use."""
    global _storage

    if _storage is None:
        _storage = await _open_storage()
    return _storage


def _reset_storage() -> None:
    global _storage
    _storage = None
