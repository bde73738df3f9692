"""Tests for session storage backends."""

import json
from unittest.mock import AsyncMock, patch

import pytest

from src.songsync.core.models.session import AuthSession, UserSession
from src.songsync.core.storage import InMemorySessionStorage, RedisSessionStorage
from src.songsync.core.storage.session_storage import _open_storage, get_session_storage
from src.songsync.runtime.config.config_data import ConfigData, RedisConfig


class TestInMemorySessionStorage:
    @pytest.mark.asyncio
    async def test_set_and_get(
        self, session_storage: InMemorySessionStorage, user_session: UserSession
    ):
        await session_storage.set("user:1", user_session, 60)

        assert await session_storage.get("user:1", UserSession) == user_session

    @pytest.mark.asyncio
    async def test_missing_key(self, session_storage: InMemorySessionStorage):
        assert await session_storage.get("user:nope", UserSession) is None

    @pytest.mark.asyncio
    async def test_expired_entry_is_dropped(
        self, session_storage: InMemorySessionStorage, user_session: UserSession
    ):
        await session_storage.set("user:1", user_session, -1)

        assert await session_storage.get("user:1", UserSession) is None
        assert "user:1" not in session_storage._records

    @pytest.mark.asyncio
    async def test_invalid_record_is_evicted(self, session_storage: InMemorySessionStorage):
        # a pending authorization has no tokens, so it can never read as a user session
        await session_storage.set("user:1", AuthSession.create("1", state="s"), 60)

        assert await session_storage.get("user:1", UserSession) is None
        assert "user:1" not in session_storage._records

    @pytest.mark.asyncio
    async def test_cleanup_expired(
        self, session_storage: InMemorySessionStorage, user_session: UserSession
    ):
        await session_storage.set("user:old", user_session, -1)
        await session_storage.set("user:new", user_session, 60)

        assert await session_storage.cleanup_expired() == 1
        assert await session_storage.get("user:new", UserSession) == user_session

    @pytest.mark.asyncio
    async def test_delete(
        self, session_storage: InMemorySessionStorage, user_session: UserSession
    ):
        await session_storage.set("user:1", user_session, 60)
        await session_storage.delete("user:1")
        await session_storage.delete("user:1")

        assert await session_storage.get("user:1", UserSession) is None


class TestRedisSessionStorage:
    @pytest.mark.asyncio
    async def test_set_uses_ttl(self, user_session: UserSession):
        redis_client = AsyncMock()
        storage = RedisSessionStorage(redis_client)

        await storage.set("user:1", user_session, 120)

        key, ttl, data = redis_client.setex.call_args.args
        assert (key, ttl) == ("user:1", 120)
        assert json.loads(data)["access_token"] == "access-abc"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("as_bytes", [False, True])
    async def test_get_decodes_record(self, user_session: UserSession, as_bytes: bool):
        raw = user_session.model_dump_json()
        redis_client = AsyncMock()
        redis_client.get.return_value = raw.encode() if as_bytes else raw
        storage = RedisSessionStorage(redis_client)

        assert await storage.get("user:1", UserSession) == user_session

    @pytest.mark.asyncio
    async def test_invalid_record_is_deleted(self):
        redis_client = AsyncMock()
        redis_client.get.return_value = json.dumps({"id": "s1", "access_token": "a"})
        storage = RedisSessionStorage(redis_client)

        assert await storage.get("user:s1", UserSession) is None
        redis_client.delete.assert_awaited_once_with("user:s1")

    @pytest.mark.asyncio
    async def test_failures_raise_runtime_error(self):
        redis_client = AsyncMock()
        redis_client.get.side_effect = ConnectionError("down")
        storage = RedisSessionStorage(redis_client)

        with pytest.raises(RuntimeError, match="Redis get failed"):
            await storage.get("user:1", UserSession)
        assert not storage.is_available()

    @pytest.mark.asyncio
    async def test_ping(self):
        redis_client = AsyncMock()
        storage = RedisSessionStorage(redis_client)
        assert await storage.ping()

        redis_client.ping.side_effect = ConnectionError("down")
        assert not await storage.ping()
        assert not storage.is_available()


class TestStorageSelection:
    @pytest.mark.asyncio
    async def test_disabled_redis_uses_memory(self):
        storage = await _open_storage()
        assert isinstance(storage, InMemorySessionStorage)

    @pytest.mark.asyncio
    async def test_singleton(self):
        assert await get_session_storage() is await get_session_storage()

    @pytest.mark.asyncio
    async def test_unreachable_redis_falls_back_outside_production(
        self, test_config: ConfigData
    ):
        test_config.redis = RedisConfig(enabled=True, url="redis://nowhere:6379/0")
        redis_client = AsyncMock()
        redis_client.ping.side_effect = ConnectionError("down")

        with patch("redis.asyncio.from_url", return_value=redis_client):
            storage = await _open_storage()

        assert isinstance(storage, InMemorySessionStorage)

    @pytest.mark.asyncio
    async def test_unreachable_redis_fails_in_production(self, test_config: ConfigData):
        test_config.app.environment = "production"
        test_config.redis = RedisConfig(enabled=True, url="redis://nowhere:6379/0")
        redis_client = AsyncMock()
        redis_client.ping.side_effect = ConnectionError("down")

        with patch("redis.asyncio.from_url", return_value=redis_client):
            with pytest.raises(RuntimeError):
                await _open_storage()

    @pytest.mark.asyncio
    async def test_reachable_redis_is_used(self, test_config: ConfigData):
        test_config.redis = RedisConfig(enabled=True, url="redis://cache:6379/0")

        with patch("redis.asyncio.from_url", return_value=AsyncMock()) as from_url:
            storage = await _open_storage()

        assert isinstance(storage, RedisSessionStorage)
        assert from_url.call_args.args[0] == "redis://cache:6379/0"
