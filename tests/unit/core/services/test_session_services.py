import time
from unittest.mock import AsyncMock

import pytest

from src.songsync.core.models.session import AuthSession, SpotifyProfile, UserSession
from src.songsync.core.services import AuthSessionService, UserSessionService
from src.songsync.core.storage import InMemorySessionStorage


class TestAuthSessionService:
    @pytest.mark.asyncio
    async def test_create_and_validate(self, auth_session_service: AuthSessionService):
        session_id = await auth_session_service.create_auth_session(
            state="state-1", return_to="/lyrics"
        )

        auth_session = await auth_session_service.validate_auth_session(
            session_id, "state-1"
        )
        assert auth_session is not None
        assert auth_session.return_to == "/lyrics"

    @pytest.mark.asyncio
    async def test_return_to_is_sanitized(
        self, auth_session_service: AuthSessionService
    ):
        session_id = await auth_session_service.create_auth_session(
            state="state-1", return_to="https://evil.example.com"
        )

        auth_session = await auth_session_service.get_auth_session(session_id)
        assert auth_session.return_to == "/"

    @pytest.mark.asyncio
    async def test_state_mismatch_retires_session(
        self, auth_session_service: AuthSessionService
    ):
        session_id = await auth_session_service.create_auth_session(state="state-1")

        assert await auth_session_service.validate_auth_session(session_id, "other") is None
        # the correct state can no longer be used either
        assert await auth_session_service.validate_auth_session(session_id, "state-1") is None

    @pytest.mark.asyncio
    async def test_missing_state(self, auth_session_service: AuthSessionService):
        session_id = await auth_session_service.create_auth_session(state="state-1")

        assert await auth_session_service.validate_auth_session(session_id, None) is None
        assert await auth_session_service.get_auth_session(session_id) is not None

    @pytest.mark.asyncio
    async def test_used_session_cannot_be_replayed(
        self, auth_session_service: AuthSessionService
    ):
        session_id = await auth_session_service.create_auth_session(state="state-1")
        await auth_session_service.mark_auth_session_used(session_id)

        assert await auth_session_service.get_auth_session(session_id) is None

    @pytest.mark.asyncio
    async def test_expired_session(
        self,
        auth_session_service: AuthSessionService,
        session_storage: InMemorySessionStorage,
    ):
        expired = AuthSession.create("a1", state="state-1", ttl_seconds=-5)
        await session_storage.set("auth:a1", expired, 60)

        assert await auth_session_service.get_auth_session("a1") is None
        assert "auth:a1" not in session_storage._records


class TestUserSessionService:
    @pytest.mark.asyncio
    async def test_create_and_get(
        self, user_session_service: UserSessionService, spotify_profile: SpotifyProfile
    ):
        created = await user_session_service.create_user_session(
            access_token="access-abc",
            refresh_token="refresh-abc",
            profile=spotify_profile,
        )

        loaded = await user_session_service.get_user_session(created.id)
        assert loaded.access_token == "access-abc"
        assert loaded.refresh_token == "refresh-abc"
        assert loaded.profile.id == "pearljamfan"

    @pytest.mark.asyncio
    async def test_session_ids_are_unique(
        self, user_session_service: UserSessionService, spotify_profile: SpotifyProfile
    ):
        first = await user_session_service.create_user_session("a", "r", spotify_profile)
        second = await user_session_service.create_user_session("a", "r", spotify_profile)

        assert first.id != second.id

    @pytest.mark.asyncio
    async def test_lookup_does_not_write_back(
        self,
        user_session_service: UserSessionService,
        session_storage: InMemorySessionStorage,
        user_session: UserSession,
    ):
        await session_storage.set(f"user:{user_session.id}", user_session, 60)
        session_storage.set = AsyncMock()
        session_storage.delete = AsyncMock()

        loaded = await user_session_service.get_user_session(user_session.id)

        assert loaded == user_session
        session_storage.set.assert_not_awaited()
        session_storage.delete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_expired_session_is_removed(
        self,
        user_session_service: UserSessionService,
        session_storage: InMemorySessionStorage,
        user_session: UserSession,
    ):
        user_session.expires_at = int(time.time()) - 1
        await session_storage.set(f"user:{user_session.id}", user_session, 60)

        assert await user_session_service.get_user_session(user_session.id) is None
        assert f"user:{user_session.id}" not in session_storage._records

    @pytest.mark.asyncio
    async def test_delete(
        self,
        user_session_service: UserSessionService,
        session_storage: InMemorySessionStorage,
        user_session: UserSession,
    ):
        await session_storage.set(f"user:{user_session.id}", user_session, 60)
        await user_session_service.delete_user_session(user_session.id)

        assert await user_session_service.get_user_session(user_session.id) is None
