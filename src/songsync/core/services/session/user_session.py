from src.songsync.core.models.session import SpotifyProfile, UserSession
from src.songsync.core.security import generate_session_id
from src.songsync.core.storage.session_storage import SessionStorage
from src.songsync.runtime.context import get_config


class UserSessionService:
    """Service for managing authenticated browser sessions."""

    def __init__(self, session_storage: SessionStorage) -> None:
        self._storage = session_storage

    async def create_user_session(
        self,
        access_token: str,
        refresh_token: str,
        profile: SpotifyProfile,
    ) -> UserSession:
        """Persist a new session for a successful login.

        Args:
            access_token: Spotify access token
            refresh_token: Spotify refresh token
            profile: Spotify profile of the logged-in user

        Returns:
            The stored session
        """
        session_max_age = get_config().app.session_max_age

        user_session = UserSession.create(
            session_id=generate_session_id(),
            access_token=access_token,
            refresh_token=refresh_token,
            profile=profile,
            session_max_age=session_max_age,
        )

        await self._storage.set(f"user:{user_session.id}", user_session, session_max_age)
        return user_session

    async def get_user_session(self, session_id: str) -> UserSession | None:
        """Resolve a session ID to a complete session.

        This is a read-only lookup: concurrent requests from the same browser
        never write the record back.

        Returns:
            User session or None if not found/expired/invalid
        """
        user_session = await self._storage.get(f"user:{session_id}", UserSession)

        if not user_session:
            return None

        if user_session.is_expired():
            await self._storage.delete(f"user:{session_id}")
            return None

        return user_session

    async def delete_user_session(self, session_id: str) -> None:
        await self._storage.delete(f"user:{session_id}")
