from src.songsync.core.models.session import AuthSession
from src.songsync.core.security import generate_session_id, sanitize_return_url
from src.songsync.core.storage.session_storage import SessionStorage
from src.songsync.runtime.context import get_config


class AuthSessionService:
    """Pending authorizations: created on redirect, consumed by the callback."""

    def __init__(self, session_storage: SessionStorage) -> None:
        self._storage = session_storage

    async def create_auth_session(self, state: str, return_to: str = "/") -> str:
        """Create a pending authorization bound to ``state``.

        Args:
            state: CSRF state parameter sent to the provider
            return_to: Post-auth redirect URI (sanitized here)

        Returns:
            Session ID
        """
        ttl = get_config().security.auth_session_ttl_seconds
        auth_session = AuthSession.create(
            session_id=generate_session_id(),
            state=state,
            return_to=sanitize_return_url(return_to),
            ttl_seconds=ttl,
        )

        await self._storage.set(f"auth:{auth_session.id}", auth_session, ttl)
        return auth_session.id

    async def get_auth_session(self, session_id: str) -> AuthSession | None:
        """Get auth session by ID.

        Returns:
            Auth session or None if not found/expired/already used
        """
        auth_session = await self._storage.get(f"auth:{session_id}", AuthSession)

        if not auth_session:
            return None

        if auth_session.used or auth_session.is_expired():
            await self._storage.delete(f"auth:{session_id}")
            return None

        return auth_session

    async def validate_auth_session(
        self, session_id: str, state: str | None
    ) -> AuthSession | None:
        """Return the pending authorization if ``state`` matches it.

        A mismatch retires the session so the same cookie cannot be replayed.
        """
        if not state:
            return None

        auth_session = await self.get_auth_session(session_id)
        if not auth_session:
            return None

        if state != auth_session.state:
            await self.delete_auth_session(session_id)
            return None

        return auth_session

    async def mark_auth_session_used(self, session_id: str) -> None:
        """Mark auth session as used to prevent replay attacks."""
        auth_session = await self._storage.get(f"auth:{session_id}", AuthSession)

        if auth_session:
            auth_session.mark_used()
            await self._storage.set(
                f"auth:{auth_session.id}",
                auth_session,
                get_config().security.auth_session_ttl_seconds,
            )

    async def delete_auth_session(self, session_id: str) -> None:
        await self._storage.delete(f"auth:{session_id}")
