"""FastAPI dependency implementations."""

from __future__ import annotations

from fastapi import Depends, Request
from loguru import logger

from src.songsync.api.http.app_data import ApplicationDependencies
from src.songsync.core.models.session import UserSession
from src.songsync.core.services import (
    AuthSessionService,
    LyricsService,
    NowPlayingService,
    OAuthClientService,
    UserSessionService,
)
from src.songsync.core.storage import SessionStorage

SESSION_COOKIE = "user_session_id"
AUTH_SESSION_COOKIE = "auth_session_id"


def _app_deps(request: Request) -> ApplicationDependencies:
    return request.app.state.app_dependencies


def get_session_storage(request: Request) -> SessionStorage:
    """Get the session storage backend."""
    return _app_deps(request).session_storage


def get_user_session_service(request: Request) -> UserSessionService:
    """Get the User Session service instance."""
    return _app_deps(request).user_session_service


def get_auth_session_service(request: Request) -> AuthSessionService:
    """Get the Auth Session service instance."""
    return _app_deps(request).auth_session_service


def get_oauth_client_service(request: Request) -> OAuthClientService:
    """Get the OAuth client service instance."""
    return _app_deps(request).oauth_client_service


def get_now_playing_service(request: Request) -> NowPlayingService:
    return _app_deps(request).now_playing_service


def get_lyrics_service(request: Request) -> LyricsService:
    return _app_deps(request).lyrics_service


async def get_optional_session(
    request: Request,
    user_session_service: UserSessionService = Depends(get_user_session_service),
) -> UserSession | None:
    """Resolve the session cookie to a complete session, or None.

    Missing cookie, unknown or expired id, a stored record that fails
    validation, and an unreachable store all resolve to None.
    """
    session_id = request.cookies.get(SESSION_COOKIE)
    if not session_id:
        return None

    try:
        user_session = await user_session_service.get_user_session(session_id)
    except RuntimeError:
        logger.exception("Session lookup failed; treating request as anonymous")
        return None

    if user_session:
        request.state.session_id = user_session.id
    return user_session
