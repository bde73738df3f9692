"""Spotify login, callback and logout endpoints.

A browser moves Anonymous -> PendingAuthorization (``/auth/spotify``) ->
Authenticated (``/auth/callback``) -> Anonymous (``/logout``). Only the
callback creates a session; any failure on the way sends the browser back
to the configured failure route and it has to start over.
"""

from typing import Any

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import RedirectResponse
from loguru import logger
from pydantic import BaseModel

from src.songsync.api.http.deps import (
    AUTH_SESSION_COOKIE,
    SESSION_COOKIE,
    get_auth_session_service,
    get_oauth_client_service,
    get_optional_session,
    get_user_session_service,
)
from src.songsync.core.models.session import UserSession
from src.songsync.core.security import generate_state
from src.songsync.core.services import (
    AuthSessionService,
    OAuthClientService,
    OAuthExchangeError,
    UserSessionService,
)
from src.songsync.runtime.context import get_config

router_auth = APIRouter(tags=["auth"])

TOKEN_COOKIE = "user.token"
REFRESH_COOKIE = "user.refresh"


class AuthState(BaseModel):
    """Current authentication state for web clients."""

    authenticated: bool
    profile: dict[str, Any] | None = None


def _get_secure_cookie_settings() -> dict[str, Any]:
    """Cookie attributes for the server-held session references.

    SameSite=Lax still lets the provider's top-level redirect back to the
    callback carry the pending-authorization cookie.
    """
    config = get_config()
    return {
        "httponly": True,
        "secure": config.app.environment == "production",
        "samesite": config.security.cookie_samesite,
        "path": "/",
    }


def _set_token_cookies(response: RedirectResponse, user_session: UserSession) -> None:
    # Readable by page scripts: the web client takes its tokens from here.
    max_age = get_config().oauth.token_cookie_max_age_ms // 1000
    for key, value in (
        (TOKEN_COOKIE, user_session.access_token),
        (REFRESH_COOKIE, user_session.refresh_token),
    ):
        response.set_cookie(
            key=key,
            value=value,
            max_age=max_age,
            expires=max_age,
            httponly=False,
            path="/",
        )


def _app_url(path: str = "/") -> str:
    return f"{get_config().app.public_url.rstrip('/')}{path}"


def _failure_redirect() -> RedirectResponse:
    response = RedirectResponse(
        url=get_config().oauth.failure_redirect, status_code=status.HTTP_302_FOUND
    )
    response.delete_cookie(AUTH_SESSION_COOKIE, path="/")
    return response


async def _retire_auth_session(
    auth_session_service: AuthSessionService, session_id: str
) -> None:
    try:
        await auth_session_service.delete_auth_session(session_id)
    except RuntimeError:
        logger.exception("Failed to delete pending authorization")


@router_auth.get("/auth/spotify")
async def initiate_login(
    return_to: str | None = None,
    auth_session_service: AuthSessionService = Depends(get_auth_session_service),
    oauth_client_service: OAuthClientService = Depends(get_oauth_client_service),
) -> RedirectResponse:
    """Redirect the browser to Spotify's authorization page."""
    state = generate_state()
    session_id = await auth_session_service.create_auth_session(
        state=state, return_to=return_to or "/"
    )

    response = RedirectResponse(
        url=oauth_client_service.build_authorization_url(state),
        status_code=status.HTTP_302_FOUND,
    )
    response.set_cookie(
        key=AUTH_SESSION_COOKIE,
        value=session_id,
        max_age=get_config().security.auth_session_ttl_seconds,
        **_get_secure_cookie_settings(),
    )
    return response


@router_auth.get("/auth/callback")
async def handle_callback(
    request: Request,
    code: str | None = None,
    state: str | None = None,
    error: str | None = None,
    auth_session_service: AuthSessionService = Depends(get_auth_session_service),
    user_session_service: UserSessionService = Depends(get_user_session_service),
    oauth_client_service: OAuthClientService = Depends(get_oauth_client_service),
) -> RedirectResponse:
    """Exchange the authorization code and start an authenticated session."""
    session_id = request.cookies.get(AUTH_SESSION_COOKIE)
    # Avoid logging state/code/session ids to prevent leakage
    logger.debug("Callback received for Spotify login")

    if not session_id:
        logger.warning("Callback without a pending authorization")
        return _failure_redirect()

    try:
        auth_session = await auth_session_service.validate_auth_session(
            session_id=session_id, state=state
        )
    except RuntimeError:
        logger.exception("Pending authorization lookup failed")
        return _failure_redirect()

    if not auth_session:
        logger.warning("Invalid or expired pending authorization")
        return _failure_redirect()

    # Provider errors are surfaced only after state validation
    if error or not code:
        logger.warning("Authorization was not granted: {}", error or "missing code")
        await _retire_auth_session(auth_session_service, session_id)
        return _failure_redirect()

    try:
        await auth_session_service.mark_auth_session_used(session_id)
        tokens = await oauth_client_service.exchange_code_for_tokens(code)
        profile = await oauth_client_service.get_profile(tokens.access_token)
        user_session = await user_session_service.create_user_session(
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token,
            profile=profile,
        )
    except (OAuthExchangeError, RuntimeError):
        logger.exception("Authentication failed during callback")
        await _retire_auth_session(auth_session_service, session_id)
        return _failure_redirect()

    await _retire_auth_session(auth_session_service, session_id)
    logger.info("User {} logged in", user_session.profile.id)

    response = RedirectResponse(
        url=_app_url(auth_session.return_to), status_code=status.HTTP_302_FOUND
    )
    response.set_cookie(
        key=SESSION_COOKIE,
        value=user_session.id,
        max_age=get_config().app.session_max_age,
        **_get_secure_cookie_settings(),
    )
    if get_config().oauth.expose_tokens_to_browser:
        _set_token_cookies(response, user_session)
    response.delete_cookie(AUTH_SESSION_COOKIE, path="/")
    return response


@router_auth.get("/logout")
async def logout(
    request: Request,
    user_session_service: UserSessionService = Depends(get_user_session_service),
) -> RedirectResponse:
    """Drop the server-side session and cookies. Always redirects."""
    session_id = request.cookies.get(SESSION_COOKIE)
    if session_id:
        try:
            await user_session_service.delete_user_session(session_id)
        except RuntimeError:
            logger.exception("Failed to delete session during logout")

    response = RedirectResponse(url=_app_url("/#/"), status_code=status.HTTP_302_FOUND)
    for key in (SESSION_COOKIE, TOKEN_COOKIE, REFRESH_COOKIE):
        response.delete_cookie(key, path="/")
    return response


@router_auth.get("/auth/me")
async def get_auth_state(
    user_session: UserSession | None = Depends(get_optional_session),
) -> AuthState:
    """Whether the browser is logged in, and as whom."""
    if not user_session:
        return AuthState(authenticated=False)

    return AuthState(
        authenticated=True,
        profile=user_session.profile.model_dump(exclude_none=True),
    )
