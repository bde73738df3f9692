"""Core services exports."""

from src.songsync.core.storage.session_storage import (
    InMemorySessionStorage,
    RedisSessionStorage,
)

from .errors import (
    LyricsLookupError,
    OAuthExchangeError,
    SpotifyApiError,
    UpstreamError,
)
from .lyrics.musixmatch import MusixmatchClient
from .oauth_client_service import OAuthClientService, TokenResponse
from .proxy_service import LyricsService, NowPlayingService, map_now_playing
from .session.auth_session import AuthSessionService
from .session.user_session import UserSessionService
from .spotify.client import SpotifyApiClient

__all__ = [
    # Session Services
    "AuthSessionService",
    "UserSessionService",
    # OAuth
    "OAuthClientService",
    "TokenResponse",
    # Downstream clients
    "SpotifyApiClient",
    "MusixmatchClient",
    # Proxy
    "NowPlayingService",
    "LyricsService",
    "map_now_playing",
    # Errors
    "UpstreamError",
    "OAuthExchangeError",
    "SpotifyApiError",
    "LyricsLookupError",
    # Session Storage for testing
    "InMemorySessionStorage",
    "RedisSessionStorage",
]
