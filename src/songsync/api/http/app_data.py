from dataclasses import dataclass

from src.songsync.core.services import (
    AuthSessionService,
    LyricsService,
    NowPlayingService,
    OAuthClientService,
    UserSessionService,
)
from src.songsync.core.storage import SessionStorage


@dataclass
class ApplicationDependencies:
    session_storage: SessionStorage
    oauth_client_service: OAuthClientService
    user_session_service: UserSessionService
    auth_session_service: AuthSessionService
    now_playing_service: NowPlayingService
    lyrics_service: LyricsService
