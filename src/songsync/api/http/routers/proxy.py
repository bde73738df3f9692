"""Now-playing and lyrics proxy endpoints.

Both routes answer 200 whatever happens downstream; failures are reported in
the body (``error`` for the current song, ``lyrics: null`` for lyrics).
"""

from typing import Any

from fastapi import APIRouter, Depends

from src.songsync.api.http.deps import (
    get_lyrics_service,
    get_now_playing_service,
    get_optional_session,
)
from src.songsync.core.models.session import UserSession
from src.songsync.core.services import LyricsService, NowPlayingService

router_proxy = APIRouter(prefix="/api", tags=["proxy"])


@router_proxy.get("/getCurrentSong")
async def get_current_song(
    user_session: UserSession | None = Depends(get_optional_session),
    now_playing_service: NowPlayingService = Depends(get_now_playing_service),
) -> dict[str, Any]:
    """What the logged-in user is playing right now."""
    return await now_playing_service.get_current_song(user_session)


@router_proxy.get("/getLyrics")
async def get_lyrics(
    trackName: str | None = None,
    artist: str | None = None,
    query: str | None = None,
    lyrics_service: LyricsService = Depends(get_lyrics_service),
) -> dict[str, Any]:
    """Lyrics for a track. Not tied to the Spotify session."""
    result = await lyrics_service.get_lyrics(
        track_name=trackName, artist=artist, query=query
    )
    return result.to_body()
