"""Token-bearing proxy: downstream calls mapped into client-facing bodies.

Downstream failures never escape these services. They are logged and
turned into body-level errors so the browser store has one failure path
(inspect the body) regardless of what broke.
"""

from __future__ import annotations

from typing import Any

from loguru import logger
from pydantic import ValidationError

from src.songsync.core.models.music import (
    NO_ACCESS_TOKEN,
    LyricsResult,
    NotPlaying,
    NowPlaying,
    PlayingTrack,
    now_playing_body,
    soft_error_body,
)
from src.songsync.core.models.session import UserSession
from src.songsync.core.services.errors import SpotifyApiError, UpstreamError
from src.songsync.core.services.lyrics.musixmatch import MusixmatchClient
from src.songsync.core.services.spotify.client import SpotifyApiClient


def map_now_playing(payload: dict[str, Any] | None) -> NowPlaying:
    """Map a Spotify currently-playing payload to a NowPlaying record.

    Raises:
        SpotifyApiError: a playing payload is missing the track fields
    """
    if not payload or not payload.get("is_playing"):
        return NotPlaying()

    item = payload.get("item")
    if item is None:
        # Playing but no track item (ads, podcasts without metadata)
        return NotPlaying()

    try:
        return PlayingTrack(
            album=item["album"]["name"],
            artist=item["artists"][0]["name"],
            trackName=item["name"],
            progress=payload.get("progress_ms"),
            duration=item["duration_ms"],
        )
    except (KeyError, IndexError, TypeError, ValidationError) as e:
        raise SpotifyApiError("Spotify returned a malformed payload") from e


class NowPlayingService:
    async def get_current_song(self, session: UserSession | None) -> dict[str, Any]:
        """``/api/getCurrentSong`` body for the given (possibly missing) session."""
        if session is None:
            return soft_error_body(NO_ACCESS_TOKEN)

        client = SpotifyApiClient.for_session(session)
        try:
            payload = await client.get_currently_playing()
            now_playing = map_now_playing(payload)
        except UpstreamError as e:
            logger.bind(status_code=e.status_code).warning(
                "Current song lookup failed: {}", e
            )
            return soft_error_body(str(e))

        return now_playing_body(now_playing)


class LyricsService:
    def __init__(self, client: MusixmatchClient) -> None:
        self._client = client

    async def get_lyrics(
        self,
        track_name: str | None = None,
        artist: str | None = None,
        query: str | None = None,
    ) -> LyricsResult:
        """Search a track, then fetch its subtitle. Never raises."""
        track_name = (track_name or "").strip() or None
        artist = (artist or "").strip() or None
        query = (query or "").strip() or None

        if not (track_name or artist or query):
            logger.debug("Lyrics requested without search terms")
            return LyricsResult(lyrics=None)

        album = None
        try:
            match = await self._client.search_track(
                track_name=track_name, artist=artist, query=query
            )
            if match is None:
                logger.info("No lyrics match found")
                return LyricsResult(lyrics=None)

            album = match.album_name
            logger.debug("Fetching subtitle for track {}", match.commontrack_id)
            lyrics = await self._client.get_track_subtitle(match.commontrack_id)
        except UpstreamError as e:
            logger.bind(status_code=e.status_code).warning(
                "Lyrics lookup failed: {}", e
            )
            return LyricsResult(lyrics=None, album=album)

        return LyricsResult(lyrics=lyrics, album=album)
