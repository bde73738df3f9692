"""Minimal Musixmatch client for the two calls lyrics lookup needs."""

from __future__ import annotations

from typing import Any

import httpx
from pydantic import BaseModel

from src.songsync.core.services.errors import LyricsLookupError
from src.songsync.runtime.context import get_config


class TrackMatch(BaseModel):
    commontrack_id: int
    track_name: str | None = None
    artist_name: str | None = None
    album_name: str | None = None


class MusixmatchClient:
    """Calls ``track.search`` and ``track.subtitle.get``.

    Musixmatch reports most failures inside a 200 response
    (``message.header.status_code``); both layers are checked.
    """

    def __init__(self, api_key: str, base_url: str, timeout_seconds: float) -> None:
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout_seconds

    @classmethod
    def from_config(cls) -> MusixmatchClient:
        cfg = get_config().musixmatch
        return cls(cfg.api_key, cfg.base_url, cfg.timeout_seconds)

    async def _call(self, method: str, params: dict[str, Any]) -> dict[str, Any] | None:
        """Return ``message.body`` of a call, or None for a Musixmatch 404."""
        query = {**params, "apikey": self._api_key, "format": "json"}
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.get(f"{self._base_url}/{method}", params=query)
                response.raise_for_status()
                payload = response.json()
        except httpx.HTTPStatusError as e:
            raise LyricsLookupError(
                f"{method} failed", status_code=e.response.status_code
            ) from e
        except httpx.HTTPError as e:
            raise LyricsLookupError(f"{method} failed: {type(e).__name__}") from e
        except ValueError as e:
            raise LyricsLookupError(f"{method} returned a malformed payload") from e

        try:
            message = payload["message"]
            status_code = message["header"]["status_code"]
        except (KeyError, TypeError) as e:
            raise LyricsLookupError(f"{method} returned a malformed payload") from e

        if status_code == 404:
            return None
        if status_code != 200:
            raise LyricsLookupError(f"{method} failed", status_code=status_code)

        body = message.get("body")
        # Musixmatch sends an empty list instead of an object when there is nothing
        return body if isinstance(body, dict) else None

    async def search_track(
        self,
        track_name: str | None = None,
        artist: str | None = None,
        query: str | None = None,
    ) -> TrackMatch | None:
        """Best match that has time-synced lyrics, or None."""
        params: dict[str, Any] = {
            "f_has_subtitle": 1,
            "page_size": 1,
            "s_track_rating": "desc",
        }
        if track_name:
            params["q_track"] = track_name
        if artist:
            params["q_artist"] = artist
        if query:
            params["q"] = query

        body = await self._call("track.search", params)
        if not body:
            return None

        track_list = body.get("track_list") or []
        if not track_list:
            return None

        try:
            return TrackMatch.model_validate(track_list[0]["track"])
        except (KeyError, TypeError, ValueError) as e:
            raise LyricsLookupError("track.search returned a malformed track") from e

    async def get_track_subtitle(self, commontrack_id: int) -> str | None:
        """Subtitle (synced lyrics) body for a track, or None."""
        body = await self._call("track.subtitle.get", {"commontrack_id": commontrack_id})
        if not body:
            return None

        subtitle = body.get("subtitle")
        if not isinstance(subtitle, dict):
            return None
        return subtitle.get("subtitle_body") or None
