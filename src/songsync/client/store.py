"""Client-side state store for the now-playing and lyrics views.

Mirrors proxy responses into three pieces of observable state: ``song``,
``lyrics`` and ``album``. Every action settles: whatever the proxy or the
network does, the state ends up at a displayable value, never at the
pending marker.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Final

import httpx
from loguru import logger

PENDING: Final = ""
"""Value ``lyrics`` holds while a lookup is in flight."""

NOT_PLAYING: Final[dict[str, Any]] = {"isPlaying": False}

_SONG_FIELDS = ("album", "artist", "trackName", "progress", "duration")

Listener = Callable[[str, Any], None]


class ClientStateStore:
    """Unidirectional store fed by ``/api/getCurrentSong`` and ``/api/getLyrics``.

    Args:
        base_url: Origin of the proxy, e.g. ``http://localhost:3000``
        cookies: Cookies to send (``user_session_id`` for the current song)
        timeout_seconds: Per-request timeout
    """

    def __init__(
        self,
        base_url: str,
        cookies: dict[str, str] | None = None,
        timeout_seconds: float = 10.0,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._cookies = dict(cookies or {})
        self._timeout = timeout_seconds
        self._listeners: list[Listener] = []

        self.song: dict[str, Any] | None = None
        self.lyrics: str | None = None
        self.album: str | None = None

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener(name, value)`` on every commit. Returns an unsubscribe."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # --- mutations ---

    def _commit(self, name: str, value: Any) -> None:
        setattr(self, name, value)
        for listener in list(self._listeners):
            listener(name, value)

    def set_song(self, song: dict[str, Any] | None) -> None:
        self._commit("song", song)

    def set_lyrics(self, lyrics: str | None, album: str | None = None) -> None:
        self._commit("lyrics", lyrics)
        self._commit("album", album)

    # --- actions ---

    async def _get_json(self, path: str, params: dict[str, str] | None = None) -> Any:
        async with httpx.AsyncClient(
            base_url=self._base_url, cookies=self._cookies, timeout=self._timeout
        ) as client:
            response = await client.get(path, params=params)
            response.raise_for_status()
            return response.json()

    async def get_current_song(self) -> dict[str, Any]:
        """Refresh ``song`` from the proxy.

        A playing track becomes the display record. Not playing, a body-level
        error, and any HTTP or transport failure all become ``{"isPlaying": False}``.
        """
        song = NOT_PLAYING
        try:
            data = await self._get_json("/api/getCurrentSong")
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("getCurrentSong request failed: {}", e)
        else:
            song = _song_from_response(data)

        self.set_song(dict(song))
        return self.song

    async def get_lyrics(self, query: str | dict[str, str]) -> str | None:
        """Refresh ``lyrics`` and ``album`` for a track.

        ``query`` is either free text or ``{"trackName": ..., "artist": ...}``.
        """
        self.set_lyrics(PENDING, self.album)

        params = {"query": query} if isinstance(query, str) else dict(query)
        lyrics, album = None, None
        try:
            data = await self._get_json("/api/getLyrics", params=params)
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("getLyrics request failed: {}", e)
        else:
            if isinstance(data, dict):
                lyrics = data.get("lyrics") or None
                album = data.get("album") or None

        self.set_lyrics(lyrics, album)
        return self.lyrics


def _song_from_response(data: Any) -> dict[str, Any]:
    if not isinstance(data, dict):
        return NOT_PLAYING
    if "error" in data:
        logger.info("getCurrentSong reported: {}", data["error"])
        return NOT_PLAYING

    result = data.get("result")
    body = result.get("body") if isinstance(result, dict) else None
    if not isinstance(body, dict) or not body.get("isPlaying"):
        return NOT_PLAYING

    return {**{field: body.get(field) for field in _SONG_FIELDS}, "isPlaying": True}
