from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import httpx
from loguru import logger

from src.songsync.core.models.session import UserSession
from src.songsync.core.services.errors import SpotifyApiError
from src.songsync.runtime.context import get_config


@dataclass(frozen=True)
class SpotifyApiClient:
    """Spotify Web API client bound to one session's tokens.

    Built per request from the resolved session and never shared, so tokens
    of one browser cannot leak into another's call.
    """

    access_token: str
    refresh_token: str
    api_base_url: str
    timeout_seconds: float

    @classmethod
    def for_session(cls, session: UserSession) -> SpotifyApiClient:
        spotify = get_config().spotify
        return cls(
            access_token=session.access_token,
            refresh_token=session.refresh_token,
            api_base_url=spotify.api_base_url,
            timeout_seconds=spotify.timeout_seconds,
        )

    async def get_currently_playing(self) -> dict[str, Any] | None:
        """Raw currently-playing payload, or None when nothing is playing (204).

        Raises:
            SpotifyApiError: non-2xx status, transport failure, or a body that
                is not a JSON object
        """
        headers = {"Authorization": f"Bearer {self.access_token}"}
        url = f"{self.api_base_url}/me/player/currently-playing"

        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                response = await client.get(url, headers=headers)
        except httpx.HTTPError as e:
            raise SpotifyApiError(f"Spotify request failed: {type(e).__name__}") from e

        if response.status_code == 204:
            return None

        if response.status_code >= 400:
            logger.warning(
                "Spotify currently-playing returned {}", response.status_code
            )
            raise SpotifyApiError(
                _describe_status(response.status_code),
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise SpotifyApiError("Spotify returned a malformed payload") from e

        if not isinstance(data, dict):
            raise SpotifyApiError("Spotify returned a malformed payload")
        return data


def _describe_status(status_code: int) -> str:
    if status_code == 401:
        return "Spotify access token expired or invalid"
    if status_code == 403:
        return "Spotify refused the request"
    if status_code == 429:
        return "Spotify rate limit exceeded"
    return f"Spotify request failed with status {status_code}"
