"""Response shapes shared by the proxy routes and the client state store.

Field names are camelCase on the wire because the browser client reads them
directly.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

NO_ACCESS_TOKEN = "No access token"


class PlayingTrack(BaseModel):
    """Now-playing record when something is playing."""

    model_config = ConfigDict(frozen=True)

    isPlaying: Literal[True] = True
    album: str
    artist: str
    trackName: str
    progress: int | None = Field(description="Playback position in milliseconds")
    duration: int = Field(description="Track length in milliseconds")


class NotPlaying(BaseModel):
    """Now-playing record when nothing is playing. Carries no other fields."""

    model_config = ConfigDict(frozen=True)

    isPlaying: Literal[False] = False


NowPlaying = PlayingTrack | NotPlaying


class LyricsResult(BaseModel):
    """Lyrics lookup outcome. ``lyrics=None`` means not found or upstream failure."""

    lyrics: str | None = None
    album: str | None = None

    def to_body(self) -> dict[str, Any]:
        # album is optional on the wire; leave it out rather than send null
        body: dict[str, Any] = {"lyrics": self.lyrics}
        if self.album:
            body["album"] = self.album
        return body


def now_playing_body(now_playing: NowPlaying) -> dict[str, Any]:
    """Envelope a NowPlaying record the way ``/api/getCurrentSong`` returns it."""
    return {"result": {"body": now_playing.model_dump()}}


def soft_error_body(cause: str) -> dict[str, Any]:
    """Failure reported in the body of a 200 response."""
    return {"error": cause}
