"""Session and response models."""

from .music import (
    NO_ACCESS_TOKEN,
    LyricsResult,
    NotPlaying,
    NowPlaying,
    PlayingTrack,
    now_playing_body,
    soft_error_body,
)
from .session import AuthSession, SpotifyProfile, UserSession

__all__ = [
    "AuthSession",
    "SpotifyProfile",
    "UserSession",
    "NO_ACCESS_TOKEN",
    "LyricsResult",
    "NotPlaying",
    "NowPlaying",
    "PlayingTrack",
    "now_playing_body",
    "soft_error_body",
]
