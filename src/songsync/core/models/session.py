"""Session models for the Spotify login flow."""

import time
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class AuthSession(BaseModel):
    """Pending authorization between the redirect to Spotify and the callback."""

    id: str = Field(description="Session identifier")
    state: str = Field(description="CSRF state parameter")
    return_to: str = Field(default="/", description="Sanitized post-auth redirect URL")
    created_at: int = Field(description="Creation timestamp")
    expires_at: int = Field(description="Expiration timestamp")
    used: bool = Field(default=False, description="Whether session has been used")

    @classmethod
    def create(
        cls,
        session_id: str,
        state: str,
        return_to: str = "/",
        ttl_seconds: int = 600,
    ) -> "AuthSession":
        """Create a new auth session with timestamps."""
        now = int(time.time())
        return cls(
            id=session_id,
            state=state,
            return_to=return_to,
            created_at=now,
            expires_at=now + ttl_seconds,
        )

    def is_expired(self) -> bool:
        """Check if session is expired."""
        return time.time() > self.expires_at

    def mark_used(self) -> None:
        """Mark session as used (for single-use enforcement)."""
        self.used = True


class SpotifyProfile(BaseModel):
    """The subset of the Spotify ``/me`` payload kept in the session."""

    model_config = ConfigDict(extra="allow")

    id: str = Field(min_length=1, description="Spotify user ID")
    display_name: str | None = Field(default=None, description="Display name")
    email: str | None = Field(default=None, description="Account email")
    country: str | None = Field(default=None, description="Account country")
    product: str | None = Field(default=None, description="Subscription level")
    uri: str | None = Field(default=None, description="Spotify URI of the user")
    images: list[dict[str, Any]] = Field(default_factory=list, description="Avatar images")


class UserSession(BaseModel):
    """Authenticated browser session: provider tokens plus profile.

    Both tokens are required. A stored record that lacks either one fails
    validation and is treated as no session at all.
    """

    id: str = Field(description="Session identifier")
    access_token: str = Field(min_length=1, description="Spotify access token")
    refresh_token: str = Field(min_length=1, description="Spotify refresh token")
    profile: SpotifyProfile = Field(description="Spotify profile")
    created_at: int = Field(description="Creation timestamp")
    expires_at: int = Field(description="Session expiration timestamp")

    @classmethod
    def create(
        cls,
        session_id: str,
        access_token: str,
        refresh_token: str,
        profile: SpotifyProfile,
        session_max_age: int = 86400,
    ) -> "UserSession":
        """Create a new user session with timestamps."""
        now = int(time.time())
        return cls(
            id=session_id,
            access_token=access_token,
            refresh_token=refresh_token,
            profile=profile,
            created_at=now,
            expires_at=now + session_max_age,
        )

    def is_expired(self) -> bool:
        """Check if session is expired."""
        return time.time() > self.expires_at
