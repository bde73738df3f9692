"""Pydantic models for parsing the config.yaml configuration file.

This module contains Pydantic models that correspond to the structure of config.yaml.
These models handle validation and type conversion of the YAML configuration data.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, computed_field, field_validator


class CORSConfig(BaseModel):
    """CORS configuration for the application."""

    origins: list[str] = Field(
        default=["http://localhost:8080", "http://localhost:3000"]
    )
    allow_credentials: bool = True
    allow_methods: list[str] = Field(default=["GET", "OPTIONS"])
    allow_headers: list[str] = Field(default=["*"])


class RedisConfig(BaseModel):
    """Redis configuration model."""

    enabled: bool = Field(default=False, description="Enable Redis session storage")
    url: str = Field(default="", description="Redis connection URL")
    password: str | None = Field(
        default=None, description="Password for Redis authentication"
    )
    decode_responses: bool = Field(
        default=True, description="Decode Redis responses to strings"
    )

    @computed_field
    @property
    def connection_string(self) -> str:
        """Construct the Redis connection string with password if provided."""
        if self.password:
            if "@" in self.url:
                # URL already has auth info
                return self.url
            parts = self.url.split("://", 1)
            if len(parts) == 2:
                scheme, rest = parts
                return f"{scheme}://:{self.password}@{rest}"
        return self.url


class SpotifyConfig(BaseModel):
    """Spotify OAuth client and Web API configuration."""

    client_id: str = Field(default="", description="Spotify application client ID")
    client_secret: str = Field(
        default="", description="Spotify application client secret"
    )
    callback_url: str = Field(
        default="http://localhost:3000/auth/callback",
        description="Redirect URI registered with Spotify",
    )
    scopes: list[str] = Field(
        default_factory=lambda: [
            "user-read-email",
            "user-read-private",
            "user-read-currently-playing",
            "user-read-playback-state",
        ],
        description="Scopes requested during authorization",
    )
    authorization_endpoint: str = Field(
        default="https://accounts.spotify.com/authorize",
        description="Spotify authorization endpoint URL",
    )
    token_endpoint: str = Field(
        default="https://accounts.spotify.com/api/token",
        description="Spotify token endpoint URL",
    )
    api_base_url: str = Field(
        default="https://api.spotify.com/v1", description="Spotify Web API base URL"
    )
    timeout_seconds: float = Field(
        default=10.0, description="Timeout for calls to Spotify"
    )

    @field_validator("client_id", "client_secret", mode="before")
    @classmethod
    def blank_credentials(cls, value):
        # an empty `${VAR:-}` placeholder reaches here as YAML null
        return "" if value is None else value


class MusixmatchConfig(BaseModel):
    """Musixmatch lyrics API configuration."""

    api_key: str = Field(default="", description="Musixmatch API key")
    base_url: str = Field(
        default="https://api.musixmatch.com/ws/1.1",
        description="Musixmatch API base URL",
    )
    timeout_seconds: float = Field(
        default=10.0, description="Timeout for calls to Musixmatch"
    )

    @field_validator("api_key", mode="before")
    @classmethod
    def blank_api_key(cls, value):
        return "" if value is None else value


class OAuthConfig(BaseModel):
    """Behaviour of the login flow around the provider exchange."""

    failure_redirect: str = Field(
        default="/", description="Where the browser goes when login fails"
    )
    expose_tokens_to_browser: bool = Field(
        default=True,
        description="Set the non-HTTP-only user.token / user.refresh cookies",
    )
    token_cookie_max_age_ms: int = Field(
        default=900000, description="Lifetime of the token cookies in milliseconds"
    )


class LoggingConfig(BaseModel):
    """Logging configuration model."""

    level: str = Field(default="INFO", description="Logging level")
    format: Literal["json", "plain"] = Field(default="plain", description="Log format")
    file: str | None = Field(default=None, description="Log file path")
    max_size_mb: int = Field(default=10, description="Maximum log file size in MB")
    backup_count: int = Field(
        default=5, description="Number of backup log files to keep"
    )


class AppConfig(BaseModel):
    """Application configuration model."""

    environment: Literal["development", "production", "test"] = Field(
        default="development", description="Application environment"
    )
    host: str = Field(default="0.0.0.0", description="Interface to listen on")
    port: int = Field(default=3000, description="Application port")
    public_url: str = Field(
        default="http://localhost:8080",
        description="Public URL of the web client, used for post-login redirects",
    )
    session_max_age: int = Field(
        default=86400, description="Session maximum age in seconds"
    )
    cors: CORSConfig = Field(
        default_factory=CORSConfig, description="CORS configuration"
    )


class SecurityConfig(BaseModel):
    """Security configuration for authentication and sessions."""

    cookie_samesite: Literal["lax", "strict", "none"] = Field(
        default="lax", description="SameSite cookie attribute"
    )
    auth_session_ttl_seconds: int = Field(
        default=600, description="Pending authorization TTL (10 minutes)"
    )


class ConfigData(BaseModel):
    """Root configuration model that matches the config.yaml structure."""

    app: AppConfig = Field(
        default_factory=AppConfig, description="Application configuration"
    )
    spotify: SpotifyConfig = Field(
        default_factory=SpotifyConfig, description="Spotify configuration"
    )
    musixmatch: MusixmatchConfig = Field(
        default_factory=MusixmatchConfig, description="Musixmatch configuration"
    )
    oauth: OAuthConfig = Field(
        default_factory=OAuthConfig, description="Login flow configuration"
    )
    redis: RedisConfig = Field(
        default_factory=RedisConfig, description="Redis configuration"
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )
    security: SecurityConfig = Field(
        default_factory=SecurityConfig, description="Security configuration"
    )
