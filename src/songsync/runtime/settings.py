"""Process-level settings read from the environment and ``.env`` files.

These are the few primitive values needed before config.yaml is parsed
(where to find it) and the listen address overrides that deployment
platforms inject as plain variables.
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class EnvironmentVariables(BaseSettings):
    """Simple primitive values loaded from environment variables and .env files."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        extra="ignore",
    )

    config_path: str = Field(default="config.yaml", validation_alias="SONGSYNC_CONFIG")

    # Listen address overrides (PORT is what most PaaS runtimes inject)
    port: int | None = Field(default=None, validation_alias="PORT")
    host: str | None = Field(default=None, validation_alias="LISTEN_HOST")
