"""Loading of the templated config.yaml."""

import os
import re
from pathlib import Path

import yaml
from loguru import logger
from pydantic_core import ValidationError

from src.songsync.runtime.config.config_data import ConfigData

# ${NAME}, ${NAME:-default} or ${NAME:?message}
_PLACEHOLDER = re.compile(
    r"\$\{(?P<name>[A-Za-z_][A-Za-z0-9_]*)(?:(?P<op>:-|:\?)(?P<arg>[^}]*))?\}"
)


def _lookup(name: str, prefix: str) -> str | None:
    if prefix:
        override = os.environ.get(f"{prefix}{name}")
        if override is not None:
            logger.debug("Using {}{} in place of {}", prefix, name, name)
            return override
    return os.environ.get(name)


def substitute_env_vars(text: str, prefix: str = "") -> str:
    """Replace ``${...}`` placeholders in ``text`` with environment values.

    ``${NAME}`` and ``${NAME:?message}`` must be set, ``${NAME:-default}``
    falls back to ``default``. With a ``prefix`` such as ``PRODUCTION_``,
    ``PRODUCTION_NAME`` wins over ``NAME``.
    """

    def resolve(match: re.Match) -> str:
        name, op, arg = match.group("name", "op", "arg")
        value = _lookup(name, prefix)
        if value is not None:
            return value
        if op == ":-":
            return arg
        if op == ":?":
            raise ValueError(f"Required environment variable {name}: {arg}")
        raise ValueError(f"Required environment variable {name} not set")

    return _PLACEHOLDER.sub(resolve, text)


def load_templated_yaml(file_path: Path) -> ConfigData:
    """Read ``file_path``, fill in its placeholders and validate the ``config`` section.

    ``APP_ENVIRONMENT`` picks the override prefix, so ``APP_ENVIRONMENT=production``
    lets ``PRODUCTION_PUBLIC_URL`` replace ``PUBLIC_URL``.

    Raises:
        ValueError: A required variable is missing, or the YAML or its values are invalid
        FileNotFoundError: The file does not exist
    """
    env_mode = os.getenv("APP_ENVIRONMENT", "development")
    logger.info("Loading {} for environment {}", file_path, env_mode)

    rendered = substitute_env_vars(
        Path(file_path).read_text(), prefix=f"{env_mode.upper()}_"
    )

    try:
        loaded = yaml.safe_load(rendered)
    except yaml.YAMLError as e:
        raise ValueError(f"Error parsing YAML: {e}") from e
    if not isinstance(loaded, dict):
        raise ValueError(f"{file_path} has no configuration mapping")

    try:
        config = ConfigData(**(loaded.get("config") or {}))
    except ValidationError as e:
        raise ValueError(f"Invalid configuration: {e}") from e

    if not config.spotify.client_id or not config.spotify.client_secret:
        logger.warning("Spotify client credentials are not configured; login will fail")
    if not config.musixmatch.api_key:
        logger.warning("Musixmatch API key is not configured; lyrics lookups will fail")

    return config
