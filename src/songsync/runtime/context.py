"""Process-wide configuration, loaded once from ``config.yaml`` at import."""

from dataclasses import dataclass
from pathlib import Path

from loguru import logger

from src.songsync.runtime.config.config_data import ConfigData
from src.songsync.runtime.config.config_template import load_templated_yaml
from src.songsync.runtime.settings import EnvironmentVariables


@dataclass
class AppContext:
    config: ConfigData


def _load_config() -> ConfigData:
    config_path = Path(EnvironmentVariables().config_path)
    if not config_path.exists():
        logger.warning("{} not found; using built-in configuration defaults", config_path)
        return ConfigData()
    return load_templated_yaml(config_path)


# Shared by every thread, including the ones uvicorn and TestClient run the app in
_app_context = AppContext(config=_load_config())


def get_config() -> ConfigData:
    """The configuration the running service reads."""
    return _app_context.config
