"""Test configuration and fixtures for songsync."""

from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient

from src.songsync.api.http.app import app
from src.songsync.core.storage.session_storage import _reset_storage
from src.songsync.runtime import context
from src.songsync.runtime.config.config_data import ConfigData
from tests.fixtures import *  # noqa: F401,F403


@pytest.fixture(autouse=True)
def _install_test_config(monkeypatch, test_config: ConfigData) -> None:
    monkeypatch.setattr(context._app_context, "config", test_config)


@pytest.fixture(autouse=True)
def _fresh_session_storage() -> Generator[None, None, None]:
    _reset_storage()
    yield
    _reset_storage()


@pytest.fixture(name="client")
def client_fixture() -> Generator[TestClient, None, None]:
    """Test client with the lifespan running and redirects left unfollowed."""
    with TestClient(app, follow_redirects=False) as test_client:
        yield test_client
