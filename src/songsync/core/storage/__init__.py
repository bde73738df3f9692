"""Session storage abstractions for the login flow."""

from .session_storage import (
    InMemorySessionStorage,
    RedisSessionStorage,
    SessionStorage,
    get_session_storage,
)

__all__ = [
    "InMemorySessionStorage",
    "RedisSessionStorage",
    "SessionStorage",
    "get_session_storage",
]
