from .store import NOT_PLAYING, PENDING, ClientStateStore

__all__ = ["ClientStateStore", "NOT_PLAYING", "PENDING"]
