"""SongSync: Spotify login, now-playing and lyrics proxy for a browser client."""

__version__ = "0.1.0"
