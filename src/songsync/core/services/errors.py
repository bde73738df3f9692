class UpstreamError(RuntimeError):
    """A call to a third-party service failed or returned something unusable."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class OAuthExchangeError(UpstreamError):
    """The provider rejected the authorization code or returned bad tokens."""


class SpotifyApiError(UpstreamError):
    """Spotify Web API call failed."""


class LyricsLookupError(UpstreamError):
    """Musixmatch lookup failed."""
