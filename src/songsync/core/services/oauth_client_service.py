"""Spotify OAuth client for the authorization code flow."""

import base64
import time
from urllib.parse import urlencode

import httpx
from loguru import logger
from pydantic import BaseModel, ValidationError

from src.songsync.core.models.session import SpotifyProfile
from src.songsync.core.services.errors import OAuthExchangeError
from src.songsync.runtime.context import get_config


class TokenResponse(BaseModel):
    """Token endpoint response."""

    access_token: str
    token_type: str
    expires_in: int # Lifetime in seconds of the access token
    refresh_token: str | None = None
    scope: str | None = None

    @property
    def expires_at(self) -> int:
        """Calculate absolute expiry timestamp."""
        return int(time.time()) + self.expires_in


def _client_auth_header() -> dict[str, str]:
    spotify = get_config().spotify
    credentials = f"{spotify.client_id}:{spotify.client_secret}"
    encoded_credentials = base64.b64encode(credentials.encode()).decode()
    return {"Authorization": f"Basic {encoded_credentials}"}


class OAuthClientService:
    """Talks to the Spotify accounts service and the ``/me`` endpoint.

    Nothing here touches sessions; the router turns the results into one.
    """

    def build_authorization_url(self, state: str) -> str:
        """Authorization URL with the configured client, callback and scopes."""
        spotify = get_config().spotify
        auth_params = {
            "client_id": spotify.client_id,
            "response_type": "code",
            "redirect_uri": spotify.callback_url,
            "scope": " ".join(spotify.scopes),
            "state": state,
        }
        return f"{spotify.authorization_endpoint}?{urlencode(auth_params)}"

    async def exchange_code_for_tokens(self, code: str) -> TokenResponse:
        """Exchange authorization code for tokens.

        Args:
            code: Authorization code from callback

        Returns:
            Token response with access and refresh tokens

        Raises:
            OAuthExchangeError: provider rejected the code, was unreachable,
                or answered without the tokens a session needs
        """
        spotify = get_config().spotify

        token_data = {
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": spotify.callback_url,
        }
        headers = {
            "Content-Type": "application/x-www-form-urlencoded",
            **_client_auth_header(),
        }

        try:
            async with httpx.AsyncClient(timeout=spotify.timeout_seconds) as client:
                response = await client.post(
                    spotify.token_endpoint, data=token_data, headers=headers
                )
                response.raise_for_status()
                tokens = TokenResponse(**response.json())
        except httpx.HTTPStatusError as e:
            raise OAuthExchangeError(
                "Token exchange rejected", status_code=e.response.status_code
            ) from e
        except httpx.HTTPError as e:
            raise OAuthExchangeError(f"Token endpoint unreachable: {e}") from e
        except (ValueError, TypeError, ValidationError) as e:
            raise OAuthExchangeError("Malformed token response") from e

        if not tokens.refresh_token:
            raise OAuthExchangeError("Token response did not include a refresh token")

        logger.debug("Token exchange succeeded, expires in {}s", tokens.expires_in)
        return tokens

    async def get_profile(self, access_token: str) -> SpotifyProfile:
        """Fetch the logged-in user's profile.

        Raises:
            OAuthExchangeError: the profile could not be fetched or parsed
        """
        spotify = get_config().spotify
        headers = {"Authorization": f"Bearer {access_token}"}

        try:
            async with httpx.AsyncClient(timeout=spotify.timeout_seconds) as client:
                response = await client.get(f"{spotify.api_base_url}/me", headers=headers)
                response.raise_for_status()
                return SpotifyProfile.model_validate(response.json())
        except httpx.HTTPStatusError as e:
            raise OAuthExchangeError(
                "Profile request rejected", status_code=e.response.status_code
            ) from e
        except httpx.HTTPError as e:
            raise OAuthExchangeError(f"Profile endpoint unreachable: {e}") from e
        except (ValueError, TypeError, ValidationError) as e:
            raise OAuthExchangeError("Malformed profile response") from e
