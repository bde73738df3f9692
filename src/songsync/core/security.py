"""Security utilities for the OAuth login flow."""

import base64
import secrets


def generate_secure_token(length: int = 32) -> str:
    """Generate a cryptographically secure random token.

    Args:
        length: Number of random bytes to generate (default 32)

    Returns:
        URL-safe base64 encoded token
    """
    return (
        base64.urlsafe_b64encode(secrets.token_bytes(length))
        .decode("utf-8")
        .rstrip("=")
    )


def generate_state() -> str:
    """Generate a cryptographically secure state parameter for CSRF protection.

    Returns:
        URL-safe base64 encoded state (256 bits of entropy)
    """
    return generate_secure_token(32)


def generate_session_id() -> str:
    return secrets.token_urlsafe(32)


def sanitize_return_url(return_to: str | None) -> str:
    """Reduce a post-login destination to a same-site path.

    The callback prefixes the result with the web client's public URL, so only
    a plain path (or fragment route such as ``/#/lyrics``) is accepted. Anything
    else, including protocol-relative ``//host`` and absolute URLs, becomes ``/``.
    """
    if not return_to:
        return "/"

    path = return_to.strip()
    if path.startswith("/") and not path.startswith("//") and path.isprintable():
        return path
    return "/"
