"""Security utilities for the OIDC login flow and session cookies."""

import base64
import hashlib
import hmac
import secrets
from urllib.parse import urlparse

from src.unieats.runtime.context import get_config


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


def generate_nonce() -> str:
    """Generate a nonce binding the ID token to this login attempt."""
    return generate_secure_token(32)


def generate_state() -> str:
    """Generate the state parameter that keys the pending handshake."""
    return generate_secure_token(32)


def generate_pkce_pair() -> tuple[str, str]:
    """Generate PKCE code verifier and challenge pair.

    Returns:
        Tuple of (code_verifier, code_challenge)
    """
    code_verifier = generate_secure_token(32)

    challenge_bytes = hashlib.sha256(code_verifier.encode("utf-8")).digest()
    code_challenge = (
        base64.urlsafe_b64encode(challenge_bytes).decode("utf-8").rstrip("=")
    )

    return code_verifier, code_challenge


def _session_signature(session_id: str, secret: str) -> str:
    digest = hmac.new(
        secret.encode("utf-8"), session_id.encode("utf-8"), hashlib.sha256
    ).digest()
    return base64.urlsafe_b64encode(digest).decode("ascii").rstrip("=")


def sign_session_id(session_id: str, secret: str | None = None) -> str:
    """Return ``<session_id>.<signature>`` for use in cookies and redirects."""
    secret = secret or get_config().app.session_secret
    return f"{session_id}.{_session_signature(session_id, secret)}"


def unsign_session_id(token: str | None, secret: str | None = None) -> str | None:
    """Return the session id carried by a signed token, or None if it was tampered with."""
    if not token or "." not in token:
        return None

    session_id, signature = token.rsplit(".", 1)
    if not session_id:
        return None

    secret = secret or get_config().app.session_secret
    expected = _session_signature(session_id, secret)
    if not hmac.compare_digest(expected, signature):
        return None
    return session_id


def sanitize_return_url(
    return_to: str | None, allowed_hosts: list[str] | None = None
) -> str | None:
    """Sanitize a post-login return URL to prevent open redirects.

    Args:
        return_to: User-provided return URL
        allowed_hosts: Optional list of allowed hosts for absolute URLs

    Returns:
        The URL when it is a safe relative path or an allowed absolute URL,
        otherwise None
    """
    if not return_to:
        return None

    return_to = return_to.strip()

    if return_to.startswith("/") and not return_to.startswith("//"):
        # No control characters or backslash tricks
        if all(ord(c) >= 32 for c in return_to) and "\\" not in return_to:
            return return_to

    if allowed_hosts and return_to.startswith(("http://", "https://")):
        if urlparse(return_to).hostname in allowed_hosts:
            return return_to

    return None
