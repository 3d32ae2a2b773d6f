"""Session models kept in session storage."""

import time

from pydantic import BaseModel, Field


class AuthSession(BaseModel):
    """Pending OIDC handshake, keyed by its state parameter."""

    state: str = Field(description="State parameter sent to the issuer")
    nonce: str = Field(description="OIDC nonce for replay protection")
    pkce_verifier: str = Field(description="PKCE code verifier")
    provider: str = Field(description="OIDC provider identifier")
    return_to: str | None = Field(
        default=None, description="Sanitized frontend path to land on after login"
    )
    created_at: int = Field(description="Creation timestamp")
    expires_at: int = Field(description="Expiration timestamp")

    @classmethod
    def create(
        cls,
        state: str,
        nonce: str,
        pkce_verifier: str,
        provider: str,
        return_to: str | None = None,
        ttl_seconds: int = 600,
    ) -> "AuthSession":
        """Create a new auth session with timestamps."""
        now = int(time.time())
        return cls(
            state=state,
            nonce=nonce,
            pkce_verifier=pkce_verifier,
            provider=provider,
            return_to=return_to,
            created_at=now,
            expires_at=now + ttl_seconds,
        )

    def is_expired(self) -> bool:
        """Check if session is expired."""
        return time.time() > self.expires_at


class UserSession(BaseModel):
    """Server-side session binding a client to a local user."""

    id: str = Field(description="Session identifier")
    user_id: str = Field(description="Internal user ID")
    created_at: int = Field(description="Creation timestamp")
    expires_at: int = Field(description="Session expiration timestamp")

    @classmethod
    def create(
        cls,
        session_id: str,
        user_id: str,
        session_max_age: int = 86400,
    ) -> "UserSession":
        """Create a new user session with timestamps."""
        now = int(time.time())
        return cls(
            id=session_id,
            user_id=user_id,
            created_at=now,
            expires_at=now + session_max_age,
        )

    def is_expired(self) -> bool:
        """Check if session is expired."""
        return time.time() > self.expires_at

    @property
    def remaining_seconds(self) -> int:
        return max(0, self.expires_at - int(time.time()))
