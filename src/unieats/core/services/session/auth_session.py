from loguru import logger

from src.unieats.core.models.session import AuthSession
from src.unieats.core.security import sanitize_return_url
from src.unieats.core.storage.session_storage import SessionStorage
from src.unieats.runtime.context import get_config


class AuthSessionService:
    """Pending login handshakes, keyed by the state parameter.

    The issuer posts the callback cross-site, so the browser's cookies cannot
    be relied on to find the handshake; the state value is the lookup key.
    """

    def __init__(self, session_storage: SessionStorage) -> None:
        self._storage = session_storage

    async def create_auth_session(
        self,
        state: str,
        nonce: str,
        pkce_verifier: str,
        provider: str,
        return_to: str | None = None,
    ) -> AuthSession:
        """Persist a new handshake until the issuer calls back.

        Args:
            state: State parameter sent to the issuer
            nonce: Nonce expected in the ID token
            pkce_verifier: PKCE code verifier
            provider: OIDC provider identifier
            return_to: Requested post-login path (sanitized here)
        """
        config = get_config()
        ttl = config.security.auth_session_ttl_seconds
        auth_session = AuthSession.create(
            state=state,
            nonce=nonce,
            pkce_verifier=pkce_verifier,
            provider=provider,
            return_to=sanitize_return_url(
                return_to, allowed_hosts=config.oidc.allowed_redirect_hosts
            ),
            ttl_seconds=ttl,
        )
        await self._storage.set(f"auth:{state}", auth_session, ttl)
        return auth_session

    async def consume_auth_session(self, state: str | None) -> AuthSession | None:
        """Return the handshake for state and remove it so it cannot be replayed."""
        if not state:
            return None

        auth_session = await self._storage.pop(f"auth:{state}", AuthSession)

        if auth_session is None or auth_session.is_expired():
            logger.debug("No pending handshake for the supplied state")
            return None
        return auth_session

    async def purge_expired(self) -> None:
        """Cleanup expired sessions from storage."""
        await self._storage.cleanup_expired()
