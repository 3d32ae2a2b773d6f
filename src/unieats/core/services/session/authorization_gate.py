from fastapi import Request

from src.unieats.core.security import unsign_session_id
from src.unieats.core.services.session.session_authority import SessionAuthority
from src.unieats.entities.core.user import User
from src.unieats.runtime.context import get_config


class AuthorizationGate:
    """Admits requests that carry a valid session and attaches their user."""

    def __init__(self, session_authority: SessionAuthority) -> None:
        self._authority = session_authority

    @staticmethod
    def extract_session_id(request: Request) -> str | None:
        """Read the signed session id from the cookie or a Bearer header.

        The header form serves frontends on another origin, which receive the
        signed id in the post-login redirect instead of sharing the cookie.
        """
        token = request.cookies.get(get_config().app.session_cookie_name)
        if not token:
            auth_header = request.headers.get("Authorization", "")
            if auth_header.startswith("Bearer "):
                token = auth_header.split(" ", 1)[1].strip()

        return unsign_session_id(token)

    async def authorize(self, request: Request) -> User | None:
        """Return the session's user, or None when the request is unauthenticated."""
        session_id = self.extract_session_id(request)
        user = await self._authority.validate(session_id)
        if user is None:
            return None

        request.state.user = user
        request.state.session_id = session_id
        return user
