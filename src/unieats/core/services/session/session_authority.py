import secrets

from loguru import logger

from src.unieats.core.models.session import UserSession
from src.unieats.core.services.user.user_directory import UserDirectory
from src.unieats.core.storage.session_storage import SessionStorage
from src.unieats.entities.core.user import User
from src.unieats.runtime.context import get_config


class SessionAuthority:
    """Issues, validates and destroys server-side user sessions.

    A session only stores the user's id; every validation reloads the user
    from the directory so role and profile changes apply immediately.
    """

    def __init__(
        self,
        session_storage: SessionStorage,
        user_directory: UserDirectory,
        session_max_age: int | None = None,
    ) -> None:
        self._storage = session_storage
        self._directory = user_directory
        self._session_max_age = session_max_age

    @property
    def session_max_age(self) -> int:
        return self._session_max_age or get_config().app.session_max_age

    @staticmethod
    def _key(session_id: str) -> str:
        return f"user:{session_id}"

    async def establish(self, user: User) -> str:
        """Create a session for user and return its opaque id."""
        user_session = UserSession.create(
            session_id=secrets.token_urlsafe(32),
            user_id=user.id,
            session_max_age=self.session_max_age,
        )
        await self._storage.set(
            self._key(user_session.id), user_session, self.session_max_age
        )
        logger.info("Session established for user {}", user.id)
        return user_session.id

    async def validate(self, session_id: str | None) -> User | None:
        """Resolve the user bound to an active session.

        Returns None for unknown, expired or destroyed sessions, and for
        sessions whose user no longer exists.

        Raises:
            DirectoryUnavailable: If the user directory cannot be reached.
        """
        if not session_id:
            return None

        user_session = await self._storage.get(self._key(session_id), UserSession)
        if user_session is None:
            return None

        if user_session.is_expired():
            await self._storage.delete(self._key(session_id))
            return None

        user = await self._directory.find_by_id(user_session.user_id)
        if user is None:
            logger.warning(
                "Session refers to missing user {}; destroying it", user_session.user_id
            )
            await self.destroy(session_id)
            return None

        return user

    async def destroy(self, session_id: str | None) -> None:
        """Remove a session. Unknown or already destroyed sessions are ignored."""
        if not session_id:
            return
        await self._storage.delete(self._key(session_id))

    async def list_user_sessions(self, user_id: str | None = None) -> list[UserSession]:
        """List active sessions, optionally only those of one user."""
        sessions = await self._storage.list_sessions("user:*", UserSession)
        if user_id is None:
            return sessions
        return [session for session in sessions if session.user_id == user_id]

    async def purge_expired(self) -> int:
        return await self._storage.cleanup_expired()
