"""Reconciles identities asserted by the issuer with local user records."""

from collections.abc import Callable
from datetime import datetime

from loguru import logger
from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlmodel import Session
from starlette.concurrency import run_in_threadpool

from src.unieats.core.errors import DirectoryUnavailable
from src.unieats.core.models.identity import ExternalIdentity
from src.unieats.core.services.database.db_session import DbSessionService
from src.unieats.entities._base import utc_now
from src.unieats.entities.core.user import User, UserRepository

# Failures meaning the store itself is unreachable, as opposed to a bad statement
_CONNECTIVITY_ERRORS = (OperationalError, InterfaceError, PoolTimeoutError)


class UserDirectory:
    """The single source of truth for local identity.

    Blocking database work runs in the threadpool so a slow store only delays
    the request waiting on it.
    """

    def __init__(
        self,
        db_service: DbSessionService,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._db = db_service
        self._clock = clock

    async def resolve(self, identity: ExternalIdentity) -> User:
        """Look up, create or refresh the user for an external identity.

        Repeating the call with the same identity performs no further writes.

        Raises:
            DirectoryUnavailable: If the backing store cannot be reached.
        """
        return await run_in_threadpool(self._run, self._resolve, identity)

    async def find_by_id(self, user_id: str) -> User | None:
        """Load a user by local id, or None if there is no such user."""
        return await run_in_threadpool(self._run, self._find_by_id, user_id)

    def _run(self, operation: Callable, *args):
        try:
            with self._db.session_scope() as db:
                return operation(db, *args)
        except _CONNECTIVITY_ERRORS as exc:
            raise DirectoryUnavailable(
                f"User directory unavailable: {type(exc).__name__}"
            ) from exc

    def _find_by_id(self, db: Session, user_id: str) -> User | None:
        return UserRepository(db).get(user_id)

    def _resolve(self, db: Session, identity: ExternalIdentity) -> User:
        repo = UserRepository(db)

        user = repo.get_by_external_subject_id(identity.subject_id)
        if user is None:
            try:
                return self._create(db, repo, identity)
            except IntegrityError:
                # Lost the race to a concurrent first login; retry the lookup once
                db.rollback()
                logger.info(
                    "Concurrent creation detected for subject {}, re-reading",
                    identity.subject_id,
                )
                user = repo.get_by_external_subject_id(identity.subject_id)
                if user is None:
                    raise

        return self._reconcile(repo, user, identity)

    def _create(
        self, db: Session, repo: UserRepository, identity: ExternalIdentity
    ) -> User:
        now = self._clock()
        created = repo.create(
            User(
                external_subject_id=identity.subject_id,
                email=identity.email,
                display_name=identity.display_name,
                created_at=now,
                updated_at=now,
            )
        )
        # Commit here so a uniqueness violation surfaces inside the retry window
        db.commit()
        logger.info("Created user {} for subject {}", created.id, identity.subject_id)
        return created

    def _reconcile(
        self, repo: UserRepository, user: User, identity: ExternalIdentity
    ) -> User:
        if user.email == identity.email and user.display_name == identity.display_name:
            return user

        logger.info("Refreshing profile of user {} from issuer", user.id)
        return repo.update_profile(
            user.id,
            email=identity.email,
            display_name=identity.display_name,
            updated_at=self._clock(),
        )
