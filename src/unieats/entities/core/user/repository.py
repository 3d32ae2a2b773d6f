from datetime import datetime

from sqlmodel import Session, select

from src.unieats.entities.core.user.entity import User
from src.unieats.entities.core.user.table import UserTable


class UserRepository:
    """Data-access layer for users.

    Writes are flushed but never committed; the caller owns the transaction.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, user_id: str) -> User | None:
        row = self._session.get(UserTable, user_id)
        if row is None:
            return None
        return User.model_validate(row, from_attributes=True)

    def get_by_external_subject_id(self, subject_id: str) -> User | None:
        statement = select(UserTable).where(UserTable.external_subject_id == subject_id)
        row = self._session.exec(statement).first()
        if row is None:
            return None
        return User.model_validate(row, from_attributes=True)

    def create(self, user: User) -> User:
        row = UserTable.model_validate(user.model_dump())
        self._session.add(row)
        self._session.flush()
        self._session.refresh(row)
        return User.model_validate(row, from_attributes=True)

    def update_profile(
        self, user_id: str, *, email: str, display_name: str, updated_at: datetime
    ) -> User:
        row = self._session.get(UserTable, user_id)
        if row is None:
            raise ValueError(f"User {user_id} not found")

        row.email = email
        row.display_name = display_name
        row.updated_at = updated_at
        self._session.add(row)
        self._session.flush()
        self._session.refresh(row)
        return User.model_validate(row, from_attributes=True)

    def list_all(self) -> list[User]:
        rows = self._session.exec(select(UserTable)).all()
        return [User.model_validate(row, from_attributes=True) for row in rows]
