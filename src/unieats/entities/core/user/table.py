"""User database table model."""

from sqlmodel import Field

from src.unieats.entities._base import EntityTable
from src.unieats.entities.core.user.entity import UserRole


class UserTable(EntityTable, table=True):
    """Database persistence model for users.

    The unique index on ``external_subject_id`` is what settles two
    concurrent first logins for the same person: the second insert fails.
    """

    __tablename__ = "users"

    external_subject_id: str = Field(unique=True, index=True, nullable=False)
    email: str = Field(nullable=False)
    display_name: str = Field(nullable=False)
    role: UserRole = Field(default=UserRole.CUSTOMER, nullable=False)
