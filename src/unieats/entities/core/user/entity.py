"""User domain entity."""

from enum import Enum
from typing import Any

from pydantic import Field

from src.unieats.entities._base import Entity


class UserRole(str, Enum):
    CUSTOMER = "customer"
    DRIVER = "driver"
    ADMIN = "admin"


class User(Entity):
    """A person known to the platform, linked to exactly one external identity.

    ``external_subject_id`` is the issuer's subject id. It is unique across
    users and never changes once set; email and display name follow the
    issuer's latest values.
    """

    external_subject_id: str = Field(description="Issuer-assigned subject identifier")
    email: str = Field(description="User's email address")
    display_name: str = Field(description="User's display name")
    role: UserRole = Field(default=UserRole.CUSTOMER, description="Platform role")

    def public_view(self) -> dict[str, str]:
        """Shape returned by ``GET /api/user``."""
        return {
            "id": self.id,
            "name": self.display_name,
            "email": self.email,
            "role": self.role.value,
        }

    def __eq__(self, other: Any) -> bool:
        """Compare users by business attributes, ignoring timestamps."""
        if not isinstance(other, User):
            return False

        return (
            self.id == other.id
            and self.external_subject_id == other.external_subject_id
            and self.email == other.email
            and self.display_name == other.display_name
            and self.role == other.role
        )

    def __hash__(self) -> int:
        return hash((self.id, self.external_subject_id))
