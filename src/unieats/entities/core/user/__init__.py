"""Entity package: User."""

from .entity import User, UserRole
from .repository import UserRepository
from .table import UserTable

__all__ = ["User", "UserRepository", "UserRole", "UserTable"]
