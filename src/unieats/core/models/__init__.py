from .identity import ExternalIdentity
from .session import AuthSession, UserSession

__all__ = ["AuthSession", "ExternalIdentity", "UserSession"]
