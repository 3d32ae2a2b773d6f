from src.unieats.core.services.database.db_session import DbSessionService
from src.unieats.core.services.jwt.jwks import JWKSCache, JWKSCacheInMemory, JwksService
from src.unieats.core.services.jwt.jwt_verify import IdTokenVerifier
from src.unieats.core.services.oidc_client_service import OidcClientService
from src.unieats.core.services.session.auth_session import AuthSessionService
from src.unieats.core.services.session.authorization_gate import AuthorizationGate
from src.unieats.core.services.session.session_authority import SessionAuthority
from src.unieats.core.services.user.user_directory import UserDirectory
from src.unieats.core.storage.session_storage import (
    InMemorySessionStorage,
    RedisSessionStorage,
    SessionStorage,
)

__all__ = [
    "AuthSessionService",
    "AuthorizationGate",
    "DbSessionService",
    "IdTokenVerifier",
    "InMemorySessionStorage",
    "JWKSCache",
    "JWKSCacheInMemory",
    "JwksService",
    "OidcClientService",
    "RedisSessionStorage",
    "SessionAuthority",
    "SessionStorage",
    "UserDirectory",
]
