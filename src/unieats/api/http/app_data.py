from dataclasses import dataclass

from src.unieats.core.services import (
    AuthorizationGate,
    AuthSessionService,
    DbSessionService,
    IdTokenVerifier,
    JWKSCacheInMemory,
    JwksService,
    OidcClientService,
    SessionAuthority,
    SessionStorage,
    UserDirectory,
)


@dataclass
class ApplicationDependencies:
    jwks_cache: JWKSCacheInMemory
    jwks_service: JwksService
    id_token_verifier: IdTokenVerifier
    session_storage: SessionStorage
    auth_session_service: AuthSessionService
    oidc_client_service: OidcClientService
    database_service: DbSessionService
    user_directory: UserDirectory
    session_authority: SessionAuthority
    authorization_gate: AuthorizationGate
