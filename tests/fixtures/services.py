from __future__ import annotations

from typing import Any

import pytest

from src.unieats.core.models.identity import ExternalIdentity
from src.unieats.core.services import (
    AuthorizationGate,
    AuthSessionService,
    DbSessionService,
    IdTokenVerifier,
    InMemorySessionStorage,
    JWKSCacheInMemory,
    OidcClientService,
    SessionAuthority,
    UserDirectory,
)
from src.unieats.core.services.oidc_client_service import CallbackPayload
from src.unieats.runtime.config.config_data import OIDCProviderConfig


class FakeJwksService:
    """Serves prepared key sets and records every fetch."""

    def __init__(self, *key_sets: dict[str, Any]) -> None:
        self._key_sets = list(key_sets)
        self.calls: list[bool] = []

    async def fetch_jwks(
        self, provider: OIDCProviderConfig, force_refresh: bool = False
    ) -> dict[str, Any]:
        self.calls.append(force_refresh)
        index = min(len(self.calls), len(self._key_sets)) - 1
        return self._key_sets[index]


class FakeOidcClient:
    """Stands in for the issuer handshake in HTTP-level tests."""

    def __init__(self) -> None:
        self.identity: ExternalIdentity | None = None
        self.return_to: str | None = None
        self.error: Exception | None = None
        self.payloads: list[CallbackPayload] = []

    async def begin_authentication(
        self, provider: str | None = None, return_to: str | None = None
    ) -> str:
        if self.error is not None:
            raise self.error
        return "https://login.microsoftonline.com/test-tenant/authorize?state=abc"

    async def complete_authentication(
        self, payload: CallbackPayload
    ) -> tuple[ExternalIdentity, str | None]:
        self.payloads.append(payload)
        if self.error is not None:
            raise self.error
        assert self.identity is not None
        return self.identity, self.return_to


@pytest.fixture
def session_storage() -> InMemorySessionStorage:
    return InMemorySessionStorage()


@pytest.fixture
def user_directory(db_service: DbSessionService, clock) -> UserDirectory:
    return UserDirectory(db_service, clock=clock)


@pytest.fixture
def session_authority(
    session_storage: InMemorySessionStorage, user_directory: UserDirectory
) -> SessionAuthority:
    return SessionAuthority(session_storage, user_directory, session_max_age=3600)


@pytest.fixture
def authorization_gate(session_authority: SessionAuthority) -> AuthorizationGate:
    return AuthorizationGate(session_authority)


@pytest.fixture
def auth_session_service(session_storage: InMemorySessionStorage) -> AuthSessionService:
    return AuthSessionService(session_storage)


@pytest.fixture
def fake_jwks_service(jwks_data: dict[str, Any]) -> FakeJwksService:
    return FakeJwksService(jwks_data)


@pytest.fixture
def id_token_verifier(fake_jwks_service: FakeJwksService) -> IdTokenVerifier:
    return IdTokenVerifier(fake_jwks_service)


@pytest.fixture
def oidc_client_service(
    auth_session_service: AuthSessionService, id_token_verifier: IdTokenVerifier
) -> OidcClientService:
    return OidcClientService(auth_session_service, id_token_verifier)


@pytest.fixture
def fake_oidc_client() -> FakeOidcClient:
    return FakeOidcClient()


@pytest.fixture
def jwks_cache() -> JWKSCacheInMemory:
    return JWKSCacheInMemory(ttl_seconds=60)


@pytest.fixture
def app_dependencies(
    jwks_cache: JWKSCacheInMemory,
    session_storage: InMemorySessionStorage,
    auth_session_service: AuthSessionService,
    fake_oidc_client: FakeOidcClient,
    db_service: DbSessionService,
    user_directory: UserDirectory,
    session_authority: SessionAuthority,
    authorization_gate: AuthorizationGate,
):
    from src.unieats.api.http.app_data import ApplicationDependencies
    from src.unieats.core.services import JwksService

    jwks_service = JwksService(jwks_cache)
    return ApplicationDependencies(
        jwks_cache=jwks_cache,
        jwks_service=jwks_service,
        id_token_verifier=IdTokenVerifier(jwks_service),
        session_storage=session_storage,
        auth_session_service=auth_session_service,
        oidc_client_service=fake_oidc_client,
        database_service=db_service,
        user_directory=user_directory,
        session_authority=session_authority,
        authorization_gate=authorization_gate,
    )


@pytest.fixture
def client(app_dependencies):
    """Test client wired to in-memory services; the lifespan is not run."""
    from fastapi.testclient import TestClient

    from src.unieats.api.http.app import app

    previous = getattr(app.state, "app_dependencies", None)
    app.state.app_dependencies = app_dependencies
    try:
        yield TestClient(app)
    finally:
        app.state.app_dependencies = previous
