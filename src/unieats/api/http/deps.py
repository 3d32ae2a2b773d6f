"""FastAPI dependency implementations."""

from __future__ import annotations

from collections.abc import Iterator

from fastapi import Depends, HTTPException, Request
from sqlmodel import Session

from src.unieats.api.http.app_data import ApplicationDependencies
from src.unieats.core.services import (
    AuthorizationGate,
    OidcClientService,
    SessionAuthority,
    UserDirectory,
)
from src.unieats.entities.core.user import User, UserRole


def _app_deps(request: Request) -> ApplicationDependencies:
    return request.app.state.app_dependencies


def get_db_session(request: Request) -> Iterator[Session]:
    """Yield a database session that is closed after the request."""
    db = _app_deps(request).database_service.get_session()
    try:
        yield db
    finally:
        db.close()


def get_oidc_client_service(request: Request) -> OidcClientService:
    """Get the OIDC Client service instance."""
    return _app_deps(request).oidc_client_service


def get_user_directory(request: Request) -> UserDirectory:
    """Get the User Directory instance."""
    return _app_deps(request).user_directory


def get_session_authority(request: Request) -> SessionAuthority:
    """Get the Session Authority instance."""
    return _app_deps(request).session_authority


def get_authorization_gate(request: Request) -> AuthorizationGate:
    """Get the Authorization Gate instance."""
    return _app_deps(request).authorization_gate


async def get_optional_user(
    request: Request,
    gate: AuthorizationGate = Depends(get_authorization_gate),
) -> User | None:
    """Resolve the session's user without requiring one."""
    return await gate.authorize(request)


async def require_user(user: User | None = Depends(get_optional_user)) -> User:
    """Admit only requests with a valid session.

    Rejected requests never reach the route handler; they receive a 401 with
    ``{"success": false, "message": "Not authenticated"}``.
    """
    if user is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return user


def require_role(*roles: UserRole):
    """Create a dependency that requires the authenticated user to hold one of roles."""

    async def dep(user: User = Depends(require_user)) -> User:
        if user.role not in roles:
            raise HTTPException(status_code=403, detail="Insufficient role")
        return user

    return dep
