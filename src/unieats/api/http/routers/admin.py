"""Administrative endpoints."""

from typing import Any

from fastapi import APIRouter, Depends

from src.unieats.api.http.deps import get_session_authority, require_role
from src.unieats.core.services import SessionAuthority
from src.unieats.entities.core.user import UserRole

router = APIRouter(
    prefix="/api/admin",
    tags=["admin"],
    dependencies=[Depends(require_role(UserRole.ADMIN))],
)


@router.get("/sessions")
async def list_sessions(
    user_id: str | None = None,
    session_authority: SessionAuthority = Depends(get_session_authority),
) -> dict[str, Any]:
    """List active sessions, optionally for a single user."""
    sessions = await session_authority.list_user_sessions(user_id)
    return {
        "success": True,
        "sessions": [
            {
                "user_id": s.user_id,
                "created_at": s.created_at,
                "expires_at": s.expires_at,
            }
            for s in sessions
        ],
    }
