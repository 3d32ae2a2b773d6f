"""Current-user endpoint."""

from typing import Any

from fastapi import APIRouter, Depends

from src.unieats.api.http.deps import require_user
from src.unieats.entities.core.user import User

router = APIRouter(prefix="/api", tags=["user"])


@router.get("/user")
async def current_user(user: User = Depends(require_user)) -> dict[str, Any]:
    """Return the signed-in user."""
    return {"success": True, "user": user.public_view()}
