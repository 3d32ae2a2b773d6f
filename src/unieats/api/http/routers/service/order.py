"""Order API router: a signed-in user's own orders."""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session

from src.unieats.api.http.deps import get_db_session, require_user
from src.unieats.entities.core.user import User, UserRole
from src.unieats.entities.service.order import OrderRepository

router = APIRouter(prefix="/api/orders", tags=["orders"])


@router.get("")
def list_orders(
    user: User = Depends(require_user),
    session: Session = Depends(get_db_session),
) -> dict[str, Any]:
    """List the caller's orders; drivers also see the orders they deliver."""
    repository = OrderRepository(session)
    if user.role == UserRole.DRIVER:
        orders = repository.list_for_participant(user.id)
    else:
        orders = repository.list_for_customer(user.id)
    return {"success": True, "orders": [o.model_dump(mode="json") for o in orders]}


@router.get("/{order_id}")
def get_order(
    order_id: str,
    user: User = Depends(require_user),
    session: Session = Depends(get_db_session),
) -> dict[str, Any]:
    """Get one of the caller's orders by ID."""
    order = OrderRepository(session).get(order_id)
    if order is None or not (order.is_visible_to(user.id) or user.role == UserRole.ADMIN):
        raise HTTPException(status_code=404, detail="Order not found")
    return {"success": True, "order": order.model_dump(mode="json")}
