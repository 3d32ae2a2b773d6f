"""Restaurant API router (read-only)."""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session

from src.unieats.api.http.deps import get_db_session, require_user
from src.unieats.entities.service.restaurant import RestaurantRepository

router = APIRouter(
    prefix="/api/restaurants",
    tags=["restaurants"],
    dependencies=[Depends(require_user)],
)


@router.get("")
def list_restaurants(session: Session = Depends(get_db_session)) -> dict[str, Any]:
    """List all restaurants with their menus."""
    restaurants = RestaurantRepository(session).list_all()
    return {
        "success": True,
        "restaurants": [r.model_dump(mode="json") for r in restaurants],
    }


@router.get("/{restaurant_id}")
def get_restaurant(
    restaurant_id: str,
    session: Session = Depends(get_db_session),
) -> dict[str, Any]:
    """Get a restaurant by ID."""
    restaurant = RestaurantRepository(session).get(restaurant_id)
    if restaurant is None:
        raise HTTPException(status_code=404, detail="Restaurant not found")
    return {"success": True, "restaurant": restaurant.model_dump(mode="json")}
