from sqlmodel import Session, select

from src.unieats.entities.service.restaurant.entity import Restaurant
from src.unieats.entities.service.restaurant.table import RestaurantTable


class RestaurantRepository:
    """Data-access layer for restaurants."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, restaurant_id: str) -> Restaurant | None:
        row = self._session.get(RestaurantTable, restaurant_id)
        if row is None:
            return None
        return Restaurant.model_validate(row, from_attributes=True)

    def create(self, restaurant: Restaurant) -> Restaurant:
        row = RestaurantTable.model_validate(restaurant.model_dump())
        self._session.add(row)
        self._session.flush()
        self._session.refresh(row)
        return Restaurant.model_validate(row, from_attributes=True)

    def list_all(self) -> list[Restaurant]:
        statement = select(RestaurantTable).order_by(RestaurantTable.name)
        rows = self._session.exec(statement).all()
        return [Restaurant.model_validate(row, from_attributes=True) for row in rows]
