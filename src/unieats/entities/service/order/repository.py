from sqlmodel import Session, or_, select

from src.unieats.entities.service.order.entity import Order
from src.unieats.entities.service.order.table import OrderTable


class OrderRepository:
    """Data-access layer for orders."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, order_id: str) -> Order | None:
        row = self._session.get(OrderTable, order_id)
        if row is None:
            return None
        return Order.model_validate(row, from_attributes=True)

    def create(self, order: Order) -> Order:
        row = OrderTable.model_validate(order.model_dump())
        self._session.add(row)
        self._session.flush()
        self._session.refresh(row)
        return Order.model_validate(row, from_attributes=True)

    def list_for_customer(self, customer_id: str) -> list[Order]:
        statement = (
            select(OrderTable)
            .where(OrderTable.customer_id == customer_id)
            .order_by(OrderTable.created_at.desc())
        )
        rows = self._session.exec(statement).all()
        return [Order.model_validate(row, from_attributes=True) for row in rows]

    def list_for_participant(self, user_id: str) -> list[Order]:
        """Orders the user placed or is delivering."""
        statement = (
            select(OrderTable)
            .where(or_(OrderTable.customer_id == user_id, OrderTable.driver_id == user_id))
            .order_by(OrderTable.created_at.desc())
        )
        rows = self._session.exec(statement).all()
        return [Order.model_validate(row, from_attributes=True) for row in rows]
