"""Order database table model."""

from typing import Any

import sqlalchemy as sa
from sqlmodel import Field

from src.unieats.entities._base import EntityTable
from src.unieats.entities.service.order.entity import OrderStatus


class OrderTable(EntityTable, table=True):
    """Database persistence model for orders; line items are a JSON document."""

    __tablename__ = "orders"

    customer_id: str = Field(foreign_key="users.id", index=True, nullable=False)
    driver_id: str | None = Field(default=None, foreign_key="users.id", index=True)
    restaurant_id: str = Field(foreign_key="restaurants.id", nullable=False)
    items: list[dict[str, Any]] = Field(default_factory=list, sa_type=sa.JSON)
    total_price: float = Field(nullable=False)
    status: OrderStatus = Field(default=OrderStatus.PLACED, nullable=False)
    delivery_address: str = Field(nullable=False)
