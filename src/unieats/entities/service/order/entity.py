"""Entity: Order."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from src.unieats.entities._base import Entity


class OrderStatus(str, Enum):
    PLACED = "placed"
    ACCEPTED = "accepted"
    PICKED_UP = "picked-up"
    DELIVERED = "delivered"


class OrderItem(BaseModel):
    item_name: str
    price: float = Field(ge=0)
    quantity: int = Field(default=1, ge=1)


class Order(Entity):
    """An order placed by a customer at a restaurant, optionally carried by a driver."""

    customer_id: str = Field(description="User who placed the order")
    driver_id: str | None = Field(default=None, description="User delivering the order")
    restaurant_id: str = Field(description="Restaurant preparing the order")
    items: list[OrderItem] = Field(default_factory=list)
    total_price: float = Field(ge=0)
    status: OrderStatus = Field(default=OrderStatus.PLACED)
    delivery_address: str

    def is_visible_to(self, user_id: str) -> bool:
        return user_id in (self.customer_id, self.driver_id)

    def __eq__(self, other: Any) -> bool:
        """Compare orders by business attributes, ignoring timestamps."""
        if not isinstance(other, Order):
            return False

        return (
            self.id == other.id
            and self.customer_id == other.customer_id
            and self.driver_id == other.driver_id
            and self.restaurant_id == other.restaurant_id
            and self.items == other.items
            and self.total_price == other.total_price
            and self.status == other.status
            and self.delivery_address == other.delivery_address
        )

    def __hash__(self) -> int:
        return hash((self.id, self.customer_id, self.restaurant_id))
