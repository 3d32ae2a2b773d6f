"""Domain entities and their table models.

Importing this package registers every table with ``SQLModel.metadata``.
"""

from src.unieats.entities.core.user import User, UserRepository, UserRole, UserTable
from src.unieats.entities.service.order import (
    Order,
    OrderItem,
    OrderRepository,
    OrderStatus,
    OrderTable,
)
from src.unieats.entities.service.restaurant import (
    MenuItem,
    Restaurant,
    RestaurantRepository,
    RestaurantTable,
)

__all__ = [
    "MenuItem",
    "Order",
    "OrderItem",
    "OrderRepository",
    "OrderStatus",
    "OrderTable",
    "Restaurant",
    "RestaurantRepository",
    "RestaurantTable",
    "User",
    "UserRepository",
    "UserRole",
    "UserTable",
]
