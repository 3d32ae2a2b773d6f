"""Entity package: Order."""

from .entity import Order, OrderItem, OrderStatus
from .repository import OrderRepository
from .table import OrderTable

__all__ = ["Order", "OrderItem", "OrderRepository", "OrderStatus", "OrderTable"]
