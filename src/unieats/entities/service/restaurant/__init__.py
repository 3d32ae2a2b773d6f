"""Entity package: Restaurant."""

from .entity import MenuItem, Restaurant
from .repository import RestaurantRepository
from .table import RestaurantTable

__all__ = ["MenuItem", "Restaurant", "RestaurantRepository", "RestaurantTable"]
