"""Entity: Restaurant."""

from typing import Any

from pydantic import BaseModel, Field

from src.unieats.entities._base import Entity


class MenuItem(BaseModel):
    item_name: str = Field(description="Dish name as shown on the menu")
    description: str | None = Field(default=None, description="Short description")
    price: float = Field(ge=0, description="Price in the campus currency")


class Restaurant(Entity):
    """A restaurant that accepts orders through the platform."""

    name: str = Field(description="Name")
    address: str = Field(description="Street address")
    menu: list[MenuItem] = Field(default_factory=list, description="Menu items")

    def __eq__(self, other: Any) -> bool:
        """Compare restaurants by business attributes, ignoring timestamps."""
        if not isinstance(other, Restaurant):
            return False

        return (
            self.id == other.id
            and self.name == other.name
            and self.address == other.address
            and self.menu == other.menu
        )

    def __hash__(self) -> int:
        return hash((self.id, self.name, self.address))
