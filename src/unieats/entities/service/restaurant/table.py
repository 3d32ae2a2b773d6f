"""Restaurant database table model."""

from typing import Any

import sqlalchemy as sa
from sqlmodel import Field

from src.unieats.entities._base import EntityTable


class RestaurantTable(EntityTable, table=True):
    """Database persistence model for restaurants; the menu is a JSON document."""

    __tablename__ = "restaurants"

    name: str = Field(nullable=False)
    address: str = Field(nullable=False)
    menu: list[dict[str, Any]] = Field(default_factory=list, sa_type=sa.JSON)
