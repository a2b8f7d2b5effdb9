"""Menu data models.

These models represent menu items and categories as stored in DynamoDB.
Numbers come back from boto3 as Decimal, so the from_dynamodb_item
constructors coerce integer attributes explicitly.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_serializer
from pydantic.alias_generators import to_camel


class MenuItemStatus(str, Enum):
    """Availability of a menu item."""

    AVAILABLE = "AVAILABLE"
    UNAVAILABLE = "UNAVAILABLE"


class MenuItem(BaseModel):
    """Menu item entity."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: int = Field(..., description="Unique identifier for the menu item")
    category_id: int = Field(..., description="Category this item belongs to")
    name: str = Field(..., description="Item name")
    description: str | None = Field(None, description="Item description")
    price: Decimal = Field(..., description="Item price", gt=0)
    image_url: str | None = Field(None, description="URL to item image")
    preparation_time_minutes: int | None = Field(
        None, description="Expected preparation time in minutes", ge=0
    )
    is_vegetarian: bool = Field(default=True, description="Whether the item is vegetarian")
    display_order: int = Field(default=0, description="Sort order within the category")
    status: MenuItemStatus = Field(
        default=MenuItemStatus.AVAILABLE, description="Whether item can be ordered"
    )
    updated_at: datetime | None = Field(None, description="Timestamp of last modification")

    @property
    def is_available(self) -> bool:
        return self.status == MenuItemStatus.AVAILABLE

    @field_serializer("price", when_used="json")
    def serialize_price(self, price: Decimal) -> str:
        return str(price)

    def to_dynamodb_item(self) -> dict[str, Any]:
        """Convert to DynamoDB item format.

        Returns:
            dict: DynamoDB-compatible representation
        """
        item: dict[str, Any] = {
            "item_id": self.id,
            "category_id": self.category_id,
            "name": self.name,
            "price": self.price,
            "is_vegetarian": self.is_vegetarian,
            "display_order": self.display_order,
            "status": self.status.value,
        }

        if self.description is not None:
            item["description"] = self.description

        if self.image_url is not None:
            item["image_url"] = self.image_url

        if self.preparation_time_minutes is not None:
            item["preparation_time_minutes"] = self.preparation_time_minutes

        if self.updated_at is not None:
            item["updated_at"] = self.updated_at.isoformat()

        return item

    @classmethod
    def from_dynamodb_item(cls, item: dict[str, Any]) -> "MenuItem":
        """Create MenuItem from DynamoDB item.

        Args:
            item: DynamoDB item dictionary

        Returns:
            MenuItem: Parsed model instance
        """
        data: dict[str, Any] = {
            "id": int(item["item_id"]),
            "category_id": int(item["category_id"]),
            "name": item["name"],
            "price": Decimal(str(item["price"])),
            "is_vegetarian": bool(item.get("is_vegetarian", True)),
            "display_order": int(item.get("display_order", 0)),
            "status": MenuItemStatus(item.get("status", MenuItemStatus.AVAILABLE.value)),
        }

        if item.get("description") is not None:
            data["description"] = item["description"]

        if item.get("image_url") is not None:
            data["image_url"] = item["image_url"]

        if item.get("preparation_time_minutes") is not None:
            data["preparation_time_minutes"] = int(item["preparation_time_minutes"])

        if item.get("updated_at") is not None:
            data["updated_at"] = datetime.fromisoformat(item["updated_at"])

        return cls(**data)


class Category(BaseModel):
    """Menu category model."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: int = Field(..., description="Unique identifier for the category")
    name: str = Field(..., description="Category name")
    description: str | None = Field(None, description="Category description")
    image_url: str | None = Field(None, description="URL to category image")
    display_order: int = Field(default=0, description="Display order of category")
    is_active: bool = Field(default=True, description="Whether the category is shown to customers")
    updated_at: datetime | None = Field(None, description="Timestamp of last modification")

    def to_dynamodb_item(self) -> dict[str, Any]:
        item: dict[str, Any] = {
            "category_id": self.id,
            "name": self.name,
            "display_order": self.display_order,
            "is_active": self.is_active,
        }

        if self.description is not None:
            item["description"] = self.description

        if self.image_url is not None:
            item["image_url"] = self.image_url

        if self.updated_at is not None:
            item["updated_at"] = self.updated_at.isoformat()

        return item

    @classmethod
    def from_dynamodb_item(cls, item: dict[str, Any]) -> "Category":
        updated_at = item.get("updated_at")
        return cls(
            id=int(item["category_id"]),
            name=item["name"],
            description=item.get("description"),
            image_url=item.get("image_url"),
            display_order=int(item.get("display_order", 0)),
            is_active=bool(item.get("is_active", True)),
            updated_at=datetime.fromisoformat(updated_at) if updated_at else None,
        )
