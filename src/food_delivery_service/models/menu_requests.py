"""Request models for menu administration.

Partial updates (MenuItemPatch, CategoryPatch) only apply keys present in the
request body. Presence is tracked through pydantic's ``model_fields_set``
rather than by comparing against None, so a client can explicitly clear a
nullable field by sending ``null``.
"""

from decimal import Decimal
from typing import Any, ClassVar, TypeVar

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

# Prices are stored as DynamoDB numbers; keep them to currency precision
PRICE_MAX_DIGITS = 10
PRICE_DECIMAL_PLACES = 2

EntityT = TypeVar("EntityT", bound=BaseModel)


class PartialUpdate(BaseModel):
    """Base class for partial update bodies.

    Subclasses declare every attribute as optional with a None default and
    list the attributes that may be explicitly cleared in ``clearable_fields``.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    clearable_fields: ClassVar[frozenset[str]] = frozenset()

    @model_validator(mode="after")
    def reject_null_for_required_fields(self) -> "PartialUpdate":
        """Only nullable fields can be cleared with an explicit null."""
        cleared = sorted(
            name
            for name in self.model_fields_set
            if getattr(self, name) is None and name not in self.clearable_fields
        )
        if cleared:
            raise ValueError(f"Fields cannot be set to null: {', '.join(cleared)}")
        return self

    def changes(self) -> dict[str, Any]:
        """Return the attributes present in the request, in declaration order.

        Returns:
            dict: Mapping of attribute name to new value
        """
        return {
            name: getattr(self, name)
            for name in type(self).model_fields
            if name in self.model_fields_set
        }

    @property
    def is_empty(self) -> bool:
        return not self.model_fields_set


class MenuItemPatch(PartialUpdate):
    """Partial update for a menu item.

    Every attribute is optional. Absent attributes leave the stored value
    untouched; present ones overwrite it.

    Example:
        # Update price and vegetarian flag only
        {"price": 12.50, "isVegetarian": true}

        # Remove the image
        {"imageUrl": null}
    """

    clearable_fields: ClassVar[frozenset[str]] = frozenset(
        {"description", "image_url", "preparation_time_minutes"}
    )

    category_id: int | None = Field(None, description="New owning category")
    name: str | None = Field(None, description="New display name", min_length=1)
    description: str | None = Field(None, description="New description")
    price: Decimal | None = Field(
        None,
        description="New price",
        gt=0,
        max_digits=PRICE_MAX_DIGITS,
        decimal_places=PRICE_DECIMAL_PLACES,
    )
    image_url: str | None = Field(None, description="New image URL")
    preparation_time_minutes: int | None = Field(
        None, description="New preparation time in minutes", ge=0
    )
    is_vegetarian: bool | None = Field(None, description="New vegetarian flag")
    display_order: int | None = Field(None, description="New sort order within the category")


class CategoryPatch(PartialUpdate):
    """Partial update for a menu category."""

    clearable_fields: ClassVar[frozenset[str]] = frozenset({"description", "image_url"})

    name: str | None = Field(None, description="New category name", min_length=1)
    description: str | None = Field(None, description="New description")
    image_url: str | None = Field(None, description="New image URL")
    display_order: int | None = Field(None, description="New display order")


class MenuItemCreateRequest(BaseModel):
    """Request body for adding a menu item."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    category_id: int
    name: str = Field(..., min_length=1)
    description: str | None = None
    price: Decimal = Field(
        ..., gt=0, max_digits=PRICE_MAX_DIGITS, decimal_places=PRICE_DECIMAL_PLACES
    )
    image_url: str | None = None
    preparation_time_minutes: int | None = Field(None, ge=0)
    is_vegetarian: bool = True
    display_order: int = 0


class CategoryCreateRequest(BaseModel):
    """Request body for adding a menu category."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str = Field(..., min_length=1)
    description: str | None = None
    image_url: str | None = None
    display_order: int = 0


def apply_patch(entity: EntityT, patch: PartialUpdate) -> EntityT:
    """Merge a patch onto an entity without mutating either.

    Args:
        entity: The current menu item or category
        patch: Validated partial update

    Returns:
        A copy of ``entity`` with every present patch attribute applied
    """
    if patch.is_empty:
        return entity.model_copy()
    return entity.model_copy(update=patch.changes())
