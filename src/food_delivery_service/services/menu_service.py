"""Menu service for administering menu items and categories."""

import logging
from datetime import UTC, datetime
from typing import Any

from food_delivery_service.models.menu_models import Category, MenuItem, MenuItemStatus
from food_delivery_service.models.menu_requests import (
    CategoryCreateRequest,
    CategoryPatch,
    MenuItemCreateRequest,
    MenuItemPatch,
    apply_patch,
)
from food_delivery_service.observability import traced
from food_delivery_service.observability.metrics import (
    record_menu_catalog_change,
    record_menu_item_update,
)
from food_delivery_service.repositories.menu_repositories import (
    CategoryRepository,
    IdSequenceRepository,
    MenuItemRepository,
)

logger = logging.getLogger(__name__)

MENU_ITEM_SEQUENCE = "menu_item"
CATEGORY_SEQUENCE = "category"


class MenuServiceError(Exception):
    """Base class for menu rule violations."""


class InvalidCategoryError(MenuServiceError):
    """Raised when an item references a category that does not exist."""

    def __init__(self, category_id: int) -> None:
        super().__init__(f"Category {category_id} does not exist")
        self.category_id = category_id


class CategoryNotEmptyError(MenuServiceError):
    """Raised when deleting a category that still has menu items."""

    def __init__(self, category_id: int, item_count: int) -> None:
        super().__init__(f"Category {category_id} still has {item_count} menu item(s)")
        self.category_id = category_id
        self.item_count = item_count


class MenuPersistenceError(MenuServiceError):
    """Raised when a validated change could not be written."""


class MenuItemPersistenceError(MenuPersistenceError):
    """Raised when a change to an existing menu item could not be written."""

    def __init__(self, item_id: int) -> None:
        super().__init__(f"Failed to persist changes to menu item {item_id}")
        self.item_id = item_id


def _changed_fields(current: Any, changes: dict[str, Any]) -> dict[str, Any]:
    changed = {name: value for name, value in changes.items() if getattr(current, name) != value}
    changed["updated_at"] = datetime.now(UTC)
    return changed


class MenuService:
    """Service for menu administration.

    Partial updates are merged in memory first so that a patch which changes
    nothing never touches the table, then written as a single conditional
    DynamoDB update so all present fields commit together.
    """

    def __init__(
        self,
        item_repository: MenuItemRepository,
        category_repository: CategoryRepository,
        id_sequence: IdSequenceRepository,
    ) -> None:
        """Initialize the MenuService.

        Args:
            item_repository: Repository for menu items
            category_repository: Repository for categories
            id_sequence: Source of IDs for new items and categories
        """
        self.item_repository = item_repository
        self.category_repository = category_repository
        self.id_sequence = id_sequence

    async def get_menu_item(self, item_id: int) -> MenuItem | None:
        """Get a menu item by ID.

        Returns:
            MenuItem if found, None otherwise
        """
        return self.item_repository.get_item(item_id)

    async def list_menu_items(self, category_id: int | None = None) -> list[MenuItem]:
        """List menu items ordered by category, display order, then ID.

        Args:
            category_id: Optional category to restrict the listing to

        Returns:
            List of menu items, empty list if none found
        """
        items = self.item_repository.list_items(category_id=category_id)
        return sorted(items, key=lambda item: (item.category_id, item.display_order, item.id))

    @traced("create_menu_item")
    async def create_menu_item(self, request: MenuItemCreateRequest) -> MenuItem:
        """Add a menu item to an existing category.

        New items start out AVAILABLE.

        Raises:
            InvalidCategoryError: If the category does not exist
            MenuPersistenceError: If no ID could be reserved or the write fails
        """
        self._require_category(request.category_id)

        item_id = self.id_sequence.next_id(MENU_ITEM_SEQUENCE)
        if item_id is None:
            raise MenuPersistenceError("Failed to reserve a menu item ID")

        item = MenuItem(
            id=item_id,
            status=MenuItemStatus.AVAILABLE,
            updated_at=datetime.now(UTC),
            **request.model_dump(),
        )
        if not self.item_repository.create_item(item):
            raise MenuPersistenceError(f"Failed to create menu item {item_id}")

        logger.info(f"Created menu item {item_id} in category {item.category_id}")
        record_menu_catalog_change("menu_item", "created")
        return item

    @traced("update_menu_item")
    async def update_menu_item(self, item_id: int, patch: MenuItemPatch) -> MenuItem | None:
        """Apply a partial update to a menu item.

        Args:
            item_id: The menu item to update
            patch: Validated partial update

        Returns:
            The menu item after the update, or None if it does not exist

        Raises:
            InvalidCategoryError: If the patch references an unknown category
            MenuItemPersistenceError: If the write fails
        """
        current = self.item_repository.get_item(item_id)
        if current is None:
            logger.info(f"Menu item {item_id} not found, update rejected")
            record_menu_item_update("not_found")
            return None

        changes = patch.changes()

        if "category_id" in changes and changes["category_id"] != current.category_id:
            try:
                self._require_category(changes["category_id"])
            except InvalidCategoryError:
                record_menu_item_update("invalid_category")
                raise

        merged = apply_patch(current, patch)
        if merged == current:
            logger.info(f"Patch for menu item {item_id} changes nothing, skipping write")
            record_menu_item_update("unchanged")
            return current

        changed_fields = _changed_fields(current, changes)

        updated = self.item_repository.update_fields(item_id, changed_fields)
        if updated is None:
            record_menu_item_update("failed")
            raise MenuItemPersistenceError(item_id)

        updated_names = sorted(changed_fields.keys() - {"updated_at"})
        logger.info(f"Updated menu item {item_id}: {', '.join(updated_names)}")
        record_menu_item_update("applied")
        return updated

    async def delete_menu_item(self, item_id: int) -> bool:
        """Delete a menu item.

        Returns:
            True if the item was deleted, False if it does not exist

        Raises:
            MenuItemPersistenceError: If the delete fails
        """
        if self.item_repository.get_item(item_id) is None:
            return False

        if not self.item_repository.delete_item(item_id):
            raise MenuItemPersistenceError(item_id)

        logger.info(f"Deleted menu item {item_id}")
        record_menu_catalog_change("menu_item", "deleted")
        return True

    async def toggle_availability(self, item_id: int) -> MenuItem | None:
        """Flip a menu item between AVAILABLE and UNAVAILABLE.

        Returns:
            The menu item after the toggle, or None if it does not exist

        Raises:
            MenuItemPersistenceError: If the write fails
        """
        current = self.item_repository.get_item(item_id)
        if current is None:
            return None

        new_status = (
            MenuItemStatus.UNAVAILABLE if current.is_available else MenuItemStatus.AVAILABLE
        )
        updated = self.item_repository.update_fields(
            item_id, {"status": new_status, "updated_at": datetime.now(UTC)}
        )
        if updated is None:
            raise MenuItemPersistenceError(item_id)

        logger.info(f"Menu item {item_id} is now {new_status.value}")
        return updated

    async def list_categories(self) -> list[Category]:
        """List categories ordered by display order, then ID."""
        categories = self.category_repository.list_categories()
        return sorted(categories, key=lambda category: (category.display_order, category.id))

    @traced("create_category")
    async def create_category(self, request: CategoryCreateRequest) -> Category:
        """Add a category. New categories start out active.

        Raises:
            MenuPersistenceError: If no ID could be reserved or the write fails
        """
        category_id = self.id_sequence.next_id(CATEGORY_SEQUENCE)
        if category_id is None:
            raise MenuPersistenceError("Failed to reserve a category ID")

        category = Category(
            id=category_id, is_active=True, updated_at=datetime.now(UTC), **request.model_dump()
        )
        if not self.category_repository.create_category(category):
            raise MenuPersistenceError(f"Failed to create category {category_id}")

        logger.info(f"Created category {category_id}")
        record_menu_catalog_change("category", "created")
        return category

    async def update_category(self, category_id: int, patch: CategoryPatch) -> Category | None:
        """Apply a partial update to a category.

        Returns:
            The category after the update, or None if it does not exist

        Raises:
            MenuPersistenceError: If the write fails
        """
        current = self.category_repository.get_category(category_id)
        if current is None:
            return None

        if apply_patch(current, patch) == current:
            return current

        updated = self.category_repository.update_fields(
            category_id, _changed_fields(current, patch.changes())
        )
        if updated is None:
            raise MenuPersistenceError(f"Failed to persist changes to category {category_id}")

        logger.info(f"Updated category {category_id}")
        record_menu_catalog_change("category", "updated")
        return updated

    async def delete_category(self, category_id: int) -> bool:
        """Delete an empty category.

        Returns:
            True if the category was deleted, False if it does not exist

        Raises:
            CategoryNotEmptyError: If menu items still belong to the category
            MenuPersistenceError: If the delete fails
        """
        if self.category_repository.get_category(category_id) is None:
            return False

        remaining = self.item_repository.list_items(category_id=category_id)
        if remaining:
            raise CategoryNotEmptyError(category_id, len(remaining))

        if not self.category_repository.delete_category(category_id):
            raise MenuPersistenceError(f"Failed to delete category {category_id}")

        logger.info(f"Deleted category {category_id}")
        record_menu_catalog_change("category", "deleted")
        return True

    async def toggle_category(self, category_id: int) -> Category | None:
        """Flip a category between active and inactive.

        Returns:
            The category after the toggle, or None if it does not exist

        Raises:
            MenuPersistenceError: If the write fails
        """
        current = self.category_repository.get_category(category_id)
        if current is None:
            return None

        updated = self.category_repository.update_fields(
            category_id, {"is_active": not current.is_active, "updated_at": datetime.now(UTC)}
        )
        if updated is None:
            raise MenuPersistenceError(f"Failed to persist changes to category {category_id}")

        state = "active" if updated.is_active else "inactive"
        logger.info(f"Category {category_id} is now {state}")
        return updated

    def _require_category(self, category_id: int) -> Category:
        category = self.category_repository.get_category(category_id)
        if category is None:
            raise InvalidCategoryError(category_id)
        return category
