"""DynamoDB repository classes for menu models.

These repositories provide CRUD operations for menu items and categories,
plus an atomic ID sequence for new records. Expected failures are reported by
returning None, False or an empty list rather than raising; the service layer
decides how to surface them.
"""

import logging
from datetime import datetime
from enum import Enum
from typing import Any

from boto3.dynamodb.conditions import Attr
from botocore.exceptions import ClientError
from mypy_boto3_dynamodb.service_resource import DynamoDBServiceResource, Table

from food_delivery_service.models.menu_models import Category, MenuItem

logger = logging.getLogger(__name__)


def _to_attribute_value(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    return value


def _is_condition_failure(error: ClientError) -> bool:
    return error.response.get("Error", {}).get("Code") == "ConditionalCheckFailedException"


def build_update_expression(
    changes: dict[str, Any],
) -> tuple[str, dict[str, str], dict[str, Any]]:
    """Build a DynamoDB update expression for a set of attribute changes.

    Attributes whose new value is None are removed; all others are set.
    Every attribute goes through ExpressionAttributeNames since ``name``
    and ``status`` are DynamoDB reserved words.

    Args:
        changes: Mapping of attribute name to new value (must not be empty)

    Returns:
        tuple: (UpdateExpression, ExpressionAttributeNames, ExpressionAttributeValues)
    """
    if not changes:
        raise ValueError("At least one attribute change is required")

    set_clauses: list[str] = []
    remove_clauses: list[str] = []
    names: dict[str, str] = {}
    values: dict[str, Any] = {}

    for index, (attribute, value) in enumerate(changes.items()):
        name_key = f"#a{index}"
        names[name_key] = attribute
        if value is None:
            remove_clauses.append(name_key)
        else:
            value_key = f":v{index}"
            values[value_key] = _to_attribute_value(value)
            set_clauses.append(f"{name_key} = {value_key}")

    expression_parts = []
    if set_clauses:
        expression_parts.append("SET " + ", ".join(set_clauses))
    if remove_clauses:
        expression_parts.append("REMOVE " + ", ".join(remove_clauses))

    return " ".join(expression_parts), names, values


def build_conditional_update(
    key_name: str, key_value: int, changes: dict[str, Any]
) -> dict[str, Any]:
    """Build update_item arguments that only touch an existing record.

    Args:
        key_name: Partition key attribute
        key_value: Partition key value
        changes: Mapping of attribute name to new value; None removes the attribute

    Returns:
        dict: Keyword arguments for ``Table.update_item``
    """
    update_expression, names, values = build_update_expression(changes)

    update_kwargs: dict[str, Any] = {
        "Key": {key_name: key_value},
        "UpdateExpression": update_expression,
        "ConditionExpression": f"attribute_exists({key_name})",
        "ExpressionAttributeNames": names,
        "ReturnValues": "ALL_NEW",
    }
    if values:
        update_kwargs["ExpressionAttributeValues"] = values
    return update_kwargs


def _scan_all(table: Table, **scan_kwargs: Any) -> list[dict[str, Any]]:
    # Follows LastEvaluatedKey until the whole table has been read
    items: list[dict[str, Any]] = []
    while True:
        response = table.scan(**scan_kwargs)
        items.extend(response.get("Items", []))

        last_key = response.get("LastEvaluatedKey")
        if not last_key:
            return items
        scan_kwargs["ExclusiveStartKey"] = last_key


class MenuItemRepository:
    """Repository for menu item CRUD operations.

    Manages menu item records in DynamoDB with item_id as partition key.
    """

    def __init__(self, dynamodb_resource: DynamoDBServiceResource, table_name: str) -> None:
        """Initialize repository.

        Args:
            dynamodb_resource: Boto3 DynamoDB resource
            table_name: Name of the DynamoDB table
        """
        self.dynamodb = dynamodb_resource
        self.table_name = table_name
        self.table: Table = dynamodb_resource.Table(table_name)

    def get_item(self, item_id: int) -> MenuItem | None:
        """Retrieve a menu item by ID.

        Args:
            item_id: Menu item identifier

        Returns:
            MenuItem if found, None otherwise
        """
        try:
            response = self.table.get_item(Key={"item_id": item_id}, ConsistentRead=True)

            if "Item" not in response:
                return None

            return MenuItem.from_dynamodb_item(response["Item"])

        except ClientError as e:
            logger.error(f"Failed to get menu item {item_id}: {e}")  # pragma: no cover
            return None

    def list_items(self, category_id: int | None = None) -> list[MenuItem]:
        """List menu items, optionally restricted to one category.

        Args:
            category_id: Optional category to filter by

        Returns:
            list: List of MenuItem objects (empty list if none found or on error)
        """
        scan_kwargs: dict[str, Any] = {}
        if category_id is not None:
            scan_kwargs["FilterExpression"] = Attr("category_id").eq(category_id)

        try:
            raw_items = _scan_all(self.table, **scan_kwargs)
            return [MenuItem.from_dynamodb_item(raw) for raw in raw_items]

        except ClientError as e:
            logger.error(f"Failed to list menu items: {e}")  # pragma: no cover
            return []

    def create_item(self, item: MenuItem) -> bool:
        """Store a new menu item.

        The write is conditional on the ID being unused, so an existing item
        is never overwritten.

        Args:
            item: MenuItem to store

        Returns:
            bool: True if the item was stored, False otherwise
        """
        try:
            self.table.put_item(
                Item=item.to_dynamodb_item(),
                ConditionExpression="attribute_not_exists(item_id)",
            )
            return True

        except ClientError as e:
            if _is_condition_failure(e):
                logger.warning(f"Menu item {item.id} already exists, create skipped")
            else:
                logger.error(f"Failed to create menu item {item.id}: {e}")  # pragma: no cover
            return False

    def update_fields(self, item_id: int, changes: dict[str, Any]) -> MenuItem | None:
        """Apply attribute changes to an existing menu item in a single write.

        The update is conditional on the item existing, so a concurrently
        deleted item is never recreated from a partial set of attributes.

        Args:
            item_id: Menu item identifier
            changes: Mapping of attribute name to new value; None removes the attribute

        Returns:
            MenuItem with all attributes after the update, or None if the item
            does not exist or the write failed
        """
        update_kwargs = build_conditional_update("item_id", item_id, changes)

        try:
            response = self.table.update_item(**update_kwargs)
            return MenuItem.from_dynamodb_item(response["Attributes"])

        except ClientError as e:
            if _is_condition_failure(e):
                logger.warning(f"Menu item {item_id} no longer exists, update skipped")
            else:
                logger.error(f"Failed to update menu item {item_id}: {e}")  # pragma: no cover
            return None

    def delete_item(self, item_id: int) -> bool:
        """Delete a menu item.

        Args:
            item_id: Menu item identifier

        Returns:
            bool: True if an existing item was deleted, False otherwise
        """
        try:
            self.table.delete_item(
                Key={"item_id": item_id}, ConditionExpression="attribute_exists(item_id)"
            )
            return True

        except ClientError as e:
            if _is_condition_failure(e):
                logger.warning(f"Menu item {item_id} no longer exists, delete skipped")
            else:
                logger.error(f"Failed to delete menu item {item_id}: {e}")  # pragma: no cover
            return False


class CategoryRepository:
    """Repository for menu category CRUD operations.

    Manages category records in DynamoDB with category_id as partition key.
    """

    def __init__(self, dynamodb_resource: DynamoDBServiceResource, table_name: str) -> None:
        self.dynamodb = dynamodb_resource
        self.table_name = table_name
        self.table: Table = dynamodb_resource.Table(table_name)

    def get_category(self, category_id: int) -> Category | None:
        """Retrieve a category by ID.

        Args:
            category_id: Category identifier

        Returns:
            Category if found, None otherwise
        """
        try:
            response = self.table.get_item(Key={"category_id": category_id}, ConsistentRead=True)

            if "Item" not in response:
                return None

            return Category.from_dynamodb_item(response["Item"])

        except ClientError as e:
            logger.error(f"Failed to get category {category_id}: {e}")  # pragma: no cover
            return None

    def list_categories(self) -> list[Category]:
        """List all categories.

        Returns:
            list: List of Category objects (empty list if none found or on error)
        """
        try:
            return [Category.from_dynamodb_item(raw) for raw in _scan_all(self.table)]

        except ClientError as e:
            logger.error(f"Failed to list categories: {e}")  # pragma: no cover
            return []

    def create_category(self, category: Category) -> bool:
        """Store a new category without overwriting an existing one.

        Returns:
            bool: True if the category was stored, False otherwise
        """
        try:
            self.table.put_item(
                Item=category.to_dynamodb_item(),
                ConditionExpression="attribute_not_exists(category_id)",
            )
            return True

        except ClientError as e:
            logger.error(f"Failed to create category {category.id}: {e}")  # pragma: no cover
            return False

    def update_fields(self, category_id: int, changes: dict[str, Any]) -> Category | None:
        """Apply attribute changes to an existing category in a single write.

        Returns:
            Category after the update, or None if it does not exist or the write failed
        """
        update_kwargs = build_conditional_update("category_id", category_id, changes)

        try:
            response = self.table.update_item(**update_kwargs)
            return Category.from_dynamodb_item(response["Attributes"])

        except ClientError as e:
            if _is_condition_failure(e):
                logger.warning(f"Category {category_id} no longer exists, update skipped")
            else:
                logger.error(f"Failed to update category {category_id}: {e}")  # pragma: no cover
            return None

    def delete_category(self, category_id: int) -> bool:
        """Delete a category.

        Returns:
            bool: True if an existing category was deleted, False otherwise
        """
        try:
            self.table.delete_item(
                Key={"category_id": category_id},
                ConditionExpression="attribute_exists(category_id)",
            )
            return True

        except ClientError as e:
            logger.error(f"Failed to delete category {category_id}: {e}")  # pragma: no cover
            return False


class IdSequenceRepository:
    """Atomic integer sequences for new record IDs.

    Each sequence is one record keyed by sequence_name whose current_value is
    incremented with an ADD update, so concurrent callers never share an ID.
    """

    def __init__(self, dynamodb_resource: DynamoDBServiceResource, table_name: str) -> None:
        self.dynamodb = dynamodb_resource
        self.table_name = table_name
        self.table: Table = dynamodb_resource.Table(table_name)

    def next_id(self, sequence_name: str) -> int | None:
        """Reserve the next value of a sequence.

        Args:
            sequence_name: Sequence to advance, e.g. "menu_item"

        Returns:
            int: The reserved ID (starting at 1), or None if the write failed
        """
        try:
            response = self.table.update_item(
                Key={"sequence_name": sequence_name},
                UpdateExpression="ADD #value :one",
                ExpressionAttributeNames={"#value": "current_value"},
                ExpressionAttributeValues={":one": 1},
                ReturnValues="UPDATED_NEW",
            )
            return int(response["Attributes"]["current_value"])

        except ClientError as e:
            logger.error(f"Failed to advance sequence {sequence_name}: {e}")  # pragma: no cover
            return None
