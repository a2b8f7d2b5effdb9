"""Unit tests for FastAPI admin endpoints."""

from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from food_delivery_service.handlers.api_handler import create_app
from food_delivery_service.models.menu_models import Category, MenuItem, MenuItemStatus
from food_delivery_service.models.menu_requests import (
    CategoryCreateRequest,
    CategoryPatch,
    MenuItemCreateRequest,
    MenuItemPatch,
)
from food_delivery_service.services.menu_service import (
    CategoryNotEmptyError,
    InvalidCategoryError,
    MenuItemPersistenceError,
    MenuPersistenceError,
    MenuService,
)
from food_delivery_service.services.notification_service import NotificationService

HEADERS = {"X-API-Key": "test-api-key"}


@pytest.fixture
def client() -> TestClient:
    """Create a test client with mocked services."""
    app = create_app(
        menu_service=MagicMock(spec=MenuService),
        notification_service=MagicMock(spec=NotificationService),
        api_keys=["test-api-key"],
    )
    return TestClient(app)


@pytest.mark.unit
class TestHealthEndpoint:
    """Test suite for health check endpoint."""

    def test_health_check(self, client: TestClient) -> None:
        """Test health check endpoint returns 200 without an API key."""
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}


@pytest.mark.unit
class TestAuthentication:
    """Test suite for admin API key enforcement."""

    def test_missing_api_key(self, client: TestClient) -> None:
        """Test that requests without a key are rejected."""
        response = client.get("/admin/menu/items")

        assert response.status_code == 401
        assert response.json() == {"success": False, "message": "Missing API key", "data": None}

    def test_invalid_api_key(self, client: TestClient) -> None:
        """Test that requests with an unknown key are rejected."""
        response = client.put(
            "/admin/menu/items/101", json={"price": 12.5}, headers={"X-API-Key": "wrong"}
        )

        assert response.status_code == 401
        assert response.json() == {"success": False, "message": "Invalid API key", "data": None}
        client.app.state.menu_service.update_menu_item.assert_not_called()


@pytest.mark.unit
class TestMenuReadEndpoints:
    """Test suite for menu item read endpoints."""

    def test_list_menu_items(self, client: TestClient, paneer_tikka: MenuItem) -> None:
        """Test listing items returns the envelope with camelCase fields."""
        client.app.state.menu_service.list_menu_items = AsyncMock(return_value=[paneer_tikka])

        response = client.get("/admin/menu/items", headers=HEADERS)

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert len(body["data"]) == 1
        assert body["data"][0]["id"] == 101
        assert body["data"][0]["categoryId"] == 7
        assert body["data"][0]["isVegetarian"] is False
        client.app.state.menu_service.list_menu_items.assert_awaited_once_with(category_id=None)

    def test_list_menu_items_by_category(self, client: TestClient) -> None:
        """Test that the categoryId query parameter is forwarded."""
        client.app.state.menu_service.list_menu_items = AsyncMock(return_value=[])

        response = client.get("/admin/menu/items?categoryId=7", headers=HEADERS)

        assert response.status_code == 200
        assert response.json()["data"] == []
        client.app.state.menu_service.list_menu_items.assert_awaited_once_with(category_id=7)

    def test_get_menu_item(self, client: TestClient, paneer_tikka: MenuItem) -> None:
        """Test fetching a single item."""
        client.app.state.menu_service.get_menu_item = AsyncMock(return_value=paneer_tikka)

        response = client.get("/admin/menu/items/101", headers=HEADERS)

        assert response.status_code == 200
        assert response.json()["data"]["name"] == "Paneer Tikka"

    def test_get_menu_item_not_found(self, client: TestClient) -> None:
        """Test fetching a missing item returns 404."""
        client.app.state.menu_service.get_menu_item = AsyncMock(return_value=None)

        response = client.get("/admin/menu/items/999", headers=HEADERS)

        assert response.status_code == 404
        assert response.json() == {
            "success": False,
            "message": "Menu item 999 not found",
            "data": None,
        }


@pytest.mark.unit
class TestUpdateMenuItemEndpoint:
    """Test suite for the partial update endpoint."""

    @pytest.mark.parametrize("method", ["put", "patch"])
    def test_update_success(self, client: TestClient, paneer_tikka: MenuItem, method: str) -> None:
        """Test that PUT and PATCH both apply a partial update."""
        updated = paneer_tikka.model_copy(
            update={"price": Decimal("12.50"), "is_vegetarian": True}
        )
        client.app.state.menu_service.update_menu_item = AsyncMock(return_value=updated)

        response = getattr(client, method)(
            "/admin/menu/items/101",
            json={"price": 12.50, "isVegetarian": True},
            headers=HEADERS,
        )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Menu item updated successfully"
        assert Decimal(body["data"]["price"]) == Decimal("12.50")
        assert body["data"]["isVegetarian"] is True
        assert body["data"]["displayOrder"] == 3

        item_id, patch = client.app.state.menu_service.update_menu_item.call_args.args
        assert item_id == 101
        assert isinstance(patch, MenuItemPatch)
        assert patch.changes() == {"price": Decimal("12.5"), "is_vegetarian": True}

    def test_empty_body_is_accepted(self, client: TestClient, paneer_tikka: MenuItem) -> None:
        """Test that an empty patch reaches the service as an empty change set."""
        client.app.state.menu_service.update_menu_item = AsyncMock(return_value=paneer_tikka)

        response = client.put("/admin/menu/items/101", json={}, headers=HEADERS)

        assert response.status_code == 200
        _, patch = client.app.state.menu_service.update_menu_item.call_args.args
        assert patch.is_empty is True

    @pytest.mark.parametrize("price", [-1, 0])
    def test_invalid_price_rejected(self, client: TestClient, price: int) -> None:
        """Test that a non-positive price is a 400 and never reaches the service."""
        client.app.state.menu_service.update_menu_item = AsyncMock()

        response = client.put("/admin/menu/items/101", json={"price": price}, headers=HEADERS)

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["message"] == "Validation failed"
        assert body["data"][0]["field"] == "price"
        client.app.state.menu_service.update_menu_item.assert_not_awaited()

    @pytest.mark.parametrize("price", ["12.345", "12345678901"])
    def test_price_beyond_currency_precision_rejected(
        self, client: TestClient, price: str
    ) -> None:
        """Test that a price DynamoDB cannot store exactly is a 400, not a 500."""
        client.app.state.menu_service.update_menu_item = AsyncMock()

        response = client.put("/admin/menu/items/101", json={"price": price}, headers=HEADERS)

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["data"][0]["field"] == "price"
        client.app.state.menu_service.update_menu_item.assert_not_awaited()

    def test_null_name_rejected(self, client: TestClient) -> None:
        """Test that clearing a required field is a 400."""
        client.app.state.menu_service.update_menu_item = AsyncMock()

        response = client.put("/admin/menu/items/101", json={"name": None}, headers=HEADERS)

        assert response.status_code == 400
        assert "cannot be set to null" in response.json()["data"][0]["message"]
        client.app.state.menu_service.update_menu_item.assert_not_awaited()

    def test_non_numeric_item_id_rejected(self, client: TestClient) -> None:
        """Test that a malformed path parameter is a 400."""
        response = client.put("/admin/menu/items/abc", json={}, headers=HEADERS)

        assert response.status_code == 400
        assert response.json()["data"][0]["field"] == "path.item_id"

    def test_item_not_found(self, client: TestClient) -> None:
        """Test that updating a missing item returns 404."""
        client.app.state.menu_service.update_menu_item = AsyncMock(return_value=None)

        response = client.put("/admin/menu/items/999", json={"name": "x"}, headers=HEADERS)

        assert response.status_code == 404

    def test_unknown_category(self, client: TestClient) -> None:
        """Test that an unknown category is a 400."""
        client.app.state.menu_service.update_menu_item = AsyncMock(
            side_effect=InvalidCategoryError(42)
        )

        response = client.put("/admin/menu/items/101", json={"categoryId": 42}, headers=HEADERS)

        assert response.status_code == 400
        assert response.json() == {
            "success": False,
            "message": "Category 42 does not exist",
            "data": None,
        }

    def test_persistence_failure(self, client: TestClient) -> None:
        """Test that a failed write is a 500."""
        client.app.state.menu_service.update_menu_item = AsyncMock(
            side_effect=MenuItemPersistenceError(101)
        )

        response = client.put("/admin/menu/items/101", json={"name": "x"}, headers=HEADERS)

        assert response.status_code == 500
        assert response.json() == {
            "success": False,
            "message": "Failed to update menu item",
            "data": None,
        }


@pytest.mark.unit
class TestToggleEndpoint:
    """Test suite for the availability toggle endpoint."""

    def test_toggle(self, client: TestClient, paneer_tikka: MenuItem) -> None:
        """Test toggling an item reports its new status."""
        disabled = paneer_tikka.model_copy(update={"status": MenuItemStatus.UNAVAILABLE})
        client.app.state.menu_service.toggle_availability = AsyncMock(return_value=disabled)

        response = client.put("/admin/menu/items/101/toggle", headers=HEADERS)

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Menu item is now UNAVAILABLE"
        assert body["data"]["status"] == "UNAVAILABLE"

    def test_toggle_not_found(self, client: TestClient) -> None:
        """Test toggling a missing item returns 404."""
        client.app.state.menu_service.toggle_availability = AsyncMock(return_value=None)

        response = client.put("/admin/menu/items/999/toggle", headers=HEADERS)

        assert response.status_code == 404

    def test_toggle_persistence_failure(self, client: TestClient) -> None:
        """Test that a failed toggle write is a 500."""
        client.app.state.menu_service.toggle_availability = AsyncMock(
            side_effect=MenuItemPersistenceError(101)
        )

        response = client.put("/admin/menu/items/101/toggle", headers=HEADERS)

        assert response.status_code == 500
        assert response.json()["success"] is False


@pytest.mark.unit
class TestNotificationEndpoints:
    """Test suite for push notification endpoints."""

    def test_order_status_notification(self, client: TestClient) -> None:
        """Test pushing an order status change."""
        client.app.state.notification_service.send_order_status_update = AsyncMock(
            return_value="projects/p/messages/1"
        )

        response = client.post(
            "/admin/notifications/order-status",
            json={"deviceToken": "device-token", "orderId": 42, "status": "CANCELLED"},
            headers=HEADERS,
        )

        assert response.status_code == 200
        assert response.json()["data"] == {
            "orderId": 42,
            "notificationType": "ORDER_CANCELLED",
            "messageId": "projects/p/messages/1",
        }

    def test_order_status_unknown_status(self, client: TestClient) -> None:
        """Test that an unknown status value is a 400."""
        response = client.post(
            "/admin/notifications/order-status",
            json={"deviceToken": "device-token", "orderId": 42, "status": "LOST"},
            headers=HEADERS,
        )

        assert response.status_code == 400
        assert response.json()["data"][0]["field"] == "status"

    def test_order_status_rejected_by_fcm(self, client: TestClient) -> None:
        """Test that an FCM rejection is a 502."""
        client.app.state.notification_service.send_order_status_update = AsyncMock(
            return_value=None
        )

        response = client.post(
            "/admin/notifications/order-status",
            json={"deviceToken": "device-token", "orderId": 42, "status": "READY"},
            headers=HEADERS,
        )

        assert response.status_code == 502
        assert response.json() == {
            "success": False,
            "message": "Push notification was rejected by FCM",
            "data": None,
        }

    def test_order_assigned_notification(self, client: TestClient) -> None:
        """Test pushing a delivery assignment."""
        client.app.state.notification_service.send_order_assigned = AsyncMock(
            return_value="projects/p/messages/2"
        )

        response = client.post(
            "/admin/notifications/order-assigned",
            json={"deviceToken": "partner-token", "orderId": 9},
            headers=HEADERS,
        )

        assert response.status_code == 200
        assert response.json()["data"]["notificationType"] == "ORDER_ASSIGNED"
        client.app.state.notification_service.send_order_assigned.assert_awaited_once_with(
            device_token="partner-token", order_id=9
        )

    def test_order_assigned_empty_token(self, client: TestClient) -> None:
        """Test that an empty device token is a 400."""
        response = client.post(
            "/admin/notifications/order-assigned",
            json={"deviceToken": "", "orderId": 9},
            headers=HEADERS,
        )

        assert response.status_code == 400


@pytest.mark.unit
class TestErrorEnvelope:
    """Test suite for errors raised outside route handlers."""

    def test_unknown_route(self, client: TestClient) -> None:
        """Test that routing errors use the same envelope."""
        response = client.get("/admin/unknown", headers=HEADERS)

        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "Not Found", "data": None}

    def test_method_not_allowed(self, client: TestClient) -> None:
        """Test that an unsupported method uses the same envelope."""
        response = client.post("/health")

        assert response.status_code == 405
        assert response.json()["success"] is False
        assert response.json()["message"] == "Method Not Allowed"


@pytest.mark.unit
class TestCreateAndDeleteMenuItemEndpoints:
    """Test suite for adding and removing menu items."""

    def test_create_menu_item(self, client: TestClient, paneer_tikka: MenuItem) -> None:
        """Test that a valid body is passed to the service and echoed back."""
        client.app.state.menu_service.create_menu_item = AsyncMock(return_value=paneer_tikka)

        response = client.post(
            "/admin/menu/items",
            json={"categoryId": 7, "name": "Paneer Tikka", "price": "10.00"},
            headers=HEADERS,
        )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Menu item created successfully"
        assert body["data"]["id"] == 101
        assert body["data"]["price"] == "10.00"
        (request,) = client.app.state.menu_service.create_menu_item.call_args.args
        assert isinstance(request, MenuItemCreateRequest)
        assert request.category_id == 7

    def test_create_menu_item_missing_name(self, client: TestClient) -> None:
        """Test that a body without a name is a 400."""
        client.app.state.menu_service.create_menu_item = AsyncMock()

        response = client.post(
            "/admin/menu/items", json={"categoryId": 7, "price": "10.00"}, headers=HEADERS
        )

        assert response.status_code == 400
        assert response.json()["data"][0]["field"] == "name"
        client.app.state.menu_service.create_menu_item.assert_not_awaited()

    def test_create_menu_item_unknown_category(self, client: TestClient) -> None:
        """Test that an unknown category is a 400."""
        client.app.state.menu_service.create_menu_item = AsyncMock(
            side_effect=InvalidCategoryError(42)
        )

        response = client.post(
            "/admin/menu/items",
            json={"categoryId": 42, "name": "Paneer Tikka", "price": "10.00"},
            headers=HEADERS,
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Category 42 does not exist"

    def test_create_menu_item_persistence_failure(self, client: TestClient) -> None:
        """Test that a failed create is a 500."""
        client.app.state.menu_service.create_menu_item = AsyncMock(
            side_effect=MenuPersistenceError("Failed to reserve a menu item ID")
        )

        response = client.post(
            "/admin/menu/items",
            json={"categoryId": 7, "name": "Paneer Tikka", "price": "10.00"},
            headers=HEADERS,
        )

        assert response.status_code == 500
        assert response.json()["message"] == "Failed to create menu item"

    def test_delete_menu_item(self, client: TestClient) -> None:
        """Test deleting an existing item."""
        client.app.state.menu_service.delete_menu_item = AsyncMock(return_value=True)

        response = client.delete("/admin/menu/items/101", headers=HEADERS)

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "message": "Menu item deleted successfully",
            "data": None,
        }
        client.app.state.menu_service.delete_menu_item.assert_awaited_once_with(101)

    def test_delete_menu_item_not_found(self, client: TestClient) -> None:
        """Test deleting a missing item returns 404."""
        client.app.state.menu_service.delete_menu_item = AsyncMock(return_value=False)

        response = client.delete("/admin/menu/items/999", headers=HEADERS)

        assert response.status_code == 404
        assert response.json()["message"] == "Menu item 999 not found"

    def test_delete_menu_item_requires_api_key(self, client: TestClient) -> None:
        """Test that deletes are admin-only."""
        client.app.state.menu_service.delete_menu_item = AsyncMock()

        response = client.delete("/admin/menu/items/101")

        assert response.status_code == 401
        client.app.state.menu_service.delete_menu_item.assert_not_awaited()


@pytest.mark.unit
class TestCategoryEndpoints:
    """Test suite for category administration endpoints."""

    def test_list_categories(self, client: TestClient, starters_category: Category) -> None:
        """Test listing categories with camelCase fields."""
        client.app.state.menu_service.list_categories = AsyncMock(
            return_value=[starters_category]
        )

        response = client.get("/admin/menu/categories", headers=HEADERS)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data[0]["id"] == 7
        assert data[0]["displayOrder"] == 1
        assert data[0]["isActive"] is True

    def test_create_category(self, client: TestClient, starters_category: Category) -> None:
        """Test adding a category."""
        client.app.state.menu_service.create_category = AsyncMock(return_value=starters_category)

        response = client.post(
            "/admin/menu/categories",
            json={"name": "Starters", "displayOrder": 1},
            headers=HEADERS,
        )

        assert response.status_code == 200
        assert response.json()["message"] == "Category created successfully"
        (request,) = client.app.state.menu_service.create_category.call_args.args
        assert isinstance(request, CategoryCreateRequest)
        assert request.display_order == 1

    def test_create_category_empty_name(self, client: TestClient) -> None:
        """Test that a blank category name is a 400."""
        response = client.post("/admin/menu/categories", json={"name": ""}, headers=HEADERS)

        assert response.status_code == 400
        assert response.json()["data"][0]["field"] == "name"

    @pytest.mark.parametrize("method", ["put", "patch"])
    def test_update_category(
        self, client: TestClient, starters_category: Category, method: str
    ) -> None:
        """Test that PUT and PATCH both apply a partial category update."""
        renamed = starters_category.model_copy(update={"name": "Small Plates"})
        client.app.state.menu_service.update_category = AsyncMock(return_value=renamed)

        response = getattr(client, method)(
            "/admin/menu/categories/7", json={"name": "Small Plates"}, headers=HEADERS
        )

        assert response.status_code == 200
        assert response.json()["data"]["name"] == "Small Plates"
        category_id, patch = client.app.state.menu_service.update_category.call_args.args
        assert category_id == 7
        assert isinstance(patch, CategoryPatch)
        assert patch.changes() == {"name": "Small Plates"}

    def test_update_category_not_found(self, client: TestClient) -> None:
        """Test updating a missing category returns 404."""
        client.app.state.menu_service.update_category = AsyncMock(return_value=None)

        response = client.put("/admin/menu/categories/99", json={"name": "x"}, headers=HEADERS)

        assert response.status_code == 404
        assert response.json()["message"] == "Category 99 not found"

    def test_delete_category(self, client: TestClient) -> None:
        """Test deleting an empty category."""
        client.app.state.menu_service.delete_category = AsyncMock(return_value=True)

        response = client.delete("/admin/menu/categories/7", headers=HEADERS)

        assert response.status_code == 200
        assert response.json()["message"] == "Category deleted successfully"

    def test_delete_category_with_items(self, client: TestClient) -> None:
        """Test that deleting a category that still has items is a 409."""
        client.app.state.menu_service.delete_category = AsyncMock(
            side_effect=CategoryNotEmptyError(7, 3)
        )

        response = client.delete("/admin/menu/categories/7", headers=HEADERS)

        assert response.status_code == 409
        assert response.json() == {
            "success": False,
            "message": "Category 7 still has 3 menu item(s)",
            "data": None,
        }

    def test_delete_category_not_found(self, client: TestClient) -> None:
        """Test deleting a missing category returns 404."""
        client.app.state.menu_service.delete_category = AsyncMock(return_value=False)

        response = client.delete("/admin/menu/categories/99", headers=HEADERS)

        assert response.status_code == 404

    def test_toggle_category(self, client: TestClient, starters_category: Category) -> None:
        """Test toggling a category reports its new state."""
        hidden = starters_category.model_copy(update={"is_active": False})
        client.app.state.menu_service.toggle_category = AsyncMock(return_value=hidden)

        response = client.put("/admin/menu/categories/7/toggle", headers=HEADERS)

        assert response.status_code == 200
        assert response.json()["message"] == "Category is now inactive"
        assert response.json()["data"]["isActive"] is False

    def test_toggle_category_persistence_failure(self, client: TestClient) -> None:
        """Test that a failed toggle write is a 500."""
        client.app.state.menu_service.toggle_category = AsyncMock(
            side_effect=MenuPersistenceError("Failed to persist changes to category 7")
        )

        response = client.put("/admin/menu/categories/7/toggle", headers=HEADERS)

        assert response.status_code == 500
        assert response.json()["message"] == "Failed to update category"
