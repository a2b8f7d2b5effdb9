"""FastAPI application for admin API endpoints."""

import logging
from typing import Any, Generic, TypeVar

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from food_delivery_service.auth.api_dependencies import require_api_key
from food_delivery_service.auth.api_key_validator import APIKeyValidator
from food_delivery_service.models.menu_models import Category, MenuItem
from food_delivery_service.models.menu_requests import (
    CategoryCreateRequest,
    CategoryPatch,
    MenuItemCreateRequest,
    MenuItemPatch,
)
from food_delivery_service.models.notification_models import (
    NotificationResult,
    NotificationType,
    OrderStatusNotificationRequest,
)
from food_delivery_service.services.menu_service import (
    CategoryNotEmptyError,
    InvalidCategoryError,
    MenuItemPersistenceError,
    MenuPersistenceError,
    MenuService,
)
from food_delivery_service.services.notification_service import (
    NotificationService,
    notification_type_for_status,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str


class ApiResponse(BaseModel, Generic[T]):
    """Envelope used by every admin endpoint."""

    success: bool
    message: str | None = None
    data: T | None = None


class OrderAssignedNotificationRequest(BaseModel):
    """Request body for telling a delivery partner about a new assignment."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    device_token: str = Field(..., min_length=1)
    order_id: int


def _validation_errors(exc: RequestValidationError) -> list[dict[str, Any]]:
    errors = []
    for error in exc.errors():
        location = [str(part) for part in error.get("loc", ()) if part != "body"]
        errors.append({"field": ".".join(location), "message": error.get("msg", "")})
    return errors


def create_app(
    menu_service: MenuService,
    notification_service: NotificationService,
    api_keys: list[str],
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        menu_service: Service for menu item administration
        notification_service: Service for order push notifications
        api_keys: List of valid API keys for admin endpoints

    Returns:
        Configured FastAPI application
    """
    app = FastAPI(
        title="Food Delivery Admin API",
        description="Admin API for menu management and order notifications",
        version="1.0.0",
    )

    app.state.menu_service = menu_service
    app.state.notification_service = notification_service
    app.state.api_key_validator = APIKeyValidator(api_keys=api_keys)

    admin_key = require_api_key(app.state.api_key_validator)

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Reject invalid request bodies with 400 before they reach a service."""
        errors = _validation_errors(exc)
        logger.info(f"Rejected {request.method} {request.url.path}: {errors}")
        return JSONResponse(
            status_code=400,
            content=ApiResponse[Any](
                success=False, message="Validation failed", data=errors
            ).model_dump(mode="json"),
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        """Render every HTTP error in the same envelope as successful responses."""
        return JSONResponse(
            status_code=exc.status_code,
            content=ApiResponse[Any](success=False, message=str(exc.detail)).model_dump(
                mode="json"
            ),
            headers=exc.headers,
        )

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check() -> HealthResponse:
        return HealthResponse(status="healthy")

    @app.get(
        "/admin/menu/items",
        response_model=ApiResponse[list[MenuItem]],
        tags=["Menu"],
    )
    async def list_menu_items(
        category_id: int | None = Query(None, alias="categoryId"),
        _api_key: str = Depends(admin_key),
    ) -> ApiResponse[list[MenuItem]]:
        """List menu items, optionally filtered by category."""
        items = await app.state.menu_service.list_menu_items(category_id=category_id)
        return ApiResponse[list[MenuItem]](success=True, data=items)

    @app.get(
        "/admin/menu/items/{item_id}",
        response_model=ApiResponse[MenuItem],
        tags=["Menu"],
    )
    async def get_menu_item(
        item_id: int,
        _api_key: str = Depends(admin_key),
    ) -> ApiResponse[MenuItem]:
        """Get a single menu item.

        Raises:
            HTTPException: 404 if the item does not exist
        """
        item = await app.state.menu_service.get_menu_item(item_id)
        if item is None:
            raise HTTPException(status_code=404, detail=f"Menu item {item_id} not found")
        return ApiResponse[MenuItem](success=True, data=item)

    @app.api_route(
        "/admin/menu/items/{item_id}",
        methods=["PUT", "PATCH"],
        response_model=ApiResponse[MenuItem],
        tags=["Menu"],
    )
    async def update_menu_item(
        item_id: int,
        patch: MenuItemPatch,
        _api_key: str = Depends(admin_key),
    ) -> ApiResponse[MenuItem]:
        """Apply a partial update to a menu item.

        Only keys present in the body are changed.

        Raises:
            HTTPException: 404 if the item does not exist, 400 for an unknown
                category, 500 if the write fails
        """
        try:
            item = await app.state.menu_service.update_menu_item(item_id, patch)
        except InvalidCategoryError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e
        except MenuItemPersistenceError as e:
            logger.error(str(e))
            raise HTTPException(status_code=500, detail="Failed to update menu item") from e

        if item is None:
            raise HTTPException(status_code=404, detail=f"Menu item {item_id} not found")

        return ApiResponse[MenuItem](
            success=True, message="Menu item updated successfully", data=item
        )

    @app.put(
        "/admin/menu/items/{item_id}/toggle",
        response_model=ApiResponse[MenuItem],
        tags=["Menu"],
    )
    async def toggle_menu_item(
        item_id: int,
        _api_key: str = Depends(admin_key),
    ) -> ApiResponse[MenuItem]:
        """Enable or disable a menu item."""
        try:
            item = await app.state.menu_service.toggle_availability(item_id)
        except MenuItemPersistenceError as e:
            logger.error(str(e))
            raise HTTPException(status_code=500, detail="Failed to update menu item") from e

        if item is None:
            raise HTTPException(status_code=404, detail=f"Menu item {item_id} not found")

        return ApiResponse[MenuItem](
            success=True, message=f"Menu item is now {item.status.value}", data=item
        )

    @app.post(
        "/admin/menu/items",
        response_model=ApiResponse[MenuItem],
        tags=["Menu"],
    )
    async def create_menu_item(
        request: MenuItemCreateRequest,
        _api_key: str = Depends(admin_key),
    ) -> ApiResponse[MenuItem]:
        """Add a menu item.

        Raises:
            HTTPException: 400 for an unknown category, 500 if the write fails
        """
        try:
            item = await app.state.menu_service.create_menu_item(request)
        except InvalidCategoryError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e
        except MenuPersistenceError as e:
            logger.error(str(e))
            raise HTTPException(status_code=500, detail="Failed to create menu item") from e

        return ApiResponse[MenuItem](
            success=True, message="Menu item created successfully", data=item
        )

    @app.delete(
        "/admin/menu/items/{item_id}",
        response_model=ApiResponse[None],
        tags=["Menu"],
    )
    async def delete_menu_item(
        item_id: int,
        _api_key: str = Depends(admin_key),
    ) -> ApiResponse[None]:
        try:
            deleted = await app.state.menu_service.delete_menu_item(item_id)
        except MenuPersistenceError as e:
            logger.error(str(e))
            raise HTTPException(status_code=500, detail="Failed to delete menu item") from e

        if not deleted:
            raise HTTPException(status_code=404, detail=f"Menu item {item_id} not found")

        return ApiResponse[None](success=True, message="Menu item deleted successfully")

    @app.get(
        "/admin/menu/categories",
        response_model=ApiResponse[list[Category]],
        tags=["Categories"],
    )
    async def list_categories(
        _api_key: str = Depends(admin_key),
    ) -> ApiResponse[list[Category]]:
        categories = await app.state.menu_service.list_categories()
        return ApiResponse[list[Category]](success=True, data=categories)

    @app.post(
        "/admin/menu/categories",
        response_model=ApiResponse[Category],
        tags=["Categories"],
    )
    async def create_category(
        request: CategoryCreateRequest,
        _api_key: str = Depends(admin_key),
    ) -> ApiResponse[Category]:
        """Add a category.

        Raises:
            HTTPException: 500 if the write fails
        """
        try:
            category = await app.state.menu_service.create_category(request)
        except MenuPersistenceError as e:
            logger.error(str(e))
            raise HTTPException(status_code=500, detail="Failed to create category") from e

        return ApiResponse[Category](
            success=True, message="Category created successfully", data=category
        )

    @app.api_route(
        "/admin/menu/categories/{category_id}",
        methods=["PUT", "PATCH"],
        response_model=ApiResponse[Category],
        tags=["Categories"],
    )
    async def update_category(
        category_id: int,
        patch: CategoryPatch,
        _api_key: str = Depends(admin_key),
    ) -> ApiResponse[Category]:
        """Apply a partial update to a category.

        Raises:
            HTTPException: 404 if the category does not exist, 500 if the write fails
        """
        try:
            category = await app.state.menu_service.update_category(category_id, patch)
        except MenuPersistenceError as e:
            logger.error(str(e))
            raise HTTPException(status_code=500, detail="Failed to update category") from e

        if category is None:
            raise HTTPException(status_code=404, detail=f"Category {category_id} not found")

        return ApiResponse[Category](
            success=True, message="Category updated successfully", data=category
        )

    @app.delete(
        "/admin/menu/categories/{category_id}",
        response_model=ApiResponse[None],
        tags=["Categories"],
    )
    async def delete_category(
        category_id: int,
        _api_key: str = Depends(admin_key),
    ) -> ApiResponse[None]:
        """Delete a category that no longer holds any menu items.

        Raises:
            HTTPException: 404 if the category does not exist, 409 if it still
                has items, 500 if the delete fails
        """
        try:
            deleted = await app.state.menu_service.delete_category(category_id)
        except CategoryNotEmptyError as e:
            raise HTTPException(status_code=409, detail=str(e)) from e
        except MenuPersistenceError as e:
            logger.error(str(e))
            raise HTTPException(status_code=500, detail="Failed to delete category") from e

        if not deleted:
            raise HTTPException(status_code=404, detail=f"Category {category_id} not found")

        return ApiResponse[None](success=True, message="Category deleted successfully")

    @app.put(
        "/admin/menu/categories/{category_id}/toggle",
        response_model=ApiResponse[Category],
        tags=["Categories"],
    )
    async def toggle_category(
        category_id: int,
        _api_key: str = Depends(admin_key),
    ) -> ApiResponse[Category]:
        """Show or hide a category."""
        try:
            category = await app.state.menu_service.toggle_category(category_id)
        except MenuPersistenceError as e:
            logger.error(str(e))
            raise HTTPException(status_code=500, detail="Failed to update category") from e

        if category is None:
            raise HTTPException(status_code=404, detail=f"Category {category_id} not found")

        state = "active" if category.is_active else "inactive"
        return ApiResponse[Category](
            success=True, message=f"Category is now {state}", data=category
        )

    @app.post(
        "/admin/notifications/order-status",
        response_model=ApiResponse[NotificationResult],
        tags=["Notifications"],
    )
    async def notify_order_status(
        request: OrderStatusNotificationRequest,
        _api_key: str = Depends(admin_key),
    ) -> ApiResponse[NotificationResult]:
        """Push an order status change to a customer or delivery partner device.

        Raises:
            HTTPException: 502 if FCM rejects the message
        """
        message_id = await app.state.notification_service.send_order_status_update(
            device_token=request.device_token,
            order_id=request.order_id,
            status=request.status,
        )
        if message_id is None:
            raise HTTPException(status_code=502, detail="Push notification was rejected by FCM")

        return ApiResponse[NotificationResult](
            success=True,
            data=NotificationResult(
                order_id=request.order_id,
                notification_type=notification_type_for_status(request.status),
                message_id=message_id,
            ),
        )

    @app.post(
        "/admin/notifications/order-assigned",
        response_model=ApiResponse[NotificationResult],
        tags=["Notifications"],
    )
    async def notify_order_assigned(
        request: OrderAssignedNotificationRequest,
        _api_key: str = Depends(admin_key),
    ) -> ApiResponse[NotificationResult]:
        """Tell a delivery partner that an order was assigned to them.

        Raises:
            HTTPException: 502 if FCM rejects the message
        """
        message_id = await app.state.notification_service.send_order_assigned(
            device_token=request.device_token,
            order_id=request.order_id,
        )
        if message_id is None:
            raise HTTPException(status_code=502, detail="Push notification was rejected by FCM")

        return ApiResponse[NotificationResult](
            success=True,
            data=NotificationResult(
                order_id=request.order_id,
                notification_type=NotificationType.ORDER_ASSIGNED,
                message_id=message_id,
            ),
        )

    return app
