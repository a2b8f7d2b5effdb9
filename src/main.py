"""Main application entry point for the food delivery service.

This module provides the FastAPI application factory and configuration
for running the service locally or in production.
"""

import logging
import os
from typing import Any

import boto3
from fastapi import FastAPI

from food_delivery_service.auth.api_key_validator import parse_api_keys
from food_delivery_service.handlers.api_handler import create_app
from food_delivery_service.notifications import FirebaseAppRegistry
from food_delivery_service.observability import configure_logging, setup_observability
from food_delivery_service.repositories.menu_repositories import (
    CategoryRepository,
    IdSequenceRepository,
    MenuItemRepository,
)
from food_delivery_service.services.menu_service import MenuService
from food_delivery_service.services.notification_service import NotificationService

logger = logging.getLogger(__name__)


def get_dynamodb_resource() -> Any:
    """Create DynamoDB resource with appropriate configuration.

    Returns:
        Boto3 DynamoDB resource configured for environment
    """
    endpoint_url = os.getenv("DYNAMODB_ENDPOINT")
    region = os.getenv("AWS_REGION", "us-east-1")

    if endpoint_url:
        # Local DynamoDB
        logger.info(f"Using local DynamoDB at {endpoint_url}")
        return boto3.resource(
            "dynamodb",
            endpoint_url=endpoint_url,
            region_name=region,
            aws_access_key_id=os.getenv("AWS_ACCESS_KEY_ID"),
            aws_secret_access_key=os.getenv("AWS_SECRET_ACCESS_KEY"),
        )

    logger.info(f"Using AWS DynamoDB in region {region}")
    # Default credential chain (IAM role, env vars, etc.)
    return boto3.resource("dynamodb", region_name=region)


def create_firebase_registry() -> FirebaseAppRegistry:
    """Create the Firebase registry and register the app eagerly.

    Push notifications are a required dependency, so a missing or malformed
    service account aborts startup here rather than on the first send.

    Returns:
        FirebaseAppRegistry with the app already registered

    Raises:
        FirebaseConfigurationError: If the service account path is unset or malformed
        OSError: If the service account file cannot be read
    """
    registry = FirebaseAppRegistry(
        service_account_path=os.getenv("FIREBASE_SERVICE_ACCOUNT_PATH"),
        app_name=os.getenv("FIREBASE_APP_NAME") or None,
    )
    registry.get_client()
    return registry


def create_application() -> FastAPI:
    """Create and configure the FastAPI application with all dependencies.

    Returns:
        Configured FastAPI application instance
    """
    configure_logging(os.getenv("LOG_LEVEL", "INFO"))

    logger.info("Initializing food delivery service...")

    api_keys = parse_api_keys(os.getenv("ADMIN_API_KEY"))
    if not api_keys:
        raise ValueError("ADMIN_API_KEY must be set in environment")

    dynamodb_resource = get_dynamodb_resource()

    items_table = os.getenv("DYNAMODB_MENU_ITEMS_TABLE", "menu-items")
    categories_table = os.getenv("DYNAMODB_CATEGORIES_TABLE", "menu-categories")
    sequences_table = os.getenv("DYNAMODB_ID_SEQUENCES_TABLE", "menu-id-sequences")

    menu_service = MenuService(
        item_repository=MenuItemRepository(
            dynamodb_resource=dynamodb_resource, table_name=items_table
        ),
        category_repository=CategoryRepository(
            dynamodb_resource=dynamodb_resource, table_name=categories_table
        ),
        id_sequence=IdSequenceRepository(
            dynamodb_resource=dynamodb_resource, table_name=sequences_table
        ),
    )

    logger.info(
        f"Repositories configured - items: {items_table}, "
        f"categories: {categories_table}, sequences: {sequences_table}"
    )

    notification_service = NotificationService(firebase_registry=create_firebase_registry())

    logger.info("Services initialized")

    app = create_app(
        menu_service=menu_service,
        notification_service=notification_service,
        api_keys=api_keys,
    )

    setup_observability(app)

    logger.info("Food delivery service initialized successfully")

    return app


# Skip wiring during test collection; tests build their own apps
if os.getenv("ENVIRONMENT") != "test":  # noqa: SIM108
    app = create_application()
else:
    app = FastAPI()


if __name__ == "__main__":
    import uvicorn

    port = int(os.getenv("PORT", "8080"))
    host = os.getenv("HOST", "0.0.0.0")

    logger.info(f"Starting development server on {host}:{port}")

    uvicorn.run(
        "main:app",
        host=host,
        port=port,
        reload=True,
        log_level=os.getenv("LOG_LEVEL", "info").lower(),
    )
