"""Shared pytest fixtures and configuration for all tests."""

import json
import os
from datetime import UTC, datetime
from decimal import Decimal
from pathlib import Path

# main.py builds the real application at import time unless running under test
os.environ.setdefault("ENVIRONMENT", "test")

import pytest  # noqa: E402

from food_delivery_service.models.menu_models import Category, MenuItem  # noqa: E402


@pytest.fixture
def mock_item_id() -> int:
    """Fixture providing a standard test menu item ID."""
    return 101


@pytest.fixture
def paneer_tikka() -> MenuItem:
    """Fixture providing a stored menu item."""
    return MenuItem(
        id=101,
        category_id=7,
        name="Paneer Tikka",
        description="Cottage cheese cubes grilled in a tandoor",
        price=Decimal("10.00"),
        image_url="https://cdn.example.com/menu/paneer-tikka.jpg",
        preparation_time_minutes=20,
        is_vegetarian=False,
        display_order=3,
    )


@pytest.fixture
def starters_category() -> Category:
    """Fixture providing the category the sample item belongs to."""
    return Category(id=7, name="Starters", display_order=1)


@pytest.fixture
def paneer_tikka_dynamodb_item() -> dict:
    """Fixture providing the raw DynamoDB representation of the sample item."""
    return {
        "item_id": Decimal("101"),
        "category_id": Decimal("7"),
        "name": "Paneer Tikka",
        "description": "Cottage cheese cubes grilled in a tandoor",
        "price": Decimal("10.00"),
        "image_url": "https://cdn.example.com/menu/paneer-tikka.jpg",
        "preparation_time_minutes": Decimal("20"),
        "is_vegetarian": False,
        "display_order": Decimal("3"),
        "status": "AVAILABLE",
        "updated_at": datetime(2024, 1, 15, 10, 30, tzinfo=UTC).isoformat(),
    }


@pytest.fixture
def malformed_service_account_file(tmp_path: Path) -> Path:
    """Fixture writing a well-formed JSON service account whose private key is not a key."""
    path = tmp_path / "firebase-service-account.json"
    path.write_text(
        json.dumps(
            {
                "type": "service_account",
                "project_id": "food-delivery-test",
                "private_key_id": "key-id",
                "private_key": "not-a-real-key",
                "client_email": "firebase-adminsdk@food-delivery-test.iam.gserviceaccount.com",
                "client_id": "1234567890",
                "token_uri": "https://oauth2.googleapis.com/token",
            }
        )
    )
    return path
