"""Firebase Cloud Messaging integration."""

from food_delivery_service.notifications.firebase_app import (
    FirebaseAppRegistry,
    FirebaseConfigurationError,
    load_credentials,
)
from food_delivery_service.notifications.push_client import PushNotificationClient

__all__ = [
    "FirebaseAppRegistry",
    "FirebaseConfigurationError",
    "PushNotificationClient",
    "load_credentials",
]
