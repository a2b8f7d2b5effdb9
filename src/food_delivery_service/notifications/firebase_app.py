"""Process-wide Firebase app registration.

The Firebase Admin SDK keeps a global registry of apps and refuses to
initialize the same app name twice. FirebaseAppRegistry wraps that registry
with init-once semantics: the first caller reads the service account file and
registers the app, every later caller (from any thread) gets the same
PushNotificationClient.
"""

import logging
import threading
from pathlib import Path

import firebase_admin
from firebase_admin import App, credentials

from food_delivery_service.notifications.push_client import PushNotificationClient
from food_delivery_service.observability.metrics import record_firebase_initialization

logger = logging.getLogger(__name__)


class FirebaseConfigurationError(ValueError):
    """Raised when the Firebase service account is missing or malformed."""


def load_credentials(service_account_path: str | None) -> credentials.Certificate:
    """Load service account credentials from a JSON file.

    Args:
        service_account_path: Path to the service account JSON file

    Returns:
        Certificate credential for initializing the Firebase app

    Raises:
        FirebaseConfigurationError: If the path is unset or the file content is invalid
        OSError: If the file cannot be opened
    """
    if not service_account_path or not service_account_path.strip():
        raise FirebaseConfigurationError("Firebase service account path is not configured")

    path = Path(service_account_path.strip()).expanduser()

    # Certificate calls .get on the parsed JSON, so a non-object top level is an AttributeError
    try:
        return credentials.Certificate(str(path))
    except (ValueError, AttributeError) as e:
        raise FirebaseConfigurationError(
            f"Invalid Firebase service account file {path}: {e}"
        ) from e


class FirebaseAppRegistry:
    """Init-once holder for the Firebase app and its push client.

    The check-and-register sequence runs under a lock shared by all registry
    instances, so concurrent first calls register exactly one app even when
    several registries point at the same app name.
    """

    _registration_lock = threading.Lock()

    def __init__(self, service_account_path: str | None, app_name: str | None = None) -> None:
        """Initialize the registry. Nothing is read or registered until first use.

        Args:
            service_account_path: Path to the service account JSON file
            app_name: Optional Firebase app name; the SDK default app when None
        """
        self.service_account_path = service_account_path
        self.app_name = app_name
        self._client: PushNotificationClient | None = None

    def get_client(self) -> PushNotificationClient:
        """Return the shared push client, registering the Firebase app on first call.

        Returns:
            PushNotificationClient bound to the single registered app

        Raises:
            FirebaseConfigurationError: If credentials are unset or malformed
            OSError: If the credentials file cannot be read
        """
        client = self._client
        if client is not None:
            return client

        with self._registration_lock:
            if self._client is None:
                self._client = PushNotificationClient(self._get_or_register_app())
            return self._client

    @property
    def is_initialized(self) -> bool:
        return self._client is not None

    def reset(self) -> None:
        """Delete the registered app and forget the cached client."""
        with self._registration_lock:
            if self._client is None:
                return
            firebase_admin.delete_app(self._client.app)
            self._client = None
            logger.info("Firebase app deleted")

    def _get_or_register_app(self) -> App:
        existing = self._find_registered_app()
        if existing is not None:
            logger.info(f"Reusing already registered Firebase app '{existing.name}'")
            return existing

        certificate = load_credentials(self.service_account_path)

        if self.app_name:
            app = firebase_admin.initialize_app(certificate, name=self.app_name)
        else:
            app = firebase_admin.initialize_app(certificate)

        record_firebase_initialization()
        logger.info(f"Registered Firebase app '{app.name}'")
        return app

    def _find_registered_app(self) -> App | None:
        # get_app raises ValueError when no app with that name is registered
        try:
            if self.app_name:
                return firebase_admin.get_app(self.app_name)
            return firebase_admin.get_app()
        except ValueError:
            return None
