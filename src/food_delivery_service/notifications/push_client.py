"""Push notification client bound to a registered Firebase app."""

import asyncio
import logging

from firebase_admin import App, messaging

logger = logging.getLogger(__name__)


class PushNotificationClient:
    """Thin handle around Firebase Cloud Messaging for one registered app.

    Instances are created by FirebaseAppRegistry and shared by every caller;
    the wrapped app and its credentials are never modified after creation.
    """

    def __init__(self, app: App) -> None:
        """Initialize the client.

        Args:
            app: Registered Firebase app used for every send
        """
        self.app = app

    def send(self, message: messaging.Message, dry_run: bool = False) -> str:
        """Send a message through FCM.

        Args:
            message: The message to deliver
            dry_run: Validate the message without delivering it

        Returns:
            str: Provider-assigned message ID

        Raises:
            firebase_admin.exceptions.FirebaseError: If FCM rejects the message
        """
        message_id: str = messaging.send(message, dry_run=dry_run, app=self.app)
        logger.debug(f"FCM accepted message {message_id}")
        return message_id

    async def send_async(self, message: messaging.Message, dry_run: bool = False) -> str:
        """Send a message from async code without blocking the event loop."""
        return await asyncio.to_thread(self.send, message, dry_run)
