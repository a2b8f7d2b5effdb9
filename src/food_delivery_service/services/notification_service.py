"""Order notification service for pushing order events to devices."""

import logging

from firebase_admin import messaging
from firebase_admin.exceptions import FirebaseError

from food_delivery_service.models.notification_models import NotificationType, OrderStatus
from food_delivery_service.notifications.firebase_app import FirebaseAppRegistry
from food_delivery_service.observability import traced
from food_delivery_service.observability.metrics import record_push_failure, record_push_sent

logger = logging.getLogger(__name__)

ORDER_STATUS_TEXT: dict[OrderStatus, tuple[str, str]] = {
    OrderStatus.PENDING_PAYMENT: (
        "Payment pending",
        "Complete payment to place order #{order_id}.",
    ),
    OrderStatus.PLACED: ("Order placed", "Your order #{order_id} has been placed."),
    OrderStatus.ACCEPTED: ("Order accepted", "The restaurant has accepted order #{order_id}."),
    OrderStatus.PREPARING: ("Preparing your food", "Order #{order_id} is being prepared."),
    OrderStatus.READY: ("Order ready", "Order #{order_id} is ready for pickup."),
    OrderStatus.OUT_FOR_DELIVERY: ("Out for delivery", "Order #{order_id} is on its way."),
    OrderStatus.DELIVERED: (
        "Order delivered",
        "Order #{order_id} has been delivered. Enjoy your meal!",
    ),
    OrderStatus.CANCELLED: ("Order cancelled", "Order #{order_id} has been cancelled."),
}


def notification_type_for_status(status: OrderStatus) -> NotificationType:
    if status == OrderStatus.CANCELLED:
        return NotificationType.ORDER_CANCELLED
    return NotificationType.ORDER_STATUS_UPDATED


def build_order_message(
    device_token: str,
    order_id: int,
    notification_type: NotificationType,
    title: str,
    body: str,
    extra_data: dict[str, str] | None = None,
) -> messaging.Message:
    """Build an FCM message for an order event.

    FCM data payloads only carry strings, so the order ID is stringified.

    Args:
        device_token: FCM registration token of the target device
        order_id: Order the event refers to
        notification_type: Value for the ``type`` data key
        title: Notification title
        body: Notification body
        extra_data: Additional string data entries

    Returns:
        messaging.Message ready to send
    """
    data = {"type": notification_type.value, "orderId": str(order_id)}
    if extra_data:
        data.update(extra_data)

    return messaging.Message(
        token=device_token,
        notification=messaging.Notification(title=title, body=body),
        data=data,
        android=messaging.AndroidConfig(priority="high"),
    )


class NotificationService:
    """Service for sending order-related push notifications.

    The push client is obtained from the registry on every send; the registry
    registers the Firebase app on first use and returns the cached client
    afterwards.
    """

    def __init__(self, firebase_registry: FirebaseAppRegistry) -> None:
        """Initialize the NotificationService.

        Args:
            firebase_registry: Registry providing the shared push client
        """
        self.firebase_registry = firebase_registry

    async def send_order_status_update(
        self, device_token: str, order_id: int, status: OrderStatus
    ) -> str | None:
        """Notify a device that an order changed status.

        Args:
            device_token: FCM registration token of the target device
            order_id: The order that changed
            status: The new order status

        Returns:
            FCM message ID, or None if FCM rejected the message
        """
        title, body_template = ORDER_STATUS_TEXT[status]
        message = build_order_message(
            device_token=device_token,
            order_id=order_id,
            notification_type=notification_type_for_status(status),
            title=title,
            body=body_template.format(order_id=order_id),
            extra_data={"status": status.value},
        )
        return await self._send(message, notification_type_for_status(status), order_id)

    async def send_order_assigned(self, device_token: str, order_id: int) -> str | None:
        """Notify a delivery partner that an order was assigned to them.

        Returns:
            FCM message ID, or None if FCM rejected the message
        """
        message = build_order_message(
            device_token=device_token,
            order_id=order_id,
            notification_type=NotificationType.ORDER_ASSIGNED,
            title="New delivery assigned",
            body=f"Order #{order_id} has been assigned to you.",
        )
        return await self._send(message, NotificationType.ORDER_ASSIGNED, order_id)

    @traced("send_push_notification")
    async def _send(
        self, message: messaging.Message, notification_type: NotificationType, order_id: int
    ) -> str | None:
        client = self.firebase_registry.get_client()

        try:
            message_id = await client.send_async(message)
        except FirebaseError as e:
            logger.error(
                f"FCM rejected {notification_type.value} for order {order_id}: {e.code} {e}"
            )
            record_push_failure(notification_type.value, str(e.code))
            return None

        logger.info(f"Sent {notification_type.value} for order {order_id}, message {message_id}")
        record_push_sent(notification_type.value)
        return message_id
