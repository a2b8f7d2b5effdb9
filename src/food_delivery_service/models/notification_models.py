"""Order notification models."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class OrderStatus(str, Enum):
    """Lifecycle states of a customer order."""

    PENDING_PAYMENT = "PENDING_PAYMENT"
    PLACED = "PLACED"
    ACCEPTED = "ACCEPTED"
    PREPARING = "PREPARING"
    READY = "READY"
    OUT_FOR_DELIVERY = "OUT_FOR_DELIVERY"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"


class NotificationType(str, Enum):
    """Value of the ``type`` key in the push message data payload.

    The delivery app switches on this key to refresh or clear its orders.
    """

    ORDER_STATUS_UPDATED = "ORDER_STATUS_UPDATED"
    ORDER_ASSIGNED = "ORDER_ASSIGNED"
    ORDER_CANCELLED = "ORDER_CANCELLED"


class OrderStatusNotificationRequest(BaseModel):
    """Request body for pushing an order status change to a device."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    device_token: str = Field(
        ..., description="FCM registration token of the target device", min_length=1
    )
    order_id: int = Field(..., description="Order whose status changed")
    status: OrderStatus = Field(..., description="New order status")


class NotificationResult(BaseModel):
    """Outcome of a push notification send."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    order_id: int
    notification_type: NotificationType
    message_id: str | None = None
