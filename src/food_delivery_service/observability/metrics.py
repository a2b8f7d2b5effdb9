"""Custom metrics for the food delivery service."""

from opentelemetry import metrics

meter = metrics.get_meter("food-delivery-svc")

menu_item_update_counter = meter.create_counter(
    name="menu_item_update_total",
    description="Menu item update requests by outcome",
    unit="1",
)

push_sent_counter = meter.create_counter(
    name="push_notification_sent_total",
    description="Push notifications accepted by FCM by notification type",
    unit="1",
)

push_failure_counter = meter.create_counter(
    name="push_notification_failure_total",
    description="Push notifications rejected by FCM by notification type",
    unit="1",
)

firebase_initialization_counter = meter.create_counter(
    name="firebase_app_initialization_total",
    description="Number of Firebase app registrations performed by this process",
    unit="1",
)

menu_catalog_change_counter = meter.create_counter(
    name="menu_catalog_change_total",
    description="Menu items and categories created, updated or deleted",
    unit="1",
)


def record_menu_item_update(outcome: str) -> None:
    """Record the outcome of a menu item update.

    Args:
        outcome: One of "applied", "unchanged", "not_found", "invalid_category", "failed"
    """
    menu_item_update_counter.add(1, {"outcome": outcome})


def record_push_sent(notification_type: str) -> None:
    push_sent_counter.add(1, {"notification_type": notification_type})


def record_push_failure(notification_type: str, error_code: str) -> None:
    """Record a push notification FCM refused.

    Args:
        notification_type: Value of the message's ``type`` data key
        error_code: Firebase error code (e.g. "NOT_FOUND", "UNAVAILABLE")
    """
    push_failure_counter.add(1, {"notification_type": notification_type, "error_code": error_code})


def record_firebase_initialization() -> None:
    firebase_initialization_counter.add(1)


def record_menu_catalog_change(entity: str, action: str) -> None:
    """Record a completed create, update or delete of a menu record.

    Args:
        entity: "menu_item" or "category"
        action: "created", "updated" or "deleted"
    """
    menu_catalog_change_counter.add(1, {"entity": entity, "action": action})
