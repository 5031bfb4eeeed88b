"""Business services orchestrating domain logic."""

from .cart_service import CartRegistry, CartService
from .cart_store import CartStore
from .checkout import (
    build_checkout_link,
    build_product_link,
    compose_order_message,
    compose_single_product_message,
)
from .notifications import NotificationKind, QueueNotificationSink
from .pricing import calculate_totals, get_delivery_progress, get_discount_progress
from .threshold_notifier import ThresholdNotifier

__all__ = [
    "CartRegistry",
    "CartService",
    "CartStore",
    "NotificationKind",
    "QueueNotificationSink",
    "ThresholdNotifier",
    "build_checkout_link",
    "build_product_link",
    "calculate_totals",
    "compose_order_message",
    "compose_single_product_message",
    "get_delivery_progress",
    "get_discount_progress",
]
