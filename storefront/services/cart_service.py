"""Cart sessions: a store, its threshold notifier and a notification queue."""
from __future__ import annotations

import logging
import re
import threading
import time
from collections.abc import Callable

from storefront.core.constants import SECONDS_PER_DAY
from storefront.core.exceptions import ValidationException
from storefront.domain.entities.product import Product
from storefront.integrations.cart_persistence import CartPersistence
from storefront.services.cart_store import CartStore
from storefront.services.checkout import CheckoutLink, build_checkout_link
from storefront.services.notifications import (
    Notification,
    NotificationKind,
    QueueNotificationSink,
    safe_notify,
)
from storefront.services.pricing import CartSummary, build_cart_summary
from storefront.services.settings_provider import SettingsProvider
from storefront.services.threshold_notifier import ThresholdNotifier

logger = logging.getLogger(__name__)

ADDED_TO_CART_MESSAGE = "Added to cart!"
MAX_QUANTITY_MESSAGE = "Maximum available quantity is already in your cart"
NOT_AVAILABLE_MESSAGE = "This product is not available right now"
OUT_OF_STOCK_MESSAGE = "This product is out of stock"

_CLIENT_ID_RE = re.compile(r"^[A-Za-z0-9_-]{1,64}$")


class CartService:
    """One mounted cart: mutations go through here so the UI gets its toasts.

    Calls for one client may arrive on several worker threads; ``lock``
    serialises them so the quantity cap and toasts see a consistent cart.
    """

    def __init__(
        self,
        store: CartStore,
        settings_provider: SettingsProvider,
        sink: QueueNotificationSink | None = None,
    ) -> None:
        self.store = store
        self._settings_provider = settings_provider
        self.sink = sink if sink is not None else QueueNotificationSink()
        self.notifier = ThresholdNotifier(settings_provider, self.sink)
        self._detach = self.notifier.attach(store)
        self.lock = threading.RLock()

    def add_product(self, product: Product) -> bool:
        with self.lock:
            if not product.is_available:
                safe_notify(self.sink, NOT_AVAILABLE_MESSAGE, NotificationKind.ERROR)
                return False
            if not self.store.is_in_cart(product.id) and product.available_quantity < 1:
                safe_notify(self.sink, OUT_OF_STOCK_MESSAGE, NotificationKind.ERROR)
                return False
            added = self.store.add_item(product)
            if added:
                safe_notify(self.sink, ADDED_TO_CART_MESSAGE, NotificationKind.SUCCESS)
            else:
                safe_notify(self.sink, MAX_QUANTITY_MESSAGE, NotificationKind.INFO)
            return added

    def update_quantity(self, product_id: str, quantity: int) -> bool:
        with self.lock:
            return self.store.update_quantity(product_id, quantity)

    def remove_product(self, product_id: str) -> bool:
        with self.lock:
            return self.store.remove_item(product_id)

    def clear(self) -> None:
        with self.lock:
            self.store.clear_cart()

    def summary(self) -> CartSummary:
        with self.lock:
            return build_cart_summary(self.store.lines, self._settings_provider.get_settings())

    def snapshot(self) -> tuple[CartSummary, list[Notification]]:
        """Summary and pending toasts taken together."""
        with self.lock:
            return self.summary(), self.drain_notifications()

    def checkout_link(self, phone_number: str | None = None) -> CheckoutLink:
        with self.lock:
            lines = self.store.lines
        return build_checkout_link(lines, self._settings_provider.get_settings(), phone_number)

    def drain_notifications(self) -> list[Notification]:
        with self.lock:
            return self.sink.drain()

    def close(self) -> None:
        self._detach()


class CartRegistry:
    """Keeps one ``CartService`` per client id for the HTTP API.

    Services idle for longer than ``idle_seconds`` are dropped; their carts
    stay in persistence and are restored on the next request. ``on_expire``
    lets process-local storage free the client's cart as well.
    """

    def __init__(
        self,
        persistence_factory: Callable[[str], CartPersistence],
        settings_provider: SettingsProvider,
        idle_seconds: int = SECONDS_PER_DAY,
        clock: Callable[[], float] = time.monotonic,
        on_expire: Callable[[str], None] | None = None,
    ) -> None:
        self._persistence_factory = persistence_factory
        self._settings_provider = settings_provider
        self._idle_seconds = idle_seconds
        self._clock = clock
        self._on_expire = on_expire
        self._services: dict[str, CartService] = {}
        self._last_access: dict[str, float] = {}
        self._lock = threading.Lock()

    @staticmethod
    def validate_client_id(client_id: str | None) -> str:
        if not client_id or not _CLIENT_ID_RE.match(client_id):
            raise ValidationException("A valid client id is required")
        return client_id

    def _cleanup_expired(self, now: float) -> None:
        expired = [
            client_id
            for client_id, last_access in self._last_access.items()
            if now - last_access > self._idle_seconds
        ]
        for client_id in expired:
            service = self._services.pop(client_id, None)
            self._last_access.pop(client_id, None)
            if service is not None:
                service.close()
            if self._on_expire is not None:
                self._on_expire(client_id)
        if expired:
            logger.debug("Dropped %s idle cart sessions", len(expired))

    def get(self, client_id: str | None) -> CartService:
        client_id = self.validate_client_id(client_id)
        with self._lock:
            now = self._clock()
            self._cleanup_expired(now)
            service = self._services.get(client_id)
            if service is None:
                store = CartStore(self._persistence_factory(client_id))
                service = CartService(store, self._settings_provider)
                self._services[client_id] = service
            self._last_access[client_id] = now
            return service

    def __len__(self) -> int:
        return len(self._services)
