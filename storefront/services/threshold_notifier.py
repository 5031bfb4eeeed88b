"""One-shot notifications when the cart crosses a pricing threshold."""
from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from storefront.core.constants import DISCOUNT_TIER_HIGH, DISCOUNT_TIER_LOW
from storefront.domain.cart import CartChange, CartLine
from storefront.services.cart_store import CartStore
from storefront.services.notifications import (
    LoggingNotificationSink,
    NotificationKind,
    NotificationSink,
    safe_notify,
)
from storefront.services.pricing import calculate_totals
from storefront.services.settings_provider import SettingsProvider

logger = logging.getLogger(__name__)

FREE_DELIVERY_MESSAGE = "🎉 Free delivery unlocked!"


def discount_applied_message(amount: int, currency: str) -> str:
    return f"🎉 {amount} {currency} discount applied!"


@dataclass
class NotifierState:
    was_free_delivery: bool = False
    previous_discount: float = 0
    has_shown_free_delivery: bool = False
    has_shown_25: bool = False
    has_shown_50: bool = False
    previous_item_count: int = 0
    is_initial_mount: bool = True


class ThresholdNotifier:
    """Watches cart changes and notifies once per threshold crossing.

    One instance per cart surface. The first evaluation only records the
    current state, so a cart restored from storage that already qualifies
    does not announce anything. Dropping below a threshold re-arms it.
    """

    def __init__(
        self, settings_provider: SettingsProvider, sink: NotificationSink | None = None
    ) -> None:
        self._settings_provider = settings_provider
        self._sink = sink if sink is not None else LoggingNotificationSink()
        self.state = NotifierState()

    def attach(self, store: CartStore) -> Callable[[], None]:
        """Snapshot ``store`` and follow its changes; returns the detach callable."""
        self.evaluate(store.lines)
        return store.subscribe(self.on_cart_change)

    def on_cart_change(self, event: CartChange) -> None:
        self.evaluate(event.lines)

    def reset(self) -> None:
        self.state = NotifierState(is_initial_mount=False)

    def evaluate(self, lines: Sequence[CartLine]) -> None:
        settings = self._settings_provider.get_settings()
        totals = calculate_totals(lines, settings)
        item_count = sum(line.quantity for line in lines)
        state = self.state

        if state.is_initial_mount:
            self.state = NotifierState(
                was_free_delivery=totals.is_free_delivery,
                previous_discount=totals.discount,
                previous_item_count=item_count,
                is_initial_mount=False,
            )
            return

        if item_count == 0:
            self.reset()
            return

        state.previous_item_count = item_count

        if totals.is_free_delivery and not state.was_free_delivery and not state.has_shown_free_delivery:
            self._notify(FREE_DELIVERY_MESSAGE)
            state.has_shown_free_delivery = True
            state.was_free_delivery = True
        elif not totals.is_free_delivery and state.was_free_delivery:
            state.was_free_delivery = False
            state.has_shown_free_delivery = False
        elif totals.is_free_delivery:
            state.was_free_delivery = True

        discount = totals.discount
        if (
            discount == DISCOUNT_TIER_HIGH
            and state.previous_discount < DISCOUNT_TIER_HIGH
            and not state.has_shown_50
        ):
            self._notify(discount_applied_message(DISCOUNT_TIER_HIGH, settings.currency))
            state.has_shown_50 = True
        elif (
            discount == DISCOUNT_TIER_LOW
            and state.previous_discount < DISCOUNT_TIER_LOW
            and not state.has_shown_25
        ):
            self._notify(discount_applied_message(DISCOUNT_TIER_LOW, settings.currency))
            state.has_shown_25 = True
        elif discount < state.previous_discount:
            if discount < DISCOUNT_TIER_HIGH:
                state.has_shown_50 = False
            if discount < DISCOUNT_TIER_LOW:
                state.has_shown_25 = False
        state.previous_discount = discount

    def _notify(self, message: str) -> None:
        logger.debug("Threshold crossed: %s", message)
        safe_notify(self._sink, message, NotificationKind.SUCCESS)
