"""Client cart state: quantity-capped lines persisted on every mutation."""
from __future__ import annotations

import logging
from collections.abc import Callable

from storefront.domain.cart import CartAction, CartChange, CartLine
from storefront.domain.entities.product import Product
from storefront.integrations.cart_persistence import CartPersistence, MemoryCartPersistence

logger = logging.getLogger(__name__)

CartListener = Callable[[CartChange], None]


class CartStore:
    """Ordered cart lines keyed by product id.

    Misuse is never an error: adding past the available quantity, removing a
    missing line or updating to a non-positive quantity are defined no-ops
    (or a removal), so the cart always stays displayable. Mutators return
    True only when the cart actually changed.
    """

    def __init__(self, persistence: CartPersistence | None = None) -> None:
        self._persistence = persistence or MemoryCartPersistence()
        self._lines: dict[str, CartLine] = {}
        self._listeners: list[CartListener] = []
        self._restore()

    def _restore(self) -> None:
        try:
            loaded = self._persistence.load()
        except Exception as exc:
            logger.warning("Cart load failed, starting with an empty cart: %s", exc)
            loaded = []
        for line in loaded:
            if line.product_id in self._lines:
                logger.warning("Duplicate cart line for product %s ignored", line.product_id)
                continue
            available = line.product.available_quantity
            if available < 1:
                logger.warning("Out-of-stock cart line for product %s dropped", line.product_id)
                continue
            if line.quantity > available:
                logger.warning(
                    "Cart line for product %s clamped from %s to %s",
                    line.product_id,
                    line.quantity,
                    available,
                )
                line = line.with_quantity(available)
            self._lines[line.product_id] = line

    # ------------------------------------------------------------------ reads

    @property
    def lines(self) -> list[CartLine]:
        return list(self._lines.values())

    def get_line(self, product_id: str) -> CartLine | None:
        return self._lines.get(product_id)

    def is_in_cart(self, product_id: str) -> bool:
        return product_id in self._lines

    def get_total(self) -> float:
        return sum(line.product.unit_price * line.quantity for line in self._lines.values())

    def get_item_count(self) -> int:
        """Units in the cart, not lines: one line of 3 counts as 3."""
        return sum(line.quantity for line in self._lines.values())

    def __len__(self) -> int:
        return len(self._lines)

    # ---------------------------------------------------------- subscriptions

    def subscribe(self, listener: CartListener) -> Callable[[], None]:
        """Register ``listener`` for change events; returns the unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _commit(self, action: CartAction, product_id: str | None) -> None:
        lines = self.lines
        try:
            self._persistence.save(lines)
        except Exception as exc:
            logger.error("Cart save failed after %s: %s", action.value, exc)

        event = CartChange(
            action=action,
            product_id=product_id,
            item_count=self.get_item_count(),
            lines=tuple(lines),
        )
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception as e:
                logger.error(f"Cart listener error on {action.value}: {e}")

    # -------------------------------------------------------------- mutations

    def add_item(self, product: Product) -> bool:
        existing = self._lines.get(product.id)
        if existing is None:
            if product.available_quantity < 1:
                logger.debug("Product %s is out of stock, not added", product.id)
                return False
            self._lines[product.id] = CartLine(product=product, quantity=1)
        else:
            # Cap against the snapshot captured when the line was created
            if existing.quantity + 1 > existing.product.available_quantity:
                logger.debug("Product %s already at available quantity", product.id)
                return False
            self._lines[product.id] = existing.with_quantity(existing.quantity + 1)

        self._commit(CartAction.ADD, product.id)
        return True

    def remove_item(self, product_id: str) -> bool:
        if self._lines.pop(product_id, None) is None:
            return False
        self._commit(CartAction.REMOVE, product_id)
        return True

    def update_quantity(self, product_id: str, quantity: int) -> bool:
        if quantity <= 0:
            return self.remove_item(product_id)

        line = self._lines.get(product_id)
        if line is None:
            return False

        final_quantity = min(int(quantity), line.product.available_quantity)
        if final_quantity < 1 or final_quantity == line.quantity:
            return False
        self._lines[product_id] = line.with_quantity(final_quantity)
        self._commit(CartAction.UPDATE, product_id)
        return True

    def clear_cart(self) -> None:
        if not self._lines:
            return
        self._lines.clear()
        self._commit(CartAction.CLEAR, None)
