"""Cart line and cart change event types."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping

from storefront.domain.entities.product import Product


@dataclass(frozen=True)
class CartLine:
    """One product snapshot with its quantity in the cart."""

    product: Product
    quantity: int

    def __post_init__(self) -> None:
        if self.quantity < 1:
            raise ValueError("cart line quantity must be >= 1")

    @property
    def product_id(self) -> str:
        return self.product.id

    def with_quantity(self, quantity: int) -> CartLine:
        return CartLine(product=self.product, quantity=quantity)

    def to_dict(self) -> dict[str, Any]:
        return {"product": self.product.to_dict(), "quantity": int(self.quantity)}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> CartLine:
        return cls(product=Product.from_dict(data["product"]), quantity=int(data["quantity"]))


class CartAction(str, Enum):
    """Kinds of cart mutation."""

    ADD = "add"
    UPDATE = "update"
    REMOVE = "remove"
    CLEAR = "clear"


@dataclass(frozen=True)
class CartChange:
    """Emitted by the cart store after a mutation changed its state."""

    action: CartAction
    product_id: str | None
    item_count: int
    lines: tuple[CartLine, ...]
