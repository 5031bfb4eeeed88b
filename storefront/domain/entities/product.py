"""Product snapshot entity stored inside cart lines."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from storefront.core.constants import DEFAULT_AVAILABLE_QUANTITY

PRODUCT_STATUS_AVAILABLE = "available"

_KNOWN_FIELDS = {
    "id",
    "title",
    "price",
    "sale_price",
    "quantity",
    "product_code",
    "images",
    "status",
}


@dataclass(frozen=True)
class ProductImage:
    """Single product image reference."""

    image_url: str
    sort_order: int = 0
    id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"image_url": self.image_url, "sort_order": self.sort_order}
        if self.id is not None:
            data["id"] = self.id
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ProductImage:
        return cls(
            image_url=str(data.get("image_url", "")),
            sort_order=int(data.get("sort_order") or 0),
            id=str(data["id"]) if data.get("id") is not None else None,
        )


@dataclass(frozen=True)
class Product:
    """Immutable copy of catalog data captured when a product enters the cart.

    Only ``id``, ``price``, ``sale_price`` and ``quantity`` drive cart math.
    Everything else is display data; unknown catalog fields are kept in
    ``extra`` so they survive a persistence round-trip.
    """

    id: str
    title: str
    price: float
    sale_price: float | None = None
    quantity: int | None = None
    product_code: str = ""
    images: tuple[ProductImage, ...] = ()
    status: str = PRODUCT_STATUS_AVAILABLE
    extra: Mapping[str, Any] = field(default_factory=dict, compare=False)

    def __post_init__(self) -> None:
        if self.price < 0:
            raise ValueError("price must be >= 0")
        if self.sale_price is not None and self.sale_price < 0:
            raise ValueError("sale_price must be >= 0")
        if self.quantity is not None and self.quantity < 0:
            raise ValueError("quantity must be >= 0")

    @property
    def unit_price(self) -> float:
        """Price charged per unit: the sale price when one is set."""
        return self.sale_price if self.sale_price is not None else self.price

    @property
    def available_quantity(self) -> int:
        return self.quantity if self.quantity is not None else DEFAULT_AVAILABLE_QUANTITY

    @property
    def is_available(self) -> bool:
        return self.status == PRODUCT_STATUS_AVAILABLE

    @property
    def main_image_url(self) -> str | None:
        return self.images[0].image_url if self.images else None

    def to_dict(self) -> dict[str, Any]:
        data = dict(self.extra)
        data.update(
            {
                "id": self.id,
                "title": self.title,
                "price": self.price,
                "sale_price": self.sale_price,
                "quantity": self.quantity,
                "product_code": self.product_code,
                "images": [image.to_dict() for image in self.images],
                "status": self.status,
            }
        )
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Product:
        sale_price = data.get("sale_price")
        quantity = data.get("quantity")
        images = sorted(
            (ProductImage.from_dict(raw) for raw in data.get("images") or []),
            key=lambda image: image.sort_order,
        )
        return cls(
            id=str(data["id"]),
            title=str(data.get("title", "")),
            price=float(data.get("price") or 0),
            sale_price=float(sale_price) if sale_price is not None else None,
            quantity=int(quantity) if quantity is not None else None,
            product_code=str(data.get("product_code") or ""),
            images=tuple(images),
            status=str(data.get("status") or PRODUCT_STATUS_AVAILABLE),
            extra={key: value for key, value in data.items() if key not in _KNOWN_FIELDS},
        )
