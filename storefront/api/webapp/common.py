from __future__ import annotations

import logging
from typing import Any, Callable, Optional, TypeVar

import anyio
from fastapi import Header, HTTPException
from pydantic import BaseModel, ConfigDict, Field

from storefront.core.constants import CLIENT_ID_HEADER
from storefront.core.exceptions import BackendException, StorefrontException, ValidationException
from storefront.domain.entities.product import Product
from storefront.services.cart_service import CartRegistry, CartService
from storefront.services.customer_requests import CustomerRequestService
from storefront.services.notifications import Notification
from storefront.services.pricing import CartSummary, line_total
from storefront.services.settings_provider import SettingsProvider

logger = logging.getLogger(__name__)

T = TypeVar("T")

_cart_registry: CartRegistry | None = None
_settings_provider: SettingsProvider | None = None
_request_service: CustomerRequestService | None = None


# =============================================================================
# Pydantic Models
# =============================================================================


class ProductImagePayload(BaseModel):
    image_url: str
    sort_order: int = 0
    id: Optional[str] = None


class ProductPayload(BaseModel):
    """Product snapshot as sent by the UI; unknown catalog fields pass through."""

    model_config = ConfigDict(extra="allow")

    id: str = Field(..., min_length=1)
    title: str = ""
    price: float = Field(..., ge=0)
    sale_price: Optional[float] = Field(None, ge=0)
    quantity: Optional[int] = Field(None, ge=0)
    product_code: str = ""
    images: list[ProductImagePayload] = Field(default_factory=list)
    status: str = "available"

    def to_product(self) -> Product:
        return Product.from_dict(self.model_dump())


class QuantityRequest(BaseModel):
    quantity: int


class CalculateItem(BaseModel):
    product: ProductPayload
    quantity: int = Field(..., ge=1)


class CalculateRequest(BaseModel):
    items: list[CalculateItem] = Field(default_factory=list)


class CartLineResponse(BaseModel):
    product_id: str
    title: str
    product_code: str
    image_url: Optional[str] = None
    price: float
    sale_price: Optional[float] = None
    unit_price: float
    quantity: int
    available_quantity: int
    line_total: float


class TotalsResponse(BaseModel):
    subtotal: float
    discount: float
    delivery_charge: float
    total: float
    is_free_delivery: bool
    free_delivery_threshold: float
    discount_150_threshold: float
    discount_200_threshold: float
    currency: str


class DeliveryProgressResponse(BaseModel):
    percentage: float
    remaining: float
    message: str
    unlocked: bool


class DiscountProgressResponse(BaseModel):
    next_threshold: float
    next_discount: int
    remaining: float
    message: str


class NotificationResponse(BaseModel):
    message: str
    kind: str


class CartResponse(BaseModel):
    items: list[CartLineResponse]
    item_count: int
    totals: TotalsResponse
    delivery_progress: DeliveryProgressResponse
    discount_progress: DiscountProgressResponse
    notifications: list[NotificationResponse] = Field(default_factory=list)


class CheckoutResponse(BaseModel):
    message: str
    url: str


class SettingsResponse(BaseModel):
    store_name: str
    currency: str
    whatsapp_number: str
    delivery_charge: float
    free_delivery_threshold: float
    discount_150_threshold: float
    discount_200_threshold: float


# =============================================================================
# Helper Functions
# =============================================================================


def build_cart_response(
    summary: CartSummary, notifications: list[Notification] | None = None
) -> CartResponse:
    items = [
        CartLineResponse(
            product_id=line.product.id,
            title=line.product.title,
            product_code=line.product.product_code,
            image_url=line.product.main_image_url,
            price=line.product.price,
            sale_price=line.product.sale_price,
            unit_price=line.product.unit_price,
            quantity=line.quantity,
            available_quantity=line.product.available_quantity,
            line_total=line_total(line),
        )
        for line in summary.lines
    ]
    return CartResponse(
        items=items,
        item_count=summary.item_count,
        totals=TotalsResponse(**summary.totals.to_dict()),
        delivery_progress=DeliveryProgressResponse(
            percentage=summary.delivery_progress.percentage,
            remaining=summary.delivery_progress.remaining,
            message=summary.delivery_progress.message,
            unlocked=summary.delivery_progress.unlocked,
        ),
        discount_progress=DiscountProgressResponse(
            next_threshold=summary.discount_progress.next_threshold,
            next_discount=summary.discount_progress.next_discount,
            remaining=summary.discount_progress.remaining,
            message=summary.discount_progress.message,
        ),
        notifications=[
            NotificationResponse(message=item.message, kind=item.kind.value)
            for item in notifications or []
        ],
    )


def cart_snapshot(service: CartService) -> CartResponse:
    summary, notifications = service.snapshot()
    return build_cart_response(summary, notifications)


async def run_blocking(func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
    """Run a sync call (storage, backend HTTP) in a worker thread."""
    return await anyio.to_thread.run_sync(lambda: func(*args, **kwargs))


def raise_http_error(exc: StorefrontException) -> None:
    """Translate a storefront error into the matching HTTP status."""
    if isinstance(exc, ValidationException):
        raise HTTPException(status_code=400, detail=exc.message) from exc
    if isinstance(exc, BackendException):
        raise HTTPException(status_code=502, detail="Backend is unavailable") from exc
    logger.error(f"Unhandled storefront error: {exc}")
    raise HTTPException(status_code=500, detail="Internal server error") from exc


# =============================================================================
# Dependencies
# =============================================================================


def set_services(
    cart_registry: CartRegistry,
    settings_provider: SettingsProvider,
    request_service: CustomerRequestService | None = None,
) -> None:
    global _cart_registry, _settings_provider, _request_service
    _cart_registry = cart_registry
    _settings_provider = settings_provider
    _request_service = request_service


def get_cart_registry() -> CartRegistry:
    if _cart_registry is None:
        raise HTTPException(status_code=503, detail="Cart service is not configured")
    return _cart_registry


def get_settings_provider() -> SettingsProvider:
    if _settings_provider is None:
        raise HTTPException(status_code=503, detail="Settings are not configured")
    return _settings_provider


def get_request_service() -> CustomerRequestService:
    if _request_service is None:
        raise HTTPException(status_code=503, detail="Backend is not configured")
    return _request_service


def get_client_id(x_client_id: Optional[str] = Header(None, alias=CLIENT_ID_HEADER)) -> str:
    if not x_client_id:
        raise HTTPException(status_code=400, detail=f"{CLIENT_ID_HEADER} header is required")
    return x_client_id


__all__ = [
    "CalculateRequest",
    "CartResponse",
    "CheckoutResponse",
    "ProductPayload",
    "QuantityRequest",
    "SettingsResponse",
    "build_cart_response",
    "cart_snapshot",
    "get_cart_registry",
    "get_client_id",
    "get_request_service",
    "get_settings_provider",
    "logger",
    "raise_http_error",
    "run_blocking",
    "set_services",
]
