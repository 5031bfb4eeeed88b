from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from storefront.core.exceptions import StorefrontException
from storefront.domain.cart import CartLine
from storefront.domain.entities.product import Product
from storefront.services.cart_service import CartRegistry
from storefront.services.checkout import CheckoutLink, build_product_link
from storefront.services.pricing import build_cart_summary
from storefront.services.settings_provider import SettingsProvider

from .common import (
    CalculateRequest,
    CartResponse,
    CheckoutResponse,
    ProductPayload,
    QuantityRequest,
    build_cart_response,
    cart_snapshot,
    get_cart_registry,
    get_client_id,
    get_settings_provider,
    logger,
    raise_http_error,
    run_blocking,
)

router = APIRouter()


def _add_product(registry: CartRegistry, client_id: str, product: Product) -> CartResponse:
    service = registry.get(client_id)
    service.add_product(product)
    return cart_snapshot(service)


def _update_quantity(
    registry: CartRegistry, client_id: str, product_id: str, quantity: int
) -> CartResponse:
    service = registry.get(client_id)
    service.update_quantity(product_id, quantity)
    return cart_snapshot(service)


def _remove_product(registry: CartRegistry, client_id: str, product_id: str) -> CartResponse:
    service = registry.get(client_id)
    service.remove_product(product_id)
    return cart_snapshot(service)


def _clear(registry: CartRegistry, client_id: str) -> CartResponse:
    service = registry.get(client_id)
    service.clear()
    return cart_snapshot(service)


def _calculate(request: CalculateRequest, settings_provider: SettingsProvider) -> CartResponse:
    lines: list[CartLine] = []
    seen: set[str] = set()
    for item in request.items:
        product = item.product.to_product()
        if product.id in seen:
            continue
        seen.add(product.id)
        quantity = min(item.quantity, product.available_quantity)
        if quantity < 1:
            continue
        lines.append(CartLine(product=product, quantity=quantity))
    return build_cart_response(build_cart_summary(lines, settings_provider.get_settings()))


def _checkout_link(registry: CartRegistry, client_id: str, phone: str | None) -> CheckoutLink:
    return registry.get(client_id).checkout_link(phone)


@router.get("/cart", response_model=CartResponse)
async def get_cart(
    client_id: str = Depends(get_client_id),
    registry: CartRegistry = Depends(get_cart_registry),
):
    """Current cart with totals, progress banners and pending toasts."""
    try:
        return await run_blocking(lambda: cart_snapshot(registry.get(client_id)))
    except StorefrontException as e:
        raise_http_error(e)


@router.post("/cart/items", response_model=CartResponse)
async def add_cart_item(
    product: ProductPayload,
    client_id: str = Depends(get_client_id),
    registry: CartRegistry = Depends(get_cart_registry),
):
    """Add one unit of a product; a no-op when the available quantity is reached."""
    try:
        return await run_blocking(_add_product, registry, client_id, product.to_product())
    except StorefrontException as e:
        raise_http_error(e)


@router.patch("/cart/items/{product_id}", response_model=CartResponse)
async def update_cart_item(
    product_id: str,
    request: QuantityRequest,
    client_id: str = Depends(get_client_id),
    registry: CartRegistry = Depends(get_cart_registry),
):
    """Set line quantity, clamped to stock; zero or less removes the line."""
    try:
        return await run_blocking(_update_quantity, registry, client_id, product_id, request.quantity)
    except StorefrontException as e:
        raise_http_error(e)


@router.delete("/cart/items/{product_id}", response_model=CartResponse)
async def remove_cart_item(
    product_id: str,
    client_id: str = Depends(get_client_id),
    registry: CartRegistry = Depends(get_cart_registry),
):
    try:
        return await run_blocking(_remove_product, registry, client_id, product_id)
    except StorefrontException as e:
        raise_http_error(e)


@router.delete("/cart", response_model=CartResponse)
async def clear_cart(
    client_id: str = Depends(get_client_id),
    registry: CartRegistry = Depends(get_cart_registry),
):
    try:
        return await run_blocking(_clear, registry, client_id)
    except StorefrontException as e:
        raise_http_error(e)


@router.post("/cart/calculate", response_model=CartResponse)
async def calculate_cart(
    request: CalculateRequest,
    settings_provider: SettingsProvider = Depends(get_settings_provider),
):
    """Calculate totals for posted lines without touching any stored cart."""
    try:
        return await run_blocking(_calculate, request, settings_provider)
    except StorefrontException as e:
        raise_http_error(e)


@router.get("/cart/checkout", response_model=CheckoutResponse)
async def get_checkout_link(
    phone: str | None = Query(None, description="Override the store WhatsApp number"),
    client_id: str = Depends(get_client_id),
    registry: CartRegistry = Depends(get_cart_registry),
):
    """Order message and WhatsApp deep link for the current cart."""
    try:
        link = await run_blocking(_checkout_link, registry, client_id, phone)
        logger.info("Checkout link built for client %s", client_id)
        return CheckoutResponse(message=link.message, url=link.url)
    except StorefrontException as e:
        raise_http_error(e)


@router.post("/products/whatsapp-link", response_model=CheckoutResponse)
async def get_product_link(
    product: ProductPayload,
    phone: str | None = Query(None, description="Override the store WhatsApp number"),
    settings_provider: SettingsProvider = Depends(get_settings_provider),
):
    """Single-product "Buy on WhatsApp" link, bypassing the cart."""
    try:
        settings = await run_blocking(settings_provider.get_settings)
        link = build_product_link(product.to_product(), settings, phone)
        return CheckoutResponse(message=link.message, url=link.url)
    except StorefrontException as e:
        raise_http_error(e)
