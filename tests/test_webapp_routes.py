"""Tests for the /api/v1 cart, settings and request endpoints."""
from __future__ import annotations

import asyncio
import uuid

import pytest
from fastapi import HTTPException

import storefront.api.webapp.common as common
from storefront.api.webapp.common import (
    CalculateItem,
    CalculateRequest,
    ProductPayload,
    QuantityRequest,
    get_cart_registry,
    get_client_id,
    get_request_service,
)
from storefront.api.webapp.routes_cart import (
    add_cart_item,
    calculate_cart,
    clear_cart,
    get_cart,
    get_checkout_link,
    get_product_link,
    remove_cart_item,
    update_cart_item,
)
from storefront.api.webapp.routes_requests import create_offer, create_product_notification
from storefront.api.webapp.routes_settings import get_store_settings
from storefront.domain.models.customer_requests import OfferCreate, ProductNotificationCreate
from storefront.integrations.cart_persistence import MemoryCartPersistence
from storefront.services.cart_service import CartRegistry
from storefront.services.customer_requests import CustomerRequestService


def payload(product_id: str = "p1", price: float = 10, quantity: int | None = 5, **extra) -> ProductPayload:
    return ProductPayload(
        id=product_id,
        title=f"Product {product_id}",
        price=price,
        quantity=quantity,
        product_code=f"C-{product_id}",
        **extra,
    )


@pytest.fixture()
def registry(settings_provider):
    storage: dict[str, MemoryCartPersistence] = {}
    return CartRegistry(
        lambda client_id: storage.setdefault(client_id, MemoryCartPersistence()),
        settings_provider,
    )


class TestCartRoutes:
    @pytest.mark.asyncio
    async def test_empty_cart(self, registry):
        response = await get_cart(client_id="c1", registry=registry)

        assert response.items == []
        assert response.item_count == 0
        assert response.totals.total == 25
        assert response.delivery_progress.message == "Add 70 AED more for free delivery!"

    @pytest.mark.asyncio
    async def test_add_returns_cart_and_toasts(self, registry):
        response = await add_cart_item(payload("a", price=30), client_id="c1", registry=registry)

        assert response.item_count == 1
        assert response.items[0].line_total == 30
        assert [item.message for item in response.notifications] == ["Added to cart!"]

        # Toasts are delivered once
        again = await get_cart(client_id="c1", registry=registry)
        assert again.notifications == []

    @pytest.mark.asyncio
    async def test_add_respects_stock(self, registry):
        for _ in range(3):
            response = await add_cart_item(payload("a", quantity=2), client_id="c1", registry=registry)

        assert response.items[0].quantity == 2
        assert response.notifications[0].kind == "info"

    @pytest.mark.asyncio
    async def test_concurrent_adds_respect_stock(self, registry):
        await asyncio.gather(
            *(add_cart_item(payload("a", quantity=3), client_id="c1", registry=registry) for _ in range(10))
        )

        response = await get_cart(client_id="c1", registry=registry)
        assert [(item.product_id, item.quantity) for item in response.items] == [("a", 3)]
        assert len(registry) == 1

    @pytest.mark.asyncio
    async def test_unknown_catalog_fields_are_kept(self, registry):
        response = await add_cart_item(
            payload("a", category="lamps", images=[{"image_url": "x.jpg"}]),
            client_id="c1",
            registry=registry,
        )

        line = registry.get("c1").store.get_line("a")
        assert line.product.extra == {"category": "lamps"}
        assert response.items[0].image_url == "x.jpg"

    @pytest.mark.asyncio
    async def test_update_remove_and_clear(self, registry):
        await add_cart_item(payload("a"), client_id="c1", registry=registry)
        await add_cart_item(payload("b"), client_id="c1", registry=registry)

        response = await update_cart_item("a", QuantityRequest(quantity=99), client_id="c1", registry=registry)
        assert [(item.product_id, item.quantity) for item in response.items] == [("a", 5), ("b", 1)]

        response = await remove_cart_item("a", client_id="c1", registry=registry)
        assert [item.product_id for item in response.items] == ["b"]

        response = await update_cart_item("b", QuantityRequest(quantity=0), client_id="c1", registry=registry)
        assert response.items == []

        await add_cart_item(payload("c"), client_id="c1", registry=registry)
        response = await clear_cart(client_id="c1", registry=registry)
        assert response.item_count == 0

    @pytest.mark.asyncio
    async def test_clients_have_separate_carts(self, registry):
        await add_cart_item(payload("a"), client_id="c1", registry=registry)

        response = await get_cart(client_id="c2", registry=registry)
        assert response.items == []

    @pytest.mark.asyncio
    async def test_invalid_client_id_is_bad_request(self, registry):
        with pytest.raises(HTTPException) as exc_info:
            await get_cart(client_id="bad id!", registry=registry)

        assert exc_info.value.status_code == 400

    @pytest.mark.asyncio
    async def test_checkout_link(self, registry):
        await add_cart_item(payload("a", price=50), client_id="c1", registry=registry)

        response = await get_checkout_link(phone=None, client_id="c1", registry=registry)

        assert response.message.startswith("Hi, I want to buy:\n\n1. Product a (Code: C-a)")
        assert response.url.startswith("https://wa.me/971501234567?text=")

    @pytest.mark.asyncio
    async def test_checkout_of_empty_cart_is_bad_request(self, registry):
        with pytest.raises(HTTPException) as exc_info:
            await get_checkout_link(phone=None, client_id="c1", registry=registry)

        assert exc_info.value.status_code == 400
        assert exc_info.value.detail == "Cart is empty"


class TestStatelessRoutes:
    @pytest.mark.asyncio
    async def test_calculate_clamps_and_deduplicates(self, settings_provider):
        request = CalculateRequest(
            items=[
                CalculateItem(product=payload("a", price=100, quantity=1), quantity=3),
                CalculateItem(product=payload("a", price=100, quantity=1), quantity=1),
                CalculateItem(product=payload("b", price=60, quantity=0), quantity=1),
                CalculateItem(product=payload("c", price=60), quantity=1),
            ]
        )

        response = await calculate_cart(request, settings_provider=settings_provider)

        assert [(item.product_id, item.quantity) for item in response.items] == [("a", 1), ("c", 1)]
        assert response.totals.subtotal == 160
        assert response.totals.discount == 25
        assert response.totals.total == 135

    @pytest.mark.asyncio
    async def test_product_link(self, settings_provider):
        response = await get_product_link(
            payload("a", price=20), phone="+1 555 0100", settings_provider=settings_provider
        )

        assert response.message == "Hi, I want to buy: Product a (Code: C-a) - 20 AED"
        assert response.url.startswith("https://wa.me/15550100?text=")

    @pytest.mark.asyncio
    async def test_settings(self, settings_provider):
        response = await get_store_settings(settings_provider=settings_provider)

        assert response.store_name == "Test Store"
        assert response.free_delivery_threshold == 70


class TestRequestRoutes:
    @pytest.mark.asyncio
    async def test_create_offer(self, fake_backend):
        offer = OfferCreate(
            product_id=uuid.uuid4(), name="Sara", phone="+971501234567", offer_price=99
        )

        response = await create_offer(offer, service=CustomerRequestService(fake_backend))

        assert response["data"]["status"] == "pending"

    @pytest.mark.asyncio
    async def test_backend_failure_is_bad_gateway(self, fake_backend):
        fake_backend.fail = True
        request = ProductNotificationCreate(
            product_id=uuid.uuid4(), customer_name="Omar", email="omar@example.com"
        )

        with pytest.raises(HTTPException) as exc_info:
            await create_product_notification(request, service=CustomerRequestService(fake_backend))

        assert exc_info.value.status_code == 502


class TestDependencies:
    def test_missing_client_id(self):
        with pytest.raises(HTTPException) as exc_info:
            get_client_id(None)
        assert exc_info.value.status_code == 400

    def test_unconfigured_services(self, monkeypatch):
        monkeypatch.setattr(common, "_cart_registry", None)
        monkeypatch.setattr(common, "_request_service", None)

        for dependency in (get_cart_registry, get_request_service):
            with pytest.raises(HTTPException) as exc_info:
                dependency()
            assert exc_info.value.status_code == 503
