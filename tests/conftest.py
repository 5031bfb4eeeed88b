"""Shared pytest fixtures for cart, pricing and API tests."""
from __future__ import annotations

import pytest

from storefront.domain.entities.settings import StoreSettings
from storefront.integrations.cart_persistence import MemoryCartPersistence
from storefront.services.cart_store import CartStore
from storefront.services.settings_provider import StaticSettingsProvider

from .factories import FakeBackend, FakeRedisClient, RecordingSink


@pytest.fixture()
def store_settings() -> StoreSettings:
    return StoreSettings(
        currency="AED",
        delivery_charge=25,
        free_delivery_threshold=70,
        discount_150_threshold=150,
        discount_200_threshold=200,
        store_name="Test Store",
        whatsapp_number="+971 50 123 4567",
    )


@pytest.fixture()
def settings_provider(store_settings: StoreSettings) -> StaticSettingsProvider:
    return StaticSettingsProvider(store_settings)


@pytest.fixture()
def persistence() -> MemoryCartPersistence:
    return MemoryCartPersistence()


@pytest.fixture()
def store(persistence: MemoryCartPersistence) -> CartStore:
    return CartStore(persistence)


@pytest.fixture()
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture()
def fake_redis() -> FakeRedisClient:
    return FakeRedisClient()


@pytest.fixture()
def fake_backend() -> FakeBackend:
    return FakeBackend()
