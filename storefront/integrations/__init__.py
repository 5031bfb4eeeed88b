"""Integrations package: storage backends and external services."""

from storefront.integrations.cart_persistence import (
    CartPersistence,
    JsonFileCartPersistence,
    MemoryCartPersistence,
    MemoryCartPool,
)
from storefront.integrations.redis_cart import RedisCartPersistence
from storefront.integrations.supabase_client import SupabaseClient
from storefront.integrations.whatsapp import build_whatsapp_link

__all__ = [
    "CartPersistence",
    "JsonFileCartPersistence",
    "MemoryCartPersistence",
    "MemoryCartPool",
    "RedisCartPersistence",
    "SupabaseClient",
    "build_whatsapp_link",
]
