"""
FastAPI server for the storefront web UI.

Serves the cart, pricing, checkout link, settings and customer request
endpoints. Products, settings and requests live in the hosted backend;
carts live in Redis, a JSON file or memory depending on configuration.
"""
from __future__ import annotations

import logging
import urllib.parse
from collections.abc import Callable
from contextlib import asynccontextmanager
from typing import Any

import redis
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from storefront import __version__
from storefront.api.rate_limit import create_limiter
from storefront.api.webapp import router as webapp_router
from storefront.api.webapp import set_services
from storefront.core.config import Settings, load_settings
from storefront.core.logging_config import setup_logging
from storefront.integrations.cart_persistence import (
    CartPersistence,
    JsonFileCartPersistence,
    MemoryCartPool,
)
from storefront.integrations.redis_cart import RedisCartPersistence
from storefront.integrations.supabase_client import SupabaseClient
from storefront.services.cart_service import CartRegistry
from storefront.services.customer_requests import CustomerRequestService
from storefront.services.settings_provider import (
    BackendSettingsProvider,
    SettingsProvider,
    StaticSettingsProvider,
)

logger = logging.getLogger(__name__)


def _origin_from_url(value: str | None) -> str | None:
    if not value:
        return None
    parsed = urllib.parse.urlsplit(value.strip())
    if not parsed.scheme or not parsed.netloc:
        return None
    return f"{parsed.scheme}://{parsed.netloc}"


def build_persistence_factory(config: Settings) -> Callable[[str], CartPersistence]:
    """Pick the cart backend: Redis, then a JSON file, then process memory."""
    base_key = config.cart_storage_key

    if config.redis_url:
        try:
            client: Any = redis.from_url(
                config.redis_url,
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5,
            )
            client.ping()
        except Exception as exc:
            logger.warning("Redis unavailable for carts, trying other storage: %s", exc)
        else:
            logger.info("Carts stored in Redis")
            return lambda client_id: RedisCartPersistence(
                key=f"{base_key}:{client_id}", client=client
            )

    if config.cart_storage_path:
        path = config.cart_storage_path
        logger.info("Carts stored in %s", path)
        return lambda client_id: JsonFileCartPersistence(path, key=f"{base_key}:{client_id}")

    logger.warning("No durable cart storage configured; carts live in memory only")
    return MemoryCartPool()


def create_api_app(
    config: Settings | None = None,
    *,
    cart_registry: CartRegistry | None = None,
    settings_provider: SettingsProvider | None = None,
    request_service: CustomerRequestService | None = None,
) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        config: Loaded settings; read from the environment when omitted
        cart_registry: Prebuilt cart sessions (tests)
        settings_provider: Store settings source (tests)
        request_service: Customer request service (tests)
    """
    config = config or load_settings()
    backend: SupabaseClient | None = None

    if config.backend_enabled and (settings_provider is None or request_service is None):
        backend = SupabaseClient(config.supabase_url or "", config.supabase_key or "")

    if settings_provider is None:
        if backend is not None:
            settings_provider = BackendSettingsProvider(
                backend, fallback=config.default_store, ttl_seconds=config.settings_cache_ttl
            )
        else:
            settings_provider = StaticSettingsProvider(config.default_store)

    if request_service is None and backend is not None:
        request_service = CustomerRequestService(backend)

    if cart_registry is None:
        factory = build_persistence_factory(config)
        # Memory carts have no other home, so they go with the session
        release = factory.release if isinstance(factory, MemoryCartPool) else None
        cart_registry = CartRegistry(factory, settings_provider, on_expire=release)

    set_services(cart_registry, settings_provider, request_service)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("🚀 Storefront API starting...")
        yield
        if backend is not None:
            backend.close()
        logger.info("👋 Storefront API shutting down...")

    app = FastAPI(
        title="Storefront API",
        description="Cart, pricing and checkout API for the storefront",
        version=__version__,
        lifespan=lifespan,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
    )

    limiter = create_limiter()
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    allowed_origins: list[str] = []
    origin = _origin_from_url(config.frontend_url)
    if origin:
        allowed_origins.append(origin)
    if config.is_dev:
        allowed_origins.extend(["http://localhost:3000", "http://127.0.0.1:3000"])

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "X-Client-Id"],
    )

    app.include_router(webapp_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok", "version": __version__}

    return app


def run() -> None:
    """Run the API with uvicorn using environment configuration."""
    config = load_settings()
    setup_logging(config.log_level)
    app = create_api_app(config)
    uvicorn.run(app, host="0.0.0.0", port=config.port, log_level=config.log_level.lower())
