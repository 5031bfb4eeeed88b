from __future__ import annotations

from fastapi import APIRouter

from . import routes_cart, routes_requests, routes_settings
from .common import set_services

router = APIRouter(prefix="/api/v1", tags=["storefront"])

router.include_router(routes_cart.router)
router.include_router(routes_settings.router)
router.include_router(routes_requests.router)

__all__ = ["router", "set_services"]
