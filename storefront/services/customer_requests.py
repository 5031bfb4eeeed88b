"""Price offers and back-in-stock sign-ups submitted by customers."""
from __future__ import annotations

import logging
from typing import Any, Protocol

from storefront.domain.models.customer_requests import OfferCreate, ProductNotificationCreate

logger = logging.getLogger(__name__)

OFFERS_TABLE = "offers"
PRODUCT_NOTIFICATIONS_TABLE = "product_notifications"


class RequestBackend(Protocol):
    def insert(self, table: str, row: dict[str, Any]) -> dict[str, Any]: ...


class CustomerRequestService:
    """Stores validated customer requests; backend errors propagate as ``BackendException``."""

    def __init__(self, backend: RequestBackend) -> None:
        self._backend = backend

    def submit_offer(self, offer: OfferCreate) -> dict[str, Any]:
        row = self._backend.insert(OFFERS_TABLE, offer.to_row())
        logger.info("Offer stored for product %s", offer.product_id)
        return row

    def request_back_in_stock(self, request: ProductNotificationCreate) -> dict[str, Any]:
        row = self._backend.insert(PRODUCT_NOTIFICATIONS_TABLE, request.to_row())
        logger.info("Back-in-stock request stored for product %s", request.product_id)
        return row
