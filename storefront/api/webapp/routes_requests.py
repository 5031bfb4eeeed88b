from __future__ import annotations

from fastapi import APIRouter, Depends

from storefront.core.exceptions import StorefrontException
from storefront.domain.models.customer_requests import OfferCreate, ProductNotificationCreate
from storefront.services.customer_requests import CustomerRequestService

from .common import get_request_service, raise_http_error, run_blocking

router = APIRouter()


@router.post("/offers", status_code=201)
async def create_offer(
    offer: OfferCreate,
    service: CustomerRequestService = Depends(get_request_service),
):
    """Submit a price offer for a product; stored as pending."""
    try:
        return {"data": await run_blocking(service.submit_offer, offer)}
    except StorefrontException as e:
        raise_http_error(e)


@router.post("/product-notifications", status_code=201)
async def create_product_notification(
    request: ProductNotificationCreate,
    service: CustomerRequestService = Depends(get_request_service),
):
    """Ask to be notified when a reserved or sold product is available again."""
    try:
        return {"data": await run_blocking(service.request_back_in_stock, request)}
    except StorefrontException as e:
        raise_http_error(e)
