"""Pydantic models validated at the API boundary."""

from .customer_requests import OfferCreate, ProductNotificationCreate

__all__ = ["OfferCreate", "ProductNotificationCreate"]
