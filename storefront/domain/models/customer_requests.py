"""
Pydantic models for customer-submitted requests.

Customers can make a price offer on a product or ask to be told when a
reserved/sold product is back in stock. Both are validated here and then
stored as-is by the backend.
"""
from __future__ import annotations

from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator

OFFER_STATUS_PENDING = "pending"


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


class OfferCreate(BaseModel):
    """Price offer submitted from a product page."""

    product_id: UUID
    name: str = Field(..., min_length=2, max_length=120)
    phone: str = Field(..., min_length=10, max_length=32)
    offer_price: float = Field(..., gt=0)
    notes: Optional[str] = Field(None, max_length=1000)

    @field_validator("name", "phone", mode="before")
    @classmethod
    def strip_text(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v

    @field_validator("notes", mode="before")
    @classmethod
    def empty_notes(cls, v: Any) -> Any:
        return _blank_to_none(v)

    def to_row(self) -> dict[str, Any]:
        return {
            "product_id": str(self.product_id),
            "name": self.name,
            "phone": self.phone,
            "offer_price": self.offer_price,
            "notes": self.notes,
            "status": OFFER_STATUS_PENDING,
        }


class ProductNotificationCreate(BaseModel):
    """Back-in-stock sign-up for a reserved or sold product."""

    product_id: UUID
    customer_name: str = Field(..., min_length=2, max_length=120)
    phone: Optional[str] = Field(None, min_length=10, max_length=32)
    email: Optional[EmailStr] = None

    @field_validator("customer_name", mode="before")
    @classmethod
    def strip_name(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v

    @field_validator("phone", "email", mode="before")
    @classmethod
    def empty_contact(cls, v: Any) -> Any:
        return _blank_to_none(v)

    @model_validator(mode="after")
    def require_contact(self):
        """A sign-up without any way to reach the customer is useless."""
        if not self.phone and not self.email:
            raise ValueError("Either phone or email is required")
        return self

    def to_row(self) -> dict[str, Any]:
        return {
            "product_id": str(self.product_id),
            "customer_name": self.customer_name,
            "phone": self.phone,
            "email": self.email,
            "notified": False,
        }
