"""Order text for WhatsApp checkout.

The composer only formats: every amount comes from the pricing module.
"""
from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from storefront.core.exceptions import ValidationException
from storefront.core.money import format_amount
from storefront.domain.cart import CartLine
from storefront.domain.entities.product import Product
from storefront.domain.entities.settings import StoreSettings
from storefront.integrations.whatsapp import build_whatsapp_link, normalize_phone
from storefront.services.pricing import calculate_totals, line_total

GREETING = "Hi, I want to buy:"


@dataclass(frozen=True)
class CheckoutLink:
    message: str
    url: str


def compose_order_message(lines: Sequence[CartLine], settings: StoreSettings) -> str:
    totals = calculate_totals(lines, settings)
    currency = settings.currency

    parts = [f"{GREETING}\n\n"]
    for index, line in enumerate(lines, start=1):
        product = line.product
        text = f"{index}. {product.title} (Code: {product.product_code})"
        if line.quantity > 1:
            text += f" x{line.quantity}"
        text += (
            f" - {format_amount(product.unit_price)} {currency} each"
            f" = {format_amount(line_total(line))} {currency}\n"
        )
        parts.append(text)

    parts.append("\n---\n")
    parts.append(f"Subtotal: {format_amount(totals.subtotal)} {currency}\n")
    if totals.discount > 0:
        parts.append(f"Discount: -{format_amount(totals.discount)} {currency}\n")
    if totals.delivery_charge > 0:
        parts.append(f"Delivery: {format_amount(totals.delivery_charge)} {currency}\n")
    else:
        parts.append("Delivery: FREE\n")
    parts.append(f"Total: {format_amount(totals.total)} {currency}\n")
    return "".join(parts)


def compose_single_product_message(product: Product, settings: StoreSettings) -> str:
    return (
        f"{GREETING} {product.title} (Code: {product.product_code})"
        f" - {format_amount(product.unit_price)} {settings.currency}"
    )


def _resolve_phone(settings: StoreSettings, phone_number: str | None) -> str:
    phone = phone_number or settings.whatsapp_number
    if not normalize_phone(phone):
        raise ValidationException("Store WhatsApp number is not configured")
    return phone


def build_checkout_link(
    lines: Sequence[CartLine], settings: StoreSettings, phone_number: str | None = None
) -> CheckoutLink:
    if not lines:
        raise ValidationException("Cart is empty")
    phone = _resolve_phone(settings, phone_number)
    message = compose_order_message(lines, settings)
    return CheckoutLink(message=message, url=build_whatsapp_link(phone, message))


def build_product_link(
    product: Product, settings: StoreSettings, phone_number: str | None = None
) -> CheckoutLink:
    phone = _resolve_phone(settings, phone_number)
    message = compose_single_product_message(product, settings)
    return CheckoutLink(message=message, url=build_whatsapp_link(phone, message))
