"""Cart totals, tiered discounts and progress toward the next threshold.

Everything here is a pure function of (cart lines, store settings). Amounts
stay unrounded floats through the discount/delivery/total chain; rounding
happens only when text is produced via ``format_amount``.
"""
from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from storefront.core.constants import DEFAULT_CURRENCY, DISCOUNT_TIER_HIGH, DISCOUNT_TIER_LOW
from storefront.core.money import format_amount
from storefront.domain.cart import CartLine
from storefront.domain.entities.settings import StoreSettings


@dataclass(frozen=True)
class CartTotals:
    subtotal: float
    discount: float
    delivery_charge: float
    total: float
    is_free_delivery: bool
    free_delivery_threshold: float
    discount_150_threshold: float
    discount_200_threshold: float
    currency: str = DEFAULT_CURRENCY

    @property
    def after_discount(self) -> float:
        return self.subtotal - self.discount

    def to_dict(self) -> dict[str, Any]:
        return {
            "subtotal": self.subtotal,
            "discount": self.discount,
            "delivery_charge": self.delivery_charge,
            "total": self.total,
            "is_free_delivery": self.is_free_delivery,
            "free_delivery_threshold": self.free_delivery_threshold,
            "discount_150_threshold": self.discount_150_threshold,
            "discount_200_threshold": self.discount_200_threshold,
            "currency": self.currency,
        }


@dataclass(frozen=True)
class DeliveryProgress:
    percentage: float
    remaining: float
    message: str
    unlocked: bool


@dataclass(frozen=True)
class DiscountProgress:
    next_threshold: float
    next_discount: int
    remaining: float
    message: str


@dataclass(frozen=True)
class CartSummary:
    """Everything a cart view renders, derived in one pass."""

    lines: tuple[CartLine, ...]
    item_count: int
    totals: CartTotals
    delivery_progress: DeliveryProgress
    discount_progress: DiscountProgress


def line_total(line: CartLine) -> float:
    return line.product.unit_price * line.quantity


def calculate_subtotal(lines: Iterable[CartLine]) -> float:
    subtotal = 0.0
    for line in lines:
        subtotal += line_total(line)
    return subtotal


def discount_for_subtotal(subtotal: float, settings: StoreSettings) -> int:
    """Flat discount for the highest tier reached; tiers never stack."""
    if subtotal >= settings.discount_200_threshold:
        return DISCOUNT_TIER_HIGH
    if subtotal >= settings.discount_150_threshold:
        return DISCOUNT_TIER_LOW
    return 0


def calculate_totals(lines: Iterable[CartLine], settings: StoreSettings) -> CartTotals:
    subtotal = calculate_subtotal(lines)
    discount = discount_for_subtotal(subtotal, settings)
    after_discount = subtotal - discount

    is_free_delivery = after_discount >= settings.free_delivery_threshold
    delivery_charge = 0 if is_free_delivery else settings.delivery_charge

    return CartTotals(
        subtotal=subtotal,
        discount=discount,
        delivery_charge=delivery_charge,
        total=after_discount + delivery_charge,
        is_free_delivery=is_free_delivery,
        free_delivery_threshold=settings.free_delivery_threshold,
        discount_150_threshold=settings.discount_150_threshold,
        discount_200_threshold=settings.discount_200_threshold,
        currency=settings.currency,
    )


def get_delivery_progress(
    amount_after_discount: float, threshold: float, currency: str = DEFAULT_CURRENCY
) -> DeliveryProgress:
    if amount_after_discount >= threshold or threshold <= 0:
        return DeliveryProgress(
            percentage=100,
            remaining=0,
            message="🎉 Free delivery unlocked!",
            unlocked=True,
        )

    remaining = threshold - amount_after_discount
    percentage = amount_after_discount / threshold * 100
    return DeliveryProgress(
        percentage=min(percentage, 100),
        remaining=remaining,
        message=f"Add {format_amount(remaining)} {currency} more for free delivery!",
        unlocked=False,
    )


def get_discount_progress(
    subtotal: float,
    threshold_150: float,
    threshold_200: float,
    currency: str = DEFAULT_CURRENCY,
) -> DiscountProgress:
    if subtotal >= threshold_200:
        return DiscountProgress(
            next_threshold=threshold_200,
            next_discount=DISCOUNT_TIER_HIGH,
            remaining=0,
            message=f"🎉 Maximum discount applied ({DISCOUNT_TIER_HIGH} {currency} off)!",
        )

    if subtotal >= threshold_150:
        remaining = threshold_200 - subtotal
        return DiscountProgress(
            next_threshold=threshold_200,
            next_discount=DISCOUNT_TIER_HIGH,
            remaining=remaining,
            message=(
                f"Add {format_amount(remaining)} {currency} more "
                f"for {DISCOUNT_TIER_HIGH} {currency} off!"
            ),
        )

    remaining = threshold_150 - subtotal
    return DiscountProgress(
        next_threshold=threshold_150,
        next_discount=DISCOUNT_TIER_LOW,
        remaining=remaining,
        message=(
            f"Add {format_amount(remaining)} {currency} more for {DISCOUNT_TIER_LOW} {currency} off!"
        ),
    )


def build_cart_summary(lines: Sequence[CartLine], settings: StoreSettings) -> CartSummary:
    totals = calculate_totals(lines, settings)
    return CartSummary(
        lines=tuple(lines),
        item_count=sum(line.quantity for line in lines),
        totals=totals,
        delivery_progress=get_delivery_progress(
            totals.after_discount, settings.free_delivery_threshold, settings.currency
        ),
        discount_progress=get_discount_progress(
            totals.subtotal,
            settings.discount_150_threshold,
            settings.discount_200_threshold,
            settings.currency,
        ),
    )
