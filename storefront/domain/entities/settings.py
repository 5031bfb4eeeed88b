"""Store settings snapshot read by the cart core."""
from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Mapping

from storefront.core.constants import (
    DEFAULT_CURRENCY,
    DEFAULT_DELIVERY_CHARGE,
    DEFAULT_DISCOUNT_150_THRESHOLD,
    DEFAULT_DISCOUNT_200_THRESHOLD,
    DEFAULT_FREE_DELIVERY_THRESHOLD,
    DEFAULT_STORE_NAME,
)
from storefront.core.exceptions import ValidationException
from storefront.core.money import parse_amount

_AMOUNT_FIELDS = (
    "delivery_charge",
    "free_delivery_threshold",
    "discount_150_threshold",
    "discount_200_threshold",
)


@dataclass(frozen=True)
class StoreSettings:
    """Pricing-related store configuration.

    The threshold names refer to their historical defaults (150 and 200);
    the values themselves are editable by the store admin.
    """

    currency: str = DEFAULT_CURRENCY
    delivery_charge: float = DEFAULT_DELIVERY_CHARGE
    free_delivery_threshold: float = DEFAULT_FREE_DELIVERY_THRESHOLD
    discount_150_threshold: float = DEFAULT_DISCOUNT_150_THRESHOLD
    discount_200_threshold: float = DEFAULT_DISCOUNT_200_THRESHOLD
    store_name: str = DEFAULT_STORE_NAME
    whatsapp_number: str = ""

    def __post_init__(self) -> None:
        for name in _AMOUNT_FIELDS:
            if getattr(self, name) < 0:
                raise ValidationException(f"{name} must be >= 0")
        if self.discount_200_threshold < self.discount_150_threshold:
            raise ValidationException(
                "discount_200_threshold must be greater than or equal to discount_150_threshold"
            )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(
        cls, data: Mapping[str, Any], defaults: StoreSettings | None = None
    ) -> StoreSettings:
        """Build settings from a backend row or form payload.

        Missing or empty fields fall back to ``defaults``; numeric fields may
        arrive as strings.
        """
        base = defaults or cls()
        values: dict[str, Any] = base.to_dict()
        for name in _AMOUNT_FIELDS:
            raw = data.get(name)
            if raw is None or raw == "":
                continue
            try:
                values[name] = parse_amount(raw, name)
            except ValueError as exc:
                raise ValidationException(str(exc)) from exc
        for name in ("currency", "store_name", "whatsapp_number"):
            raw = data.get(name)
            if raw:
                values[name] = str(raw).strip()
        return cls(**values)
