"""Storefront cart engine: cart store, pricing, threshold notifications and checkout."""

__version__ = "1.0.0"
