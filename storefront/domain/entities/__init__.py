"""Domain entities package."""

from .product import Product, ProductImage
from .settings import StoreSettings

__all__ = ["Product", "ProductImage", "StoreSettings"]
