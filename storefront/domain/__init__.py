"""Domain package."""

from .cart import CartAction, CartChange, CartLine
from .entities import Product, ProductImage, StoreSettings

__all__ = [
    "CartAction",
    "CartChange",
    "CartLine",
    "Product",
    "ProductImage",
    "StoreSettings",
]
