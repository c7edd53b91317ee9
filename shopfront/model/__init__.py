# ------ shopfront/model/__init__.py ------

from .session import StoreSession
from .cart import Cart, CartItem

__all__ = [
    "StoreSession",
    "Cart",
    "CartItem",
]
