"""
Module Cart - Panier de la session
"""

from eesha.cart.models import LineItem, CartSummary
from eesha.cart.service import CartStore

__all__ = ["LineItem", "CartSummary", "CartStore"]
