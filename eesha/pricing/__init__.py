"""
Module Pricing - Calcul TVA / livraison / total
"""

from eesha.pricing.models import PricingBreakdown, PricingPolicy
from eesha.pricing.calculator import (
    calculate_order_total, calculate_pricing, calculate_shipping,
    calculate_subtotal, calculate_vat, get_default_policy
)

__all__ = [
    "PricingBreakdown", "PricingPolicy",
    "calculate_order_total", "calculate_pricing", "calculate_shipping",
    "calculate_subtotal", "calculate_vat", "get_default_policy"
]
