"""
Module Orders - Gestion des commandes et de leur suivi
"""

from eesha.orders.domain.entities import (
    ContactDetails, Order, OrderPlacement, OrderStatus, OrderTrackingEvent, OrderWithTracking,
    PaymentStatus, ShippingAddress, StatusTransition
)

__all__ = [
    "ContactDetails", "Order", "OrderPlacement", "OrderStatus", "OrderTrackingEvent", "OrderWithTracking",
    "PaymentStatus", "ShippingAddress", "StatusTransition"
]
