"""
Module Payments - Intentions de paiement
"""

from eesha.payments.domain.gateway import AbstractPaymentGateway, PaymentIntent
from eesha.payments.application.services import PaymentService

__all__ = ["AbstractPaymentGateway", "PaymentIntent", "PaymentService"]
