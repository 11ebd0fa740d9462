import logging
from decimal import Decimal
from typing import Dict, Optional

from eesha.cart.service import CartStore
from eesha.core.exceptions import EmptyCartError, PaymentError, ValidationError
from eesha.core.money import MoneyInput, round_money
from eesha.core.results import Result
from eesha.payments.domain.gateway import AbstractPaymentGateway
from eesha.pricing.calculator import calculate_pricing, get_default_policy
from eesha.pricing.models import PricingPolicy

logger = logging.getLogger(__name__)


class PaymentService:
    """Service applicatif pour la préparation des paiements."""

    def __init__(self, gateway: AbstractPaymentGateway, policy: Optional[PricingPolicy] = None):
        self.gateway = gateway
        self.policy = policy or get_default_policy()

    async def create_payment_intent(self, amount: MoneyInput, currency: Optional[str] = None,
                                    metadata: Optional[Dict[str, str]] = None) -> Result:
        try:
            value = round_money(amount)
        except (TypeError, ValueError) as e:
            return Result.failure(ValidationError(f"Montant de paiement invalide: {amount!r} ({e})"))
        if value <= Decimal("0"):
            return Result.failure(ValidationError(f"Montant de paiement non positif: {value}"))

        try:
            intent = await self.gateway.create_payment_intent(value, currency or self.policy.currency, metadata)
        except PaymentError as e:
            logger.error(f"[PaymentService] Intention de paiement non créée: {e.message}")
            return Result.failure(e)
        return Result.success(intent)

    async def create_intent_for_cart(self, cart: CartStore, metadata: Optional[Dict[str, str]] = None) -> Result:
        """Recalcule le total du panier et demande une intention de paiement pour ce montant."""
        if cart.is_empty:
            return Result.failure(EmptyCartError("Paiement demandé pour un panier vide."))
        pricing = calculate_pricing(cart.items, self.policy)
        intent_metadata = {"item_count": str(cart.summary.item_count)}
        intent_metadata.update(metadata or {})
        logger.info(f"[PaymentService] Paiement panier: {pricing.total} {pricing.currency} ({len(cart)} ligne(s))")
        return await self.create_payment_intent(pricing.total, pricing.currency, intent_metadata)
