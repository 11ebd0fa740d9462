"""
Calcul des prix d'une commande.

Fonctions pures: aucune dépendance au panier ni au stockage. La validation des
quantités et des prix est faite en amont (panier). Seul un montant impossible à
arrondir au centime (non fini, hors précision) lève ValueError.
"""
from decimal import Decimal
from typing import Iterable, Optional, Protocol

from eesha.core.money import ZERO, MoneyInput, round_money, to_decimal
from eesha.pricing.models import PricingBreakdown, PricingPolicy


class PricedItem(Protocol):
    unit_price: Decimal
    quantity: int


def get_default_policy() -> PricingPolicy:
    return PricingPolicy.from_settings()


def calculate_subtotal(items: Iterable[PricedItem]) -> Decimal:
    """Σ(prix unitaire × quantité), arrondi après sommation."""
    total = sum((to_decimal(item.unit_price) * item.quantity for item in items), ZERO)
    return round_money(total)


def calculate_vat(amount: MoneyInput, policy: Optional[PricingPolicy] = None) -> Decimal:
    policy = policy or get_default_policy()
    return round_money(round_money(amount) * policy.vat_rate)


def calculate_shipping(subtotal: MoneyInput, policy: Optional[PricingPolicy] = None) -> Decimal:
    """Forfait, sauf si le sous-total dépasse strictement le seuil de livraison offerte."""
    policy = policy or get_default_policy()
    threshold = policy.free_shipping_threshold
    if threshold is not None and (threshold <= 0 or to_decimal(subtotal) > threshold):
        return ZERO
    return round_money(policy.shipping_flat_rate)


def calculate_order_total(subtotal: MoneyInput, include_shipping: bool = True,
                          policy: Optional[PricingPolicy] = None) -> PricingBreakdown:
    """Détail de prix à partir d'un sous-total déjà connu."""
    policy = policy or get_default_policy()
    subtotal = round_money(subtotal)
    vat_amount = calculate_vat(subtotal, policy)
    shipping_amount = calculate_shipping(subtotal, policy) if include_shipping else ZERO
    return PricingBreakdown(
        subtotal=subtotal,
        vat_rate=policy.vat_rate,
        vat_amount=vat_amount,
        shipping_amount=shipping_amount,
        total=round_money(subtotal + vat_amount + shipping_amount),
        currency=policy.currency,
    )


def calculate_pricing(items: Iterable[PricedItem], policy: Optional[PricingPolicy] = None) -> PricingBreakdown:
    """Détail de prix d'un ensemble de lignes, indépendant de leur ordre."""
    return calculate_order_total(calculate_subtotal(items), policy=policy)
