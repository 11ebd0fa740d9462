from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from eesha.core.config import settings


class PricingPolicy(BaseModel):
    """Politique tarifaire d'une juridiction: TVA forfaitaire, livraison forfaitaire, seuil de gratuité."""
    vat_rate: Decimal = Field(..., ge=0)
    shipping_flat_rate: Decimal = Field(..., ge=0)
    # None désactive la livraison offerte; <= 0 la rend systématique
    free_shipping_threshold: Optional[Decimal] = None
    currency: str = "EUR"

    class Config:
        frozen = True

    @classmethod
    def from_settings(cls) -> "PricingPolicy":
        return cls(
            vat_rate=settings.VAT_RATE,
            shipping_flat_rate=settings.SHIPPING_FLAT_RATE,
            free_shipping_threshold=settings.FREE_SHIPPING_THRESHOLD,
            currency=settings.CURRENCY,
        )


class PricingBreakdown(BaseModel):
    """Détail de prix, immuable une fois calculé."""
    subtotal: Decimal
    vat_rate: Decimal
    vat_amount: Decimal
    shipping_amount: Decimal
    total: Decimal
    currency: str = "EUR"

    class Config:
        frozen = True

    @property
    def is_free_shipping(self) -> bool:
        return self.shipping_amount == 0
