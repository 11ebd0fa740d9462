from typing import Optional
from decimal import Decimal
from pydantic import BaseModel, Field

from eesha.pricing.models import PricingBreakdown

# --- Ligne de panier ---

class LineItem(BaseModel):
    """Une variante de produit et sa quantité. `variant_id` est la clé de fusion."""
    variant_id: str = Field(..., min_length=1)
    product_id: str = "" # Produit parent, informatif
    name: str = ""
    size: str = ""
    color: str = ""
    sku: str = ""
    image_url: Optional[str] = None
    # Prix figé au moment de l'ajout, jamais recalculé depuis le catalogue
    unit_price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    quantity: int = Field(..., gt=0)
    stock_quantity: Optional[int] = Field(None, ge=0) # Informatif, non utilisé pour le prix

    class Config:
        frozen = True
        from_attributes = True

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity

# --- Totaux dérivés du panier ---

class CartSummary(BaseModel):
    """Totaux recalculés après chaque mutation (jamais stockés)."""
    item_count: int = 0
    subtotal: Decimal = Decimal("0.00")
    vat_rate: Decimal = Decimal("0.00")
    vat_amount: Decimal = Decimal("0.00")
    shipping_amount: Decimal = Decimal("0.00")
    total: Decimal = Decimal("0.00")
    currency: str = "EUR"

    class Config:
        frozen = True

    @classmethod
    def from_breakdown(cls, item_count: int, breakdown: PricingBreakdown) -> "CartSummary":
        return cls(
            item_count=item_count,
            subtotal=breakdown.subtotal,
            vat_rate=breakdown.vat_rate,
            vat_amount=breakdown.vat_amount,
            shipping_amount=breakdown.shipping_amount,
            total=breakdown.total,
            currency=breakdown.currency,
        )
