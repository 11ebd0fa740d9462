from typing import Optional, List
from decimal import Decimal
from datetime import datetime
from enum import Enum
from pydantic import BaseModel, Field

from eesha.cart.models import LineItem

# Entités du Domaine "Orders"

class OrderStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    IN_TRANSIT = "in_transit"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"

class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"

class ContactDetails(BaseModel):
    email: str = Field(..., max_length=255)
    phone: Optional[str] = Field(None, max_length=30)

class ShippingAddress(BaseModel):
    full_name: str = Field(..., min_length=1, max_length=100)
    line1: str = Field(..., min_length=1, max_length=255)
    line2: Optional[str] = Field(None, max_length=255)
    city: str = Field(..., min_length=1, max_length=100)
    postal_code: str = Field(..., max_length=10)
    country: str = Field("FR", max_length=2)
    phone: Optional[str] = Field(None, max_length=30)

    class Config:
        from_attributes = True

class NewOrder(BaseModel):
    """Instantané à persister. Les montants sont calculés par le service, jamais fournis par le client."""
    order_number: str
    customer_id: str
    email: str
    phone: Optional[str] = None
    items: List[LineItem]
    shipping_address: ShippingAddress
    subtotal: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)
    vat_rate: Decimal = Field(..., ge=0)
    vat_amount: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)
    shipping_amount: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)
    discount_amount: Decimal = Field(Decimal("0.00"), ge=0, max_digits=12, decimal_places=2)
    total: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)
    currency: str = "EUR"
    status: OrderStatus = OrderStatus.PENDING
    payment_status: PaymentStatus = PaymentStatus.PENDING
    payment_intent_id: Optional[str] = None

    class Config:
        frozen = True

class Order(BaseModel):
    id: str
    order_number: str
    customer_id: str
    email: str
    phone: Optional[str] = None
    # Copie figée des lignes du panier au moment de la commande
    items: List[LineItem] = []
    shipping_address: ShippingAddress
    subtotal: Decimal
    vat_rate: Decimal
    vat_amount: Decimal
    shipping_amount: Decimal
    discount_amount: Decimal = Decimal("0.00")
    total: Decimal
    currency: str = "EUR"
    status: OrderStatus
    payment_status: PaymentStatus
    payment_intent_id: Optional[str] = None
    tracking_number: Optional[str] = None
    tracking_carrier: Optional[str] = None
    shipped_at: Optional[datetime] = None
    delivered_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class OrderTrackingEvent(BaseModel):
    id: int
    order_id: str
    status: str # Statut de commande ou 'order_placed'
    description: Optional[str] = None
    location: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class OrderWithTracking(BaseModel):
    order: Order
    tracking_events: List[OrderTrackingEvent] = []

class StatusTransition(BaseModel):
    """Résultat d'une transition: le statut est appliqué même si l'événement de suivi a échoué."""
    order: Order
    previous_status: OrderStatus
    tracking_event: Optional[OrderTrackingEvent] = None
    tracking_recorded: bool = False
    tracking_error: Optional[str] = None

    @property
    def is_partial(self) -> bool:
        return not self.tracking_recorded

class OrderPlacement(BaseModel):
    """Résultat d'une création: la commande est persistée même si l'événement 'order_placed' a échoué."""
    order: Order
    tracking_event: Optional[OrderTrackingEvent] = None
    tracking_recorded: bool = False
    tracking_error: Optional[str] = None

    @property
    def is_partial(self) -> bool:
        return not self.tracking_recorded
