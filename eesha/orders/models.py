from typing import Optional, List, Dict, Any
from datetime import datetime
from decimal import Decimal
from sqlalchemy import Column, JSON
from sqlmodel import SQLModel, Field

# --- Modèle de table pour les commandes ---

class OrderDB(SQLModel, table=True):
    """Modèle de table pour les commandes (montants figés à la création)."""
    id: str = Field(primary_key=True, max_length=36)
    order_number: str = Field(max_length=32, unique=True, index=True)
    customer_id: str = Field(max_length=64, index=True)
    email: str = Field(max_length=255)
    phone: Optional[str] = Field(default=None, max_length=30)

    # Copie figée des lignes et de l'adresse
    items: List[Dict[str, Any]] = Field(sa_column=Column(JSON, nullable=False))
    shipping_address: Dict[str, Any] = Field(sa_column=Column(JSON, nullable=False))

    subtotal: Decimal = Field(max_digits=12, decimal_places=2)
    vat_rate: Decimal = Field(max_digits=5, decimal_places=4)
    vat_amount: Decimal = Field(max_digits=12, decimal_places=2)
    shipping_amount: Decimal = Field(max_digits=12, decimal_places=2)
    discount_amount: Decimal = Field(default=Decimal("0.00"), max_digits=12, decimal_places=2)
    total: Decimal = Field(max_digits=12, decimal_places=2)
    currency: str = Field(default="EUR", max_length=3)

    status: str = Field(default="pending", max_length=20, index=True)
    payment_status: str = Field(default="pending", max_length=20)
    payment_intent_id: Optional[str] = Field(default=None, max_length=255)
    tracking_number: Optional[str] = Field(default=None, max_length=100)
    tracking_carrier: Optional[str] = Field(default=None, max_length=100)
    shipped_at: Optional[datetime] = Field(default=None)
    delivered_at: Optional[datetime] = Field(default=None)
    created_at: Optional[datetime] = Field(default=None, index=True)
    updated_at: Optional[datetime] = Field(default=None)

    __tablename__ = "orders"

# --- Modèle de table pour le suivi (ajout seul) ---

class OrderTrackingDB(SQLModel, table=True):
    """Modèle de table pour les événements de suivi de commande."""
    id: Optional[int] = Field(default=None, primary_key=True)
    order_id: str = Field(foreign_key="orders.id", index=True, max_length=36)
    status: str = Field(max_length=20)
    description: Optional[str] = Field(default=None, max_length=255)
    location: Optional[str] = Field(default=None, max_length=100)
    created_at: Optional[datetime] = Field(default=None)

    __tablename__ = "order_tracking"
