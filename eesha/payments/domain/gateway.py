from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Dict, Optional

from pydantic import BaseModel, Field


class PaymentIntent(BaseModel):
    """Intention de paiement créée chez le prestataire. Le client_secret sert à présenter la feuille de paiement."""
    client_secret: str
    amount: Decimal = Field(..., ge=0)
    currency: str = "EUR"
    metadata: Dict[str, str] = {}

    class Config:
        frozen = True


class AbstractPaymentGateway(ABC):
    """Interface abstraite vers le prestataire de paiement hébergé."""

    @abstractmethod
    async def create_payment_intent(self, amount: Decimal, currency: str,
                                    metadata: Optional[Dict[str, str]] = None) -> PaymentIntent:
        """Crée une intention de paiement pour `amount` (en unités de devise, pas en centimes).

        Raises:
            PaymentError: si le prestataire refuse ou est injoignable.
        """
        raise NotImplementedError
