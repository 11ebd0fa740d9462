import logging
from decimal import Decimal
from typing import Dict, Optional

import httpx

from eesha.core.config import settings
from eesha.core.exceptions import PaymentError
from eesha.core.money import round_money, to_cents
from eesha.payments.domain.gateway import AbstractPaymentGateway, PaymentIntent

logger = logging.getLogger(__name__)

CREATE_INTENT_PATH = "/api/payments/create-intent"


class HttpPaymentGateway(AbstractPaymentGateway):
    """Crée les intentions de paiement via l'endpoint backend qui détient la clé secrète du prestataire."""

    def __init__(self,
                 api_url: Optional[str] = None,
                 timeout: Optional[float] = None,
                 client: Optional[httpx.AsyncClient] = None):
        self.api_url = (api_url or settings.PAYMENT_API_URL).rstrip("/")
        self.timeout = timeout or settings.PAYMENT_TIMEOUT_SECONDS
        self._client = client

    async def create_payment_intent(self, amount: Decimal, currency: str,
                                    metadata: Optional[Dict[str, str]] = None) -> PaymentIntent:
        payload = {
            "amount": to_cents(amount), # Le prestataire attend des centimes
            "currency": currency.lower(),
            "description": f"Commande {settings.MERCHANT_DISPLAY_NAME}",
            "metadata": metadata or {},
        }
        url = f"{self.api_url}{CREATE_INTENT_PATH}"
        logger.info(f"[HttpPaymentGateway] Création intention de paiement: {payload['amount']} {payload['currency']}")

        try:
            if self._client is not None:
                response = await self._client.post(url, json=payload, timeout=self.timeout)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.post(url, json=payload)
        except httpx.HTTPError as e:
            logger.error(f"[HttpPaymentGateway] Erreur réseau vers {url}: {e}", exc_info=True)
            raise PaymentError(f"Prestataire de paiement injoignable: {e}") from e

        try:
            body = response.json()
        except ValueError:
            body = {}

        if response.is_error:
            detail = body.get("error") if isinstance(body, dict) else None
            logger.error(f"[HttpPaymentGateway] Refus du backend de paiement ({response.status_code}): {detail}")
            raise PaymentError(f"Création de l'intention de paiement refusée ({response.status_code}): {detail or 'sans détail'}")

        client_secret = body.get("clientSecret") if isinstance(body, dict) else None
        if not client_secret:
            logger.error("[HttpPaymentGateway] Réponse sans clientSecret.")
            raise PaymentError("Réponse du backend de paiement sans clientSecret.")

        return PaymentIntent(
            client_secret=client_secret,
            amount=round_money(amount),
            currency=currency.upper(),
            metadata=metadata or {},
        )
