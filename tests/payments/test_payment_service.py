import json
from decimal import Decimal
from unittest.mock import AsyncMock

import httpx
import pytest

from eesha.core.config import settings
from eesha.core.exceptions import ErrorCode, PaymentError
from eesha.payments.application.services import PaymentService
from eesha.payments.domain.gateway import PaymentIntent
from eesha.payments.infrastructure.http_gateway import HttpPaymentGateway


def _gateway(handler) -> HttpPaymentGateway:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return HttpPaymentGateway(api_url="http://paiement.test/", client=client)


@pytest.mark.asyncio
async def test_http_gateway_sends_cents_and_lowercase_currency():
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["url"] = str(request.url)
        captured["body"] = json.loads(request.content)
        return httpx.Response(200, json={"clientSecret": "pi_123_secret_abc"})

    intent = await _gateway(handler).create_payment_intent(Decimal("156.00"), "EUR", {"order": "ES-1"})

    assert captured["url"] == "http://paiement.test/api/payments/create-intent"
    assert captured["body"] == {
        "amount": 15600,
        "currency": "eur",
        "description": f"Commande {settings.MERCHANT_DISPLAY_NAME}",
        "metadata": {"order": "ES-1"},
    }
    assert intent.client_secret == "pi_123_secret_abc"
    assert intent.amount == Decimal("156.00")
    assert intent.currency == "EUR"


@pytest.mark.asyncio
async def test_http_gateway_error_response():
    def handler(request):
        return httpx.Response(400, json={"error": "Montant invalide"})

    with pytest.raises(PaymentError) as exc_info:
        await _gateway(handler).create_payment_intent(Decimal("10.00"), "EUR")
    assert "Montant invalide" in exc_info.value.message


@pytest.mark.asyncio
async def test_http_gateway_missing_client_secret():
    def handler(request):
        return httpx.Response(200, json={})

    with pytest.raises(PaymentError):
        await _gateway(handler).create_payment_intent(Decimal("10.00"), "EUR")


@pytest.mark.asyncio
async def test_http_gateway_network_error():
    def handler(request):
        raise httpx.ConnectError("connexion refusée", request=request)

    with pytest.raises(PaymentError):
        await _gateway(handler).create_payment_intent(Decimal("10.00"), "EUR")


@pytest.fixture
def mock_gateway():
    gateway = AsyncMock()
    gateway.create_payment_intent.return_value = PaymentIntent(client_secret="secret", amount=Decimal("130.00"))
    return gateway


@pytest.mark.asyncio
async def test_intent_for_cart_uses_recomputed_total(mock_gateway, policy, cart, silk_saree):
    cart.add_item(silk_saree)
    service = PaymentService(mock_gateway, policy)

    result = await service.create_intent_for_cart(cart, metadata={"customer": "client-123"})

    assert result.ok is True
    mock_gateway.create_payment_intent.assert_awaited_once_with(
        Decimal("130.00"), "EUR", {"item_count": "2", "customer": "client-123"}
    )


@pytest.mark.asyncio
async def test_intent_for_empty_cart_is_refused(mock_gateway, policy, cart):
    result = await PaymentService(mock_gateway, policy).create_intent_for_cart(cart)

    assert result.ok is False
    assert result.error == ErrorCode.EMPTY_CART
    mock_gateway.create_payment_intent.assert_not_called()


@pytest.mark.asyncio
@pytest.mark.parametrize("amount", [0, "-5", "abc", "NaN", "Infinity", "1e30"])
async def test_invalid_amount_is_refused(mock_gateway, policy, amount):
    result = await PaymentService(mock_gateway, policy).create_payment_intent(amount)

    assert result.ok is False
    assert result.error == ErrorCode.VALIDATION
    mock_gateway.create_payment_intent.assert_not_called()


@pytest.mark.asyncio
async def test_gateway_failure_becomes_payment_result(mock_gateway, policy):
    mock_gateway.create_payment_intent.side_effect = PaymentError("refus")

    result = await PaymentService(mock_gateway, policy).create_payment_intent(Decimal("42.00"))

    assert result.ok is False
    assert result.error == ErrorCode.PAYMENT
