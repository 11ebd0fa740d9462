"""
Règles de validation partagées (adresse de livraison, contact, catalogue).
"""
import re
from decimal import Decimal

from eesha.core.money import MoneyInput, to_decimal

MIN_PASSWORD_LENGTH = 8
MIN_PRICE = Decimal("0.01")
MAX_PRICE = Decimal("100000")

EMAIL_REGEX = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
POSTAL_CODE_REGEX = re.compile(r"^[0-9]{5}$") # Code postal français
PHONE_REGEX = re.compile(r"^(\+33|0)[1-9](\d{2}){4}$") # Téléphone français
SKU_REGEX = re.compile(r"^[A-Z0-9-]+$")


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_REGEX.match(email or ""))


def is_valid_password(password: str) -> bool:
    return len(password or "") >= MIN_PASSWORD_LENGTH


def is_valid_postal_code(postal_code: str) -> bool:
    return bool(POSTAL_CODE_REGEX.match(postal_code or ""))


def is_valid_phone(phone: str) -> bool:
    # Les espaces de saisie ('06 12 34 56 78') sont tolérés
    return bool(PHONE_REGEX.match(re.sub(r"[\s.]", "", phone or "")))


def is_valid_price(price: MoneyInput) -> bool:
    try:
        value = to_decimal(price)
    except (TypeError, ValueError):
        return False
    if not value.is_finite():
        return False
    return MIN_PRICE <= value <= MAX_PRICE


def is_valid_stock(stock: int) -> bool:
    return isinstance(stock, int) and not isinstance(stock, bool) and stock >= 0


def is_valid_sku(sku: str) -> bool:
    return 3 <= len(sku or "") <= 50 and bool(SKU_REGEX.match(sku))
