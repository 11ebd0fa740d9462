"""
Formatage pour l'affichage (locale fr-FR).

Reproduit les conventions de formatage françaises: espace fine insécable pour
les milliers, virgule décimale, symbole € en suffixe.
"""
import re
from datetime import date, datetime
from typing import Union

from eesha.core.money import MoneyInput, round_money

NARROW_NBSP = "\u202f"
NBSP = "\u00a0"

CURRENCY_SYMBOLS = {"EUR": "€", "USD": "$", "GBP": "£"}

MONTHS_FR = [
    "janvier", "février", "mars", "avril", "mai", "juin",
    "juillet", "août", "septembre", "octobre", "novembre", "décembre",
]


def format_price(amount: MoneyInput, currency: str = "EUR") -> str:
    """Ex: Decimal('1234.5') -> '1 234,50 €'."""
    value = round_money(amount)
    sign = "-" if value < 0 else ""
    integer_part, decimal_part = f"{abs(value):.2f}".split(".")
    groups = []
    while len(integer_part) > 3:
        groups.insert(0, integer_part[-3:])
        integer_part = integer_part[:-3]
    groups.insert(0, integer_part)
    symbol = CURRENCY_SYMBOLS.get(currency, currency)
    return f"{sign}{NARROW_NBSP.join(groups)},{decimal_part}{NBSP}{symbol}"


def _to_datetime(value: Union[str, date, datetime]) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def format_date(value: Union[str, date, datetime]) -> str:
    """Ex: '17 octobre 2026'."""
    dt = _to_datetime(value)
    return f"{dt.day} {MONTHS_FR[dt.month - 1]} {dt.year}"


def format_datetime(value: Union[str, date, datetime]) -> str:
    """Ex: '17 octobre 2026 à 14:05'."""
    dt = _to_datetime(value)
    return f"{format_date(dt)} à {dt.hour:02d}:{dt.minute:02d}"


def format_phone(phone: str) -> str:
    """Numéro français au format '+33 6 12 34 56 78'; inchangé sinon."""
    cleaned = re.sub(r"\D", "", phone)
    if cleaned.startswith("33") and len(cleaned) == 11:
        return f"+33 {cleaned[2:3]} {cleaned[3:5]} {cleaned[5:7]} {cleaned[7:9]} {cleaned[9:11]}"
    return phone


def format_postal_code(postal_code: str) -> str:
    return re.sub(r"\D", "", postal_code)[:5]


def format_sku(sku: str) -> str:
    return sku.upper()


def truncate(text: str, max_length: int) -> str:
    if len(text) <= max_length:
        return text
    return text[:max_length - 3] + "..."
