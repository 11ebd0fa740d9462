"""
Utilitaires monétaires.

Tous les montants sont des `Decimal` dans l'unité de la devise (EUR), arrondis
à 2 décimales (ROUND_HALF_UP) après chaque opération.
"""
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Union

TWO_PLACES = Decimal("0.01")
ZERO = Decimal("0.00")

MoneyInput = Union[Decimal, int, float, str]


def to_decimal(value: MoneyInput) -> Decimal:
    """Convertit une valeur en Decimal. Les floats passent par str() pour éviter la dérive binaire."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise TypeError("Un booléen n'est pas un montant.")
    if isinstance(value, float):
        return Decimal(str(value))
    try:
        return Decimal(value)
    except (InvalidOperation, TypeError) as e:
        raise ValueError(f"Montant invalide: {value!r}") from e


def round_money(value: MoneyInput) -> Decimal:
    """Arrondit un montant à 2 décimales.

    Raises:
        ValueError: montant non fini (NaN, Infinity) ou trop grand pour être arrondi au centime.
    """
    amount = to_decimal(value)
    if not amount.is_finite():
        raise ValueError(f"Montant non fini: {value!r}")
    try:
        return amount.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
    except InvalidOperation as e:
        raise ValueError(f"Montant hors limites: {value!r}") from e


def to_cents(value: MoneyInput) -> int:
    """Montant en centimes (entier), pour le prestataire de paiement."""
    return int((round_money(value) * 100).to_integral_value(rounding=ROUND_HALF_UP))
