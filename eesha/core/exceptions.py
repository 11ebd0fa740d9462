"""Taxonomie fermée des erreurs du moteur panier / commandes."""
from enum import Enum
from typing import Optional

from eesha.core.config import settings


class ErrorCode(str, Enum):
    VALIDATION = "validation"
    EMPTY_CART = "empty_cart"
    UNAUTHENTICATED = "unauthenticated"
    PERSISTENCE = "persistence"
    TRACKING_EVENT = "tracking_event"
    ORDER_NOT_FOUND = "order_not_found"
    INVALID_TRANSITION = "invalid_transition"
    PAYMENT = "payment"


class EeshaDomainException(Exception):
    """Classe de base. `message` est technique (logs), `user_message` est affichable."""
    code: ErrorCode = ErrorCode.VALIDATION
    default_user_message: str = settings.INVALID_INPUT_MSG

    def __init__(self, message: str, user_message: Optional[str] = None):
        self.message = message
        self.user_message = user_message or self.default_user_message
        super().__init__(self.message)


class ValidationError(EeshaDomainException):
    """Levée lorsqu'une entrée malformée atteint le panier ou la commande."""
    code = ErrorCode.VALIDATION
    default_user_message = settings.INVALID_INPUT_MSG


class EmptyCartError(EeshaDomainException):
    """Levée lorsqu'une commande est tentée sans articles."""
    code = ErrorCode.EMPTY_CART
    default_user_message = settings.EMPTY_CART_MSG

    def __init__(self, message: str = "Impossible de créer une commande sans articles."):
        super().__init__(message)


class UnauthenticatedError(EeshaDomainException):
    """Levée lorsqu'aucune identité n'est disponible."""
    code = ErrorCode.UNAUTHENTICATED
    default_user_message = settings.AUTH_REQUIRED_MSG

    def __init__(self, message: str = "Utilisateur non authentifié."):
        super().__init__(message)


class PersistenceError(EeshaDomainException):
    """Levée lorsque le stockage rejette une lecture ou une écriture."""
    code = ErrorCode.PERSISTENCE
    default_user_message = settings.ORDER_ERROR_MSG

    def __init__(self, message: str, original_exception: Optional[Exception] = None,
                 user_message: Optional[str] = None):
        full_message = message
        if original_exception:
            full_message += f" (Erreur originale: {original_exception})"
        super().__init__(full_message, user_message=user_message)
        self.original_exception = original_exception


class TrackingEventError(EeshaDomainException):
    """Échec d'ajout d'un événement de suivi. Non bloquant pour la transition de statut."""
    code = ErrorCode.TRACKING_EVENT
    default_user_message = settings.TRACKING_ERROR_MSG

    def __init__(self, order_id: str, original_exception: Optional[Exception] = None):
        message = f"Échec de l'ajout d'un événement de suivi pour la commande {order_id}"
        if original_exception:
            message += f": {original_exception}"
        super().__init__(message)
        self.order_id = order_id
        self.original_exception = original_exception


class OrderNotFoundError(EeshaDomainException):
    """Levée lorsqu'une commande spécifique n'est pas trouvée."""
    code = ErrorCode.ORDER_NOT_FOUND
    default_user_message = settings.ORDER_NOT_FOUND_MSG

    def __init__(self, order_id: str):
        super().__init__(f"Commande avec ID {order_id} non trouvée.")
        self.order_id = order_id


class InvalidStatusTransitionError(EeshaDomainException):
    """Levée lorsqu'une transition de statut n'est pas autorisée par la machine à états."""
    code = ErrorCode.INVALID_TRANSITION
    default_user_message = settings.ORDER_UPDATE_ERROR_MSG

    def __init__(self, current: str, requested: str):
        super().__init__(f"Transition de statut interdite: '{current}' -> '{requested}'.")
        self.current = current
        self.requested = requested


class PaymentError(EeshaDomainException):
    """Levée lorsque le prestataire de paiement refuse ou est injoignable."""
    code = ErrorCode.PAYMENT
    default_user_message = settings.PAYMENT_FAILED_MSG
