"""Machine à états du statut de commande."""
from typing import FrozenSet, Union

from eesha.core.exceptions import InvalidStatusTransitionError
from eesha.orders.config import ALLOWED_TRANSITIONS, ORDER_STATUS_DISPLAY, TERMINAL_STATUSES
from eesha.orders.domain.entities import OrderStatus

StatusInput = Union[OrderStatus, str]


def _as_status(value: StatusInput) -> OrderStatus:
    return value if isinstance(value, OrderStatus) else OrderStatus(value)


def allowed_next(current: StatusInput) -> FrozenSet[OrderStatus]:
    return ALLOWED_TRANSITIONS[_as_status(current)]


def is_terminal(status: StatusInput) -> bool:
    return _as_status(status) in TERMINAL_STATUSES


def can_transition(current: StatusInput, requested: StatusInput) -> bool:
    try:
        return _as_status(requested) in allowed_next(current)
    except ValueError:
        return False


def ensure_transition(current: StatusInput, requested: StatusInput) -> OrderStatus:
    """Retourne le statut demandé ou lève InvalidStatusTransitionError."""
    current_value = current.value if isinstance(current, OrderStatus) else str(current)
    requested_value = requested.value if isinstance(requested, OrderStatus) else str(requested)
    if not can_transition(current, requested):
        raise InvalidStatusTransitionError(current_value, requested_value)
    return _as_status(requested)


def status_label(status: StatusInput) -> str:
    """Libellé français du statut ('Expédiée'); la valeur brute si le statut est inconnu."""
    try:
        return ORDER_STATUS_DISPLAY[_as_status(status)]
    except ValueError:
        return str(status)
