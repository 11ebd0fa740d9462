"""
Configuration spécifique au module Orders.
Contient les constantes de la machine à états et les libellés de suivi.
"""

from typing import Dict, FrozenSet

from eesha.orders.domain.entities import OrderStatus

# Transitions autorisées (statut courant -> statuts suivants possibles)
ALLOWED_TRANSITIONS: Dict[OrderStatus, FrozenSet[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.PROCESSING, OrderStatus.CANCELLED}),
    OrderStatus.PROCESSING: frozenset({OrderStatus.SHIPPED, OrderStatus.CANCELLED}),
    OrderStatus.SHIPPED: frozenset({OrderStatus.IN_TRANSIT}),
    OrderStatus.IN_TRANSIT: frozenset({OrderStatus.DELIVERED}),
    OrderStatus.DELIVERED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}

TERMINAL_STATUSES: FrozenSet[OrderStatus] = frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED})

# Mapping des statuts pour l'affichage en français
ORDER_STATUS_DISPLAY: Dict[OrderStatus, str] = {
    OrderStatus.PENDING: "En attente",
    OrderStatus.PROCESSING: "En traitement",
    OrderStatus.SHIPPED: "Expédiée",
    OrderStatus.IN_TRANSIT: "En cours de livraison",
    OrderStatus.DELIVERED: "Livrée",
    OrderStatus.CANCELLED: "Annulée",
}

# Description par défaut de l'événement de suivi ajouté à chaque transition
TRACKING_DESCRIPTIONS: Dict[OrderStatus, str] = {
    OrderStatus.PENDING: "Commande en attente",
    OrderStatus.PROCESSING: "Commande en cours de préparation",
    OrderStatus.SHIPPED: "Commande expédiée",
    OrderStatus.IN_TRANSIT: "Colis en cours d'acheminement",
    OrderStatus.DELIVERED: "Commande livrée",
    OrderStatus.CANCELLED: "Commande annulée",
}

# Événement initial
ORDER_PLACED_EVENT: str = "order_placed"
ORDER_PLACED_DESCRIPTION: str = "Commande reçue"
CANCELLATION_DESCRIPTION: str = "Commande annulée"
