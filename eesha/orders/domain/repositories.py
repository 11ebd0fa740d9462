from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from .entities import NewOrder, Order, OrderStatus, OrderTrackingEvent

class AbstractOrderRepository(ABC):
    """Interface abstraite pour le repository des Commandes et de leur suivi."""

    @abstractmethod
    async def insert_order(self, new_order: NewOrder) -> Order:
        """Persiste une nouvelle commande.
        Lève PersistenceError si le stockage refuse l'écriture.
        """
        raise NotImplementedError

    @abstractmethod
    async def insert_tracking_event(self, order_id: str, status: str,
                                    description: Optional[str], location: Optional[str]) -> OrderTrackingEvent:
        """Ajoute un événement de suivi (journal en ajout seul).
        Lève TrackingEventError en cas d'échec.
        """
        raise NotImplementedError

    @abstractmethod
    async def query_orders_by_customer(self, customer_id: str) -> List[Order]:
        """Liste les commandes d'un client, les plus récentes d'abord."""
        raise NotImplementedError

    @abstractmethod
    async def query_order_by_id(self, order_id: str) -> Optional[Order]:
        """Récupère une commande par son ID, None si absente."""
        raise NotImplementedError

    @abstractmethod
    async def update_order_status(self, order_id: str, status: OrderStatus,
                                  tracking_number: Optional[str] = None,
                                  tracking_carrier: Optional[str] = None,
                                  shipped_at: Optional[datetime] = None,
                                  delivered_at: Optional[datetime] = None) -> Optional[Order]:
        """Met à jour le statut (et les champs de livraison). Les montants ne sont jamais modifiés."""
        raise NotImplementedError

    @abstractmethod
    async def list_tracking_events(self, order_id: str) -> List[OrderTrackingEvent]:
        """Événements de suivi d'une commande, par date de création croissante."""
        raise NotImplementedError
