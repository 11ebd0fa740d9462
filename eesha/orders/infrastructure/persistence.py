import logging
import uuid
from datetime import datetime
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from eesha.core.exceptions import PersistenceError, TrackingEventError
from eesha.orders.domain.entities import NewOrder, Order, OrderStatus, OrderTrackingEvent
from eesha.orders.domain.repositories import AbstractOrderRepository
from eesha.orders.models import OrderDB, OrderTrackingDB
from eesha.orders.utils import utcnow

logger = logging.getLogger(__name__)

class SQLAlchemyOrderRepository(AbstractOrderRepository):
    """Implémentation SQLAlchemy du repository de Commandes. Chaque écriture est sa propre transaction."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def insert_order(self, new_order: NewOrder) -> Order:
        now = utcnow()
        order_db = OrderDB(
            id=str(uuid.uuid4()),
            order_number=new_order.order_number,
            customer_id=new_order.customer_id,
            email=new_order.email,
            phone=new_order.phone,
            items=[item.model_dump(mode="json") for item in new_order.items],
            shipping_address=new_order.shipping_address.model_dump(mode="json"),
            subtotal=new_order.subtotal,
            vat_rate=new_order.vat_rate,
            vat_amount=new_order.vat_amount,
            shipping_amount=new_order.shipping_amount,
            discount_amount=new_order.discount_amount,
            total=new_order.total,
            currency=new_order.currency,
            status=new_order.status.value,
            payment_status=new_order.payment_status.value,
            payment_intent_id=new_order.payment_intent_id,
            created_at=now,
            updated_at=now,
        )
        self.session.add(order_db)
        try:
            await self.session.commit()
            await self.session.refresh(order_db)
        except IntegrityError as e:
            await self.session.rollback()
            logger.error(f"Erreur intégrité ajout commande {new_order.order_number} pour client {new_order.customer_id}: {e}", exc_info=True)
            raise PersistenceError(f"Contrainte violée lors de l'ajout de la commande {new_order.order_number}", e)
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Erreur inattendue ajout commande pour client {new_order.customer_id}: {e}", exc_info=True)
            raise PersistenceError("Écriture de la commande impossible", e)

        logger.info(f"Commande {order_db.order_number} (ID {order_db.id}) ajoutée pour client {order_db.customer_id}.")
        return Order.model_validate(order_db)

    async def insert_tracking_event(self, order_id: str, status: str,
                                    description: Optional[str], location: Optional[str]) -> OrderTrackingEvent:
        event_db = OrderTrackingDB(
            order_id=order_id,
            status=status,
            description=description,
            location=location,
            created_at=utcnow(),
        )
        self.session.add(event_db)
        try:
            await self.session.commit()
            await self.session.refresh(event_db)
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Erreur ajout événement de suivi '{status}' commande {order_id}: {e}", exc_info=True)
            raise TrackingEventError(order_id, e)
        return OrderTrackingEvent.model_validate(event_db)

    async def query_orders_by_customer(self, customer_id: str) -> List[Order]:
        stmt = (
            select(OrderDB)
            .where(OrderDB.customer_id == customer_id)
            .order_by(OrderDB.created_at.desc())
        )
        try:
            result = await self.session.execute(stmt)
        except SQLAlchemyError as e:
            logger.error(f"Erreur listage commandes client {customer_id}: {e}", exc_info=True)
            raise PersistenceError(f"Lecture des commandes du client {customer_id} impossible", e)
        return [Order.model_validate(o_db) for o_db in result.scalars().all()]

    async def query_order_by_id(self, order_id: str) -> Optional[Order]:
        try:
            order_db = await self.session.get(OrderDB, order_id)
        except SQLAlchemyError as e:
            logger.error(f"Erreur lecture commande {order_id}: {e}", exc_info=True)
            raise PersistenceError(f"Lecture de la commande {order_id} impossible", e)
        if not order_db:
            logger.debug(f"Commande ID {order_id} non trouvée dans query_order_by_id().")
            return None
        return Order.model_validate(order_db)

    async def update_order_status(self, order_id: str, status: OrderStatus,
                                  tracking_number: Optional[str] = None,
                                  tracking_carrier: Optional[str] = None,
                                  shipped_at: Optional[datetime] = None,
                                  delivered_at: Optional[datetime] = None) -> Optional[Order]:
        try:
            order_db = await self.session.get(OrderDB, order_id)
            if not order_db:
                logger.warning(f"Tentative MAJ statut commande ID {order_id} non trouvée.")
                return None

            order_db.status = status.value
            if tracking_number is not None:
                order_db.tracking_number = tracking_number
            if tracking_carrier is not None:
                order_db.tracking_carrier = tracking_carrier
            if shipped_at is not None:
                order_db.shipped_at = shipped_at
            if delivered_at is not None:
                order_db.delivered_at = delivered_at
            order_db.updated_at = utcnow()

            self.session.add(order_db)
            await self.session.commit()
            await self.session.refresh(order_db)
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Erreur inattendue MAJ statut commande {order_id}: {e}", exc_info=True)
            raise PersistenceError(f"Mise à jour du statut de la commande {order_id} impossible", e)

        logger.info(f"Statut commande ID {order_id} mis à jour à '{status.value}'.")
        return Order.model_validate(order_db)

    async def list_tracking_events(self, order_id: str) -> List[OrderTrackingEvent]:
        stmt = (
            select(OrderTrackingDB)
            .where(OrderTrackingDB.order_id == order_id)
            .order_by(OrderTrackingDB.created_at.asc(), OrderTrackingDB.id.asc())
        )
        try:
            result = await self.session.execute(stmt)
        except SQLAlchemyError as e:
            logger.error(f"Erreur lecture suivi commande {order_id}: {e}", exc_info=True)
            raise PersistenceError(f"Lecture du suivi de la commande {order_id} impossible", e)
        return [OrderTrackingEvent.model_validate(e_db) for e_db in result.scalars().all()]
