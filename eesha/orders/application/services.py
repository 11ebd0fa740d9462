import logging
from typing import Any, Iterable, List, Mapping, Optional, Tuple, Union

import pydantic

# Repositories / collaborateurs (Interfaces)
from eesha.orders.domain.repositories import AbstractOrderRepository
from eesha.auth.domain.identity import AbstractIdentityProvider

# Entités du Domaine
from eesha.cart.models import LineItem
from eesha.orders.domain.entities import (
    ContactDetails, NewOrder, OrderStatus, OrderTrackingEvent,
    OrderPlacement, OrderWithTracking, PaymentStatus, ShippingAddress, StatusTransition
)
from eesha.orders.domain.state_machine import ensure_transition, status_label

# Exceptions / résultats
from eesha.core.config import settings
from eesha.core.exceptions import (
    EeshaDomainException, EmptyCartError, InvalidStatusTransitionError,
    OrderNotFoundError, TrackingEventError, UnauthenticatedError, ValidationError
)
from eesha.core.money import round_money
from eesha.core.results import Result

# Calcul des prix
from eesha.pricing.calculator import calculate_pricing, get_default_policy
from eesha.pricing.models import PricingBreakdown, PricingPolicy

from eesha.orders.config import (
    CANCELLATION_DESCRIPTION, ORDER_PLACED_DESCRIPTION, ORDER_PLACED_EVENT, TRACKING_DESCRIPTIONS
)
from eesha.orders.utils import generate_order_number, utcnow
from eesha import validation

logger = logging.getLogger(__name__)


class OrderService:
    """Service applicatif pour la gestion des commandes.

    Les montants sont toujours recalculés à partir des lignes reçues; aucun total
    fourni par le client n'est pris en compte. Le service ne vide jamais le panier
    lui-même (voir `checkout_cart`).
    """

    def __init__(self,
                 order_repository: AbstractOrderRepository,
                 identity_provider: AbstractIdentityProvider,
                 policy: Optional[PricingPolicy] = None,
                 tracking_location: Optional[str] = None):
        self.order_repository = order_repository
        self.identity_provider = identity_provider
        self.policy = policy or get_default_policy()
        self.tracking_location = tracking_location or settings.DEFAULT_TRACKING_LOCATION

    # --- Création ---

    async def create_order(self,
                           cart_items: Iterable[Union[LineItem, Mapping[str, Any]]],
                           contact: Union[ContactDetails, Mapping[str, Any]],
                           shipping_address: Union[ShippingAddress, Mapping[str, Any]],
                           payment_intent_id: Optional[str] = None,
                           client_totals: Optional[Mapping[str, Any]] = None) -> Result:
        """Crée une commande à partir des lignes du panier, puis ajoute l'événement 'order_placed'.

        La valeur retournée est un `OrderPlacement`: `tracking_recorded` est faux si
        l'événement de suivi n'a pas pu être écrit (la commande reste créée).
        """
        items = list(cart_items)
        try:
            if not items:
                raise EmptyCartError()

            identity = await self.identity_provider.get_current_identity()
            if identity is None:
                raise UnauthenticatedError()
            logger.info(f"[OrderService] Tentative création commande pour client ID: {identity.id}")

            contact_details = self._coerce(ContactDetails, contact, "coordonnées")
            address = self._coerce(ShippingAddress, shipping_address, "adresse de livraison")
            self._validate_checkout_details(contact_details, address)
            line_items = [self._coerce(LineItem, item, "ligne de commande") for item in items]

            try:
                pricing = calculate_pricing(line_items, self.policy)
            except ValueError as e:
                raise ValidationError(f"Montants de commande incalculables: {e}") from e
            if client_totals:
                self._check_client_totals(client_totals, pricing, identity.id)

            try:
                new_order = NewOrder(
                    order_number=generate_order_number(),
                    customer_id=identity.id,
                    email=contact_details.email,
                    phone=contact_details.phone or address.phone,
                    items=line_items,
                    shipping_address=address,
                    subtotal=pricing.subtotal,
                    vat_rate=pricing.vat_rate,
                    vat_amount=pricing.vat_amount,
                    shipping_amount=pricing.shipping_amount,
                    total=pricing.total,
                    currency=pricing.currency,
                    status=OrderStatus.PENDING,
                    payment_status=PaymentStatus.PAID if payment_intent_id else PaymentStatus.PENDING,
                    payment_intent_id=payment_intent_id,
                )
            except pydantic.ValidationError as e:
                raise ValidationError(f"Commande hors limites: {e.error_count()} erreur(s) - {e.errors()[0]['msg']}") from e
            order = await self.order_repository.insert_order(new_order)
        except EeshaDomainException as e:
            logger.error(f"[OrderService] Échec création commande ({e.code.value}): {e.message}")
            return Result.failure(e)

        logger.info(f"[OrderService] Commande {order.order_number} créée (total {order.total} {order.currency}).")
        event, tracking_error = await self._append_tracking_event(order.id, ORDER_PLACED_EVENT, ORDER_PLACED_DESCRIPTION)
        return Result.success(OrderPlacement(
            order=order,
            tracking_event=event,
            tracking_recorded=event is not None,
            tracking_error=tracking_error.code.value if tracking_error else None,
        ))

    async def checkout_cart(self, cart, contact, shipping_address,
                            payment_intent_id: Optional[str] = None) -> Result:
        """Passe commande depuis un CartStore; le panier n'est vidé qu'après succès confirmé."""
        result = await self.create_order(cart.items, contact, shipping_address, payment_intent_id=payment_intent_id)
        if result.ok:
            cleared = cart.clear()
            if not cleared.ok:
                logger.warning(f"[OrderService] Commande {result.value.order.order_number} créée mais vidage du panier non persisté.")
        return result

    # --- Statut ---

    async def update_order_status(self,
                                  order_id: str,
                                  status: Union[OrderStatus, str],
                                  description: Optional[str] = None,
                                  location: Optional[str] = None,
                                  tracking_number: Optional[str] = None,
                                  carrier: Optional[str] = None) -> Result:
        """Applique une transition de statut puis ajoute l'événement de suivi (non bloquant)."""
        logger.info(f"[OrderService] Tentative MAJ statut commande ID: {order_id} à '{status}'")
        try:
            order = await self.order_repository.query_order_by_id(order_id)
            if not order:
                raise OrderNotFoundError(order_id)

            new_status = ensure_transition(order.status, status)
            now = utcnow()
            updated = await self.order_repository.update_order_status(
                order_id,
                new_status,
                tracking_number=tracking_number,
                tracking_carrier=carrier,
                shipped_at=now if new_status == OrderStatus.SHIPPED else None,
                delivered_at=now if new_status == OrderStatus.DELIVERED else None,
            )
            if not updated:
                raise OrderNotFoundError(order_id)
            logger.info(f"[OrderService] Commande {order_id}: {status_label(order.status)} -> {status_label(new_status)}")
        except InvalidStatusTransitionError as e:
            logger.warning(f"[OrderService] {e.message} (commande {order_id})")
            return Result.failure(e)
        except EeshaDomainException as e:
            logger.error(f"[OrderService] Échec MAJ statut commande {order_id} ({e.code.value}): {e.message}")
            return Result.failure(e)

        event, tracking_error = await self._append_tracking_event(
            order_id,
            new_status.value,
            description or TRACKING_DESCRIPTIONS[new_status],
            location,
        )
        return Result.success(StatusTransition(
            order=updated,
            previous_status=order.status,
            tracking_event=event,
            tracking_recorded=event is not None,
            tracking_error=tracking_error.code.value if tracking_error else None,
        ))

    async def cancel_order(self, order_id: str) -> Result:
        return await self.update_order_status(order_id, OrderStatus.CANCELLED, description=CANCELLATION_DESCRIPTION)

    # --- Lectures ---

    async def get_order(self, order_id: str, customer_id: Optional[str] = None) -> Result:
        """Récupère une commande; si customer_id est fourni, elle doit lui appartenir."""
        try:
            order = await self.order_repository.query_order_by_id(order_id)
            if not order:
                raise OrderNotFoundError(order_id)
            if customer_id is not None and order.customer_id != customer_id:
                logger.warning(f"[OrderService] Accès refusé commande {order_id} pour client {customer_id}.")
                raise OrderNotFoundError(order_id)
        except EeshaDomainException as e:
            return Result.failure(e)
        return Result.success(order)

    async def get_customer_orders(self, customer_id: str) -> Result:
        try:
            orders = await self.order_repository.query_orders_by_customer(customer_id)
        except EeshaDomainException as e:
            logger.error(f"[OrderService] Listage commandes client {customer_id} impossible: {e.message}")
            return Result.failure(e)
        return Result.success(orders)

    async def get_my_orders(self) -> Result:
        identity = await self.identity_provider.get_current_identity()
        if identity is None:
            return Result.failure(UnauthenticatedError())
        return await self.get_customer_orders(identity.id)

    async def get_tracking_events(self, order_id: str) -> Result:
        try:
            events = await self.order_repository.list_tracking_events(order_id)
        except EeshaDomainException as e:
            logger.error(f"[OrderService] Lecture suivi commande {order_id} impossible: {e.message}")
            return Result.failure(e)
        return Result.success(events)

    async def get_order_with_tracking(self, order_id: str, customer_id: Optional[str] = None) -> Result:
        """Commande et son suivi; un suivi illisible donne une liste vide (journalisé)."""
        order_result = await self.get_order(order_id, customer_id=customer_id)
        if not order_result.ok:
            return order_result
        events_result = await self.get_tracking_events(order_id)
        events: List[OrderTrackingEvent] = events_result.value if events_result.ok else []
        return Result.success(OrderWithTracking(order=order_result.value, tracking_events=events))

    # --- Interne ---

    async def _append_tracking_event(self, order_id: str, status: str, description: Optional[str],
                                     location: Optional[str] = None
                                     ) -> Tuple[Optional[OrderTrackingEvent], Optional[TrackingEventError]]:
        try:
            event = await self.order_repository.insert_tracking_event(
                order_id, status, description, location or self.tracking_location
            )
        except TrackingEventError as e:
            logger.error(f"[OrderService] Événement de suivi '{status}' non enregistré pour commande {order_id}: {e.message}")
            return None, e
        return event, None

    @staticmethod
    def _coerce(model: type, value: Any, label: str):
        if isinstance(value, model):
            return value
        try:
            return model.model_validate(dict(value))
        except (pydantic.ValidationError, TypeError, ValueError) as e:
            raise ValidationError(f"Données invalides ({label}): {e}") from e

    @staticmethod
    def _validate_checkout_details(contact: ContactDetails, address: ShippingAddress) -> None:
        if not validation.is_valid_email(contact.email):
            raise ValidationError(f"Adresse e-mail invalide: {contact.email!r}")
        if contact.phone and not validation.is_valid_phone(contact.phone):
            raise ValidationError(f"Numéro de téléphone invalide: {contact.phone!r}")
        if address.country.upper() == "FR" and not validation.is_valid_postal_code(address.postal_code):
            raise ValidationError(f"Code postal invalide: {address.postal_code!r}")

    @staticmethod
    def _check_client_totals(client_totals: Mapping[str, Any], pricing: PricingBreakdown, customer_id: str) -> None:
        """Compare les montants annoncés par le client; seuls les montants recalculés sont persistés."""
        for field in ("subtotal", "vat_amount", "shipping_amount", "total"):
            if field not in client_totals:
                continue
            try:
                claimed = round_money(client_totals[field])
            except (TypeError, ValueError):
                claimed = None
            expected = getattr(pricing, field)
            if claimed != expected:
                logger.warning(
                    f"[OrderService] Montant client ignoré pour client {customer_id}: "
                    f"{field} annoncé {client_totals[field]!r}, recalculé {expected}."
                )
