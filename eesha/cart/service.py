import json
import logging
from typing import Any, Dict, Mapping, Optional, Tuple, Union

import pydantic

from eesha.cart.domain.storage import AbstractKeyValueStorage, StorageException
from eesha.cart.models import CartSummary, LineItem
from eesha.core.config import settings
from eesha.core.exceptions import PersistenceError, ValidationError
from eesha.core.results import Result
from eesha.pricing.calculator import calculate_pricing, get_default_policy
from eesha.pricing.models import PricingPolicy

logger = logging.getLogger(__name__)

ItemInput = Union[LineItem, Mapping[str, Any]]


class CartStore:
    """Panier de la session.

    Une seule ligne par variante. Les totaux sont recalculés après chaque mutation
    et seules les lignes sont persistées dans le stockage local.
    L'état en mémoire fait foi: un échec d'écriture n'annule jamais la mutation,
    l'écriture reste due et peut être rejouée via `flush()`.
    """

    def __init__(self,
                 storage: AbstractKeyValueStorage,
                 policy: Optional[PricingPolicy] = None,
                 storage_key: Optional[str] = None):
        self.storage = storage
        self.policy = policy or get_default_policy()
        self.storage_key = storage_key or settings.CART_STORAGE_KEY
        self._items: Dict[str, LineItem] = {}
        self._summary = self._empty_summary()
        self._pending_write = False

    # --- Lectures ---

    @property
    def items(self) -> Tuple[LineItem, ...]:
        return tuple(self._items.values())

    @property
    def summary(self) -> CartSummary:
        return self._summary

    @property
    def is_empty(self) -> bool:
        return not self._items

    @property
    def has_pending_write(self) -> bool:
        return self._pending_write

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, variant_id: object) -> bool:
        return variant_id in self._items

    def get_quantity(self, variant_id: str) -> int:
        item = self._items.get(variant_id)
        return item.quantity if item else 0

    # --- Mutations ---

    def add_item(self, item: ItemInput) -> Result:
        """Ajoute une ligne; si la variante existe déjà, seule sa quantité augmente (le premier prix est conservé)."""
        try:
            line = self._coerce_item(item)
        except ValidationError as e:
            logger.warning(f"[CartStore] Ajout refusé: {e.message}")
            return Result.failure(e, value=self._summary)

        items = dict(self._items)
        existing = items.get(line.variant_id)
        if existing:
            items[line.variant_id] = existing.model_copy(
                update={"quantity": existing.quantity + line.quantity}
            )
            logger.debug(f"[CartStore] Variante {line.variant_id} fusionnée, quantité: {existing.quantity + line.quantity}")
        else:
            items[line.variant_id] = line
            logger.debug(f"[CartStore] Variante {line.variant_id} ajoutée (quantité {line.quantity}, prix {line.unit_price})")
        return self._commit(items)

    def remove_item(self, variant_id: str) -> Result:
        if variant_id not in self._items:
            logger.debug(f"[CartStore] Suppression ignorée, variante {variant_id} absente.")
            return Result.success(self._summary)
        items = dict(self._items)
        del items[variant_id]
        logger.debug(f"[CartStore] Variante {variant_id} retirée du panier.")
        return self._commit(items)

    def update_quantity(self, variant_id: str, quantity: int) -> Result:
        """Remplace la quantité d'une ligne. Une quantité <= 0 retire la ligne."""
        if isinstance(quantity, bool) or not isinstance(quantity, int):
            error = ValidationError(f"Quantité invalide pour la variante {variant_id}: {quantity!r}")
            logger.warning(f"[CartStore] {error.message}")
            return Result.failure(error, value=self._summary)

        if quantity <= 0:
            return self.remove_item(variant_id)

        existing = self._items.get(variant_id)
        if not existing:
            logger.debug(f"[CartStore] MAJ quantité ignorée, variante {variant_id} absente.")
            return Result.success(self._summary)

        items = dict(self._items)
        items[variant_id] = existing.model_copy(update={"quantity": quantity})
        return self._commit(items)

    def clear(self) -> Result:
        logger.info("[CartStore] Panier vidé.")
        return self._commit({})

    def load(self) -> Result:
        """Restaure les lignes depuis le stockage. Les totaux sont toujours recalculés, jamais relus."""
        try:
            raw = self.storage.get(self.storage_key)
        except (StorageException, OSError) as e:
            logger.error(f"[CartStore] Lecture du panier impossible: {e}", exc_info=True)
            return Result.failure(
                PersistenceError("Lecture du panier impossible", e, user_message=settings.CART_ERROR_MSG),
                value=self._summary,
            )

        if raw is None:
            self._items = {}
            self._summary = self._empty_summary()
            return Result.success(self._summary)

        try:
            restored = self._deserialize(raw)
            summary = self._recompute(restored)
        except (ValueError, TypeError, pydantic.ValidationError) as e:
            logger.error(f"[CartStore] Panier persisté illisible, panier réinitialisé: {e}", exc_info=True)
            self._items = {}
            self._summary = self._empty_summary()
            return Result.failure(
                PersistenceError("Panier persisté illisible", e, user_message=settings.CART_ERROR_MSG),
                value=self._summary,
            )

        self._items = restored
        self._summary = summary
        logger.info(f"[CartStore] Panier restauré: {len(self._items)} ligne(s), {self._summary.item_count} article(s).")
        return Result.success(self._summary)

    def flush(self) -> Result:
        """Rejoue l'écriture due après un échec de persistance."""
        if not self._pending_write:
            return Result.success(self._summary)
        return self._persist()

    # --- Interne ---

    def _commit(self, items: Dict[str, LineItem]) -> Result:
        """Applique le nouvel état seulement si ses totaux sont calculables."""
        try:
            summary = self._recompute(items)
        except ValueError as e:
            error = ValidationError(f"Totaux du panier incalculables, mutation refusée: {e}")
            logger.warning(f"[CartStore] {error.message}")
            return Result.failure(error, value=self._summary)
        self._items = items
        self._summary = summary
        return self._persist()

    def _persist(self) -> Result:
        try:
            if self._items:
                self.storage.set(self.storage_key, self._serialize())
            else:
                self.storage.delete(self.storage_key)
        except (StorageException, OSError) as e:
            self._pending_write = True
            logger.error(f"[CartStore] Échec de persistance du panier (état en mémoire conservé): {e}", exc_info=True)
            return Result.failure(
                PersistenceError("Échec de persistance du panier", e, user_message=settings.CART_ERROR_MSG),
                value=self._summary,
            )
        self._pending_write = False
        return Result.success(self._summary)

    def _recompute(self, items: Dict[str, LineItem]) -> CartSummary:
        if not items:
            return self._empty_summary()
        item_count = sum(item.quantity for item in items.values())
        return CartSummary.from_breakdown(item_count, calculate_pricing(items.values(), self.policy))

    def _empty_summary(self) -> CartSummary:
        return CartSummary(vat_rate=self.policy.vat_rate, currency=self.policy.currency)

    def _serialize(self) -> str:
        return json.dumps([item.model_dump(mode="json") for item in self._items.values()])

    @staticmethod
    def _deserialize(raw: str) -> Dict[str, LineItem]:
        payload = json.loads(raw)
        # Ancien format {items, subtotal, total...}: seuls les items sont repris
        if isinstance(payload, dict):
            payload = payload.get("items", [])
        if not isinstance(payload, list):
            raise TypeError(f"Format de panier inattendu: {type(payload).__name__}")

        restored: Dict[str, LineItem] = {}
        for entry in payload:
            item = LineItem.model_validate(entry)
            existing = restored.get(item.variant_id)
            if existing:
                item = existing.model_copy(update={"quantity": existing.quantity + item.quantity})
            restored[item.variant_id] = item
        return restored

    @staticmethod
    def _coerce_item(item: ItemInput) -> LineItem:
        if isinstance(item, LineItem):
            return item
        if isinstance(item, Mapping):
            try:
                return LineItem.model_validate(dict(item))
            except pydantic.ValidationError as e:
                raise ValidationError(f"Ligne de panier invalide: {e.error_count()} erreur(s) - {e.errors()[0]['msg']}") from e
        raise ValidationError(f"Type de ligne de panier non supporté: {type(item).__name__}")
