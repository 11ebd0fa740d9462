import logging
from typing import Optional

from eesha.cart.domain.storage import AbstractKeyValueStorage
from eesha.cart.infrastructure.storage import SQLKeyValueStorage
from eesha.cart.service import CartStore
from eesha.pricing.models import PricingPolicy

logger = logging.getLogger(__name__)


def get_local_storage(database_url: Optional[str] = None) -> AbstractKeyValueStorage:
    """Fournit le stockage clé/valeur de l'appareil."""
    logger.debug("Providing SQLKeyValueStorage")
    return SQLKeyValueStorage(database_url=database_url)


def get_cart_store(storage: Optional[AbstractKeyValueStorage] = None,
                   policy: Optional[PricingPolicy] = None) -> CartStore:
    """Fournit un panier pour la session, déjà restauré depuis le stockage local."""
    cart = CartStore(storage=storage or get_local_storage(), policy=policy)
    cart.load()
    return cart
