import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from eesha.auth.domain.identity import AbstractIdentityProvider
from eesha.orders.application.services import OrderService
from eesha.orders.domain.repositories import AbstractOrderRepository
from eesha.orders.infrastructure.persistence import SQLAlchemyOrderRepository
from eesha.pricing.models import PricingPolicy

logger = logging.getLogger(__name__)


def get_order_repository(session: AsyncSession) -> AbstractOrderRepository:
    """Fournit une instance du repository de commandes."""
    logger.debug("Providing SQLAlchemyOrderRepository")
    return SQLAlchemyOrderRepository(session=session)


def get_order_service(session: AsyncSession,
                      identity_provider: AbstractIdentityProvider,
                      policy: Optional[PricingPolicy] = None) -> OrderService:
    """Fournit une instance du service de gestion des commandes, repository injecté."""
    logger.debug("Providing OrderService with injected repository")
    return OrderService(
        order_repository=get_order_repository(session),
        identity_provider=identity_provider,
        policy=policy,
    )
