import logging
from typing import AsyncGenerator, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel

from eesha.core.config import settings

logger = logging.getLogger(__name__)


def build_engine(database_url: Optional[str] = None, echo: Optional[bool] = None) -> Tuple[AsyncEngine, sessionmaker]:
    """Crée un moteur async et sa session factory."""
    engine = create_async_engine(
        database_url or settings.DATABASE_URL,
        echo=settings.DB_ECHO_LOG if echo is None else echo,
    )
    session_factory = sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False # Empêche les objets d'expirer après commit
    )
    return engine, session_factory


engine, AsyncSessionLocal = build_engine()
logger.debug("Moteur et Session Factory SQLAlchemy Async configurés.")


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Fournit une session de base de données asynchrone (rollback en cas d'erreur)."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception as e:
            logger.error(f"Erreur durant la session DB, rollback: {e}", exc_info=True)
            await session.rollback()
            raise


async def create_tables(target: Optional[AsyncEngine] = None) -> None:
    """Crée toutes les tables déclarées sur SQLModel.metadata."""
    # Import pour enregistrer les tables sur les métadonnées
    from eesha.orders import models  # noqa: F401
    async with (target or engine).begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


async def drop_tables(target: Optional[AsyncEngine] = None) -> None:
    """Supprime toutes les tables déclarées sur SQLModel.metadata."""
    from eesha.orders import models  # noqa: F401
    async with (target or engine).begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
