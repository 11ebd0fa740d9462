import logging
from datetime import datetime, timezone
from typing import Dict, Optional

from sqlalchemy import Column, Text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Field, Session, SQLModel, create_engine

from eesha.cart.domain.storage import AbstractKeyValueStorage, StorageException
from eesha.core.config import settings

logger = logging.getLogger(__name__)


class InMemoryKeyValueStorage(AbstractKeyValueStorage):
    """Stockage en mémoire (session éphémère, tests)."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class LocalStorageEntry(SQLModel, table=True):
    """Modèle de table pour le stockage clé/valeur de l'appareil."""
    key: str = Field(primary_key=True, max_length=255)
    value: str = Field(sa_column=Column(Text, nullable=False))
    updated_at: Optional[datetime] = Field(default=None)

    __tablename__ = "local_storage"


class SQLKeyValueStorage(AbstractKeyValueStorage):
    """Implémentation SQLite (synchrone) du stockage clé/valeur local."""

    def __init__(self, engine: Optional[Engine] = None, database_url: Optional[str] = None):
        self.engine = engine or create_engine(database_url or settings.LOCAL_STORAGE_URL)
        try:
            SQLModel.metadata.create_all(self.engine, tables=[LocalStorageEntry.__table__])
        except SQLAlchemyError as e:
            logger.error(f"[SQLKeyValueStorage] Impossible d'initialiser la table local_storage: {e}", exc_info=True)
            raise StorageException(f"Initialisation du stockage local impossible: {e}") from e

    def get(self, key: str) -> Optional[str]:
        try:
            with Session(self.engine) as session:
                entry = session.get(LocalStorageEntry, key)
                return entry.value if entry else None
        except SQLAlchemyError as e:
            logger.error(f"[SQLKeyValueStorage] Erreur lecture clé '{key}': {e}", exc_info=True)
            raise StorageException(f"Lecture de la clé '{key}' impossible: {e}") from e

    def set(self, key: str, value: str) -> None:
        try:
            with Session(self.engine) as session:
                entry = session.get(LocalStorageEntry, key)
                now = datetime.now(timezone.utc)
                if entry:
                    entry.value = value
                    entry.updated_at = now
                else:
                    entry = LocalStorageEntry(key=key, value=value, updated_at=now)
                session.add(entry)
                session.commit()
        except SQLAlchemyError as e:
            logger.error(f"[SQLKeyValueStorage] Erreur écriture clé '{key}': {e}", exc_info=True)
            raise StorageException(f"Écriture de la clé '{key}' impossible: {e}") from e

    def delete(self, key: str) -> None:
        try:
            with Session(self.engine) as session:
                entry = session.get(LocalStorageEntry, key)
                if entry:
                    session.delete(entry)
                    session.commit()
        except SQLAlchemyError as e:
            logger.error(f"[SQLKeyValueStorage] Erreur suppression clé '{key}': {e}", exc_info=True)
            raise StorageException(f"Suppression de la clé '{key}' impossible: {e}") from e
