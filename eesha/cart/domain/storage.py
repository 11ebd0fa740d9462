from abc import ABC, abstractmethod
from typing import Optional


class StorageException(Exception):
    """Levée lorsque le stockage local refuse une lecture ou une écriture."""
    pass


class AbstractKeyValueStorage(ABC):
    """Interface abstraite pour le stockage clé/valeur local (synchrone, sur l'appareil)."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Retourne la valeur associée à la clé ou None."""
        raise NotImplementedError

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Écrit (ou remplace) la valeur d'une clé."""
        raise NotImplementedError

    @abstractmethod
    def delete(self, key: str) -> None:
        """Supprime la clé. Sans effet si elle n'existe pas."""
        raise NotImplementedError
