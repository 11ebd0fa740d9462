from abc import ABC, abstractmethod
from typing import Optional

from pydantic import BaseModel


class Identity(BaseModel):
    """Identité authentifiée fournie par le service d'authentification hébergé."""
    id: str
    email: Optional[str] = None

    class Config:
        frozen = True


class AbstractIdentityProvider(ABC):
    """Interface abstraite pour obtenir l'identité courante."""

    @abstractmethod
    async def get_current_identity(self) -> Optional[Identity]:
        """Retourne l'identité courante ou None si personne n'est connecté."""
        raise NotImplementedError
