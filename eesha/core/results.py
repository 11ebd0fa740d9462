from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel

from eesha.core.exceptions import EeshaDomainException, ErrorCode

T = TypeVar("T")


class Result(BaseModel, Generic[T]):
    """Résultat explicite d'une opération publique.

    `message` est destiné à l'affichage (français, générique), jamais le détail technique.
    Une erreur peut accompagner une valeur (ex: panier modifié en mémoire mais non persisté).
    """
    ok: bool
    value: Optional[T] = None
    error: Optional[ErrorCode] = None
    message: Optional[str] = None

    class Config:
        arbitrary_types_allowed = True

    @classmethod
    def success(cls, value: Any = None) -> "Result":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, exc: EeshaDomainException, value: Any = None) -> "Result":
        return cls(ok=False, value=value, error=exc.code, message=exc.user_message)
