"""
Fonctions utilitaires de sécurité pour l'authentification.

Création/décodage des tokens JWT émis par le service d'authentification hébergé.
"""
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
from jose import JWTError, jwt
import logging

from eesha.core.config import settings

logger = logging.getLogger(__name__)

ACCESS_TOKEN_EXPIRE_MINUTES = 60

def create_access_token(data: dict, expires_delta: Optional[timedelta] = None,
                        secret: Optional[str] = None, algorithm: Optional[str] = None) -> str:
    """Crée un token JWT avec les données fournies et une expiration."""
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, secret or settings.AUTH_JWT_SECRET,
                      algorithm=algorithm or settings.AUTH_JWT_ALGORITHM)

def decode_access_token(token: str, secret: Optional[str] = None, algorithm: Optional[str] = None,
                        audience: Optional[str] = None) -> Optional[Dict[str, Any]]:
    """Décode un token JWT et retourne ses claims, ou None si invalide/expiré."""
    audience = audience or settings.AUTH_JWT_AUDIENCE
    try:
        return jwt.decode(
            token,
            secret or settings.AUTH_JWT_SECRET,
            algorithms=[algorithm or settings.AUTH_JWT_ALGORITHM],
            audience=audience,
            options={"verify_aud": audience is not None},
        )
    except JWTError as e:
        logger.warning(f"Erreur de décodage JWT: {e}") # Inclut expiration, signature invalide, etc.
        return None
