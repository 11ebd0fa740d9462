import logging
from typing import Callable, Optional

from eesha.auth.domain.identity import AbstractIdentityProvider, Identity
from eesha.auth.security import decode_access_token

logger = logging.getLogger(__name__)


class StaticIdentityProvider(AbstractIdentityProvider):
    """Identité fixe (session déjà résolue par l'appelant, tests)."""

    def __init__(self, identity: Optional[Identity] = None):
        self.identity = identity

    async def get_current_identity(self) -> Optional[Identity]:
        return self.identity


class JWTIdentityProvider(AbstractIdentityProvider):
    """Résout l'identité depuis le token d'accès de la session (claims 'sub' et 'email')."""

    def __init__(self,
                 token_getter: Callable[[], Optional[str]],
                 secret: Optional[str] = None,
                 algorithm: Optional[str] = None,
                 audience: Optional[str] = None):
        self.token_getter = token_getter
        self.secret = secret
        self.algorithm = algorithm
        self.audience = audience

    async def get_current_identity(self) -> Optional[Identity]:
        token = self.token_getter()
        if not token:
            logger.debug("[JWTIdentityProvider] Aucun token de session.")
            return None

        claims = decode_access_token(token, secret=self.secret, algorithm=self.algorithm, audience=self.audience)
        if claims is None:
            return None

        subject = claims.get("sub")
        if not subject:
            logger.warning("Token JWT décodé mais sans champ 'sub' (user_id).")
            return None
        return Identity(id=str(subject), email=claims.get("email"))
