"""
Module Auth - Identité courante
"""

from eesha.auth.domain.identity import Identity, AbstractIdentityProvider
from eesha.auth.infrastructure.providers import JWTIdentityProvider, StaticIdentityProvider

__all__ = ["Identity", "AbstractIdentityProvider", "JWTIdentityProvider", "StaticIdentityProvider"]
