import secrets
from datetime import datetime, timezone
from typing import Optional

from eesha.core.config import settings


def generate_order_number(now: Optional[datetime] = None, prefix: Optional[str] = None) -> str:
    """Numéro lisible: PREFIXE-AAAAMMJJ-XXXXXX (6 caractères hexadécimaux aléatoires)."""
    now = now or datetime.now(timezone.utc)
    prefix = prefix or settings.ORDER_NUMBER_PREFIX
    return f"{prefix}-{now:%Y%m%d}-{secrets.token_hex(3).upper()}"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
