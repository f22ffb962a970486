from slowapi import Limiter
from slowapi.util import get_remote_address

from app.core.config import settings

limiter = Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)


def auth_rate_limit() -> str:
    """Limit applied to the registration, verification and login routes."""
    return settings.AUTH_RATE_LIMIT
