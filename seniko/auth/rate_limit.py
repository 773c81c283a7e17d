"""
Request rate limiting for the API.

A fixed-window limit keyed by client address. Routes opt in with the
limiter's ``limit`` decorator; the /health check is never decorated. One
limiter per application so counters are never shared between app instances.
"""
from slowapi import Limiter
from slowapi.util import get_remote_address

from seniko.config import Settings


def create_limiter(settings: Settings) -> Limiter:
    return Limiter(
        key_func=get_remote_address,
        strategy="fixed-window",
        storage_uri="memory://",
        enabled=settings.rate_limit_enabled,
    )
