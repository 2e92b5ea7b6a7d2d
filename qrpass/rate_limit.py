"""Shared rate limiter instance.

Extracted from main.py to avoid circular imports when route modules
need to apply per-endpoint rate limits via ``@limiter.limit()``.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address
from starlette.requests import Request

from qrpass.config import get_settings

# Per-client budget for each token endpoint
TOKEN_ENDPOINT_LIMIT = "30/minute"


def _get_client_ip(request: Request) -> str:
    """Extract the real client IP, respecting X-Forwarded-For behind a proxy."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        # First entry is the original client; proxies append their own.
        return forwarded.split(",")[0].strip()
    return get_remote_address(request)


def create_limiter() -> Limiter:
    """Build the limiter from settings (disabled in tests via RATE_LIMIT_ENABLED)."""
    settings = get_settings()
    return Limiter(
        key_func=_get_client_ip,
        default_limits=[settings.rate_limit_default],
        enabled=settings.rate_limit_enabled,
    )


limiter = create_limiter()
