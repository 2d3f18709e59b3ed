from __future__ import annotations

from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from checkresume.core.config import settings


def analysis_rate_key(request: Request) -> str:
    """Rate limit per caller when the gateway forwards an identity, else per client address."""
    user_id = (request.headers.get("X-User-Id") or "").strip()
    if user_id:
        return f"user:{user_id}"
    return get_remote_address(request)


limiter = Limiter(key_func=analysis_rate_key, enabled=settings.rate_limit_enabled)


def rate_limit():
    if not settings.rate_limit_enabled:

        def decorator(func):
            return func

        return decorator
    return limiter.limit(settings.rate_limit)
