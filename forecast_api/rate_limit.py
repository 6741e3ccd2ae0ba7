"""Per-client fixed-window rate limiting on top of slowapi.

Limits apply to every route through ``SlowAPIMiddleware``; routes marked with
``limiter.exempt`` (the health check) are never counted.
"""

import logging
from typing import Callable

from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from .config import Settings

logger = logging.getLogger(__name__)

RATE_LIMIT_MESSAGE = "Too many requests, please try again later."


def limit_string(settings: Settings) -> str:
    return f"{settings.rate_limit_max_requests}/{settings.rate_limit_window_seconds} seconds"


def client_address_key(settings: Settings) -> Callable[[Request], str]:
    """Key requests by socket peer; X-Forwarded-For counts only behind a trusted proxy."""

    def key(request: Request) -> str:
        if settings.trust_proxy:
            forwarded = request.headers.get("x-forwarded-for", "")
            first_hop = forwarded.split(",")[0].strip()
            if first_hop:
                return first_hop
        return get_remote_address(request)

    return key


def build_limiter(settings: Settings) -> Limiter:
    return Limiter(
        key_func=client_address_key(settings),
        default_limits=[limit_string(settings)],
        strategy="fixed-window",
        storage_uri="memory://",
        headers_enabled=True,
    )


# SlowAPIMiddleware calls this directly, so it has to stay synchronous
def rate_limit_exceeded(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    logger.warning("Rate limit exceeded for %s on %s", get_remote_address(request), request.url.path)
    response = JSONResponse({"error": RATE_LIMIT_MESSAGE}, status_code=429)
    view_rate_limit = getattr(request.state, "view_rate_limit", None)
    if view_rate_limit is not None:
        response = request.app.state.limiter._inject_headers(response, view_rate_limit)
    return response
