import logging

from fastapi import Request
from fastapi.responses import JSONResponse, Response
from starlette.middleware.base import BaseHTTPMiddleware

from .config import Settings

logger = logging.getLogger(__name__)

ALLOW_METHODS = "GET, POST, OPTIONS"
ALLOW_HEADERS = "Content-Type"


class OriginAllowlistMiddleware(BaseHTTPMiddleware):
    """Only allowlisted origins get CORS headers; other browser origins get 403.

    Requests that carry no Origin header (health probes, server-to-server
    calls) pass through untouched, except preflights, which need one.
    """

    def __init__(self, app, settings: Settings):
        super().__init__(app)
        self.settings = settings

    def _cors_headers(self, origin: str) -> dict:
        return {
            "Access-Control-Allow-Origin": "*" if self.settings.allow_any_origin else origin,
            "Vary": "Origin",
        }

    async def dispatch(self, request: Request, call_next):
        origin = request.headers.get("origin")
        allowed = self.settings.is_origin_allowed(origin)

        if request.method == "OPTIONS":
            if not allowed:
                logger.warning("Rejected preflight from origin %r", origin)
                return JSONResponse({"error": "Origin not allowed"}, status_code=403)
            headers = self._cors_headers(origin)
            headers.update(
                {
                    "Access-Control-Allow-Methods": ALLOW_METHODS,
                    "Access-Control-Allow-Headers": ALLOW_HEADERS,
                    "Access-Control-Max-Age": "3600",
                }
            )
            return Response(status_code=204, headers=headers)

        if origin and not allowed:
            logger.warning("Rejected %s %s from origin %r", request.method, request.url.path, origin)
            return JSONResponse({"error": "Origin not allowed"}, status_code=403)

        response = await call_next(request)
        if origin:
            for key, value in self._cors_headers(origin).items():
                response.headers[key] = value
        return response
