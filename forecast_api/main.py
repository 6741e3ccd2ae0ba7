import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import Settings, get_settings
from .gemini import GeminiInvoker
from .middleware import OriginAllowlistMiddleware
from .mock_data import CannedPipeline
from .pipeline import SuggestionPipeline
from .rate_limit import build_limiter, rate_limit_exceeded
from .retry import RetryOrchestrator
from .suggestions import router as suggestions_router

logger = logging.getLogger(__name__)


def build_pipeline(settings: Settings):
    if settings.use_mock:
        logger.info("USE_MOCK_GEMINI is on; serving canned suggestions")
        return CannedPipeline()
    orchestrator = RetryOrchestrator(GeminiInvoker(settings), max_retries=settings.max_retries)
    return SuggestionPipeline(
        orchestrator,
        combined_call=settings.combined_call,
        resolve_day_night=settings.resolve_day_night,
    )


async def _http_error(request: Request, exc: StarletteHTTPException):
    return JSONResponse({"error": str(exc.detail)}, status_code=exc.status_code, headers=getattr(exc, "headers", None))


async def _validation_error(request: Request, exc: RequestValidationError):
    return JSONResponse(
        {"error": "Invalid input", "details": jsonable_encoder(exc.errors())},
        status_code=400,
    )


def create_app(settings: Optional[Settings] = None, pipeline=None) -> FastAPI:
    settings = settings or get_settings()
    logging.basicConfig(level=settings.log_level)

    app = FastAPI(title="Family Weather Wardrobe API", version="0.1.0")
    app.state.settings = settings
    app.state.pipeline = pipeline or build_pipeline(settings)
    app.state.limiter = limiter = build_limiter(settings)

    app.add_exception_handler(StarletteHTTPException, _http_error)
    app.add_exception_handler(RequestValidationError, _validation_error)
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded)

    # last added runs first: origin checks happen before requests are counted
    app.add_middleware(SlowAPIMiddleware)
    app.add_middleware(OriginAllowlistMiddleware, settings=settings)

    @app.get("/healthz", response_class=PlainTextResponse)
    @limiter.exempt
    def healthz() -> str:
        return "ok"

    app.include_router(suggestions_router)
    return app
