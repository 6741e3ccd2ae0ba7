import json
import logging
from typing import Any

from fastapi import APIRouter, Body, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from .errors import PipelineError
from .schemas import SuggestionRequest

logger = logging.getLogger(__name__)

router = APIRouter()

GENERIC_FAILURE = "Failed to generate weather and clothing suggestions. Please try again."


@router.post("/suggestions")
def create_suggestions(request: Request, payload: Any = Body(...)):
    try:
        body = SuggestionRequest.model_validate(payload)
    except ValidationError as exc:
        details = json.loads(exc.json(include_url=False))
        logger.warning("Validation failed: %s", details)
        return JSONResponse({"error": "Invalid input", "details": details}, status_code=400)

    pipeline = request.app.state.pipeline
    try:
        result = pipeline.run(body)
    except PipelineError as exc:
        logger.error("Suggestion pipeline failed at %s: %s", exc.stage, exc)
        return JSONResponse({"error": GENERIC_FAILURE}, status_code=500)
    except Exception as exc:
        logger.error("Unexpected suggestion failure: %s", exc, exc_info=True)
        return JSONResponse({"error": GENERIC_FAILURE}, status_code=500)

    logger.info(
        "Served %s suggestions for %d family members",
        body.requestType,
        len(result.suggestions or []),
    )
    return JSONResponse(result.model_dump(exclude_none=True))
