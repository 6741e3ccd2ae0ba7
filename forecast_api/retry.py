"""Bounded, jittered retry loop around one kind of model call.

Every attempt runs invoke -> extract -> validate and reports an explicit
outcome (``Ok``, ``RetryableErr`` or ``TerminalErr``). The loop only looks at
that tag to decide whether to return, back off and try again, or give up.
"""

import logging
import random
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Generic, Optional, TypeVar, Union

from google.genai import errors as genai_errors
from pydantic import ValidationError

from .errors import ModelOutputError, RetriesExhaustedError
from .extraction import parse_model_json
from .gemini import ModelInvoker
from .schemas import ExtractedJson

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_RETRIES = 3

# client errors that another attempt cannot fix (bad request, auth, unknown model)
TERMINAL_STATUS_CODES = {400, 401, 403, 404}


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class RetryableErr:
    reason: str
    raw_text: str = ""


@dataclass(frozen=True)
class TerminalErr:
    reason: str
    raw_text: str = ""


AttemptResult = Union[Ok, RetryableErr, TerminalErr]


@dataclass(frozen=True)
class ModelCall(Generic[T]):
    """Everything needed to run and validate one kind of model call."""

    name: str
    prompt: str
    validate: Callable[[ExtractedJson], T]
    grounding: bool = False
    schema: Optional[Dict[str, Any]] = None
    temperature: float = 0.4
    base_delay_ms: int = 1000


def _classify_model_error(exc: Exception) -> AttemptResult:
    if isinstance(exc, genai_errors.ClientError) and getattr(exc, "code", None) in TERMINAL_STATUS_CODES:
        return TerminalErr(f"{type(exc).__name__}: {exc}")
    return RetryableErr(f"{type(exc).__name__}: {exc}")


class RetryOrchestrator:
    def __init__(
        self,
        invoker: ModelInvoker,
        max_retries: int = DEFAULT_MAX_RETRIES,
        sleep: Callable[[float], None] = time.sleep,
        rng: Optional[random.Random] = None,
    ):
        self.invoker = invoker
        self.max_retries = max(1, max_retries)
        self._sleep = sleep
        self._rng = rng or random.Random()

    def backoff_seconds(self, call: ModelCall, completed_attempts: int) -> float:
        base_ms = call.base_delay_ms * (2 ** completed_attempts)
        return base_ms * self._rng.uniform(0.5, 1.5) / 1000.0

    def attempt(self, call: ModelCall[T]) -> AttemptResult:
        try:
            raw_text = self.invoker.generate(
                call.prompt,
                grounding=call.grounding,
                schema=None if call.grounding else call.schema,
                temperature=call.temperature,
            )
        except Exception as exc:
            return _classify_model_error(exc)

        if not raw_text or not raw_text.strip():
            return RetryableErr("model returned an empty response")
        try:
            payload = parse_model_json(raw_text)
        except ValueError as exc:
            return RetryableErr(f"JSON parse failure: {exc}", raw_text)
        try:
            return Ok(call.validate(payload))
        except (ModelOutputError, ValidationError) as exc:
            return RetryableErr(f"invalid {call.name} payload: {exc}", raw_text)

    def run(self, call: ModelCall[T]) -> T:
        last_reason: Optional[str] = None
        last_raw = ""
        for attempt in range(1, self.max_retries + 1):
            result = self.attempt(call)
            if isinstance(result, Ok):
                if attempt > 1:
                    logger.info("%s call succeeded on attempt %d", call.name, attempt)
                return result.value

            last_reason = result.reason
            last_raw = result.raw_text or last_raw
            logger.warning(
                "%s attempt %d/%d failed: %s", call.name, attempt, self.max_retries, result.reason
            )
            if isinstance(result, TerminalErr):
                logger.error("%s call failed with a non-retryable error", call.name)
                raise RetriesExhaustedError(attempt, last_reason)
            if attempt < self.max_retries:
                self._sleep(self.backoff_seconds(call, attempt))

        logger.error("%s call gave up after %d attempts; last raw response: %r", call.name, self.max_retries, last_raw)
        raise RetriesExhaustedError(self.max_retries, last_reason)
