import logging
import os
import threading
from typing import Any, Dict, Optional, Protocol

import google.genai as genai
from google.genai import types

from .config import Settings
from .schemas import RawModelText

logger = logging.getLogger(__name__)


class ModelInvoker(Protocol):
    def generate(
        self,
        prompt: str,
        grounding: bool = False,
        schema: Optional[Dict[str, Any]] = None,
        temperature: float = 0.4,
    ) -> RawModelText:
        ...


def suggestions_schema() -> dict:
    return {
        "type": "ARRAY",
        "items": {
            "type": "OBJECT",
            "properties": {
                "member": {"type": "STRING"},
                "outfit": {"type": "ARRAY", "items": {"type": "STRING"}},
                "notes": {"type": "STRING"},
            },
            "required": ["member", "outfit", "notes"],
        },
    }


def _configure_vertex_env(settings: Settings) -> None:
    os.environ.setdefault("GOOGLE_CLOUD_PROJECT", settings.project_id)
    os.environ.setdefault("GOOGLE_CLOUD_LOCATION", settings.location)
    os.environ.setdefault("GOOGLE_GENAI_USE_VERTEXAI", "True")


def _response_text(response: Any) -> str:
    text = getattr(response, "text", None)
    if text:
        return text
    chunks = []
    for candidate in getattr(response, "candidates", None) or []:
        content = getattr(candidate, "content", None)
        for part in getattr(content, "parts", None) or []:
            if getattr(part, "text", None):
                chunks.append(part.text)
    return "".join(chunks)


class GeminiInvoker:
    """Single generate_content call against Gemini; retries live elsewhere."""

    def __init__(self, settings: Settings, client: Optional[genai.Client] = None):
        self._settings = settings
        self._client = client
        self._lock = threading.Lock()

    @property
    def client(self) -> genai.Client:
        with self._lock:
            if self._client is None:
                if self._settings.api_key:
                    self._client = genai.Client(api_key=self._settings.api_key)
                else:
                    _configure_vertex_env(self._settings)
                    self._client = genai.Client(http_options=types.HttpOptions(api_version="v1"))
            return self._client

    def _config(
        self,
        grounding: bool,
        schema: Optional[Dict[str, Any]],
        temperature: float,
    ) -> types.GenerateContentConfig:
        if grounding:
            # search grounding cannot be combined with a response schema
            return types.GenerateContentConfig(
                tools=[types.Tool(google_search=types.GoogleSearch())],
                temperature=temperature,
                top_p=0.8,
                max_output_tokens=4096,
            )
        return types.GenerateContentConfig(
            automatic_function_calling=types.AutomaticFunctionCallingConfig(disable=True),
            response_mime_type="application/json",
            response_schema=schema,
            temperature=temperature,
            top_p=0.95,
            max_output_tokens=4096,
        )

    def generate(
        self,
        prompt: str,
        grounding: bool = False,
        schema: Optional[Dict[str, Any]] = None,
        temperature: float = 0.4,
    ) -> RawModelText:
        response = self.client.models.generate_content(
            model=self._settings.model_name,
            contents=[types.Content(role="user", parts=[types.Part.from_text(text=prompt)])],
            config=self._config(grounding, schema, temperature),
        )
        text = _response_text(response).strip()
        logger.debug("Gemini returned %d characters (grounding=%s)", len(text), grounding)
        return RawModelText(text)
