"""Shared fixtures: scripted model invokers and app clients that never touch the network."""

import json
from dataclasses import replace
from typing import Any, Callable, Dict, List, Optional, Union

import pytest
from fastapi.testclient import TestClient

from forecast_api.config import Settings
from forecast_api.main import create_app
from forecast_api.retry import RetryOrchestrator

WEATHER_PAYLOAD: Dict[str, Any] = {
    "location": "Zurich, Switzerland",
    "highTemp": 21,
    "lowTemp": 9,
    "temp07": 10,
    "temp12": 19,
    "temp17": 20,
    "temp22": 12,
    "condition07": "Light rain showers",
    "condition12": "Partly cloudy",
    "condition17": "Sunny",
    "condition22": "Partly cloudy",
}

SUN_PAYLOAD = {"sunrise": "06:45", "sunset": "19:30"}


def suggestion(member: str) -> Dict[str, Any]:
    return {"member": member, "outfit": [f"Jacket for {member}"], "notes": f"Notes for {member}"}


Outcome = Union[str, Exception]


class ScriptedInvoker:
    """Returns (or raises) the scripted outcomes in order, recording every call."""

    def __init__(self, outcomes: List[Outcome]):
        self.outcomes = list(outcomes)
        self.calls: List[Dict[str, Any]] = []

    def generate(self, prompt, grounding=False, schema=None, temperature=0.4):
        self.calls.append({"prompt": prompt, "grounding": grounding, "schema": schema})
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class RoutingInvoker:
    """Answers by prompt kind: weather, clothing/packing, or sunrise/sunset."""

    def __init__(
        self,
        weather: Optional[Callable[[], Outcome]] = None,
        suggestions: Optional[Callable[[], Outcome]] = None,
        sun: Optional[Callable[[], Outcome]] = None,
    ):
        self.weather = weather or (lambda: json.dumps(WEATHER_PAYLOAD))
        self.suggestions = suggestions or (lambda: json.dumps([suggestion("Adult")]))
        self.sun = sun or (lambda: json.dumps(SUN_PAYLOAD))
        self.calls: List[Dict[str, Any]] = []

    def _kind(self, prompt: str) -> str:
        lowered = prompt.lower()
        if "sunrise and sunset" in lowered:
            return "sun"
        if "clothing suggestions" in lowered or "packing list" in lowered:
            return "suggestions"
        return "weather"

    def generate(self, prompt, grounding=False, schema=None, temperature=0.4):
        kind = self._kind(prompt)
        self.calls.append({"kind": kind, "prompt": prompt, "grounding": grounding, "schema": schema})
        outcome = getattr(self, kind)()
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def kinds(self) -> List[str]:
        return [call["kind"] for call in self.calls]


def no_sleep(_seconds: float) -> None:
    return None


def make_orchestrator(invoker, max_retries: int = 3) -> RetryOrchestrator:
    return RetryOrchestrator(invoker, max_retries=max_retries, sleep=no_sleep)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        allowed_origins=("https://app.example.com",),
        rate_limit_max_requests=100,
        rate_limit_window_seconds=60,
        log_level="WARNING",
    )


@pytest.fixture
def mock_settings(settings: Settings) -> Settings:
    return replace(settings, use_mock=True)


@pytest.fixture
def mock_client(mock_settings: Settings) -> TestClient:
    return TestClient(create_app(mock_settings))
