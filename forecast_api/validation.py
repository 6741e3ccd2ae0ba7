"""Semantic checks applied to parsed model output before an attempt is accepted.

Each validator takes the extracted JSON and either returns a typed value or
raises ``ModelOutputError`` / pydantic ``ValidationError``, which the retry
loop treats as a retryable failure.
"""

from collections import Counter
from typing import Any, Dict, List, Optional

from .errors import ModelOutputError
from .icons import DAY_PARTS, condition_to_icon, parse_clock
from .schemas import CombinedResult, DayPart, ExtractedJson, ForecastData, SunTimes, SuggestionEntry, WeatherReport


def _non_empty_text(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def validate_weather(payload: ExtractedJson) -> WeatherReport:
    if not isinstance(payload, dict):
        raise ModelOutputError("weather payload must be a JSON object")
    if not _non_empty_text(payload.get("location")):
        raise ModelOutputError("weather payload is missing a location")
    return WeatherReport.model_validate(payload)


def validate_suggestions(payload: ExtractedJson, roster: Optional[List[str]] = None) -> List[SuggestionEntry]:
    if not isinstance(payload, list):
        raise ModelOutputError("suggestions payload must be a JSON array")
    entries = [SuggestionEntry.model_validate(item) for item in payload]
    if roster is not None:
        ensure_roster_covered(roster, entries)
    return entries


def ensure_roster_covered(roster: List[str], entries: List[SuggestionEntry]) -> None:
    """Every roster label needs its own entry whose member matches it exactly."""
    unclaimed = Counter(entry.member for entry in entries)
    missing = []
    for member in roster:
        if unclaimed[member]:
            unclaimed[member] -= 1
        else:
            missing.append(member)
    if missing:
        raise ModelOutputError(f"no suggestion for family member(s) {missing!r}")


def _match_day_part(raw_parts: List[Dict[str, Any]], index: int) -> Optional[Dict[str, Any]]:
    period, clock, _minutes = DAY_PARTS[index]
    for part in raw_parts:
        if str(part.get("period", "")).strip().lower() == period.lower():
            return part
    for part in raw_parts:
        if str(part.get("time", "")).strip() == clock:
            return part
    if index < len(raw_parts):
        return raw_parts[index]
    return None


def normalize_day_parts(raw_parts: Any) -> List[DayPart]:
    """Map model-supplied day parts onto the four fixed periods and re-derive icons."""
    if not isinstance(raw_parts, list):
        raise ModelOutputError("weather.dayParts must be an array")
    candidates = [part for part in raw_parts if isinstance(part, dict)]
    normalized: List[DayPart] = []
    for index, (period, clock, _minutes) in enumerate(DAY_PARTS):
        part = _match_day_part(candidates, index)
        if part is None or part.get("temp") is None:
            raise ModelOutputError(f"weather.dayParts has no {period} entry")
        condition = str(part.get("condition") or "").strip()
        normalized.append(
            DayPart(
                period=period,
                time=clock,
                temp=part["temp"],
                condition=condition,
                conditionIcon=condition_to_icon(condition),
            )
        )
    return normalized


def validate_combined(payload: ExtractedJson, roster: Optional[List[str]] = None) -> CombinedResult:
    if not isinstance(payload, dict):
        raise ModelOutputError("combined payload must be a JSON object")
    weather = payload.get("weather")
    suggestions = payload.get("suggestions")
    if not isinstance(weather, dict) or not weather:
        raise ModelOutputError("Missing weather object in model output")
    if suggestions is None:
        raise ModelOutputError("Missing suggestions in model output")
    if not _non_empty_text(weather.get("location")):
        raise ModelOutputError("weather object is missing a location")
    forecast = ForecastData(
        location=weather["location"].strip(),
        highTemp=weather.get("highTemp"),
        lowTemp=weather.get("lowTemp"),
        dayParts=normalize_day_parts(weather.get("dayParts")),
        dateRange=weather.get("dateRange") or None,
    )
    return CombinedResult(weather=forecast, suggestions=validate_suggestions(suggestions, roster))


def validate_sun_times(payload: ExtractedJson) -> SunTimes:
    if not isinstance(payload, dict):
        raise ModelOutputError("sun times payload must be a JSON object")
    try:
        sunrise = parse_clock(payload.get("sunrise"))
        sunset = parse_clock(payload.get("sunset"))
    except (ValueError, OverflowError) as exc:
        raise ModelOutputError(f"unparseable sun times: {exc}") from exc
    if sunrise >= sunset:
        raise ModelOutputError(f"sunrise {sunrise} is not before sunset {sunset}")
    return SunTimes(sunrise=sunrise, sunset=sunset)
