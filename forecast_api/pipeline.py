"""Weather first, then clothing suggestions, then day/night icon resolution.

Suggestions depend on the forecast, so the stages always run one after the
other. A failed forecast or suggestion stage fails the whole request; a failed
sunrise/sunset lookup only falls back to default times.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from functools import partial
from typing import List, Optional

from .errors import ForecastServiceError, PipelineError
from .gemini import suggestions_schema
from .icons import (
    DAY_PARTS,
    DEFAULT_SUNRISE,
    DEFAULT_SUNSET,
    condition_to_icon,
    format_clock,
    is_night,
    night_adjust_icon,
)
from .prompts import (
    build_clothing_prompt,
    build_daily_prompt,
    build_sun_times_prompt,
    build_travel_clothing_prompt,
    build_travel_prompt,
    build_travel_weather_prompt,
    build_weather_prompt,
)
from .retry import ModelCall, RetryOrchestrator
from .schemas import CombinedResult, DayPart, ForecastData, SuggestionEntry, SuggestionRequest, SunTimes, WeatherReport
from .validation import validate_combined, validate_suggestions, validate_sun_times, validate_weather

logger = logging.getLogger(__name__)

WEATHER_BASE_DELAY_MS = 1000
SUGGESTIONS_BASE_DELAY_MS = 1000
COMBINED_BASE_DELAY_MS = 500
SUN_TIMES_BASE_DELAY_MS = 400


class PipelineState(str, Enum):
    START = "start"
    FETCHING_WEATHER = "fetching_weather"
    WEATHER_READY = "weather_ready"
    GENERATING_SUGGESTIONS = "generating_suggestions"
    SUGGESTIONS_READY = "suggestions_ready"
    RESOLVING_DAY_NIGHT = "resolving_day_night"
    DONE = "done"
    FAILED = "failed"


@dataclass
class PipelineRun:
    state: PipelineState = PipelineState.START
    history: List[PipelineState] = field(default_factory=lambda: [PipelineState.START])
    result: Optional[CombinedResult] = None

    def advance(self, state: PipelineState) -> None:
        logger.debug("pipeline %s -> %s", self.state.value, state.value)
        self.state = state
        self.history.append(state)


def forecast_from_report(report: WeatherReport) -> ForecastData:
    readings = [
        (report.temp07, report.condition07),
        (report.temp12, report.condition12),
        (report.temp17, report.condition17),
        (report.temp22, report.condition22),
    ]
    day_parts = [
        DayPart(
            period=period,
            time=clock,
            temp=temp,
            condition=condition,
            conditionIcon=condition_to_icon(condition),
        )
        for (period, clock, _minutes), (temp, condition) in zip(DAY_PARTS, readings)
    ]
    return ForecastData(
        location=report.location,
        highTemp=report.highTemp,
        lowTemp=report.lowTemp,
        dayParts=day_parts,
        dateRange=report.dateRange or None,
    )


def apply_day_night(forecast: ForecastData, sun_times: SunTimes) -> ForecastData:
    minutes_by_time = {clock: minutes for _period, clock, minutes in DAY_PARTS}
    adjusted = []
    for part in forecast.dayParts:
        minutes = minutes_by_time.get(part.time)
        night = minutes is not None and is_night(minutes, sun_times.sunrise, sun_times.sunset)
        adjusted.append(
            part.model_copy(
                update={
                    "isNight": night,
                    "conditionIcon": night_adjust_icon(condition_to_icon(part.condition), night),
                }
            )
        )
    return forecast.model_copy(
        update={"dayParts": adjusted, "sunrise": sun_times.sunrise, "sunset": sun_times.sunset}
    )


def order_suggestions(roster: List[str], suggestions: List[SuggestionEntry]) -> List[SuggestionEntry]:
    """Reorder validated suggestions to follow the roster; extra entries naming no roster member are dropped."""
    remaining = list(suggestions)
    ordered: List[SuggestionEntry] = []
    for member in roster:
        for index, entry in enumerate(remaining):
            if entry.member == member:
                ordered.append(remaining.pop(index))
                break
        else:
            logger.warning("No suggestion returned for family member %r", member)
    for entry in remaining:
        logger.warning("Dropping suggestion for unknown member %r", entry.member)
    return ordered


class SuggestionPipeline:
    def __init__(
        self,
        orchestrator: RetryOrchestrator,
        combined_call: bool = False,
        resolve_day_night: bool = True,
    ):
        self.orchestrator = orchestrator
        self.combined_call = combined_call
        self.resolve_day_night = resolve_day_night

    def run(self, request: SuggestionRequest) -> CombinedResult:
        return self.execute(request).result

    def execute(self, request: SuggestionRequest, run: Optional[PipelineRun] = None) -> PipelineRun:
        run = run or PipelineRun()
        try:
            if self.combined_call:
                forecast, suggestions = self._combined(request, run)
            else:
                forecast, suggestions = self._sequential(request, run)
            run.advance(PipelineState.RESOLVING_DAY_NIGHT)
            forecast = apply_day_night(forecast, self._sun_times(request, forecast))
        except Exception:
            run.advance(PipelineState.FAILED)
            raise
        run.result = CombinedResult(weather=forecast, suggestions=suggestions)
        run.advance(PipelineState.DONE)
        return run

    def _sequential(self, request: SuggestionRequest, run: PipelineRun):
        run.advance(PipelineState.FETCHING_WEATHER)
        if request.is_travel:
            weather_prompt = build_travel_weather_prompt(request.destinationAndDuration.strip())
        else:
            weather_prompt = build_weather_prompt(request.day, request.location_descriptor())
        report = self._call(
            ModelCall(
                name="weather",
                prompt=weather_prompt,
                validate=validate_weather,
                grounding=True,
                temperature=0.2,
                base_delay_ms=WEATHER_BASE_DELAY_MS,
            )
        )
        run.advance(PipelineState.WEATHER_READY)
        logger.info("Forecast ready for %s", report.location)

        run.advance(PipelineState.GENERATING_SUGGESTIONS)
        if request.is_travel:
            clothing_prompt = build_travel_clothing_prompt(request.family, report)
        else:
            clothing_prompt = build_clothing_prompt(request.family, report, request.schedule)
        suggestions = self._call(
            ModelCall(
                name="suggestions",
                prompt=clothing_prompt,
                validate=partial(validate_suggestions, roster=request.family),
                schema=suggestions_schema(),
                temperature=0.7,
                base_delay_ms=SUGGESTIONS_BASE_DELAY_MS,
            )
        )
        ordered = order_suggestions(request.family, suggestions)
        run.advance(PipelineState.SUGGESTIONS_READY)
        return forecast_from_report(report), ordered

    def _combined(self, request: SuggestionRequest, run: PipelineRun):
        run.advance(PipelineState.FETCHING_WEATHER)
        if request.is_travel:
            prompt = build_travel_prompt(request.destinationAndDuration.strip(), request.family)
        else:
            prompt = build_daily_prompt(request.family, request.day, request.schedule, request.location_descriptor())
        combined = self._call(
            ModelCall(
                name="combined",
                prompt=prompt,
                validate=partial(validate_combined, roster=request.family),
                grounding=True,
                base_delay_ms=COMBINED_BASE_DELAY_MS,
            )
        )
        run.advance(PipelineState.WEATHER_READY)
        run.advance(PipelineState.GENERATING_SUGGESTIONS)
        ordered = order_suggestions(request.family, combined.suggestions or [])
        run.advance(PipelineState.SUGGESTIONS_READY)
        return combined.weather, ordered

    def _call(self, call: ModelCall):
        try:
            return self.orchestrator.run(call)
        except ForecastServiceError as exc:
            logger.error("%s stage failed: %s", call.name, exc, exc_info=True)
            raise PipelineError(call.name, str(exc)) from exc

    def _sun_times(self, request: SuggestionRequest, forecast: ForecastData) -> SunTimes:
        default = SunTimes(sunrise=DEFAULT_SUNRISE, sunset=DEFAULT_SUNSET)
        # a trip spans several days, so a single sunrise/sunset lookup is not meaningful
        if not self.resolve_day_night or request.is_travel:
            return default
        try:
            sun_times = self.orchestrator.run(
                ModelCall(
                    name="sun_times",
                    prompt=build_sun_times_prompt(request.day, forecast.location),
                    validate=validate_sun_times,
                    grounding=True,
                    temperature=0.0,
                    base_delay_ms=SUN_TIMES_BASE_DELAY_MS,
                )
            )
        except ForecastServiceError as exc:
            logger.warning(
                "Sunrise/sunset lookup failed, using %s/%s: %s",
                format_clock(DEFAULT_SUNRISE),
                format_clock(DEFAULT_SUNSET),
                exc,
            )
            return default
        logger.info(
            "Sunrise %s, sunset %s for %s",
            format_clock(sun_times.sunrise),
            format_clock(sun_times.sunset),
            forecast.location,
        )
        return sun_times
