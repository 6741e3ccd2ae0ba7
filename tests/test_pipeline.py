import json

import pytest

from forecast_api.errors import PipelineError
from forecast_api.icons import CLEAR_NIGHT, PARTLY_CLOUDY, PARTLY_CLOUDY_NIGHT, RAIN, SUNNY
from forecast_api.pipeline import PipelineRun, PipelineState, SuggestionPipeline, order_suggestions
from forecast_api.schemas import SuggestionEntry, SuggestionRequest

from conftest import WEATHER_PAYLOAD, RoutingInvoker, ScriptedInvoker, make_orchestrator, suggestion


def location_request(family, **overrides) -> SuggestionRequest:
    body = {"requestType": "location", "location": "Zurich", "family": family}
    body.update(overrides)
    return SuggestionRequest.model_validate(body)


def travel_request(family) -> SuggestionRequest:
    return SuggestionRequest.model_validate(
        {"requestType": "travel", "destinationAndDuration": "Paris over Christmas", "family": family}
    )


class TestOrdering:
    def test_model_order_is_replaced_by_roster_order(self):
        invoker = RoutingInvoker(
            suggestions=lambda: json.dumps([suggestion("C"), suggestion("A"), suggestion("B")]),
        )
        pipeline = SuggestionPipeline(make_orchestrator(invoker))

        result = pipeline.run(location_request(["A", "B", "C"]))

        assert [entry.member for entry in result.suggestions] == ["A", "B", "C"]

    def test_unknown_members_are_dropped_and_duplicates_matched_in_turn(self):
        entries = [
            SuggestionEntry(member="Adult", outfit=["Coat"], notes="first"),
            SuggestionEntry(member="Grandpa", outfit=["Hat"], notes=""),
            SuggestionEntry(member="Adult", outfit=["Scarf"], notes="second"),
        ]
        ordered = order_suggestions(["Adult", "Adult"], entries)
        assert [entry.notes for entry in ordered] == ["first", "second"]

    def test_members_must_match_roster_exactly(self):
        invoker = RoutingInvoker(
            suggestions=lambda: json.dumps([suggestion("adult"), suggestion("child")]),
        )
        with pytest.raises(PipelineError) as excinfo:
            SuggestionPipeline(make_orchestrator(invoker)).run(location_request(["Adult", "Child"]))

        assert excinfo.value.stage == "suggestions"
        assert invoker.kinds() == ["weather", "suggestions", "suggestions", "suggestions"]

    def test_missing_member_is_retried_until_covered(self):
        replies = [
            json.dumps([suggestion("Adult")]),
            json.dumps([suggestion("Child"), suggestion("Adult"), suggestion("Dog")]),
        ]
        invoker = RoutingInvoker(suggestions=lambda: replies.pop(0))

        result = SuggestionPipeline(make_orchestrator(invoker)).run(location_request(["Adult", "Child"]))

        assert invoker.kinds().count("suggestions") == 2
        assert [entry.member for entry in result.suggestions] == ["Adult", "Child"]


class TestSequentialPipeline:
    def test_weather_then_suggestions_then_sun_times(self):
        invoker = RoutingInvoker()
        run = SuggestionPipeline(make_orchestrator(invoker)).execute(location_request(["Adult"]))

        assert invoker.kinds() == ["weather", "suggestions", "sun"]
        assert [call["grounding"] for call in invoker.calls] == [True, False, True]
        assert invoker.calls[1]["schema"]["type"] == "ARRAY"
        assert run.history == [
            PipelineState.START,
            PipelineState.FETCHING_WEATHER,
            PipelineState.WEATHER_READY,
            PipelineState.GENERATING_SUGGESTIONS,
            PipelineState.SUGGESTIONS_READY,
            PipelineState.RESOLVING_DAY_NIGHT,
            PipelineState.DONE,
        ]

        weather = run.result.weather
        assert weather.location == "Zurich, Switzerland"
        assert [part.time for part in weather.dayParts] == ["07:00", "12:00", "17:00", "22:00"]
        assert [part.period for part in weather.dayParts] == ["Morning", "Afternoon", "Evening", "Night"]
        assert (weather.sunrise, weather.sunset) == (405, 1170)

    def test_icons_follow_sun_times(self):
        invoker = RoutingInvoker()
        weather = SuggestionPipeline(make_orchestrator(invoker)).run(location_request(["Adult"])).weather

        icons = [part.conditionIcon for part in weather.dayParts]
        assert icons == [RAIN, PARTLY_CLOUDY, SUNNY, PARTLY_CLOUDY_NIGHT]
        assert [part.isNight for part in weather.dayParts] == [False, False, False, True]

    def test_early_sunset_turns_evening_into_night(self):
        invoker = RoutingInvoker(sun=lambda: json.dumps({"sunrise": "08:10", "sunset": "16:40"}))
        weather = SuggestionPipeline(make_orchestrator(invoker)).run(location_request(["Adult"])).weather

        assert [part.isNight for part in weather.dayParts] == [True, False, True, True]
        assert weather.dayParts[2].conditionIcon == CLEAR_NIGHT

    def test_sun_time_failure_falls_back_to_defaults(self):
        invoker = RoutingInvoker(sun=lambda: ConnectionError("search unavailable"))
        result = SuggestionPipeline(make_orchestrator(invoker)).run(location_request(["Adult"]))

        assert (result.weather.sunrise, result.weather.sunset) == (390, 1110)
        assert result.suggestions[0].member == "Adult"
        assert invoker.kinds().count("sun") == 3

    def test_day_night_lookup_can_be_disabled(self):
        invoker = RoutingInvoker()
        result = SuggestionPipeline(make_orchestrator(invoker), resolve_day_night=False).run(
            location_request(["Adult"])
        )
        assert "sun" not in invoker.kinds()
        assert result.weather.sunset == 1110

    def test_weather_failure_skips_suggestions(self):
        invoker = RoutingInvoker(weather=lambda: "no forecast today")
        run = PipelineRun()

        with pytest.raises(PipelineError) as excinfo:
            SuggestionPipeline(make_orchestrator(invoker)).execute(location_request(["Adult"]), run)

        assert excinfo.value.stage == "weather"
        assert invoker.kinds() == ["weather"] * 3
        assert run.state == PipelineState.FAILED

    def test_suggestion_failure_fails_the_request(self):
        invoker = RoutingInvoker(suggestions=lambda: RuntimeError("model overloaded"))
        with pytest.raises(PipelineError) as excinfo:
            SuggestionPipeline(make_orchestrator(invoker)).run(location_request(["Adult"]))
        assert excinfo.value.stage == "suggestions"

    def test_travel_uses_packing_prompt_and_skips_sun_lookup(self):
        invoker = RoutingInvoker(
            weather=lambda: json.dumps({**WEATHER_PAYLOAD, "location": "Paris, France", "dateRange": "Dec 24 - Dec 28"}),
        )
        result = SuggestionPipeline(make_orchestrator(invoker)).run(travel_request(["Adult"]))

        assert invoker.kinds() == ["weather", "suggestions"]
        assert "Paris over Christmas" in invoker.calls[0]["prompt"]
        assert "packing list" in invoker.calls[1]["prompt"]
        assert result.weather.dateRange == "Dec 24 - Dec 28"

    def test_schedule_reaches_clothing_prompt(self):
        invoker = RoutingInvoker()
        SuggestionPipeline(make_orchestrator(invoker)).run(location_request(["Adult"], schedule="Morning run"))
        assert '"Morning run"' in invoker.calls[1]["prompt"]


class TestCombinedPipeline:
    def combined_payload(self, members):
        return json.dumps(
            {
                "weather": {
                    "location": "Zurich, Switzerland",
                    "highTemp": 20.4,
                    "lowTemp": 8,
                    "dayParts": [
                        {"period": "Night", "temp": 9, "condition": "Clear", "conditionIcon": "SUNNY", "time": "22:00"},
                        {"period": "Morning", "temp": 8, "condition": "Fog", "conditionIcon": "CLOUDY", "time": "07:00"},
                        {"period": "Afternoon", "temp": 20, "condition": "Sunny", "conditionIcon": "SUNNY", "time": "12:00"},
                        {"period": "Evening", "temp": 15, "condition": "Drizzle", "conditionIcon": "RAIN", "time": "17:00"},
                    ],
                },
                "suggestions": [suggestion(member) for member in members],
            }
        )

    def test_single_call_with_normalized_day_parts(self):
        invoker = ScriptedInvoker(
            [
                "```json\n" + self.combined_payload(["B", "A"]) + "\n```",
                json.dumps({"sunrise": "06:30", "sunset": "18:30"}),
            ]
        )
        result = SuggestionPipeline(make_orchestrator(invoker), combined_call=True).run(location_request(["A", "B"]))

        assert len(invoker.calls) == 2
        assert invoker.calls[0]["grounding"] is True
        assert result.weather.highTemp == 20
        assert [part.period for part in result.weather.dayParts] == ["Morning", "Afternoon", "Evening", "Night"]
        assert [part.conditionIcon for part in result.weather.dayParts] == [PARTLY_CLOUDY, SUNNY, RAIN, CLEAR_NIGHT]
        assert [entry.member for entry in result.suggestions] == ["A", "B"]

    def test_missing_weather_is_retried(self):
        invoker = ScriptedInvoker(
            [
                json.dumps({"weather": {}, "suggestions": []}),
                self.combined_payload(["A"]),
                json.dumps({"sunrise": "06:30", "sunset": "18:30"}),
            ]
        )
        result = SuggestionPipeline(make_orchestrator(invoker), combined_call=True).run(location_request(["A"]))
        assert result.weather.location == "Zurich, Switzerland"
        assert len(invoker.calls) == 3

    def test_roster_mismatch_is_retried(self):
        invoker = ScriptedInvoker(
            [
                self.combined_payload(["a", "b"]),
                self.combined_payload(["A", "B"]),
                json.dumps({"sunrise": "06:30", "sunset": "18:30"}),
            ]
        )
        result = SuggestionPipeline(make_orchestrator(invoker), combined_call=True).run(location_request(["A", "B"]))
        assert [entry.member for entry in result.suggestions] == ["A", "B"]
        assert len(invoker.calls) == 3
