"""Prompt text for the weather, clothing, packing and sun-time model calls.

Everything here is plain string formatting: no I/O and no failure modes.
"""

from typing import List, Optional

from .schemas import MAX_SCHEDULE_CHARS, Coordinates, LocationDescriptor, NamedPlace, WeatherReport

ICON_KEYWORDS = "'SUNNY', 'CLOUDY', 'RAIN', 'SNOW', 'WINDY', 'PARTLY_CLOUDY'"

_WEATHER_FIELDS = (
    '- "highTemp": the day\'s high temperature in Celsius (integer)\n'
    '- "lowTemp": the day\'s low temperature in Celsius (integer)\n'
    '- "temp07": temperature at 7:00 AM in Celsius (integer)\n'
    '- "temp12": temperature at 12:00 noon in Celsius (integer)\n'
    '- "temp17": temperature at 5:00 PM in Celsius (integer)\n'
    '- "temp22": temperature at 10:00 PM in Celsius (integer)\n'
    '- "condition07": brief weather condition at 7:00 AM (e.g., "Clear", "Cloudy", "Light rain")\n'
    '- "condition12": brief weather condition at 12:00 noon\n'
    '- "condition17": brief weather condition at 5:00 PM\n'
    '- "condition22": brief weather condition at 10:00 PM\n'
)

_DAY_PARTS_SPEC = (
    '- "dayParts": an array of exactly 4 objects, for "Morning", "Afternoon", "Evening" and "Night". Each object must have:\n'
    '  - "period": "Morning", "Afternoon", "Evening" or "Night".\n'
    '  - "temp": an integer temperature in Celsius.\n'
    '  - "condition": a brief description of the weather.\n'
    f'  - "conditionIcon": one keyword from {ICON_KEYWORDS}.\n'
    '  - "time": "07:00" for Morning, "12:00" for Afternoon, "17:00" for Evening and "22:00" for Night.\n'
)

AUTHORITY_HINT = (
    "If the location is in Switzerland, prioritize weather data from MeteoSchweiz. "
    "For all other locations, use the best available real-time weather data."
)

JSON_ONLY = (
    "The response MUST be a single, valid JSON object and nothing else. "
    "Do not include markdown formatting or any other text outside the JSON."
)


def truncate_schedule(schedule: Optional[str]) -> str:
    if not schedule:
        return ""
    return schedule[:MAX_SCHEDULE_CHARS]


def _schedule_clause(schedule: Optional[str]) -> str:
    text = truncate_schedule(schedule)
    if not text.strip():
        return ""
    return f' The user has provided a schedule: "{text}". Suggestions MUST be tailored to these activities.'


def _day_phrase(day: Optional[str]) -> str:
    return "for tomorrow" if day == "tomorrow" else "for today"


def describe_location(location: Optional[LocationDescriptor]) -> str:
    if isinstance(location, Coordinates):
        return f"at latitude {location.lat} and longitude {location.lon}"
    if isinstance(location, NamedPlace):
        return f'for the location "{location.text}"'
    return ""


def _members(roster: List[str]) -> str:
    return ", ".join(roster)


def _forecast_lines(forecast: WeatherReport) -> str:
    return (
        f"- High: {forecast.highTemp}°C, Low: {forecast.lowTemp}°C\n"
        f"- 7:00 AM: {forecast.temp07}°C, {forecast.condition07}\n"
        f"- 12:00 noon: {forecast.temp12}°C, {forecast.condition12}\n"
        f"- 5:00 PM: {forecast.temp17}°C, {forecast.condition17}\n"
        f"- 10:00 PM: {forecast.temp22}°C, {forecast.condition22}\n"
    )


def build_weather_prompt(day: Optional[str], location: Optional[LocationDescriptor]) -> str:
    return (
        f"Using real-time weather data from Google Search {_day_phrase(day)} {describe_location(location)}, "
        "provide the weather forecast.\n"
        f"{AUTHORITY_HINT}\n"
        "The response MUST be a single, valid JSON object with these exact fields:\n"
        '- "location": the city and region (e.g., "Zurich, Switzerland")\n'
        f"{_WEATHER_FIELDS}\n"
        "Use Google Search to get accurate, real-time weather data. Do not make up or estimate temperatures."
    )


def build_clothing_prompt(roster: List[str], forecast: WeatherReport, schedule: Optional[str] = None) -> str:
    members = _members(roster)
    return (
        f"Based on the following weather forecast for {forecast.location}:\n"
        f"{_forecast_lines(forecast)}\n"
        f"Provide clothing suggestions for a family consisting of: {members}.{_schedule_clause(schedule)}\n\n"
        "The response MUST be a JSON array of objects. Each object must contain:\n"
        f'- "member": a string exactly matching one of the provided family members ({members})\n'
        '- "outfit": an array of strings listing clothing items. For items only needed for a specific part of the day, '
        'specify when (e.g., "Rain jacket (for evening)"). If an item is tied to an activity in the provided schedule, '
        'mention it in parentheses (e.g., "Running shoes (for morning run)").\n'
        '- "notes": a brief explanation of the outfit choices based on the forecast and schedule.\n\n'
        "Clothing suggestions must be practical for the full day's temperature range and conditions. "
        f"Consider local clothing norms and styles for {forecast.location}."
    )


def build_travel_weather_prompt(destination_and_duration: str) -> str:
    return (
        "Using real-time weather data from Google Search for an upcoming trip to "
        f"{destination_and_duration}, provide a weather summary.\n"
        "The response MUST be a single, valid JSON object with these exact fields:\n"
        '- "location": the destination (e.g., "Paris, France")\n'
        '- "dateRange": the interpreted date range for the trip as concrete dates (e.g., "Dec 24, 2024 - Dec 28, 2024"). '
        'Resolve relative descriptions such as "Christmas" or "next weekend" into actual dates.\n'
        f"{_WEATHER_FIELDS.replace('the day', 'a typical day')}\n"
        "Use Google Search to get accurate weather forecast data."
    )


def build_travel_clothing_prompt(roster: List[str], forecast: WeatherReport) -> str:
    members = _members(roster)
    date_range = f" ({forecast.dateRange})" if forecast.dateRange else ""
    return (
        f"Based on the following weather forecast for a trip to {forecast.location}{date_range}:\n"
        f"{_forecast_lines(forecast)}\n"
        f"Provide a packing list for a family consisting of: {members}.\n\n"
        "The response MUST be a JSON array of objects. Each object must contain:\n"
        f'- "member": a string exactly matching one of the provided family members ({members})\n'
        '- "outfit": an array of strings listing clothing items to pack\n'
        '- "notes": packing advice based on the weather forecast (e.g., "Pack an umbrella, rain is likely.")\n\n'
        f"Consider local clothing norms and styles for {forecast.location}."
    )


def build_daily_prompt(
    roster: List[str],
    day: Optional[str],
    schedule: Optional[str],
    location: Optional[LocationDescriptor],
) -> str:
    members = _members(roster)
    return (
        "Using the best available real-time weather data via Google Search for the entire day "
        f"{_day_phrase(day)} {describe_location(location)}, provide a detailed weather summary and clothing "
        f"suggestions for a family consisting of: {members}.{_schedule_clause(schedule)}\n"
        f"{AUTHORITY_HINT}\n"
        f"{JSON_ONLY}\n"
        'The JSON object must have two top-level keys: "weather" and "suggestions".\n\n'
        'The "weather" object must contain:\n'
        '- "location": a string (e.g., "San Francisco, CA").\n'
        '- "highTemp": an integer for the day\'s high in Celsius.\n'
        '- "lowTemp": an integer for the day\'s low in Celsius.\n'
        f"{_DAY_PARTS_SPEC}\n"
        'The "suggestions" key must be an array with one object per family member. Each object must contain:\n'
        f'- "member": a string exactly matching one of the provided family members ({members}).\n'
        '- "outfit": an array of clothing items. For items only needed for part of the day, specify when '
        '(e.g., "Rain jacket (for evening)"). If an item is for an activity in the provided schedule, you MUST '
        'mention it in parentheses, for example: "Running shoes (for morning run)".\n'
        '- "notes": a string for any additional advice.\n\n'
        "Clothing suggestions must be practical for the full day's temperature range and conditions. "
        "Also consider local clothing norms and styles for the provided location."
    )


def build_travel_prompt(destination_and_duration: str, roster: List[str]) -> str:
    members = _members(roster)
    return (
        "Using real-time, live weather data from Google Search for an upcoming trip to "
        f"{destination_and_duration}, provide a weather summary and a detailed packing list for a family "
        f"consisting of: {members}.\n"
        f"{JSON_ONLY}\n"
        'The JSON object must have two top-level keys: "weather" and "suggestions".\n\n'
        'The "weather" object must contain:\n'
        '- "location": a string (e.g., "Paris, France").\n'
        '- "dateRange": the interpreted date range for the trip as concrete dates (e.g., "Dec 24, 2024 - Dec 28, 2024"). '
        'This must be included, especially for relative dates like "Christmas" or "next weekend".\n'
        '- "highTemp": an integer for the typical high in Celsius.\n'
        '- "lowTemp": an integer for the typical low in Celsius.\n'
        f"{_DAY_PARTS_SPEC}\n"
        'The "suggestions" key must be an array with one packing list per family member. Each object must contain:\n'
        f'- "member": a string exactly matching one of the provided family members ({members}).\n'
        '- "outfit": an array of clothing items to pack.\n'
        '- "notes": a string for any additional packing advice.\n\n'
        "The packing list should be practical for the likely temperature ranges and conditions."
    )


def build_sun_times_prompt(day: Optional[str], location: str) -> str:
    return (
        f"Using Google Search, find the sunrise and sunset times {_day_phrase(day)} for {location}. "
        'Return a single JSON object with the keys "sunrise" and "sunset", each a local time '
        'in 24-hour HH:MM format (e.g., {"sunrise": "06:42", "sunset": "19:15"}).'
    )
