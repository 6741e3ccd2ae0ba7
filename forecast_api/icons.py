from datetime import datetime
from typing import Any, List, Tuple

from dateutil import parser as date_parser

SUNNY = "SUNNY"
CLOUDY = "CLOUDY"
PARTLY_CLOUDY = "PARTLY_CLOUDY"
RAIN = "RAIN"
SNOW = "SNOW"
WINDY = "WINDY"
CLEAR_NIGHT = "CLEAR_NIGHT"
PARTLY_CLOUDY_NIGHT = "PARTLY_CLOUDY_NIGHT"

NIGHT_VARIANTS = {
    SUNNY: CLEAR_NIGHT,
    PARTLY_CLOUDY: PARTLY_CLOUDY_NIGHT,
}

# (period, clock time, minute of day)
DAY_PARTS: List[Tuple[str, str, int]] = [
    ("Morning", "07:00", 7 * 60),
    ("Afternoon", "12:00", 12 * 60),
    ("Evening", "17:00", 17 * 60),
    ("Night", "22:00", 22 * 60),
]

DEFAULT_SUNRISE = 6 * 60 + 30
DEFAULT_SUNSET = 18 * 60 + 30

_PARSE_DEFAULT = datetime(2000, 1, 1)


def condition_to_icon(condition: str) -> str:
    c = (condition or "").lower()
    if "rain" in c or "shower" in c or "drizzle" in c:
        return RAIN
    if "snow" in c or "sleet" in c or "ice" in c:
        return SNOW
    if "wind" in c:
        return WINDY
    if "cloud" in c or "overcast" in c:
        if "partly" in c or "scattered" in c:
            return PARTLY_CLOUDY
        return CLOUDY
    if "sun" in c or "clear" in c or "fair" in c:
        return SUNNY
    return PARTLY_CLOUDY


def night_adjust_icon(icon: str, is_night: bool) -> str:
    if not is_night:
        return icon
    return NIGHT_VARIANTS.get(icon, icon)


def classify_day_part(minutes: int, sunrise: int, sunset: int) -> str:
    """Return "night" at or after sunset or before sunrise, else "day"."""
    if minutes >= sunset or minutes < sunrise:
        return "night"
    return "day"


def is_night(minutes: int, sunrise: int, sunset: int) -> bool:
    return classify_day_part(minutes, sunrise, sunset) == "night"


def parse_clock(value: Any) -> int:
    """Minutes since midnight from "06:45", "6:45 AM", "18:45:00" and the like."""
    if isinstance(value, bool):
        raise ValueError(f"not a clock time: {value!r}")
    if isinstance(value, int):
        if 0 <= value < 24 * 60:
            return value
        raise ValueError(f"minute of day out of range: {value}")
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"not a clock time: {value!r}")
    parsed = date_parser.parse(value.strip(), default=_PARSE_DEFAULT)
    return parsed.hour * 60 + parsed.minute


def format_clock(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"
