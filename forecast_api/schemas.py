from __future__ import annotations

from typing import Any, List, Literal, NewType, Optional, Union

from pydantic import BaseModel, Field, field_validator, model_validator

MAX_SCHEDULE_CHARS = 300

RawModelText = NewType("RawModelText", str)
ExtractedJson = NewType("ExtractedJson", object)


class Coordinates(BaseModel):
    lat: float
    lon: float


class NamedPlace(BaseModel):
    text: str


LocationDescriptor = Union[Coordinates, NamedPlace]


class SuggestionRequest(BaseModel):
    requestType: Literal["geolocation", "location", "travel"]
    family: List[str] = Field(min_length=1)
    day: Literal["today", "tomorrow"] = "today"
    schedule: Optional[str] = Field(default=None, max_length=MAX_SCHEDULE_CHARS)
    lat: Optional[float] = Field(default=None, ge=-90, le=90)
    lon: Optional[float] = Field(default=None, ge=-180, le=180)
    location: Optional[str] = None
    destinationAndDuration: Optional[str] = None

    @field_validator("family")
    @classmethod
    def ensure_members(cls, value: List[str]) -> List[str]:
        # labels are echoed back verbatim as suggestion members, so only blanks are rejected
        if any(not member.strip() for member in value):
            raise ValueError("Family members must be non-empty labels")
        return value

    @model_validator(mode="after")
    def ensure_variant_fields(self) -> "SuggestionRequest":
        if self.requestType == "geolocation" and (self.lat is None or self.lon is None):
            raise ValueError("lat and lon are required for geolocation requests")
        if self.requestType == "location" and not (self.location or "").strip():
            raise ValueError("location is required for location requests")
        if self.requestType == "travel" and not (self.destinationAndDuration or "").strip():
            raise ValueError("destinationAndDuration is required for travel requests")
        return self

    @property
    def is_travel(self) -> bool:
        return self.requestType == "travel"

    def location_descriptor(self) -> Optional[LocationDescriptor]:
        if self.requestType == "geolocation":
            return Coordinates(lat=self.lat, lon=self.lon)
        if self.requestType == "location":
            return NamedPlace(text=self.location.strip())
        return None


def _coerce_temp(value: Any) -> Any:
    if isinstance(value, bool):
        return value
    if isinstance(value, float):
        return int(round(value))
    if isinstance(value, str):
        cleaned = value.strip().rstrip("C").rstrip("°").strip()
        try:
            return int(round(float(cleaned)))
        except ValueError:
            return value
    return value


class WeatherReport(BaseModel):
    """Flat forecast as the weather prompt asks the model to return it."""

    location: str = Field(min_length=1)
    highTemp: int
    lowTemp: int
    temp07: int
    temp12: int
    temp17: int
    temp22: int
    condition07: str
    condition12: str
    condition17: str
    condition22: str
    dateRange: Optional[str] = None

    @field_validator("location")
    @classmethod
    def strip_location(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("location must not be empty")
        return value

    @field_validator("highTemp", "lowTemp", "temp07", "temp12", "temp17", "temp22", mode="before")
    @classmethod
    def round_temps(cls, value: Any) -> Any:
        return _coerce_temp(value)


class DayPart(BaseModel):
    period: str
    time: str
    temp: int
    condition: str
    conditionIcon: str
    isNight: bool = False

    @field_validator("temp", mode="before")
    @classmethod
    def round_temp(cls, value: Any) -> Any:
        return _coerce_temp(value)


class ForecastData(BaseModel):
    location: str
    highTemp: int
    lowTemp: int
    dayParts: List[DayPart]
    dateRange: Optional[str] = None
    sunrise: Optional[int] = None
    sunset: Optional[int] = None

    @field_validator("highTemp", "lowTemp", mode="before")
    @classmethod
    def round_temps(cls, value: Any) -> Any:
        return _coerce_temp(value)


class SuggestionEntry(BaseModel):
    member: str
    outfit: List[str]
    notes: str = ""

    @field_validator("outfit", mode="before")
    @classmethod
    def ensure_outfit_list(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [value]
        return value


class SunTimes(BaseModel):
    sunrise: int = Field(ge=0, lt=24 * 60)
    sunset: int = Field(ge=0, lt=24 * 60)


class CombinedResult(BaseModel):
    weather: Optional[ForecastData] = None
    suggestions: Optional[List[SuggestionEntry]] = None
