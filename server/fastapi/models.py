import json
from typing import Literal

from pydantic import BaseModel

WEATHER_ERROR_TEXT = "Error fetching data."


def format_number(value: float) -> str:
    """Render a number the way the chat client displays it: 12.0 -> "12"."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


# --- Upstream data ---


class GeoLocation(BaseModel):
    lat: float
    lon: float
    display_name: str


class CurrentConditions(BaseModel):
    temperature: float  # °C
    windspeed: float  # km/h


class WeatherSnapshot(BaseModel):
    """Current weather for a resolved place, as shown to the user."""

    location: str
    temperature: str
    wind_speed: str

    @classmethod
    def from_conditions(cls, location: GeoLocation, conditions: CurrentConditions) -> "WeatherSnapshot":
        return cls(
            location=location.display_name,
            temperature=f"{format_number(conditions.temperature)}°C",
            wind_speed=f"{format_number(conditions.windspeed)} km/h",
        )

    def to_text(self) -> str:
        return json.dumps(
            {"location": self.location, "temp": self.temperature, "wind": self.wind_speed},
            separators=(",", ":"),
            ensure_ascii=False,
        )


# --- Weather lookup outcome ---


class WeatherFound(BaseModel):
    kind: Literal["found"] = "found"
    snapshot: WeatherSnapshot

    def to_text(self) -> str:
        return self.snapshot.to_text()


class LocationNotFound(BaseModel):
    kind: Literal["not_found"] = "not_found"
    city: str

    def to_text(self) -> str:
        return f"Could not find coordinates for {self.city}."


class WeatherError(BaseModel):
    kind: Literal["error"] = "error"
    reason: str

    def to_text(self) -> str:
        # The reason stays server-side; clients only see the fixed string
        return WEATHER_ERROR_TEXT


WeatherResult = WeatherFound | LocationNotFound | WeatherError


def parse_weather_payload(text: str | None) -> WeatherSnapshot | None:
    """Parse ``weatherData`` the way the chat widget does.

    Returns None when the widget should not be rendered: empty text, the
    fixed error string, anything that is not a JSON object, or an object
    missing ``location``/``temp``/``wind``.
    """
    if not text or text == WEATHER_ERROR_TEXT:
        return None
    try:
        data = json.loads(text)
    except ValueError:
        return None
    if not isinstance(data, dict):
        return None
    try:
        return WeatherSnapshot(
            location=data["location"],
            temperature=data["temp"],
            wind_speed=data["wind"],
        )
    except (KeyError, ValueError):
        return None


# --- API ---


class ChatRequest(BaseModel):
    message: str | None = None


class ChatMetadata(BaseModel):
    # camelCase to match the chat client contract
    city: str
    weatherData: str


class ChatResponse(BaseModel):
    response: str
    metadata: ChatMetadata | None = None


class ErrorResponse(BaseModel):
    error: str
