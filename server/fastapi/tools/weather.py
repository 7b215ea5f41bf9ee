import logging

import httpx

from config import DEFAULT_USER_AGENT, NOMINATIM_SEARCH_URL, OPEN_METEO_FORECAST_URL
from models import (
    CurrentConditions,
    LocationNotFound,
    WeatherError,
    WeatherFound,
    WeatherResult,
    WeatherSnapshot,
)
from .geocoding import geocode_city

logger = logging.getLogger(__name__)


async def get_current_weather(
    client: httpx.AsyncClient,
    lat: float,
    lon: float,
    *,
    url: str = OPEN_METEO_FORECAST_URL,
) -> CurrentConditions:
    """Fetch current temperature (°C) and wind speed (km/h) from Open-Meteo."""
    response = await client.get(
        url,
        params={"latitude": lat, "longitude": lon, "current_weather": "true"},
    )
    response.raise_for_status()

    current = response.json()["current_weather"]
    return CurrentConditions(
        temperature=current["temperature"],
        windspeed=current["windspeed"],
    )


async def fetch_weather(
    client: httpx.AsyncClient,
    city: str,
    *,
    geocoding_url: str = NOMINATIM_SEARCH_URL,
    weather_url: str = OPEN_METEO_FORECAST_URL,
    user_agent: str = DEFAULT_USER_AGENT,
) -> WeatherResult:
    """Geocode a city, then look up its current weather.

    Never raises for upstream faults: a missing match becomes
    LocationNotFound and any network or payload error becomes WeatherError.
    """
    try:
        location = await geocode_city(client, city, url=geocoding_url, user_agent=user_agent)
        if location is None:
            return LocationNotFound(city=city)

        conditions = await get_current_weather(client, location.lat, location.lon, url=weather_url)
    except (httpx.HTTPError, KeyError, TypeError, ValueError) as exc:
        logger.exception("Error fetching weather for %r", city)
        return WeatherError(reason=f"{type(exc).__name__}: {exc}")

    return WeatherFound(snapshot=WeatherSnapshot.from_conditions(location, conditions))
