from .geocoding import geocode_city
from .weather import fetch_weather, get_current_weather

__all__ = ["geocode_city", "get_current_weather", "fetch_weather"]
