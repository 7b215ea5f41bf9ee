import logging

import httpx

from config import DEFAULT_USER_AGENT, NOMINATIM_SEARCH_URL
from models import GeoLocation

logger = logging.getLogger(__name__)


async def geocode_city(
    client: httpx.AsyncClient,
    city: str,
    *,
    url: str = NOMINATIM_SEARCH_URL,
    user_agent: str = DEFAULT_USER_AGENT,
) -> GeoLocation | None:
    """Convert a place name to coordinates using the Nominatim search API.

    Returns None when nothing matches or the result is unusable. HTTP and
    transport errors are raised to the caller.
    """
    # Nominatim's usage policy requires an identifying User-Agent
    response = await client.get(
        url,
        params={"q": city, "format": "json", "limit": 1},
        headers={"User-Agent": user_agent},
    )
    response.raise_for_status()
    data = response.json()

    if not isinstance(data, list) or not data or not isinstance(data[0], dict):
        logger.info("No geocoding match for %r", city)
        return None

    result = data[0]
    try:
        return GeoLocation(
            lat=result["lat"],
            lon=result["lon"],
            display_name=result["display_name"],
        )
    except (KeyError, ValueError):
        logger.info("Malformed geocoding result for %r: %s", city, result)
        return None
