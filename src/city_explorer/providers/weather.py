"""
Weather - daily forecast for a coordinate pair.
Source: Dark Sky compatible forecast API
"""

from city_explorer.data.models import Location, WeatherDay
from city_explorer.providers.base import BaseProvider
from city_explorer.providers.normalizers import normalize_weather
from city_explorer.logging_config import get_logger

logger = get_logger(__name__)


class WeatherProvider(BaseProvider):
    """Client for the forecast API; the key is part of the URL path."""

    NAME = "weather"

    def search(self, location: Location) -> list[WeatherDay]:
        """Return one unsaved WeatherDay per forecast day at the location."""
        url = (
            f"{self.config.weather_url.rstrip('/')}/{self.config.darksky_api_key}/"
            f"{location.latitude},{location.longitude}"
        )
        logger.info("Fetching forecast for %s,%s", location.latitude, location.longitude)
        payload = self.fetch(url)
        return self.parse(normalize_weather, payload)
