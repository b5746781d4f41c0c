"""
Business search - restaurants around a coordinate pair.
Source: Yelp Fusion API
"""

from city_explorer.data.models import Business, Location
from city_explorer.providers.base import BaseProvider
from city_explorer.providers.normalizers import normalize_businesses
from city_explorer.logging_config import get_logger

logger = get_logger(__name__)


class YelpProvider(BaseProvider):
    """Client for the Yelp business search, authenticated with a bearer token."""

    NAME = "yelp"
    SEARCH_TERM = "restaurants"

    def search(self, location: Location) -> list[Business]:
        """Return unsaved Business records near the location, in Yelp's order."""
        logger.info("Searching %s near %s,%s", self.SEARCH_TERM, location.latitude, location.longitude)
        payload = self.fetch(
            self.config.yelp_url,
            params={
                "latitude": location.latitude,
                "longitude": location.longitude,
                "term": self.SEARCH_TERM,
            },
            headers={"Authorization": f"Bearer {self.config.yelp_api_key}"},
        )
        return self.parse(normalize_businesses, payload)
