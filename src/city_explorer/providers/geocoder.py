"""
Geocoder - resolves free-text addresses to coordinates.
Source: Google Geocoding API
"""

from typing import Any

from city_explorer.data.models import Location
from city_explorer.providers.base import BaseProvider
from city_explorer.providers.normalizers import normalize_location
from city_explorer.logging_config import get_logger
from city_explorer.exceptions import UpstreamTransportError

logger = get_logger(__name__)

# Statuses that still carry a meaningful `results` list
_USABLE_STATUSES = ("OK", "ZERO_RESULTS")


class GeocoderProvider(BaseProvider):
    """Client for the Google Geocoding API."""

    NAME = "geocoder"

    def search(self, query: str) -> Location:
        """
        Geocode an address.

        Args:
            query: Free-text address as typed by the user.

        Returns:
            An unsaved Location built from the first result.

        Raises:
            UpstreamEmptyError: If the geocoder found nothing.
            UpstreamTransportError: If the request or the payload is bad.
        """
        logger.info("Geocoding '%s'", query)
        payload = self.fetch(
            self.config.geocode_url,
            params={"address": query, "key": self.config.geocode_api_key},
        )
        self._check_status(payload)
        return self.parse(normalize_location, payload, query)

    def _check_status(self, payload: Any) -> None:
        # Google answers 200 with an error status for bad keys and quota
        status = payload.get("status") if isinstance(payload, dict) else None
        if status is not None and status not in _USABLE_STATUSES:
            logger.error("Geocoder returned status %s: %s", status, payload.get("error_message"))
            raise UpstreamTransportError(
                message=f"geocoder returned status {status}",
                details={"provider": self.NAME, "status": status},
            )
