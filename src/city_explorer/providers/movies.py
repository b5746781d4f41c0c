"""
Movie search - films matching the location's city name.
Source: The Movie Database (TMDB) search API
"""

from city_explorer.data.models import Location, Movie
from city_explorer.providers.base import BaseProvider
from city_explorer.providers.normalizers import city_from_formatted_query, normalize_movies
from city_explorer.logging_config import get_logger

logger = get_logger(__name__)


class MovieProvider(BaseProvider):
    """Client for the TMDB movie search."""

    NAME = "movies"

    def search(self, location: Location) -> list[Movie]:
        """
        Search movies by city.

        The city is the part of the formatted address before the first
        comma: 'Seattle, WA, USA' searches for 'Seattle'.
        """
        city = city_from_formatted_query(location.formatted_query)
        logger.info("Searching movies for '%s'", city)
        payload = self.fetch(
            self.config.movie_url,
            params={"api_key": self.config.movie_api_key, "query": city},
        )
        return self.parse(normalize_movies, payload, self.config.movie_image_base_url)
