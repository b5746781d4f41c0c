import logging
from dataclasses import dataclass
from typing import Optional

import requests
from sqlalchemy.orm import Session

from city_explorer.config import ProviderSettings, settings
from city_explorer.data.cache import CacheHit, LookupCache
from city_explorer.data.models import Location, WeatherDay, Business, Movie
from city_explorer.data.repository import CacheRepository, Child
from city_explorer.exceptions import StoreFailureError
from city_explorer.providers import (
    BaseProvider,
    GeocoderProvider,
    WeatherProvider,
    YelpProvider,
    MovieProvider,
)

logger = logging.getLogger(__name__)


@dataclass
class Providers:
    """The four upstream clients, sharing one HTTP session."""

    geocoder: GeocoderProvider
    weather: WeatherProvider
    yelp: YelpProvider
    movies: MovieProvider
    http: Optional[requests.Session] = None

    @classmethod
    def from_settings(cls, config: Optional[ProviderSettings] = None) -> "Providers":
        config = config or settings.providers
        http = requests.Session()
        return cls(
            geocoder=GeocoderProvider(session=http, config=config),
            weather=WeatherProvider(session=http, config=config),
            yelp=YelpProvider(session=http, config=config),
            movies=MovieProvider(session=http, config=config),
            http=http,
        )

    def close(self) -> None:
        if self.http is not None:
            self.http.close()


class LookupPipeline:
    """Cache-aside lookups for locations and the three location-keyed domains."""

    def __init__(self, session: Session, providers: Providers, strict_writes: Optional[bool] = None):
        self.repository = CacheRepository(session)
        self.cache = LookupCache(self.repository)
        self.providers = providers
        self.strict_writes = settings.cache.strict_writes if strict_writes is None else strict_writes

    def location(self, query: str) -> Location:
        """
        Resolve a search query to a stored Location.

        A miss geocodes the query and stores the first result; the
        returned Location always carries its identity.
        """
        outcome = self.cache.lookup_location(query)
        if isinstance(outcome, CacheHit):
            logger.info(f"Serving location '{query}' from cache")
            return outcome.rows[0]

        location = self.providers.geocoder.search(query)
        stored = self.repository.insert_location(location)
        logger.info(f"Stored location '{query}' as id={stored.id}")
        return stored

    def weather(self, location: Location) -> list[WeatherDay]:
        return self._children(WeatherDay, location, self.providers.weather)

    def yelp(self, location: Location) -> list[Business]:
        return self._children(Business, location, self.providers.yelp)

    def movies(self, location: Location) -> list[Movie]:
        return self._children(Movie, location, self.providers.movies)

    def _children(self, model: type[Child], location: Location, provider: BaseProvider) -> list[Child]:
        outcome = self.cache.lookup_children(model, location)
        if isinstance(outcome, CacheHit):
            logger.info(f"Serving {model.__tablename__} for location {location.id} from cache")
            return outcome.rows

        records = provider.search(location)
        try:
            return self.repository.insert_children(records, location.id)
        except StoreFailureError as e:
            if self.strict_writes:
                raise
            # The client still gets the fresh records; the next call refetches
            logger.warning(f"Serving uncached {model.__tablename__} for location {location.id}: {e}")
            return records
