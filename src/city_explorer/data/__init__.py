"""Data layer: database engine, ORM models, cache lookups, and repository."""

from city_explorer.data.database import Base, create_db_engine, create_session_factory, init_db
from city_explorer.data.models import Location, WeatherDay, Business, Movie
from city_explorer.data.repository import CacheRepository
from city_explorer.data.cache import CacheHit, CacheMiss, CacheOutcome, LookupCache

__all__ = [
    "Base", "create_db_engine", "create_session_factory", "init_db",
    "Location", "WeatherDay", "Business", "Movie",
    "CacheRepository",
    "CacheHit", "CacheMiss", "CacheOutcome", "LookupCache",
]
