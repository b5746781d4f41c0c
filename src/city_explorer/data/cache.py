"""
Cache-aside lookups over the relational store.

A lookup reads the rows stored under a key and reports a tagged outcome:
CacheHit carries the rows, CacheMiss carries the key back to the caller,
who fetches from the provider and populates the store. There is no TTL
and no invalidation; the first rows written for a key are served forever.
"""

from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar, Union

from city_explorer.data.models import Location
from city_explorer.data.repository import CacheRepository, Child
from city_explorer.logging_config import get_logger

logger = get_logger(__name__)

Row = TypeVar("Row")


@dataclass(frozen=True)
class CacheHit(Generic[Row]):
    """Rows were found for the key."""

    key: Any
    rows: list[Row] = field(default_factory=list)


@dataclass(frozen=True)
class CacheMiss:
    """Nothing is stored for the key yet."""

    key: Any


CacheOutcome = Union[CacheHit, CacheMiss]


class LookupCache:
    """
    Read side of the cache-aside pattern.

    Exactly one outcome is produced per call and nothing is written;
    store failures propagate as StoreFailureError.
    """

    def __init__(self, repository: CacheRepository):
        self.repository = repository

    def lookup_location(self, search_query: str) -> CacheOutcome:
        """Look up a location by the text the client searched for."""
        return self._outcome("locations", search_query, self.repository.find_locations(search_query))

    def lookup_children(self, model: type[Child], location: Location) -> CacheOutcome:
        """Look up one dependent domain by the location's identity."""
        rows = self.repository.find_children(model, location.id)
        return self._outcome(model.__tablename__, location.id, rows)

    @staticmethod
    def _outcome(table: str, key: Any, rows: list) -> CacheOutcome:
        if rows:
            logger.debug("Cache hit: %s key=%s (%d rows)", table, key, len(rows))
            return CacheHit(key=key, rows=rows)
        logger.debug("Cache miss: %s key=%s", table, key)
        return CacheMiss(key=key)
