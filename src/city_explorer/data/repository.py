"""
Repository layer: reads and writes for the four cache tables.

Every SQLAlchemy failure is re-raised as StoreFailureError so callers
deal with one store error type.
"""

from typing import Any, Sequence, TypeVar

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from city_explorer.data.models import Location, WeatherDay, Business, Movie
from city_explorer.logging_config import get_logger
from city_explorer.exceptions import StoreFailureError

logger = get_logger(__name__)

Child = TypeVar("Child", WeatherDay, Business, Movie)


class CacheRepository:
    """
    All database operations for cached provider data.

    Usage:
        session_factory = create_session_factory()
        with session_factory() as session:
            repo = CacheRepository(session)
            rows = repo.find_locations("Seattle")
    """

    def __init__(self, session: Session):
        self.session = session

    # --- Locations ---

    def find_locations(self, search_query: str) -> list[Location]:
        """Return the rows cached for a search query (at most one)."""
        stmt = select(Location).where(Location.search_query == search_query).order_by(Location.id)
        return self._fetch(stmt, table="locations", key=search_query)

    def insert_location(self, location: Location) -> Location:
        """
        Persist a freshly geocoded location and return the stored row.

        First write wins: if another request stored the same search query
        in the meantime, the unique constraint rejects this insert and the
        existing row is returned instead.
        """
        try:
            self.session.add(location)
            self.session.commit()
            logger.debug("Stored location %r", location)
            return location
        except IntegrityError:
            self.session.rollback()
            logger.info("Location '%s' already stored by a concurrent request", location.search_query)
            existing = self.find_locations(location.search_query)
            if not existing:
                raise StoreFailureError(
                    message=f"Location '{location.search_query}' rejected but not found",
                    details={"table": "locations", "key": location.search_query},
                )
            return existing[0]
        except SQLAlchemyError as e:
            self.session.rollback()
            raise self._store_failure("write", "locations", location.search_query, e) from e

    # --- Dependent rows (weather, yelp, movies) ---

    def find_children(self, model: type[Child], location_id: int) -> list[Child]:
        """Return the rows of one dependent table for a location, in insert order."""
        stmt = select(model).where(model.location_id == location_id).order_by(model.id)
        return self._fetch(stmt, table=model.__tablename__, key=location_id)

    def insert_children(self, rows: Sequence[Child], location_id: int) -> list[Child]:
        """Attach rows to a location and store them in one commit."""
        rows = list(rows)
        for row in rows:
            row.location_id = location_id
        table = rows[0].__tablename__ if rows else "?"
        try:
            self.session.add_all(rows)
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise self._store_failure("write", table, location_id, e) from e
        logger.debug("Stored %d %s rows for location %s", len(rows), table, location_id)
        return rows

    # --- Helpers ---

    def _fetch(self, stmt, table: str, key: Any) -> list:
        try:
            return list(self.session.scalars(stmt))
        except SQLAlchemyError as e:
            raise self._store_failure("read", table, key, e) from e

    @staticmethod
    def _store_failure(action: str, table: str, key: Any, error: Exception) -> StoreFailureError:
        logger.error("Cache %s failed on %s for %s: %s", action, table, key, error)
        return StoreFailureError(
            message=f"Cache {action} failed on {table}: {error}",
            details={"table": table, "key": key},
        )
