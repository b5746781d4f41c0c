"""
SQLAlchemy ORM models for City Explorer.

One table per domain. Location rows are the parents; weather, yelp and
movies rows hang off a location id and are written once, never updated.
"""

from typing import Optional

from sqlalchemy import String, Integer, Float, Text, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from city_explorer.data.database import Base

SEARCH_QUERY_MAX_LENGTH = 255


class Location(Base):
    """
    A geocoded search.

    `search_query` is the cache key and is unique, so a given query
    resolves to one row no matter how many requests raced to create it.
    """
    __tablename__ = "locations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    search_query: Mapped[str] = mapped_column(String(SEARCH_QUERY_MAX_LENGTH), unique=True, nullable=False)
    formatted_query: Mapped[Optional[str]] = mapped_column(String(255))
    latitude: Mapped[Optional[float]] = mapped_column(Float)
    longitude: Mapped[Optional[float]] = mapped_column(Float)

    def __repr__(self) -> str:
        return f"<Location(id={self.id}, search_query='{self.search_query}')>"


class WeatherDay(Base):
    """One day of a forecast."""
    __tablename__ = "weather"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    forecast: Mapped[Optional[str]] = mapped_column(Text)
    time: Mapped[Optional[str]] = mapped_column(String(32))
    location_id: Mapped[int] = mapped_column(Integer, ForeignKey("locations.id"), index=True)

    def __repr__(self) -> str:
        return f"<WeatherDay(time='{self.time}', location_id={self.location_id})>"


class Business(Base):
    """A business returned by the local-business search."""
    __tablename__ = "yelp"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[Optional[str]] = mapped_column(String(255))
    image_url: Mapped[Optional[str]] = mapped_column(Text)
    price: Mapped[Optional[str]] = mapped_column(String(16))
    rating: Mapped[Optional[float]] = mapped_column(Float)
    url: Mapped[Optional[str]] = mapped_column(Text)
    location_id: Mapped[int] = mapped_column(Integer, ForeignKey("locations.id"), index=True)

    def __repr__(self) -> str:
        return f"<Business(name='{self.name}', rating={self.rating})>"


class Movie(Base):
    """A movie returned by the movie search for the location's city."""
    __tablename__ = "movies"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[Optional[str]] = mapped_column(String(255))
    overview: Mapped[Optional[str]] = mapped_column(Text)
    average_votes: Mapped[Optional[float]] = mapped_column(Float)
    total_votes: Mapped[Optional[int]] = mapped_column(Integer)
    image_url: Mapped[Optional[str]] = mapped_column(Text)
    popularity: Mapped[Optional[float]] = mapped_column(Float)
    released_on: Mapped[Optional[str]] = mapped_column(String(32))
    location_id: Mapped[int] = mapped_column(Integer, ForeignKey("locations.id"), index=True)

    def __repr__(self) -> str:
        return f"<Movie(title='{self.title}', released_on='{self.released_on}')>"
