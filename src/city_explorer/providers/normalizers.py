"""
Provider payload normalizers.

Pure functions mapping one upstream JSON document to local records.
Order is preserved and nothing is filtered; an element with an
unexpected shape raises instead of being skipped.
"""

from datetime import datetime, timezone
from typing import Any

from city_explorer.data.models import Location, WeatherDay, Business, Movie
from city_explorer.exceptions import UpstreamEmptyError

MOVIE_IMAGE_BASE_URL = "https://image.tmdb.org/t/p/original"

# Weekday, month, zero-padded day, year: "Mon Oct 19 2026"
DATE_FORMAT = "%a %b %d %Y"


def epoch_to_date_string(timestamp: float) -> str:
    """Convert epoch seconds to a calendar date with no time-of-day (UTC)."""
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).strftime(DATE_FORMAT)


def city_from_formatted_query(formatted_query: str) -> str:
    """'Seattle, WA, USA' -> 'Seattle'."""
    return formatted_query.split(",")[0]


def normalize_location(payload: dict[str, Any], search_query: str) -> Location:
    """
    Build a Location from a geocoder response.

    Only the first result is used; alternates are discarded.

    Raises:
        UpstreamEmptyError: If the response holds no results.
    """
    results = payload.get("results") or []
    if not results:
        raise UpstreamEmptyError(search_query)

    first = results[0]
    coordinates = first["geometry"]["location"]
    return Location(
        search_query=search_query,
        formatted_query=first["formatted_address"],
        latitude=coordinates["lat"],
        longitude=coordinates["lng"],
    )


def normalize_weather(payload: dict[str, Any]) -> list[WeatherDay]:
    """One WeatherDay per entry of the daily forecast."""
    return [
        WeatherDay(
            time=epoch_to_date_string(day["time"]),
            forecast=day.get("summary"),
        )
        for day in payload["daily"]["data"]
    ]


def normalize_businesses(payload: dict[str, Any]) -> list[Business]:
    """One Business per search result, in upstream order."""
    return [
        Business(
            name=business.get("name"),
            image_url=business.get("image_url"),
            price=business.get("price"),
            rating=business.get("rating"),
            url=business.get("url"),
        )
        for business in payload["businesses"]
    ]


def normalize_movies(payload: dict[str, Any], image_base_url: str = MOVIE_IMAGE_BASE_URL) -> list[Movie]:
    """
    One Movie per search result.

    The poster path is turned into a full image URL by prefixing the
    image base; a missing poster leaves just the base.
    """
    return [
        Movie(
            title=movie.get("title"),
            overview=movie.get("overview"),
            average_votes=movie.get("vote_average"),
            total_votes=movie.get("vote_count"),
            image_url=f"{image_base_url}{movie.get('poster_path') or ''}",
            popularity=movie.get("popularity"),
            released_on=movie.get("release_date"),
        )
        for movie in payload["results"]
    ]
