"""
Shared fixtures: an in-memory database and provider clients whose HTTP
session is a mock, so no test touches the network.
"""

from unittest.mock import MagicMock

import pytest
import requests
from sqlalchemy.orm import sessionmaker

from city_explorer.config import ProviderSettings
from city_explorer.data.database import create_db_engine, init_db
from city_explorer.pipeline.lookup_pipeline import Providers
from city_explorer.providers import GeocoderProvider, WeatherProvider, YelpProvider, MovieProvider


# ─── Provider payloads ──────────────────────────────────────


SEATTLE_GEOCODE = {
    "status": "OK",
    "results": [
        {
            "formatted_address": "Seattle, WA, USA",
            "geometry": {"location": {"lat": 47.6, "lng": -122.3}},
        },
        {
            "formatted_address": "Seattle, Tasmania, Australia",
            "geometry": {"location": {"lat": -41.0, "lng": 145.0}},
        },
    ],
}

EMPTY_GEOCODE = {"status": "ZERO_RESULTS", "results": []}

FORECAST = {
    "daily": {
        "data": [
            {"time": 1760857200, "summary": "Light rain in the morning."},
            {"time": 1760943600, "summary": "Overcast throughout the day."},
            {"time": 1761030000, "summary": "Clear throughout the day."},
        ]
    }
}

BUSINESSES = {
    "businesses": [
        {
            "name": "Pike Place Chowder",
            "image_url": "https://s3-media.yelp.com/chowder.jpg",
            "price": "$$",
            "rating": 4.5,
            "url": "https://www.yelp.com/biz/pike-place-chowder",
        },
        {
            "name": "Biscuit Bitch",
            "image_url": "https://s3-media.yelp.com/biscuit.jpg",
            "price": "$",
            "rating": 4.0,
            "url": "https://www.yelp.com/biz/biscuit-bitch",
        },
    ]
}

MOVIES = {
    "results": [
        {
            "title": "Sleepless in Seattle",
            "overview": "A widowed architect and a reporter...",
            "vote_average": 6.6,
            "vote_count": 2000,
            "poster_path": "/iLWsLVrfkFvOXOG9PbUAYg7AK3E.jpg",
            "popularity": 12.5,
            "release_date": "1993-06-24",
        },
        {
            "title": "Seattle Superstorm",
            "overview": "",
            "vote_average": 4.1,
            "vote_count": 33,
            "poster_path": None,
            "popularity": 2.0,
            "release_date": "2012-09-15",
        },
    ]
}


# ─── HTTP mocks ─────────────────────────────────────────────


def fake_response(payload=None, status_code: int = 200) -> MagicMock:
    """A stand-in for requests.Response carrying a JSON payload."""
    response = MagicMock(spec=requests.Response)
    response.status_code = status_code
    response.json.return_value = payload
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(
            f"{status_code} Error", response=response
        )
    return response


def make_http(routes: dict[str, object]) -> MagicMock:
    """
    Mock requests.Session whose GET answers by URL substring.

    Values are payloads, or ready-made responses/exceptions.
    """
    http = MagicMock(spec=requests.Session)

    def _get(url, *args, **kwargs):
        for fragment, answer in routes.items():
            if fragment in url:
                if isinstance(answer, Exception):
                    raise answer
                if isinstance(answer, MagicMock):
                    return answer
                return fake_response(answer)
        raise AssertionError(f"Unexpected GET {url}")

    http.get.side_effect = _get
    return http


@pytest.fixture
def provider_config():
    return ProviderSettings(
        geocode_api_key="geo-key",
        darksky_api_key="sky-key",
        yelp_api_key="yelp-token",
        movie_api_key="movie-key",
        geocode_url="https://geo.test/json",
        weather_url="https://weather.test/forecast",
        yelp_url="https://yelp.test/businesses/search",
        movie_url="https://movies.test/search/movie",
    )


@pytest.fixture
def http():
    """Default upstream: every provider answers with its Seattle payload."""
    return make_http({
        "geo.test": SEATTLE_GEOCODE,
        "weather.test": FORECAST,
        "yelp.test": BUSINESSES,
        "movies.test": MOVIES,
    })


@pytest.fixture
def providers(http, provider_config):
    return Providers(
        geocoder=GeocoderProvider(session=http, config=provider_config),
        weather=WeatherProvider(session=http, config=provider_config),
        yelp=YelpProvider(session=http, config=provider_config),
        movies=MovieProvider(session=http, config=provider_config),
        http=http,
    )


# ─── Database ───────────────────────────────────────────────


@pytest.fixture
def engine():
    """In-memory SQLite engine with all tables and foreign keys enforced."""
    eng = create_db_engine("sqlite:///:memory:")
    init_db(engine=eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def session(session_factory):
    sess = session_factory()
    yield sess
    sess.rollback()
    sess.close()
