import json
from unittest.mock import MagicMock, patch

import pytest
import requests
from fastapi.testclient import TestClient
from sqlalchemy import func, select

from city_explorer.api.main import app
from city_explorer.api.routes import get_providers, get_session
from city_explorer.data.models import Location, WeatherDay
from city_explorer.data.repository import CacheRepository
from city_explorer.exceptions import DatabaseConnectionError

from conftest import EMPTY_GEOCODE, make_http

# The lifespan is not entered (no `with TestClient(app)`), so the app never
# opens the configured database; sessions and providers come from fixtures.


@pytest.fixture
def client(session_factory, providers):
    def override_session():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_session] = override_session
    app.dependency_overrides[get_providers] = lambda: providers
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()


@pytest.fixture
def seattle(client):
    return client.get("/location", params={"data": "Seattle"}).json()


def location_rows(session_factory) -> int:
    with session_factory() as session:
        return session.scalar(select(func.count()).select_from(Location))


def test_root(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.text == "server is on"


def test_health_check(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


# ─── /location ──────────────────────────────────────────────


def test_location_geocodes_and_persists(client, http, session_factory):
    response = client.get("/location", params={"data": "Seattle"})

    assert response.status_code == 200
    data = response.json()
    assert data["search_query"] == "Seattle"
    assert data["formatted_query"] == "Seattle, WA, USA"
    assert data["latitude"] == 47.6
    assert data["longitude"] == -122.3
    assert isinstance(data["id"], int)
    assert location_rows(session_factory) == 1
    assert http.get.call_count == 1


def test_location_pre_seeded_is_served_without_geocoding(client, http, session_factory):
    with session_factory() as session:
        seeded = CacheRepository(session).insert_location(
            Location(search_query="Seattle", formatted_query="Seattle, WA, USA", latitude=47.6062, longitude=-122.3321)
        )

    response = client.get("/location", params={"data": "Seattle"})

    assert response.status_code == 200
    assert response.json() == {
        "search_query": "Seattle",
        "formatted_query": "Seattle, WA, USA",
        "latitude": 47.6062,
        "longitude": -122.3321,
        "id": seeded.id,
    }
    http.get.assert_not_called()
    assert location_rows(session_factory) == 1


def test_location_repeat_call_uses_cache(client, http):
    first = client.get("/location", params={"data": "Seattle"}).json()
    second = client.get("/location", params={"data": "Seattle"}).json()
    assert first == second
    assert http.get.call_count == 1


def test_location_no_data(client, providers, session_factory):
    providers.geocoder._session = make_http({"geo.test": EMPTY_GEOCODE})

    response = client.get("/location", params={"data": "Atlantis"})

    assert response.status_code == 404
    assert response.json() == {"error": "upstream-empty", "detail": "No results found for 'Atlantis'"}
    assert location_rows(session_factory) == 0


def test_location_missing_data(client):
    response = client.get("/location")
    assert response.status_code == 422
    assert response.json()["error"] == "validation"


def test_location_query_too_long_skips_geocoder(client, http, session_factory):
    response = client.get("/location", params={"data": "S" * 256})

    assert response.status_code == 422
    assert response.json() == {"error": "validation", "detail": "'data' is longer than 255 characters"}
    http.get.assert_not_called()
    assert location_rows(session_factory) == 0


def test_location_query_at_limit_is_accepted(client):
    response = client.get("/location", params={"data": "S" * 255})
    assert response.status_code == 200


def test_location_geocoder_down(client, providers):
    providers.geocoder._session = make_http({"geo.test": requests.ConnectionError("down")})

    response = client.get("/location", params={"data": "Seattle"})

    assert response.status_code == 502
    assert response.json() == {"error": "upstream-transport", "detail": "Upstream provider request failed"}


# ─── Dependent domains ──────────────────────────────────────


def test_weather(client, seattle, session_factory):
    response = client.get("/weather", params={"data": json.dumps(seattle)})

    assert response.status_code == 200
    assert response.json() == [
        {"time": "Sun Oct 19 2025", "forecast": "Light rain in the morning."},
        {"time": "Mon Oct 20 2025", "forecast": "Overcast throughout the day."},
        {"time": "Tue Oct 21 2025", "forecast": "Clear throughout the day."},
    ]
    with session_factory() as session:
        assert session.scalar(select(func.count()).select_from(WeatherDay)) == 3


def test_weather_bracket_encoding(client, seattle):
    """Browser-style `data[field]=...` keys should work like the JSON form."""
    params = {f"data[{key}]": str(value) for key, value in seattle.items()}

    response = client.get("/weather", params=params)

    assert response.status_code == 200
    assert len(response.json()) == 3


def test_weather_second_call_is_cached(client, http, seattle):
    params = {"data": json.dumps(seattle)}
    first = client.get("/weather", params=params).json()
    calls = http.get.call_count

    second = client.get("/weather", params=params).json()

    assert second == first
    assert http.get.call_count == calls


def test_yelp(client, seattle):
    response = client.get("/yelp", params={"data": json.dumps(seattle)})

    assert response.status_code == 200
    businesses = response.json()
    assert [b["name"] for b in businesses] == ["Pike Place Chowder", "Biscuit Bitch"]
    assert set(businesses[0]) == {"name", "image_url", "price", "rating", "url"}


def test_movies(client, seattle):
    response = client.get("/movies", params={"data": json.dumps(seattle)})

    assert response.status_code == 200
    movies = response.json()
    assert movies[0]["title"] == "Sleepless in Seattle"
    assert movies[0]["image_url"] == "https://image.tmdb.org/t/p/original/iLWsLVrfkFvOXOG9PbUAYg7AK3E.jpg"
    assert movies[1]["image_url"] == "https://image.tmdb.org/t/p/original"
    assert set(movies[0]) == {
        "title", "overview", "average_votes", "total_votes", "image_url", "popularity", "released_on",
    }


@pytest.mark.parametrize(
    "params",
    [
        {},
        {"data": "not json"},
        {"data": "[1, 2]"},
        {"data": json.dumps({"latitude": 47.6, "longitude": -122.3})},
        {"data": json.dumps({"id": "abc", "latitude": 47.6, "longitude": -122.3})},
        {"data": json.dumps({"id": 1})},
    ],
)
def test_weather_invalid_data(client, params):
    response = client.get("/weather", params=params)
    assert response.status_code == 422
    assert response.json()["error"] == "validation"


def test_movies_requires_formatted_query(client):
    response = client.get("/movies", params={"data": json.dumps({"id": 1, "latitude": 1.0, "longitude": 2.0})})
    assert response.status_code == 422
    assert "formatted_query" in response.json()["detail"]


def test_yelp_upstream_failure(client, providers, seattle):
    providers.yelp._session = make_http({"yelp.test": requests.Timeout("timed out")})

    response = client.get("/yelp", params={"data": json.dumps(seattle)})

    assert response.status_code == 502
    assert response.json()["error"] == "upstream-transport"


# ─── Store failures and unexpected errors ───────────────────


def test_database_unavailable(providers):
    """Without a session factory on app.state, lookups answer 503."""
    app.dependency_overrides[get_providers] = lambda: providers
    app.state.session_factory = None
    try:
        response = TestClient(app, raise_server_exceptions=False).get("/location", params={"data": "Seattle"})
    finally:
        app.dependency_overrides.clear()
        del app.state.session_factory

    assert response.status_code == 503
    assert response.json() == {"error": "store-failure", "detail": "Storage unavailable"}


def test_unexpected_error_is_generic_500(client, providers):
    providers.geocoder.search = lambda query: 1 / 0

    response = client.get("/location", params={"data": "Seattle"})

    assert response.status_code == 500
    assert response.json() == {"error": "internal", "detail": "Sorry we didn't catch that, please try again"}


# ─── Startup ────────────────────────────────────────────────


def test_lifespan_configures_logging_and_survives_database_outage():
    """Serving `main:app` directly still logs; a dead database leaves lookups at 503."""
    with patch("city_explorer.api.main.settings") as mock_settings, \
         patch("city_explorer.api.main.setup_logging") as mock_setup_logging, \
         patch("city_explorer.api.main.create_db_engine", side_effect=DatabaseConnectionError("refused")), \
         patch("city_explorer.api.main.Providers.from_settings", return_value=MagicMock()):
        mock_settings.logging.level = "INFO"
        mock_settings.logging.file = "logs/test.log"

        with TestClient(app) as client:
            health = client.get("/health").json()

    for name in ("engine", "session_factory", "providers"):
        delattr(app.state, name)

    mock_setup_logging.assert_called_once_with(level="INFO", log_file="logs/test.log")
    assert health == {"status": "healthy", "database": False}
