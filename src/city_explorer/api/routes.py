import json
import logging
from typing import Iterator, Optional

from fastapi import APIRouter, Depends, Request
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from city_explorer.api.schemas import (
    LocationResponse,
    LocationQuery,
    WeatherResponse,
    BusinessResponse,
    MovieResponse,
    ErrorResponse,
)
from city_explorer.data.models import Location, SEARCH_QUERY_MAX_LENGTH
from city_explorer.exceptions import DatabaseConnectionError, InvalidLocationError, ValidationError
from city_explorer.pipeline.lookup_pipeline import LookupPipeline, Providers

logger = logging.getLogger(__name__)

router = APIRouter()

ERROR_RESPONSES = {
    404: {"model": ErrorResponse, "description": "The geocoder found nothing"},
    422: {"model": ErrorResponse, "description": "Bad `data` parameter"},
    502: {"model": ErrorResponse, "description": "Upstream provider failed"},
    503: {"model": ErrorResponse, "description": "Storage unavailable"},
}


# --- Dependencies ---


def get_session(request: Request) -> Iterator[Session]:
    """Check a session out of the engine's pool for the length of the request."""
    session_factory = getattr(request.app.state, "session_factory", None)
    if session_factory is None:
        raise DatabaseConnectionError(message="Database is not available")
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


def get_providers(request: Request) -> Providers:
    return request.app.state.providers


def get_pipeline(
    session: Session = Depends(get_session),
    providers: Providers = Depends(get_providers),
) -> LookupPipeline:
    return LookupPipeline(session, providers)


# --- `data` parameter parsing ---


def parse_location_param(request: Request, *required: str) -> Location:
    """
    Read the Location object a client passes back in `data`.

    Accepts a JSON document (`data={"id": 1, ...}`) or bracketed keys
    (`data[id]=1&data[latitude]=47.6`).
    """
    params = request.query_params
    raw = params.get("data")

    if raw is not None:
        try:
            fields = json.loads(raw)
        except ValueError:
            raise InvalidLocationError("'data' is not valid JSON", raw)
        if not isinstance(fields, dict):
            raise InvalidLocationError("'data' must be an object", raw)
    else:
        fields = {
            key[len("data["):-1]: value
            for key, value in params.items()
            if key.startswith("data[") and key.endswith("]")
        }
        if not fields:
            raise InvalidLocationError("missing 'data' query parameter")

    try:
        query = LocationQuery.model_validate(fields)
    except PydanticValidationError as e:
        bad = ", ".join(".".join(str(part) for part in err["loc"]) for err in e.errors())
        raise InvalidLocationError(f"bad or missing field(s): {bad}", raw)

    missing = query.missing(*required)
    if missing:
        raise InvalidLocationError(f"missing field(s): {', '.join(missing)}", raw)
    return query.to_location()


# --- Endpoints ---


@router.get("/location", response_model=LocationResponse, responses=ERROR_RESPONSES)
def get_location(data: Optional[str] = None, pipeline: LookupPipeline = Depends(get_pipeline)):
    """Geocode a free-text address, serving repeated queries from the store."""
    if data is None or not data.strip():
        raise ValidationError("missing 'data' query parameter")
    if len(data) > SEARCH_QUERY_MAX_LENGTH:
        raise ValidationError(f"'data' is longer than {SEARCH_QUERY_MAX_LENGTH} characters")
    logger.info(f"Received location request for: {data}")
    return pipeline.location(data)


@router.get("/weather", response_model=list[WeatherResponse], responses=ERROR_RESPONSES)
def get_weather(request: Request, pipeline: LookupPipeline = Depends(get_pipeline)):
    """Daily forecast for a location returned by /location."""
    location = parse_location_param(request, "latitude", "longitude")
    return pipeline.weather(location)


@router.get("/yelp", response_model=list[BusinessResponse], responses=ERROR_RESPONSES)
def get_yelp(request: Request, pipeline: LookupPipeline = Depends(get_pipeline)):
    """Restaurants around a location returned by /location."""
    location = parse_location_param(request, "latitude", "longitude")
    return pipeline.yelp(location)


@router.get("/movies", response_model=list[MovieResponse], responses=ERROR_RESPONSES)
def get_movies(request: Request, pipeline: LookupPipeline = Depends(get_pipeline)):
    """Movies matching the city of a location returned by /location."""
    location = parse_location_param(request, "formatted_query")
    return pipeline.movies(location)
