from pydantic import BaseModel, ConfigDict, Field
from typing import Optional

from city_explorer.data.models import Location


class LocationResponse(BaseModel):
    """A geocoded location; `id` keys the weather, yelp and movies lookups."""
    search_query: str
    formatted_query: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    id: int

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "search_query": "Seattle",
                "formatted_query": "Seattle, WA, USA",
                "latitude": 47.6062095,
                "longitude": -122.3320708,
                "id": 1,
            }
        },
    )


class LocationQuery(BaseModel):
    """The Location object a client sends back in the `data` parameter."""
    id: int = Field(..., description="Identity returned by /location.")
    search_query: Optional[str] = None
    formatted_query: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    model_config = ConfigDict(extra="ignore")

    def missing(self, *fields: str) -> list[str]:
        return [name for name in fields if getattr(self, name) in (None, "")]

    def to_location(self) -> Location:
        """A transient Location; it is never added to a session."""
        return Location(**self.model_dump())


class WeatherResponse(BaseModel):
    time: Optional[str] = None
    forecast: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class BusinessResponse(BaseModel):
    name: Optional[str] = None
    image_url: Optional[str] = None
    price: Optional[str] = None
    rating: Optional[float] = None
    url: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class MovieResponse(BaseModel):
    title: Optional[str] = None
    overview: Optional[str] = None
    average_votes: Optional[float] = None
    total_votes: Optional[int] = None
    image_url: Optional[str] = None
    popularity: Optional[float] = None
    released_on: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class ErrorResponse(BaseModel):
    """Body of every error response."""
    error: str = Field(..., description="Error kind, e.g. 'upstream-empty'.")
    detail: str
