"""Provider clients: geocoder, weather, business search, movie search."""

from city_explorer.providers.base import BaseProvider
from city_explorer.providers.geocoder import GeocoderProvider
from city_explorer.providers.weather import WeatherProvider
from city_explorer.providers.yelp import YelpProvider
from city_explorer.providers.movies import MovieProvider

__all__ = [
    "BaseProvider",
    "GeocoderProvider",
    "WeatherProvider",
    "YelpProvider",
    "MovieProvider",
]
