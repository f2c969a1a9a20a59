"""Weather data ingestors for SkyBrief."""

from .normalizer import (
    derive_flight_category,
    find_ceiling,
    hpa_to_inhg,
    normalize_metar,
    normalize_taf,
    parse_visibility,
)
from .weather import (
    AviationWeatherIngestor,
    StationWeather,
    WeatherServiceError,
    normalize_station,
)

__all__ = [
    "AviationWeatherIngestor",
    "StationWeather",
    "WeatherServiceError",
    "derive_flight_category",
    "find_ceiling",
    "hpa_to_inhg",
    "normalize_metar",
    "normalize_station",
    "normalize_taf",
    "parse_visibility",
]
