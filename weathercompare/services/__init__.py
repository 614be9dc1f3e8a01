"""Service-layer utilities."""

from .aggregation import aggregate_daily
from .comparison import ComparisonError, ComparisonService, ComparisonSession
from .forecast import ForecastClient, ForecastError, parse_forecast
from .formatting import render_insight
from .geocoding import GeocodeResult, GeocodingClient, GeocodingError
from .historical import HistoricalClient, HistoricalFetcher
from .insights import InsightThresholds, generate_insights
from .stations import STATION_CACHE, ObservationParameter, StationCache, StationResolver

__all__ = [
    "aggregate_daily",
    "ComparisonError",
    "ComparisonService",
    "ComparisonSession",
    "ForecastClient",
    "ForecastError",
    "parse_forecast",
    "render_insight",
    "GeocodeResult",
    "GeocodingClient",
    "GeocodingError",
    "HistoricalClient",
    "HistoricalFetcher",
    "InsightThresholds",
    "generate_insights",
    "STATION_CACHE",
    "ObservationParameter",
    "StationCache",
    "StationResolver",
]
