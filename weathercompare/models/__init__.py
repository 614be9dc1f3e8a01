"""Domain models."""

from .insight import Insight, InsightKind, RainQualifier, TrendDirection, WindQualifier
from .weather import Coordinates, ForecastSample, LocationSeries, NamedLocation, WeatherRecord

__all__ = [
    "Coordinates",
    "NamedLocation",
    "ForecastSample",
    "WeatherRecord",
    "LocationSeries",
    "Insight",
    "InsightKind",
    "WindQualifier",
    "RainQualifier",
    "TrendDirection",
]
