"""Weather record shapes shared by the forecast and historical paths."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime


@dataclass(frozen=True)
class Coordinates:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class NamedLocation:
    """A place the user picked, already resolved to coordinates."""

    name: str
    coordinates: Coordinates


@dataclass
class ForecastSample:
    """One forecast instant as returned by the provider (sub-daily)."""

    valid_time: datetime
    temperature: float  # °C
    wind_speed: float  # m/s
    humidity: float  # %
    precipitation: float  # mm/h
    wind_direction: float | None = None  # degrees


@dataclass
class WeatherRecord:
    """One calendar day of weather at one location.

    Forecast records always carry all four core values. Historical records
    use 0 for wind speed and humidity when no station reported them for the
    day; temperature is always observed.
    """

    date: date
    temperature: float
    wind_speed: float
    humidity: float
    precipitation: float
    wind_direction: float | None = None

    def to_dict(self) -> dict:
        return {
            "date": self.date.isoformat(),
            "temperature": self.temperature,
            "wind_speed": self.wind_speed,
            "humidity": self.humidity,
            "precipitation": self.precipitation,
            "wind_direction": self.wind_direction,
        }


@dataclass(frozen=True)
class LocationSeries:
    """Daily records for one location, ascending by date with unique dates."""

    location_name: str
    coordinates: Coordinates
    records: tuple[WeatherRecord, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        dates = [record.date for record in self.records]
        if any(later <= earlier for earlier, later in zip(dates, dates[1:])):
            raise ValueError(
                f"Records for {self.location_name} must be strictly ascending by date"
            )

    @property
    def dates(self) -> list[date]:
        return [record.date for record in self.records]

    def to_dict(self) -> dict:
        return {
            "location_name": self.location_name,
            "coordinates": {
                "latitude": self.coordinates.latitude,
                "longitude": self.coordinates.longitude,
            },
            "records": [record.to_dict() for record in self.records],
        }


__all__ = [
    "Coordinates",
    "NamedLocation",
    "ForecastSample",
    "WeatherRecord",
    "LocationSeries",
]
