"""Nearest-station lookup for SMHI observation parameters."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Iterable

from weathercompare.models import Coordinates

logger = logging.getLogger(__name__)

EARTH_RADIUS_KM = 6371.0


class ObservationParameter(int, Enum):
    """SMHI metobs parameter ids used by the historical path."""

    TEMPERATURE = 2  # daily mean, 1/day
    WIND_SPEED = 4  # hourly
    PRECIPITATION = 5  # daily sum, 1/day
    HUMIDITY = 6  # hourly

    @property
    def is_daily(self) -> bool:
        return self in DAILY_PARAMETERS


DAILY_PARAMETERS = frozenset({ObservationParameter.TEMPERATURE, ObservationParameter.PRECIPITATION})


@dataclass(frozen=True)
class ObservingStation:
    key: str
    name: str
    coordinates: Coordinates
    active: bool

    @classmethod
    def from_payload(cls, payload: dict) -> "ObservingStation":
        return cls(
            key=str(payload["key"]),
            name=payload.get("name", ""),
            coordinates=Coordinates(
                latitude=float(payload["latitude"]),
                longitude=float(payload["longitude"]),
            ),
            active=bool(payload.get("active", False)),
        )


StationLoader = Callable[[], Awaitable[list[ObservingStation]]]


class StationCache:
    """Per-parameter station lists, populated on first use and never evicted.

    Concurrent first lookups may both load; the last write wins.
    """

    def __init__(self) -> None:
        self._entries: dict[ObservationParameter, list[ObservingStation]] = {}

    def get(self, parameter: ObservationParameter) -> list[ObservingStation] | None:
        return self._entries.get(parameter)

    async def get_or_populate(
        self, parameter: ObservationParameter, loader: StationLoader
    ) -> list[ObservingStation]:
        cached = self._entries.get(parameter)
        if cached is not None:
            return cached
        stations = await loader()
        self._entries[parameter] = stations
        logger.debug("Cached %d stations for parameter %s", len(stations), parameter.value)
        return stations

    def __contains__(self, parameter: object) -> bool:
        return parameter in self._entries

    def clear(self) -> None:
        self._entries.clear()


STATION_CACHE = StationCache()


def haversine_km(a: Coordinates, b: Coordinates) -> float:
    """Great-circle distance between two points in kilometres."""

    d_lat = math.radians(b.latitude - a.latitude)
    d_lon = math.radians(b.longitude - a.longitude)
    h = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(a.latitude))
        * math.cos(math.radians(b.latitude))
        * math.sin(d_lon / 2) ** 2
    )
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def find_nearest_station(
    stations: Iterable[ObservingStation], target: Coordinates
) -> ObservingStation | None:
    """Return the closest active station, or None when none is active."""

    nearest: ObservingStation | None = None
    min_distance = math.inf
    for station in stations:
        if not station.active:
            continue
        distance = haversine_km(target, station.coordinates)
        if distance < min_distance:
            min_distance = distance
            nearest = station
    return nearest


class StationResolver:
    """Resolve the nearest active station for a parameter, using the cache."""

    def __init__(
        self,
        list_stations: Callable[[ObservationParameter], Awaitable[list[ObservingStation]]],
        cache: StationCache | None = None,
    ) -> None:
        self._list_stations = list_stations
        self.cache = cache if cache is not None else STATION_CACHE

    async def stations_for(self, parameter: ObservationParameter) -> list[ObservingStation]:
        return await self.cache.get_or_populate(
            parameter, lambda: self._list_stations(parameter)
        )

    async def resolve(
        self, parameter: ObservationParameter, target: Coordinates
    ) -> ObservingStation | None:
        stations = await self.stations_for(parameter)
        station = find_nearest_station(stations, target)
        if station is None:
            logger.info("No active station for parameter %s", parameter.value)
        else:
            logger.debug(
                "Nearest station for parameter %s: %s (%s)",
                parameter.value,
                station.name,
                station.key,
            )
        return station


__all__ = [
    "EARTH_RADIUS_KM",
    "ObservationParameter",
    "ObservingStation",
    "StationCache",
    "StationResolver",
    "STATION_CACHE",
    "find_nearest_station",
    "haversine_km",
]
