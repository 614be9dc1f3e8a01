"""Shared fixtures and builders for weathercompare tests."""

from __future__ import annotations

import json
from datetime import date
from typing import Callable

import httpx
import pytest

from weathercompare.models import Coordinates, LocationSeries, NamedLocation, WeatherRecord
from weathercompare.services.stations import StationCache

pytest_plugins = ("pytest_asyncio",)

STOCKHOLM = NamedLocation("Stockholm", Coordinates(59.3293, 18.0686))
GOTHENBURG = NamedLocation("Göteborg", Coordinates(57.7089, 11.9746))


def make_record(
    day: date,
    temperature: float,
    wind_speed: float = 0.0,
    humidity: float = 50.0,
    precipitation: float = 0.0,
) -> WeatherRecord:
    return WeatherRecord(
        date=day,
        temperature=temperature,
        wind_speed=wind_speed,
        humidity=humidity,
        precipitation=precipitation,
    )


def make_series(name: str, records: list[WeatherRecord]) -> LocationSeries:
    return LocationSeries(name, Coordinates(59.0, 18.0), tuple(records))


def forecast_entry(valid_time: str, **params: float) -> dict:
    return {
        "validTime": valid_time,
        "parameters": [
            {"name": name, "levelType": "hl", "level": 2, "unit": "", "values": [value]}
            for name, value in params.items()
        ],
    }


def forecast_payload(*entries: dict) -> dict:
    return {
        "approvedTime": "2024-03-10T05:00:00Z",
        "referenceTime": "2024-03-10T05:00:00Z",
        "geometry": {"type": "Point", "coordinates": [[18.0686, 59.3293]]},
        "timeSeries": list(entries),
    }


def json_response(payload: object, status_code: int = 200) -> httpx.Response:
    return httpx.Response(
        status_code,
        content=json.dumps(payload).encode("utf-8"),
        headers={"Content-Type": "application/json"},
    )


def mock_client(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.fixture
def station_cache() -> StationCache:
    """Fresh station cache so tests never share station lists."""
    return StationCache()
