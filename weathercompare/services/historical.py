"""Historical observations from SMHI metobs, merged into daily records."""

from __future__ import annotations

import asyncio
import logging
from datetime import date, datetime, timezone
from typing import Any

import httpx

from weathercompare.core.config import settings
from weathercompare.models import Coordinates, WeatherRecord
from weathercompare.services.aggregation import round_half_up
from weathercompare.services.metrics import record_archive_fallback, record_failure, track_request
from weathercompare.services.stations import (
    ObservationParameter,
    ObservingStation,
    StationCache,
    StationResolver,
)

logger = logging.getLogger(__name__)

PROVIDER = "smhi-metobs"

DAILY_ARCHIVE_MARKER = "Från Datum Tid"
HOURLY_ARCHIVE_MARKER = "Datum;Tid"

DailyValues = dict[str, float]


def _parse_number(raw: Any) -> float | None:
    if raw is None:
        return None
    try:
        return float(str(raw).strip())
    except ValueError:
        return None


def _in_range(day: str, start_date: str, end_date: str) -> bool:
    return start_date <= day <= end_date


def _mean_by_day(buckets: dict[str, list[float]]) -> DailyValues:
    return {day: round_half_up(sum(values) / len(values), 1) for day, values in buckets.items()}


def parse_daily_archive(csv_text: str, start_date: str, end_date: str) -> DailyValues:
    """Parse a corrected-archive CSV for a once-per-day parameter.

    Rows before the ``Från Datum Tid`` header are preamble. Column 3 holds the
    representative day and column 4 the value; the last value seen for a day
    wins.
    """

    result: DailyValues = {}
    data_started = False
    for line in csv_text.splitlines():
        if not data_started:
            if line.startswith(DAILY_ARCHIVE_MARKER):
                data_started = True
            continue

        parts = line.split(";")
        if len(parts) < 5:
            continue
        day = parts[2].strip()
        value = _parse_number(parts[3]) if parts[3].strip() else None
        if not day or value is None:
            continue
        if not _in_range(day, start_date, end_date):
            continue
        result[day] = round_half_up(value, 1)
    return result


def parse_hourly_archive(
    csv_text: str, start_date: str, end_date: str, mode: str = "average"
) -> DailyValues:
    """Parse a corrected-archive CSV for an hourly parameter into daily values."""

    if mode not in {"average", "sum"}:
        raise ValueError(f"Unsupported aggregation mode: {mode}")

    buckets: dict[str, list[float]] = {}
    data_started = False
    for line in csv_text.splitlines():
        if not data_started:
            if line.startswith(HOURLY_ARCHIVE_MARKER):
                data_started = True
            continue

        parts = line.split(";")
        if len(parts) < 4:
            continue
        day = parts[0].strip()
        value = _parse_number(parts[2]) if parts[2].strip() else None
        if not day or value is None:
            continue
        if not _in_range(day, start_date, end_date):
            continue
        buckets.setdefault(day, []).append(value)

    if mode == "sum":
        return {day: round_half_up(sum(values), 1) for day, values in buckets.items()}
    return _mean_by_day(buckets)


def _value_day(entry: dict[str, Any]) -> str | None:
    ref = entry.get("ref")
    if ref:
        return str(ref)[:10]
    started = entry.get("from")
    if started is None:
        return None
    try:
        return datetime.fromtimestamp(int(started) / 1000, tz=timezone.utc).date().isoformat()
    except (TypeError, ValueError, OverflowError):
        return None


def parse_recent_values(
    payload: dict[str, Any],
    parameter: ObservationParameter,
    start_date: str,
    end_date: str,
) -> DailyValues:
    """Parse a latest-months JSON payload.

    Daily parameters use ``ref`` directly as the day. Hourly parameters take
    the day from the first ten characters of ``ref`` (or the ``from``
    timestamp) and average same-day samples.
    """

    values = payload.get("value") or []
    if parameter.is_daily:
        result: DailyValues = {}
        for entry in values:
            day = entry.get("ref")
            if not day or not _in_range(day, start_date, end_date):
                continue
            number = _parse_number(entry.get("value"))
            if number is not None:
                result[day] = round_half_up(number, 1)
        return result

    buckets: dict[str, list[float]] = {}
    for entry in values:
        day = _value_day(entry)
        if not day or not _in_range(day, start_date, end_date):
            continue
        number = _parse_number(entry.get("value"))
        if number is not None:
            buckets.setdefault(day, []).append(number)
    return _mean_by_day(buckets)


def merge_parameter_maps(
    temperature: DailyValues,
    precipitation: DailyValues,
    wind_speed: DailyValues,
    humidity: DailyValues,
) -> list[WeatherRecord]:
    """Merge per-parameter daily maps into records.

    Only temperature and precipitation days make up the calendar, and a day
    without temperature is skipped. Missing wind speed and humidity become 0
    so historical records have the same shape as forecast records.
    """

    records: list[WeatherRecord] = []
    for day in sorted(set(temperature) | set(precipitation)):
        if day not in temperature:
            continue
        records.append(
            WeatherRecord(
                date=date.fromisoformat(day),
                temperature=temperature[day],
                wind_speed=wind_speed.get(day, 0),
                humidity=humidity.get(day, 0),
                precipitation=precipitation.get(day, 0),
            )
        )
    return records


class HistoricalClient:
    """Thin wrapper around the SMHI metobs endpoints."""

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
    ) -> None:
        self._client = client
        self.base_url = (base_url or settings.metobs_base_url).rstrip("/")
        self.timeout = timeout or settings.metobs_timeout

    def station_list_url(self, parameter: ObservationParameter) -> str:
        return f"{self.base_url}/parameter/{parameter.value}.json"

    def data_url(self, parameter: ObservationParameter, station_key: str, period: str, fmt: str) -> str:
        return (
            f"{self.base_url}/parameter/{parameter.value}/station/{station_key}"
            f"/period/{period}/data.{fmt}"
        )

    async def list_stations(self, parameter: ObservationParameter) -> list[ObservingStation]:
        url = self.station_list_url(parameter)
        with track_request(PROVIDER):
            response = await self._get(url, accept_json=True)
            response.raise_for_status()
        data = response.json()
        if not isinstance(data, dict):
            raise ValueError(f"Unexpected station list payload for parameter {parameter.value}")
        return [ObservingStation.from_payload(item) for item in data.get("station") or []]

    async def fetch_archive_csv(self, station_key: str, parameter: ObservationParameter) -> str | None:
        """Return the corrected-archive CSV text, or None if it is not served."""

        url = self.data_url(parameter, station_key, "corrected-archive", "csv")
        with track_request(PROVIDER):
            response = await self._get(url)
        if not response.is_success:
            record_failure(PROVIDER)
            logger.debug("Archive CSV unavailable (%s): %s", url, response.status_code)
            return None
        return response.text

    async def fetch_recent_json(
        self, station_key: str, parameter: ObservationParameter
    ) -> dict[str, Any] | None:
        """Return the latest-months JSON payload, or None if it is not served."""

        url = self.data_url(parameter, station_key, "latest-months", "json")
        with track_request(PROVIDER):
            response = await self._get(url, accept_json=True)
        if not response.is_success:
            record_failure(PROVIDER)
            logger.debug("Latest-months JSON unavailable (%s): %s", url, response.status_code)
            return None
        payload = response.json()
        if payload is not None and not isinstance(payload, dict):
            raise ValueError(f"Unexpected latest-months payload for station {station_key}")
        return payload

    async def _get(self, url: str, accept_json: bool = False) -> httpx.Response:
        headers = {"Accept": "application/json"} if accept_json else None
        if self._client is not None:
            return await self._client.get(url, headers=headers, timeout=self.timeout)
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await client.get(url, headers=headers)


class HistoricalFetcher:
    """Build daily historical records for one location and date range."""

    def __init__(
        self,
        client: HistoricalClient | None = None,
        cache: StationCache | None = None,
        hourly_archive: bool | None = None,
    ) -> None:
        self.client = client or HistoricalClient()
        self.hourly_archive = (
            settings.metobs_hourly_archive if hourly_archive is None else hourly_archive
        )
        self.resolver = StationResolver(self.client.list_stations, cache=cache)

    async def fetch(self, coordinates: Coordinates, start_date: str, end_date: str) -> list[WeatherRecord]:
        temperature, wind_speed, precipitation, humidity = await asyncio.gather(
            self._fetch_parameter(ObservationParameter.TEMPERATURE, coordinates, start_date, end_date),
            self._fetch_parameter(ObservationParameter.WIND_SPEED, coordinates, start_date, end_date),
            self._fetch_parameter(ObservationParameter.PRECIPITATION, coordinates, start_date, end_date),
            self._fetch_parameter(ObservationParameter.HUMIDITY, coordinates, start_date, end_date),
        )
        records = merge_parameter_maps(temperature, precipitation, wind_speed, humidity)
        logger.info(
            "Historical fetch for %s,%s (%s..%s): %d days",
            coordinates.latitude,
            coordinates.longitude,
            start_date,
            end_date,
            len(records),
        )
        return records

    async def _fetch_parameter(
        self,
        parameter: ObservationParameter,
        coordinates: Coordinates,
        start_date: str,
        end_date: str,
    ) -> DailyValues:
        try:
            station = await self.resolver.resolve(parameter, coordinates)
            if station is None:
                return {}
            if parameter.is_daily or self.hourly_archive:
                return await self._fetch_archive(station.key, parameter, start_date, end_date)
            # Hourly archives are large; without opting in only the recent window is used.
            return await self._fetch_recent(station.key, parameter, start_date, end_date)
        except (httpx.HTTPError, ValueError, KeyError, TypeError, AttributeError) as exc:
            logger.warning(
                "Historical data for parameter %s unavailable: %s",
                parameter.name,
                exc,
                extra={"provider": PROVIDER},
            )
            return {}

    async def _fetch_archive(
        self,
        station_key: str,
        parameter: ObservationParameter,
        start_date: str,
        end_date: str,
    ) -> DailyValues:
        try:
            csv_text = await self.client.fetch_archive_csv(station_key, parameter)
        except httpx.HTTPError as exc:
            logger.warning("Archive CSV request failed for station %s: %s", station_key, exc)
            csv_text = None

        if csv_text:
            if parameter.is_daily:
                values = parse_daily_archive(csv_text, start_date, end_date)
            else:
                values = parse_hourly_archive(csv_text, start_date, end_date)
            if values:
                return values

        record_archive_fallback(parameter.name.lower())
        return await self._fetch_recent(station_key, parameter, start_date, end_date)

    async def _fetch_recent(
        self,
        station_key: str,
        parameter: ObservationParameter,
        start_date: str,
        end_date: str,
    ) -> DailyValues:
        payload = await self.client.fetch_recent_json(station_key, parameter)
        if not payload:
            return {}
        return parse_recent_values(payload, parameter, start_date, end_date)


__all__ = [
    "HistoricalClient",
    "HistoricalFetcher",
    "merge_parameter_maps",
    "parse_daily_archive",
    "parse_hourly_archive",
    "parse_recent_values",
]
