"""SMHI point forecast integration and payload normalization."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

import httpx

from weathercompare.core.config import settings
from weathercompare.models import Coordinates, ForecastSample, WeatherRecord
from weathercompare.services.aggregation import aggregate_daily
from weathercompare.services.metrics import track_request

logger = logging.getLogger(__name__)

PROVIDER = "smhi-forecast"

# t = temperature (°C), ws = wind speed (m/s), r = relative humidity (%),
# pmean = mean precipitation rate (mm/h), wd = wind direction (degrees)
PARAM_TEMPERATURE = "t"
PARAM_WIND_SPEED = "ws"
PARAM_HUMIDITY = "r"
PARAM_PRECIPITATION = "pmean"
PARAM_WIND_DIRECTION = "wd"


class ForecastError(RuntimeError):
    """Raised when the forecast provider cannot return data for a location."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def _parameter_value(entry: dict[str, Any], name: str) -> float | None:
    for parameter in entry.get("parameters") or []:
        if parameter.get("name") != name:
            continue
        values = parameter.get("values") or []
        if not values:
            return None
        try:
            return float(values[0])
        except (TypeError, ValueError):
            return None
    return None


def _parse_valid_time(raw: str) -> datetime:
    return datetime.fromisoformat(raw.replace("Z", "+00:00"))


def parse_forecast(payload: dict[str, Any]) -> list[ForecastSample]:
    """Turn a raw provider payload into fully populated forecast samples.

    Timestamps missing any of the four core parameters are dropped; this is
    normal towards the end of the forecast range.
    """

    samples: list[ForecastSample] = []
    for entry in payload.get("timeSeries") or []:
        valid_time = entry.get("validTime")
        if not valid_time:
            continue
        temperature = _parameter_value(entry, PARAM_TEMPERATURE)
        wind_speed = _parameter_value(entry, PARAM_WIND_SPEED)
        humidity = _parameter_value(entry, PARAM_HUMIDITY)
        precipitation = _parameter_value(entry, PARAM_PRECIPITATION)
        if temperature is None or wind_speed is None or humidity is None or precipitation is None:
            continue

        samples.append(
            ForecastSample(
                valid_time=_parse_valid_time(valid_time),
                temperature=temperature,
                wind_speed=wind_speed,
                humidity=humidity,
                precipitation=precipitation,
                wind_direction=_parameter_value(entry, PARAM_WIND_DIRECTION),
            )
        )
    return samples


class ForecastClient:
    """Fetch point forecasts from SMHI."""

    def __init__(self, client: httpx.AsyncClient | None = None, timeout: float | None = None) -> None:
        self._client = client
        self.timeout = timeout or settings.forecast_timeout

    def build_url(self, coordinates: Coordinates) -> str:
        decimals = settings.forecast_coordinate_decimals
        return settings.forecast_url_template.format(
            lat=round(coordinates.latitude, decimals),
            lon=round(coordinates.longitude, decimals),
        )

    async def fetch_raw(self, coordinates: Coordinates) -> dict[str, Any]:
        url = self.build_url(coordinates)
        logger.debug("Fetching SMHI forecast from: %s", url)
        try:
            with track_request(PROVIDER):
                response = await self._get(url)
                response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            logger.warning(
                "SMHI forecast error response: %s %s",
                status,
                exc.response.text[:500],
                extra={"provider": PROVIDER},
            )
            if status == 404:
                raise ForecastError(
                    "Location not found or outside SMHI coverage area", status_code=404
                ) from exc
            raise ForecastError(
                f"Weather fetch failed: {exc.response.reason_phrase}", status_code=status
            ) from exc
        except httpx.HTTPError as exc:
            logger.warning(
                "Failed to fetch SMHI forecast (%s): %s",
                url,
                exc,
                exc_info=True,
                extra={"provider": PROVIDER},
            )
            raise ForecastError("Failed to fetch weather data") from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise ForecastError("Forecast provider returned malformed JSON") from exc
        if not isinstance(payload, dict):
            raise ForecastError("Forecast provider returned malformed data")
        return payload

    async def fetch_samples(self, coordinates: Coordinates) -> list[ForecastSample]:
        payload = await self.fetch_raw(coordinates)
        try:
            samples = parse_forecast(payload)
        except (ValueError, TypeError, AttributeError, KeyError) as exc:
            logger.warning("Unparseable SMHI forecast payload: %s", exc, extra={"provider": PROVIDER})
            raise ForecastError("Forecast provider returned malformed data") from exc
        logger.debug(
            "Parsed %d forecast samples for %s,%s",
            len(samples),
            coordinates.latitude,
            coordinates.longitude,
        )
        return samples

    async def fetch_daily(self, coordinates: Coordinates) -> list[WeatherRecord]:
        return aggregate_daily(await self.fetch_samples(coordinates))

    async def _get(self, url: str) -> httpx.Response:
        headers = {"Accept": "application/json"}
        if self._client is not None:
            return await self._client.get(url, headers=headers, timeout=self.timeout)
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await client.get(url, headers=headers)


__all__ = ["ForecastClient", "ForecastError", "parse_forecast"]
