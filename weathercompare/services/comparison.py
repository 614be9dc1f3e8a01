"""Run forecast and historical comparisons for two locations."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import date
from typing import Iterable, Sequence

from weathercompare.models import Insight, LocationSeries, NamedLocation, WeatherRecord
from weathercompare.services.forecast import ForecastClient, ForecastError
from weathercompare.services.historical import HistoricalFetcher
from weathercompare.services.insights import InsightThresholds, generate_insights

logger = logging.getLogger(__name__)


class ComparisonError(RuntimeError):
    """Raised when the forecast for either location cannot be fetched."""


def shift_back_one_year(day: date) -> date:
    try:
        return day.replace(year=day.year - 1)
    except ValueError:
        # 29 February has no counterpart in the previous year
        return day.replace(year=day.year - 1, day=28)


def historical_range(dates: Iterable[date]) -> tuple[date, date] | None:
    """Reference min/max dates moved back exactly one calendar year."""

    dates = list(dates)
    if not dates:
        return None
    return shift_back_one_year(min(dates)), shift_back_one_year(max(dates))


class ComparisonService:
    """Fetch and align weather for two locations."""

    def __init__(
        self,
        forecast_client: ForecastClient | None = None,
        historical_fetcher: HistoricalFetcher | None = None,
    ) -> None:
        self.forecast_client = forecast_client or ForecastClient()
        self.historical_fetcher = historical_fetcher or HistoricalFetcher()

    async def compare(
        self, location_a: NamedLocation, location_b: NamedLocation
    ) -> tuple[LocationSeries, LocationSeries]:
        """Fetch both forecasts concurrently and aggregate them to daily series."""

        logger.info("Comparing forecasts for %s and %s", location_a.name, location_b.name)
        try:
            daily_a, daily_b = await asyncio.gather(
                self.forecast_client.fetch_daily(location_a.coordinates),
                self.forecast_client.fetch_daily(location_b.coordinates),
            )
        except ForecastError as exc:
            logger.warning("Forecast comparison failed: %s", exc)
            raise ComparisonError(str(exc)) from exc

        return (
            LocationSeries(location_a.name, location_a.coordinates, tuple(daily_a)),
            LocationSeries(location_b.name, location_b.coordinates, tuple(daily_b)),
        )

    async def fetch_historical(
        self,
        location_a: NamedLocation,
        location_b: NamedLocation,
        reference: LocationSeries | Sequence[WeatherRecord],
    ) -> tuple[LocationSeries | None, LocationSeries | None]:
        """Fetch last year's observations for the reference series' date span.

        Failures never propagate; a location whose fetch fails comes back as
        None.
        """

        records = reference.records if isinstance(reference, LocationSeries) else reference
        span = historical_range(record.date for record in records)
        if span is None:
            logger.warning("No reference dates; skipping historical fetch")
            return None, None
        return await self.fetch_historical_range(location_a, location_b, *span)

    async def fetch_historical_range(
        self,
        location_a: NamedLocation,
        location_b: NamedLocation,
        start: date,
        end: date,
    ) -> tuple[LocationSeries | None, LocationSeries | None]:
        start_date, end_date = start.isoformat(), end.isoformat()
        historical_a, historical_b = await asyncio.gather(
            self._historical_for(location_a, start_date, end_date),
            self._historical_for(location_b, start_date, end_date),
        )
        return historical_a, historical_b

    async def _historical_for(
        self, location: NamedLocation, start_date: str, end_date: str
    ) -> LocationSeries | None:
        try:
            records = await self.historical_fetcher.fetch(location.coordinates, start_date, end_date)
        except Exception:  # noqa: BLE001
            logger.warning("Historical data unavailable for %s", location.name, exc_info=True)
            return None
        return LocationSeries(location.name, location.coordinates, tuple(records))


@dataclass
class ComparisonResult:
    series_a: LocationSeries
    series_b: LocationSeries
    insights: list[Insight]


class ComparisonSession:
    """Track the latest comparison the way an interactive client does.

    Every ``run`` starts a new generation. A forecast or historical result
    that arrives after a newer ``run`` has started is discarded instead of
    stored.
    """

    def __init__(
        self,
        service: ComparisonService | None = None,
        thresholds: InsightThresholds | None = None,
    ) -> None:
        self.service = service or ComparisonService()
        self.thresholds = thresholds
        self.result: ComparisonResult | None = None
        self.historical: tuple[LocationSeries | None, LocationSeries | None] | None = None
        self.error: str | None = None
        self.is_loading = False
        self._locations: tuple[NamedLocation, NamedLocation] | None = None
        self._generation = 0

    @property
    def insights(self) -> list[Insight]:
        return self.result.insights if self.result else []

    async def run(self, location_a: NamedLocation, location_b: NamedLocation) -> ComparisonResult | None:
        self._generation += 1
        generation = self._generation
        self.is_loading = True
        self.error = None
        self.result = None
        self.historical = None
        self._locations = (location_a, location_b)

        try:
            series_a, series_b = await self.service.compare(location_a, location_b)
        except ComparisonError as exc:
            if generation == self._generation:
                self.error = str(exc)
            return None
        finally:
            if generation == self._generation:
                self.is_loading = False

        if generation != self._generation:
            logger.debug("Discarding superseded comparison %d", generation)
            return None

        self.result = ComparisonResult(
            series_a=series_a,
            series_b=series_b,
            insights=generate_insights(series_a, series_b, self.thresholds),
        )
        return self.result

    async def load_historical(
        self,
    ) -> tuple[LocationSeries | None, LocationSeries | None] | None:
        if self.result is None or self._locations is None:
            return None
        generation = self._generation
        location_a, location_b = self._locations
        historical = await self.service.fetch_historical(
            location_a, location_b, self.result.series_a
        )
        if generation != self._generation:
            logger.debug("Discarding historical overlay for superseded comparison %d", generation)
            return None
        self.historical = historical
        return historical


__all__ = [
    "ComparisonError",
    "ComparisonResult",
    "ComparisonService",
    "ComparisonSession",
    "historical_range",
    "shift_back_one_year",
]
