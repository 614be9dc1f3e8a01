"""Tests for the comparison orchestrator and session."""

import asyncio
from datetime import date
from unittest.mock import AsyncMock

import pytest

from weathercompare.services.comparison import (
    ComparisonError,
    ComparisonService,
    ComparisonSession,
    historical_range,
    shift_back_one_year,
)
from weathercompare.services.forecast import ForecastClient, ForecastError
from tests.conftest import (
    GOTHENBURG,
    STOCKHOLM,
    forecast_entry,
    forecast_payload,
    json_response,
    make_record,
    make_series,
    mock_client,
)


def _daily(*temps: float, start: int = 10):
    return [make_record(date(2024, 3, start + i), temp) for i, temp in enumerate(temps)]


@pytest.fixture
def forecast_client():
    client = AsyncMock()

    async def fetch_daily(coordinates):
        if coordinates == STOCKHOLM.coordinates:
            return _daily(5.0, 6.0)
        return _daily(8.0, 9.0)

    client.fetch_daily.side_effect = fetch_daily
    return client


class TestCompare:
    @pytest.mark.asyncio
    async def test_builds_two_series(self, forecast_client):
        service = ComparisonService(forecast_client=forecast_client, historical_fetcher=AsyncMock())

        series_a, series_b = await service.compare(STOCKHOLM, GOTHENBURG)

        assert series_a.location_name == "Stockholm"
        assert series_b.location_name == "Göteborg"
        assert [r.temperature for r in series_a.records] == [5.0, 6.0]
        assert [r.temperature for r in series_b.records] == [8.0, 9.0]
        assert forecast_client.fetch_daily.await_count == 2

    @pytest.mark.asyncio
    async def test_forecast_failure_aborts(self, forecast_client):
        forecast_client.fetch_daily.side_effect = ForecastError("Weather fetch failed: Bad Gateway", 502)
        service = ComparisonService(forecast_client=forecast_client, historical_fetcher=AsyncMock())

        with pytest.raises(ComparisonError, match="Bad Gateway"):
            await service.compare(STOCKHOLM, GOTHENBURG)


class TestHistoricalRange:
    def test_shifts_both_ends_back_one_year(self):
        assert historical_range([date(2024, 3, 12), date(2024, 3, 10), date(2024, 3, 19)]) == (
            date(2023, 3, 10),
            date(2023, 3, 19),
        )

    def test_leap_day(self):
        assert shift_back_one_year(date(2024, 2, 29)) == date(2023, 2, 28)

    def test_empty(self):
        assert historical_range([]) is None


class TestFetchHistorical:
    @pytest.mark.asyncio
    async def test_fetches_both_locations_for_shifted_range(self, forecast_client):
        fetcher = AsyncMock()
        fetcher.fetch.return_value = [make_record(date(2023, 3, 10), 1.0)]
        service = ComparisonService(forecast_client=forecast_client, historical_fetcher=fetcher)
        reference = make_series("Stockholm", _daily(5.0, 6.0, 7.0))

        historical_a, historical_b = await service.fetch_historical(STOCKHOLM, GOTHENBURG, reference)

        assert historical_a.location_name == "Stockholm"
        assert historical_b.location_name == "Göteborg"
        calls = {call.args[0]: call.args[1:] for call in fetcher.fetch.await_args_list}
        assert calls[STOCKHOLM.coordinates] == ("2023-03-10", "2023-03-12")
        assert calls[GOTHENBURG.coordinates] == ("2023-03-10", "2023-03-12")

    @pytest.mark.asyncio
    async def test_failure_for_one_location_is_absorbed(self, forecast_client):
        async def fetch(coordinates, start_date, end_date):
            if coordinates == GOTHENBURG.coordinates:
                raise RuntimeError("metobs down")
            return [make_record(date(2023, 3, 10), 1.0)]

        fetcher = AsyncMock()
        fetcher.fetch.side_effect = fetch
        service = ComparisonService(forecast_client=forecast_client, historical_fetcher=fetcher)

        historical_a, historical_b = await service.fetch_historical(
            STOCKHOLM, GOTHENBURG, _daily(5.0)
        )

        assert historical_a is not None
        assert historical_b is None

    @pytest.mark.asyncio
    async def test_empty_reference_skips_fetch(self, forecast_client):
        fetcher = AsyncMock()
        service = ComparisonService(forecast_client=forecast_client, historical_fetcher=fetcher)

        assert await service.fetch_historical(STOCKHOLM, GOTHENBURG, []) == (None, None)
        fetcher.fetch.assert_not_awaited()


class TestComparisonSession:
    @pytest.mark.asyncio
    async def test_run_stores_result_and_insights(self, forecast_client):
        session = ComparisonSession(ComparisonService(forecast_client, AsyncMock()))

        result = await session.run(STOCKHOLM, GOTHENBURG)

        assert result is session.result
        assert session.error is None
        assert not session.is_loading
        assert session.insights  # best-day insight is always present

    @pytest.mark.asyncio
    async def test_error_is_recorded(self, forecast_client):
        forecast_client.fetch_daily.side_effect = ForecastError("Failed to fetch weather data")
        session = ComparisonSession(ComparisonService(forecast_client, AsyncMock()))

        assert await session.run(STOCKHOLM, GOTHENBURG) is None
        assert session.error == "Failed to fetch weather data"
        assert session.result is None

    @pytest.mark.asyncio
    async def test_malformed_forecast_is_recorded_as_error(self):
        payload = forecast_payload(forecast_entry("not-a-time", t=4.5, ws=3.2, r=81, pmean=0.1))

        async with mock_client(lambda request: json_response(payload)) as client:
            service = ComparisonService(ForecastClient(client=client), AsyncMock())
            session = ComparisonSession(service)
            result = await session.run(STOCKHOLM, GOTHENBURG)

        assert result is None
        assert session.error == "Forecast provider returned malformed data"
        assert not session.is_loading

    @pytest.mark.asyncio
    async def test_superseded_run_is_discarded(self):
        release_first = asyncio.Event()
        calls = 0

        async def fetch_daily(coordinates):
            nonlocal calls
            calls += 1
            if calls <= 2:
                await release_first.wait()
                return _daily(1.0)
            return _daily(20.0)

        client = AsyncMock()
        client.fetch_daily.side_effect = fetch_daily
        session = ComparisonSession(ComparisonService(client, AsyncMock()))

        first = asyncio.create_task(session.run(STOCKHOLM, GOTHENBURG))
        await asyncio.sleep(0)
        await session.run(GOTHENBURG, STOCKHOLM)
        release_first.set()

        assert await first is None
        assert session.result.series_a.location_name == "Göteborg"
        assert session.result.series_a.records[0].temperature == 20.0

    @pytest.mark.asyncio
    async def test_historical_failure_keeps_forecast(self, forecast_client):
        fetcher = AsyncMock()
        fetcher.fetch.side_effect = RuntimeError("boom")
        session = ComparisonSession(ComparisonService(forecast_client, fetcher))
        await session.run(STOCKHOLM, GOTHENBURG)

        historical = await session.load_historical()

        assert historical == (None, None)
        assert session.result is not None
        assert session.error is None

    @pytest.mark.asyncio
    async def test_load_historical_without_comparison(self):
        session = ComparisonSession(ComparisonService(AsyncMock(), AsyncMock()))
        assert await session.load_historical() is None
