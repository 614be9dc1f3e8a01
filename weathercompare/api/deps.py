"""API dependencies."""

from __future__ import annotations

from collections.abc import AsyncGenerator

import httpx
from fastapi import Depends

from weathercompare.services.comparison import ComparisonService
from weathercompare.services.forecast import ForecastClient
from weathercompare.services.geocoding import GeocodingClient
from weathercompare.services.historical import HistoricalClient, HistoricalFetcher


async def get_http_client() -> AsyncGenerator[httpx.AsyncClient, None]:
    """Yield a request-scoped HTTP client for outbound provider calls."""
    async with httpx.AsyncClient() as client:
        yield client


def get_forecast_client(client: httpx.AsyncClient = Depends(get_http_client)) -> ForecastClient:
    return ForecastClient(client=client)


def get_historical_fetcher(
    client: httpx.AsyncClient = Depends(get_http_client),
) -> HistoricalFetcher:
    return HistoricalFetcher(client=HistoricalClient(client=client))


def get_geocoding_client(client: httpx.AsyncClient = Depends(get_http_client)) -> GeocodingClient:
    return GeocodingClient(client=client)


def get_comparison_service(
    forecast_client: ForecastClient = Depends(get_forecast_client),
    historical_fetcher: HistoricalFetcher = Depends(get_historical_fetcher),
) -> ComparisonService:
    return ComparisonService(forecast_client=forecast_client, historical_fetcher=historical_fetcher)
