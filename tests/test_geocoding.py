"""Tests for the Nominatim adapter."""

import httpx
import pytest

from weathercompare.models import Coordinates
from weathercompare.services.geocoding import GeocodingClient, GeocodingError, is_within_sweden
from tests.conftest import json_response, mock_client

UPPSALA = {
    "place_id": 123,
    "lat": "59.8586",
    "lon": "17.6389",
    "name": "Uppsala",
    "display_name": "Uppsala, Uppsala län, Sverige",
}


@pytest.mark.asyncio
async def test_search_parses_results_and_sends_user_agent():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return json_response([UPPSALA])

    async with mock_client(handler) as client:
        results = await GeocodingClient(client=client).search("Uppsala")

    assert results[0].name == "Uppsala"
    assert results[0].coordinates == Coordinates(59.8586, 17.6389)
    assert seen[0].url.params["countrycodes"] == "se"
    assert seen[0].headers["User-Agent"].startswith("WeatherCompareApp")


@pytest.mark.asyncio
async def test_blank_query_does_not_hit_provider():
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    async with mock_client(handler) as client:
        assert await GeocodingClient(client=client).search("   ") == []


@pytest.mark.asyncio
async def test_geocode_returns_first_or_none():
    async with mock_client(lambda request: json_response([])) as client:
        assert await GeocodingClient(client=client).geocode("Nowhere") is None


@pytest.mark.asyncio
async def test_provider_error_raises():
    async with mock_client(lambda request: httpx.Response(500)) as client:
        with pytest.raises(GeocodingError):
            await GeocodingClient(client=client).search("Uppsala")


def test_is_within_sweden():
    assert is_within_sweden(Coordinates(59.33, 18.07))
    assert is_within_sweden(Coordinates(55.0, 10.5))
    assert not is_within_sweden(Coordinates(52.52, 13.40))
