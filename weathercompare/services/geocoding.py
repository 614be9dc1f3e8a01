"""Nominatim place search."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from weathercompare.core.config import settings
from weathercompare.models import Coordinates, NamedLocation
from weathercompare.services.metrics import track_request

logger = logging.getLogger(__name__)

PROVIDER = "nominatim"

# Approximate bounding box of Sweden (SMHI coverage)
SWEDEN_BOUNDS = {
    "min_lat": 55.0,
    "max_lat": 69.5,
    "min_lon": 10.5,
    "max_lon": 24.5,
}


class GeocodingError(RuntimeError):
    """Raised when the geocoding provider request fails."""


@dataclass(frozen=True)
class GeocodeResult:
    place_id: int
    name: str
    display_name: str
    coordinates: Coordinates

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "GeocodeResult":
        return cls(
            place_id=int(payload["place_id"]),
            name=payload.get("name") or "",
            display_name=payload.get("display_name") or "",
            coordinates=Coordinates(
                latitude=float(payload["lat"]),
                longitude=float(payload["lon"]),
            ),
        )

    def to_location(self) -> NamedLocation:
        return NamedLocation(name=self.name or self.display_name, coordinates=self.coordinates)


def is_within_sweden(coordinates: Coordinates) -> bool:
    return (
        SWEDEN_BOUNDS["min_lat"] <= coordinates.latitude <= SWEDEN_BOUNDS["max_lat"]
        and SWEDEN_BOUNDS["min_lon"] <= coordinates.longitude <= SWEDEN_BOUNDS["max_lon"]
    )


class GeocodingClient:
    def __init__(self, client: httpx.AsyncClient | None = None, timeout: float | None = None) -> None:
        self._client = client
        self.timeout = timeout or settings.geocode_timeout

    async def search_raw(
        self, query: str, limit: int | None = None, country_codes: str | None = None
    ) -> list[dict[str, Any]]:
        params = {
            "q": query,
            "format": "json",
            "countrycodes": country_codes or settings.geocode_country_codes,
            "limit": str(limit or settings.geocode_default_limit),
        }
        headers = {
            "User-Agent": settings.geocode_user_agent,
            "Accept": "application/json",
        }
        try:
            with track_request(PROVIDER):
                if self._client is not None:
                    response = await self._client.get(
                        settings.geocode_url, params=params, headers=headers, timeout=self.timeout
                    )
                else:
                    async with httpx.AsyncClient(timeout=self.timeout) as client:
                        response = await client.get(settings.geocode_url, params=params, headers=headers)
                response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.warning("Geocoding request for %r failed: %s", query, exc)
            raise GeocodingError(f"Geocoding failed: {exc}") from exc
        return response.json()

    async def search(self, query: str, limit: int | None = None) -> list[GeocodeResult]:
        if not query.strip():
            return []
        payload = await self.search_raw(query, limit=limit)
        return [GeocodeResult.from_payload(item) for item in payload]

    async def geocode(self, name: str) -> GeocodeResult | None:
        results = await self.search(name, limit=1)
        return results[0] if results else None


__all__ = ["GeocodeResult", "GeocodingClient", "GeocodingError", "is_within_sweden"]
