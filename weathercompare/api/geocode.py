"""Place search endpoint."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query

from weathercompare.api.deps import get_geocoding_client
from weathercompare.services.geocoding import GeocodingClient, GeocodingError

router = APIRouter(tags=["geocode"])


@router.get("/geocode")
async def geocode(
    q: str = Query(..., min_length=1),
    limit: int = Query(1, ge=1, le=50),
    countrycodes: str | None = Query(default=None),
    client: GeocodingClient = Depends(get_geocoding_client),
) -> list[dict[str, Any]]:
    try:
        return await client.search_raw(q, limit=limit, country_codes=countrycodes)
    except GeocodingError as exc:
        raise HTTPException(status_code=502, detail="Failed to geocode location") from exc


__all__ = ["router"]
