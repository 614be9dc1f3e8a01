"""Forecast passthrough and historical observation endpoints."""

from __future__ import annotations

import logging
import re
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query

from weathercompare.api.deps import get_forecast_client, get_historical_fetcher
from weathercompare.models import Coordinates
from weathercompare.services.forecast import ForecastClient, ForecastError
from weathercompare.services.historical import HistoricalFetcher

logger = logging.getLogger(__name__)

router = APIRouter(tags=["weather"])

DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


@router.get("/weather")
async def get_forecast(
    lat: float = Query(..., ge=-90, le=90),
    lon: float = Query(..., ge=-180, le=180),
    forecast_client: ForecastClient = Depends(get_forecast_client),
) -> dict[str, Any]:
    """Return the raw SMHI point forecast for a coordinate."""

    try:
        return await forecast_client.fetch_raw(Coordinates(latitude=lat, longitude=lon))
    except ForecastError as exc:
        status = 404 if exc.status_code == 404 else 502
        raise HTTPException(status_code=status, detail=str(exc)) from exc


@router.get("/historical")
async def get_historical(
    lat: float = Query(..., ge=-90, le=90),
    lon: float = Query(..., ge=-180, le=180),
    start_date: str = Query(..., alias="startDate"),
    end_date: str = Query(..., alias="endDate"),
    fetcher: HistoricalFetcher = Depends(get_historical_fetcher),
) -> list[dict[str, Any]]:
    """Return daily historical records from the nearest SMHI stations."""

    if not DATE_RE.match(start_date) or not DATE_RE.match(end_date):
        raise HTTPException(status_code=400, detail="Dates must be in YYYY-MM-DD format")

    try:
        records = await fetcher.fetch(Coordinates(latitude=lat, longitude=lon), start_date, end_date)
    except Exception as exc:
        logger.error("Historical data fetch error: %s", exc, exc_info=True)
        raise HTTPException(
            status_code=500, detail="Failed to fetch historical weather data"
        ) from exc
    return [record.to_dict() for record in records]


__all__ = ["router"]
