"""Two-location comparison endpoints."""

from __future__ import annotations

from datetime import date
from typing import Any, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from weathercompare.api.deps import get_comparison_service
from weathercompare.models import Coordinates, LocationSeries, NamedLocation
from weathercompare.services.comparison import (
    ComparisonError,
    ComparisonService,
    historical_range,
)
from weathercompare.services.formatting import render_insight
from weathercompare.services.insights import generate_insights

router = APIRouter(prefix="/compare", tags=["compare"])


class LocationPayload(BaseModel):
    name: str
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)

    def to_location(self) -> NamedLocation:
        return NamedLocation(
            name=self.name,
            coordinates=Coordinates(latitude=self.latitude, longitude=self.longitude),
        )


class ComparePayload(BaseModel):
    location_a: LocationPayload
    location_b: LocationPayload


class HistoricalPayload(ComparePayload):
    reference_dates: list[date] = Field(
        min_length=1,
        description="Dates of the forecast series; the range is shifted back one year.",
    )


def _series_or_none(series: LocationSeries | None) -> Optional[dict[str, Any]]:
    return series.to_dict() if series is not None else None


@router.post("")
async def compare(
    payload: ComparePayload,
    language: Optional[Literal["en", "sv"]] = Query(default=None),
    service: ComparisonService = Depends(get_comparison_service),
) -> dict[str, Any]:
    try:
        series_a, series_b = await service.compare(
            payload.location_a.to_location(), payload.location_b.to_location()
        )
    except ComparisonError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc

    insights = generate_insights(series_a, series_b)
    body: dict[str, Any] = {
        "location_a": series_a.to_dict(),
        "location_b": series_b.to_dict(),
        "insights": [insight.to_dict() for insight in insights],
    }
    if language:
        body["insight_text"] = [render_insight(insight, language) for insight in insights]
    return body


@router.post("/historical")
async def compare_historical(
    payload: HistoricalPayload,
    service: ComparisonService = Depends(get_comparison_service),
) -> dict[str, Any]:
    start, end = historical_range(payload.reference_dates)
    historical_a, historical_b = await service.fetch_historical_range(
        payload.location_a.to_location(), payload.location_b.to_location(), start, end
    )
    return {
        "start_date": start.isoformat(),
        "end_date": end.isoformat(),
        "location_a": _series_or_none(historical_a),
        "location_b": _series_or_none(historical_b),
    }


__all__ = ["router"]
