"""Tail of recent log records for operators."""

from __future__ import annotations

from fastapi import APIRouter, Query

from weathercompare.core.config import settings
from weathercompare.core.logging_config import get_log_buffer

router = APIRouter(prefix="/logs", tags=["logs"])


@router.get("")
def list_logs(
    limit: int = Query(100, ge=1, le=settings.log_buffer_size),
    level: str | None = Query(default=None, description="Only return records at this level."),
) -> dict[str, list[dict[str, str]]]:
    entries = get_log_buffer(limit=settings.log_buffer_size)
    if level:
        entries = [entry for entry in entries if entry["level"] == level.upper()]
    return {"logs": entries[:limit]}


__all__ = ["router"]
