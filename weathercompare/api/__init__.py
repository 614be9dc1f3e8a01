"""API router definitions."""

from fastapi import APIRouter

from .compare import router as compare_router
from .geocode import router as geocode_router
from .logs import router as logs_router
from .routes import health_router
from .weather import router as weather_router

api_router = APIRouter()
api_router.include_router(health_router)
api_router.include_router(weather_router)
api_router.include_router(geocode_router)
api_router.include_router(compare_router)
api_router.include_router(logs_router)

__all__ = ["api_router"]
