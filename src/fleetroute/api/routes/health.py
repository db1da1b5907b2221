"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

from ...config import settings

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


def _get_osrm_health_check():
    """Lazy import to avoid startup failures."""
    from ...services.routing.osrm_client import check_health as osrm_health_check
    return osrm_health_check


@router.get("/health/gateway", status_code=status.HTTP_200_OK)
def health_gateway() -> dict:
    """Report which collaborators are configured and, for OSRM, whether it answers."""
    backend = settings.directions_backend
    payload = {
        "directions_backend": backend,
        "places_configured": bool(settings.google_maps_api_key),
        "weather_configured": bool(settings.openweather_api_key),
    }
    if backend == "osrm":
        payload["healthy"] = _get_osrm_health_check()()
    else:
        payload["healthy"] = bool(settings.google_maps_api_key)
    return payload
