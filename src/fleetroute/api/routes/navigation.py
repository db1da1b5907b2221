"""Navigation endpoints: route optimization, fuel planning, traffic, weather and ETA."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Callable, TypeVar

from fastapi import APIRouter, HTTPException, status

from ...errors import GatewayUnavailable, NoRouteFound, WeatherUnavailable
from ...schemas.navigation import (
    ArrivalRequest,
    ArrivalResponse,
    FuelOptimizationRequest,
    FuelOptimizationResponse,
    OptimizedRouteModel,
    OptimizeRouteRequest,
    TrafficRequest,
    TrafficResponse,
    WeatherConditionModel,
    WeatherRequest,
    WeatherResponse,
)
from ...services.routing.service import RouteOptimizationService, build_route_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/navigation", tags=["navigation"])

T = TypeVar("T")


@lru_cache(maxsize=1)
def get_route_service() -> RouteOptimizationService:
    return build_route_service()


def _run(action: str, call: Callable[[], T]) -> T:
    try:
        return call()
    except NoRouteFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except (GatewayUnavailable, WeatherUnavailable) as exc:
        logger.warning(f"{action} failed on an upstream gateway: {exc}")
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        logger.exception(f"Error during {action}: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to {action}: {str(exc)}",
        ) from exc


@router.post("/optimize", response_model=OptimizedRouteModel, status_code=status.HTTP_200_OK)
def optimize(payload: OptimizeRouteRequest) -> OptimizedRouteModel:
    route = _run(
        "optimize route",
        lambda: get_route_service().optimize_route(
            payload.start.to_domain(),
            [stop.to_domain() for stop in payload.stops],
            payload.vehicle_class,
        ),
    )
    return OptimizedRouteModel.from_domain(route)


@router.post("/optimize-fuel", response_model=FuelOptimizationResponse, status_code=status.HTTP_200_OK)
def optimize_fuel(payload: FuelOptimizationRequest) -> FuelOptimizationResponse:
    result = _run(
        "optimize route for fuel",
        lambda: get_route_service().optimize_for_fuel(
            payload.start.to_domain(),
            payload.destination.to_domain(),
            payload.current_fuel_level,
            payload.tank_capacity,
            payload.vehicle_class,
        ),
    )
    return FuelOptimizationResponse.from_domain(result)


@router.post("/traffic", response_model=TrafficResponse, status_code=status.HTTP_200_OK)
def traffic(payload: TrafficRequest) -> TrafficResponse:
    snapshot = _run(
        "get traffic info",
        lambda: get_route_service().get_traffic_info(payload.origin.to_domain(), payload.destination.to_domain()),
    )
    return TrafficResponse.from_domain(snapshot)


@router.post("/weather", response_model=WeatherResponse, status_code=status.HTTP_200_OK)
def weather(payload: WeatherRequest) -> WeatherResponse:
    """Conditions per coordinate; locations whose lookup fails are left out."""
    snapshots = _run(
        "get weather conditions",
        lambda: get_route_service().get_weather_conditions([point.to_domain() for point in payload.coordinates]),
    )
    return WeatherResponse(
        requested=len(payload.coordinates),
        conditions=[WeatherConditionModel.from_domain(snapshot) for snapshot in snapshots],
    )


@router.post("/eta", response_model=ArrivalResponse, status_code=status.HTTP_200_OK)
def eta(payload: ArrivalRequest) -> ArrivalResponse:
    estimate = _run(
        "estimate arrival",
        lambda: get_route_service().estimate_arrival(
            payload.origin.to_domain(), payload.destination.to_domain(), payload.departure_time
        ),
    )
    return ArrivalResponse.from_domain(estimate)
