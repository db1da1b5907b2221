"""Route optimization orchestration service."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Sequence

from ...config import settings
from ...errors import EmptyStopSet, GatewayUnavailable, WeatherUnavailable
from ...models.domain import (
    ArrivalEstimate,
    Coordinate,
    FuelOptimizationResult,
    OptimizedRoute,
    Stop,
    StopKind,
    TrafficSnapshot,
    VehicleClass,
    WeatherSnapshot,
)
from ..costs.model import CostModel, build_cost_model
from ..fuel.planner import StationScoring, find_stations_near_route, needs_refuel, select_best_station
from ..traffic.service import CongestionThresholds, build_traffic_snapshot
from ..weather.service import fetch_weather_conditions
from .construction import nearest_neighbor_stops
from .improvement import two_opt_stops
from .providers import DirectionsProvider, DirectionsResult, PlaceSearchProvider, WeatherProvider

logger = logging.getLogger(__name__)


class RouteOptimizationService:
    """Stateless facade over the heuristics, cost model and gateway collaborators.

    Instances hold only configuration and provider references, so one instance
    can serve concurrent callers.
    """

    def __init__(
        self,
        directions: DirectionsProvider,
        places: PlaceSearchProvider | None = None,
        weather: WeatherProvider | None = None,
        cost_model: CostModel | None = None,
        *,
        small_route_threshold: int | None = None,
        fuel_safety_margin: float | None = None,
        congestion: CongestionThresholds | None = None,
        station_scoring: StationScoring | None = None,
        station_search_radius_meters: int | None = None,
        default_fuel_price_per_unit: float | None = None,
        weather_max_parallel_requests: int | None = None,
        weather_timeout_seconds: float | None = None,
    ) -> None:
        self.directions = directions
        self.places = places
        self.weather = weather
        self.cost_model = cost_model or build_cost_model()
        self.small_route_threshold = small_route_threshold or settings.small_route_threshold
        self.fuel_safety_margin = fuel_safety_margin or settings.fuel_safety_margin
        self.congestion = congestion or CongestionThresholds.from_settings()
        self.station_scoring = station_scoring or StationScoring.from_settings()
        self.station_search_radius_meters = station_search_radius_meters or settings.fuel_station_search_radius_meters
        self.default_fuel_price_per_unit = (
            default_fuel_price_per_unit
            if default_fuel_price_per_unit is not None
            else settings.default_fuel_price_per_unit
        )
        self.weather_max_parallel_requests = weather_max_parallel_requests or settings.weather_max_parallel_requests
        self.weather_timeout_seconds = weather_timeout_seconds or settings.http_timeout_seconds

    def optimize_route(
        self,
        start: Coordinate,
        stops: Sequence[Stop],
        vehicle_class: str | VehicleClass = VehicleClass.DEFAULT,
    ) -> OptimizedRoute:
        """Order ``stops`` from ``start`` and attach real-road metrics and cost estimates.

        Up to ``small_route_threshold`` stops the gateway orders the
        intermediate stops itself (the last stop stays the destination);
        larger sets are ordered locally with nearest-neighbor + 2-opt and the
        gateway is asked once for the frozen order.
        """
        if not stops:
            raise EmptyStopSet()
        stops = list(stops)
        profile = self.cost_model.profile(vehicle_class)

        if len(stops) <= self.small_route_threshold:
            logger.info(f"Optimizing {len(stops)} stops with gateway waypoint ordering")
            result = self.directions.route(
                start,
                stops[-1].coordinate,
                [stop.coordinate for stop in stops[:-1]],
                optimize_waypoints=True,
                avoid_tolls=profile.avoid_tolls,
                use_traffic_model=profile.use_traffic_model,
            )
            ordered = _apply_waypoint_order(stops, result.waypoint_order)
        else:
            logger.info(f"Optimizing {len(stops)} stops with nearest-neighbor + 2-opt")
            ordered = two_opt_stops(start, nearest_neighbor_stops(start, stops))
            result = self.directions.route(
                start,
                ordered[-1].coordinate,
                [stop.coordinate for stop in ordered[:-1]],
                optimize_waypoints=False,
                avoid_tolls=profile.avoid_tolls,
                use_traffic_model=profile.use_traffic_model,
            )

        return self._build_route(ordered, result, vehicle_class, traffic_requested=profile.use_traffic_model)

    def _build_route(
        self,
        ordered: Sequence[Stop],
        result: DirectionsResult,
        vehicle_class: str | VehicleClass,
        *,
        traffic_requested: bool,
    ) -> OptimizedRoute:
        distance = max(result.distance_meters, 0)
        traffic_factored = traffic_requested and result.has_traffic
        duration = result.duration_in_traffic_seconds if traffic_factored else result.duration_seconds
        fuel = self.cost_model.fuel_consumption(distance, vehicle_class)
        cost = self.cost_model.trip_cost(distance, fuel, vehicle_class)
        return OptimizedRoute(
            ordered_stops=tuple(ordered),
            total_distance_meters=distance,
            total_duration_seconds=max(duration, 0),
            estimated_fuel_units=fuel,
            estimated_cost=cost,
            polyline=result.polyline,
            turn_instructions=tuple(result.instructions),
            traffic_factored=traffic_factored,
        )

    def get_traffic_info(
        self,
        origin: Coordinate,
        destination: Coordinate,
        *,
        now: datetime | None = None,
    ) -> TrafficSnapshot:
        result = self.directions.route(origin, destination, use_traffic_model=True)
        snapshot = build_traffic_snapshot(result, thresholds=self.congestion, now=now)
        logger.info(
            f"Traffic {origin.as_tuple()} -> {destination.as_tuple()}: "
            f"delay={snapshot.current_delay_seconds}s congestion={snapshot.congestion_level.value}"
        )
        return snapshot

    def optimize_for_fuel(
        self,
        start: Coordinate,
        destination: Coordinate,
        current_fuel_level: float,
        tank_capacity: float,
        vehicle_class: str | VehicleClass = VehicleClass.DEFAULT,
    ) -> FuelOptimizationResult:
        if current_fuel_level < 0 or tank_capacity <= 0:
            raise ValueError("Fuel level must be non-negative and tank capacity positive.")
        if current_fuel_level > tank_capacity:
            raise ValueError("Current fuel level cannot exceed tank capacity.")

        route = self.optimize_route(start, [Stop(coordinate=destination, kind=StopKind.DELIVERY)], vehicle_class)
        fuel_required = self.cost_model.fuel_consumption(route.total_distance_meters, vehicle_class)

        if not needs_refuel(current_fuel_level, fuel_required, self.fuel_safety_margin):
            logger.info(
                f"No refuel needed: fuel={current_fuel_level:.2f} required={fuel_required:.2f} "
                f"margin={self.fuel_safety_margin}"
            )
            return FuelOptimizationResult(base_route=route, fuel_required=fuel_required, refuel_needed=False)

        if self.places is None:
            raise GatewayUnavailable("No place search provider is configured for fuel stations.")
        stations = find_stations_near_route(
            self.places,
            start,
            destination,
            polyline=route.polyline,
            radius_meters=self.station_search_radius_meters,
            default_price_per_unit=self.default_fuel_price_per_unit,
        )
        best = select_best_station(stations, self.station_scoring)
        logger.info(
            f"Refuel needed: fuel={current_fuel_level:.2f} required={fuel_required:.2f}; "
            f"recommended={best.name if best else None}"
        )
        return FuelOptimizationResult(
            base_route=route,
            fuel_required=fuel_required,
            refuel_needed=True,
            candidate_stations=tuple(stations),
            recommended_station=best,
        )

    def get_weather_conditions(self, coordinates: Sequence[Coordinate]) -> list[WeatherSnapshot]:
        if self.weather is None:
            raise WeatherUnavailable("No weather provider is configured.")
        return fetch_weather_conditions(
            self.weather,
            coordinates,
            max_parallel_requests=self.weather_max_parallel_requests,
            timeout_seconds=self.weather_timeout_seconds,
        )

    def estimate_arrival(
        self,
        origin: Coordinate,
        destination: Coordinate,
        departure_time: datetime | None = None,
    ) -> ArrivalEstimate:
        departure = departure_time or datetime.now(timezone.utc)
        result = self.directions.route(origin, destination, use_traffic_model=True)
        duration = result.duration_in_traffic_seconds
        return ArrivalEstimate(
            departure_time=departure,
            arrival_time=departure + timedelta(seconds=duration),
            duration_seconds=duration,
            traffic_factored=result.has_traffic,
        )


def _apply_waypoint_order(stops: Sequence[Stop], waypoint_order: Sequence[int]) -> list[Stop]:
    """Reorder intermediate stops by the gateway's order; the last stop stays last."""
    intermediate = list(stops[:-1])
    if not waypoint_order:
        return list(stops)
    if sorted(waypoint_order) != list(range(len(intermediate))):
        raise GatewayUnavailable(
            f"Gateway returned waypoint order {list(waypoint_order)} for {len(intermediate)} waypoints."
        )
    return [intermediate[index] for index in waypoint_order] + [stops[-1]]


def build_route_service() -> RouteOptimizationService:
    """Wire the configured gateways into a service instance."""
    from ..weather.client import OpenWeatherClient
    from .google_client import GoogleMapsClient
    from .osrm_client import OSRMClient

    try:
        google = GoogleMapsClient() if settings.google_maps_api_key else None
        if settings.directions_backend == "osrm":
            directions: DirectionsProvider = OSRMClient()
        elif google is not None:
            directions = google
        else:
            raise ValueError("Google Maps API key is not configured.")
        weather = OpenWeatherClient() if settings.openweather_api_key else None
    except ValueError as e:
        raise GatewayUnavailable(f"Routing gateway is not configured: {e}") from e
    return RouteOptimizationService(directions=directions, places=google, weather=weather)
