"""Capability contracts for the external routing, places and weather gateways."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Protocol, Sequence

from ...models.domain import Coordinate


@dataclass(slots=True)
class RouteLeg:
    distance_meters: int
    duration_seconds: int
    duration_in_traffic_seconds: Optional[int] = None


@dataclass(slots=True)
class DirectionsResult:
    """First route returned by a directions gateway.

    ``waypoint_order`` holds the visiting order of the *intermediate*
    waypoints when optimization was requested, empty otherwise.
    """

    legs: list[RouteLeg]
    polyline: str = ""
    instructions: list[str] = field(default_factory=list)
    waypoint_order: list[int] = field(default_factory=list)

    @property
    def distance_meters(self) -> int:
        return sum(leg.distance_meters for leg in self.legs)

    @property
    def duration_seconds(self) -> int:
        return sum(leg.duration_seconds for leg in self.legs)

    @property
    def has_traffic(self) -> bool:
        return bool(self.legs) and all(leg.duration_in_traffic_seconds is not None for leg in self.legs)

    @property
    def duration_in_traffic_seconds(self) -> int:
        return sum(
            leg.duration_in_traffic_seconds if leg.duration_in_traffic_seconds is not None else leg.duration_seconds
            for leg in self.legs
        )


@dataclass(slots=True)
class PlaceResult:
    id: str
    name: str
    coordinate: Coordinate
    rating: float = 0.0
    brand: Optional[str] = None


@dataclass(slots=True)
class WeatherReading:
    temperature_c: float
    humidity_pct: float
    wind_speed_kmh: float
    visibility_meters: float
    condition_label: str


class DirectionsProvider(Protocol):
    def route(
        self,
        origin: Coordinate,
        destination: Coordinate,
        waypoints: Sequence[Coordinate] = (),
        *,
        optimize_waypoints: bool = False,
        avoid_tolls: bool = False,
        use_traffic_model: bool = False,
    ) -> DirectionsResult:
        """Raise ``NoRouteFound`` for zero routes and ``GatewayUnavailable`` on transport failure."""
        ...


class PlaceSearchProvider(Protocol):
    def nearby(self, center: Coordinate, radius_meters: int, category: str) -> list[PlaceResult]:
        ...


class WeatherProvider(Protocol):
    def current(self, coordinate: Coordinate) -> WeatherReading:
        """Raise ``WeatherUnavailable`` on transport or parsing failure."""
        ...
