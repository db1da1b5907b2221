"""Domain models for stops, vehicles and optimized routes."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class StopKind(str, Enum):
    PICKUP = "pickup"
    DELIVERY = "delivery"
    WAYPOINT = "waypoint"


class VehicleClass(str, Enum):
    TRUCK = "truck"
    HEAVY_TRUCK = "heavy_truck"
    CAR = "car"
    BIKE = "bike"
    DEFAULT = "default"


class CongestionLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class DrivingImpact(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True, slots=True)
class Coordinate:
    """WGS-84 position in decimal degrees."""

    latitude: float
    longitude: float

    def as_tuple(self) -> tuple[float, float]:
        return (self.latitude, self.longitude)


@dataclass(frozen=True, slots=True)
class TimeWindow:
    start: datetime
    end: datetime


@dataclass(frozen=True, slots=True)
class Stop:
    """A location the vehicle must visit.

    ``time_window`` is carried through to the result but is not enforced by
    the ordering heuristics.
    """

    coordinate: Coordinate
    kind: StopKind = StopKind.DELIVERY
    address: Optional[str] = None
    time_window: Optional[TimeWindow] = None
    service_time_minutes: int = 0


@dataclass(frozen=True, slots=True)
class OptimizedRoute:
    ordered_stops: tuple[Stop, ...]
    total_distance_meters: int
    total_duration_seconds: int
    estimated_fuel_units: float
    estimated_cost: float
    polyline: str = ""
    turn_instructions: tuple[str, ...] = ()
    traffic_factored: bool = False


@dataclass(frozen=True, slots=True)
class TrafficSnapshot:
    current_delay_seconds: int
    average_speed_kmh: float
    congestion_level: CongestionLevel
    recommended_departure_time: datetime


@dataclass(frozen=True, slots=True)
class FuelStation:
    id: str
    name: str
    coordinate: Coordinate
    price_per_unit: float
    rating_out_of_5: float
    distance_from_route_meters: int
    brand: Optional[str] = None


@dataclass(frozen=True, slots=True)
class FuelOptimizationResult:
    base_route: OptimizedRoute
    fuel_required: float
    refuel_needed: bool
    candidate_stations: tuple[FuelStation, ...] = ()
    recommended_station: Optional[FuelStation] = None


@dataclass(frozen=True, slots=True)
class WeatherSnapshot:
    coordinate: Coordinate
    temperature_c: float
    humidity_pct: float
    visibility_km: float
    wind_speed_kmh: float
    condition_label: str
    driving_impact: DrivingImpact


@dataclass(frozen=True, slots=True)
class ArrivalEstimate:
    departure_time: datetime
    arrival_time: datetime
    duration_seconds: int
    traffic_factored: bool = False
