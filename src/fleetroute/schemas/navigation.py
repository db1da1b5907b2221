"""Navigation request/response schemas."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator

from ..models.domain import (
    ArrivalEstimate,
    Coordinate,
    CongestionLevel,
    DrivingImpact,
    FuelOptimizationResult,
    FuelStation,
    OptimizedRoute,
    Stop,
    StopKind,
    TimeWindow,
    TrafficSnapshot,
    WeatherSnapshot,
)


class CoordinateModel(BaseModel):
    latitude: float = Field(..., ge=-90.0, le=90.0)
    longitude: float = Field(..., ge=-180.0, le=180.0)

    def to_domain(self) -> Coordinate:
        return Coordinate(latitude=self.latitude, longitude=self.longitude)

    @classmethod
    def from_domain(cls, coordinate: Coordinate) -> "CoordinateModel":
        return cls(latitude=coordinate.latitude, longitude=coordinate.longitude)


class TimeWindowModel(BaseModel):
    start: datetime
    end: datetime

    @model_validator(mode="after")
    def _check_order(self) -> "TimeWindowModel":
        if self.end < self.start:
            raise ValueError("Time window end must not precede its start.")
        return self


class StopModel(BaseModel):
    coordinate: CoordinateModel
    kind: StopKind = StopKind.DELIVERY
    address: Optional[str] = None
    time_window: Optional[TimeWindowModel] = Field(
        default=None, description="Advisory only; not enforced by the ordering heuristics."
    )
    service_time_minutes: int = Field(default=0, ge=0)

    def to_domain(self) -> Stop:
        window = TimeWindow(start=self.time_window.start, end=self.time_window.end) if self.time_window else None
        return Stop(
            coordinate=self.coordinate.to_domain(),
            kind=self.kind,
            address=self.address,
            time_window=window,
            service_time_minutes=self.service_time_minutes,
        )

    @classmethod
    def from_domain(cls, stop: Stop) -> "StopModel":
        window = TimeWindowModel(start=stop.time_window.start, end=stop.time_window.end) if stop.time_window else None
        return cls(
            coordinate=CoordinateModel.from_domain(stop.coordinate),
            kind=stop.kind,
            address=stop.address,
            time_window=window,
            service_time_minutes=stop.service_time_minutes,
        )


class OptimizeRouteRequest(BaseModel):
    start: CoordinateModel
    stops: List[StopModel] = Field(default_factory=list)
    vehicle_class: str = Field(default="default", description="truck, heavy_truck, car, bike or default.")


class OptimizedRouteModel(BaseModel):
    ordered_stops: List[StopModel]
    total_distance_meters: int
    total_duration_seconds: int
    estimated_fuel_units: float
    estimated_cost: float
    polyline: str
    turn_instructions: List[str]
    traffic_factored: bool

    @classmethod
    def from_domain(cls, route: OptimizedRoute) -> "OptimizedRouteModel":
        return cls(
            ordered_stops=[StopModel.from_domain(stop) for stop in route.ordered_stops],
            total_distance_meters=route.total_distance_meters,
            total_duration_seconds=route.total_duration_seconds,
            estimated_fuel_units=route.estimated_fuel_units,
            estimated_cost=route.estimated_cost,
            polyline=route.polyline,
            turn_instructions=list(route.turn_instructions),
            traffic_factored=route.traffic_factored,
        )


class TrafficRequest(BaseModel):
    origin: CoordinateModel
    destination: CoordinateModel


class TrafficResponse(BaseModel):
    current_delay_seconds: int
    average_speed_kmh: float
    congestion_level: CongestionLevel
    recommended_departure_time: datetime

    @classmethod
    def from_domain(cls, snapshot: TrafficSnapshot) -> "TrafficResponse":
        return cls(
            current_delay_seconds=snapshot.current_delay_seconds,
            average_speed_kmh=snapshot.average_speed_kmh,
            congestion_level=snapshot.congestion_level,
            recommended_departure_time=snapshot.recommended_departure_time,
        )


class FuelOptimizationRequest(BaseModel):
    start: CoordinateModel
    destination: CoordinateModel
    current_fuel_level: float = Field(..., ge=0.0)
    tank_capacity: float = Field(..., gt=0.0)
    vehicle_class: str = "default"

    @model_validator(mode="after")
    def _check_tank(self) -> "FuelOptimizationRequest":
        if self.current_fuel_level > self.tank_capacity:
            raise ValueError("Current fuel level cannot exceed tank capacity.")
        return self


class FuelStationModel(BaseModel):
    id: str
    name: str
    coordinate: CoordinateModel
    brand: Optional[str] = None
    price_per_unit: float
    rating_out_of_5: float
    distance_from_route_meters: int

    @classmethod
    def from_domain(cls, station: FuelStation) -> "FuelStationModel":
        return cls(
            id=station.id,
            name=station.name,
            coordinate=CoordinateModel.from_domain(station.coordinate),
            brand=station.brand,
            price_per_unit=station.price_per_unit,
            rating_out_of_5=station.rating_out_of_5,
            distance_from_route_meters=station.distance_from_route_meters,
        )


class FuelOptimizationResponse(BaseModel):
    base_route: OptimizedRouteModel
    fuel_required: float
    refuel_needed: bool
    candidate_stations: List[FuelStationModel]
    recommended_station: Optional[FuelStationModel] = None

    @classmethod
    def from_domain(cls, result: FuelOptimizationResult) -> "FuelOptimizationResponse":
        return cls(
            base_route=OptimizedRouteModel.from_domain(result.base_route),
            fuel_required=result.fuel_required,
            refuel_needed=result.refuel_needed,
            candidate_stations=[FuelStationModel.from_domain(station) for station in result.candidate_stations],
            recommended_station=(
                FuelStationModel.from_domain(result.recommended_station) if result.recommended_station else None
            ),
        )


class WeatherRequest(BaseModel):
    coordinates: List[CoordinateModel] = Field(..., min_length=1)


class WeatherConditionModel(BaseModel):
    coordinate: CoordinateModel
    temperature_c: float
    humidity_pct: float
    visibility_km: float
    wind_speed_kmh: float
    condition_label: str
    driving_impact: DrivingImpact

    @classmethod
    def from_domain(cls, snapshot: WeatherSnapshot) -> "WeatherConditionModel":
        return cls(
            coordinate=CoordinateModel.from_domain(snapshot.coordinate),
            temperature_c=snapshot.temperature_c,
            humidity_pct=snapshot.humidity_pct,
            visibility_km=snapshot.visibility_km,
            wind_speed_kmh=snapshot.wind_speed_kmh,
            condition_label=snapshot.condition_label,
            driving_impact=snapshot.driving_impact,
        )


class WeatherResponse(BaseModel):
    requested: int
    conditions: List[WeatherConditionModel]


class ArrivalRequest(BaseModel):
    origin: CoordinateModel
    destination: CoordinateModel
    departure_time: Optional[datetime] = None


class ArrivalResponse(BaseModel):
    departure_time: datetime
    arrival_time: datetime
    duration_seconds: int
    traffic_factored: bool

    @classmethod
    def from_domain(cls, estimate: ArrivalEstimate) -> "ArrivalResponse":
        return cls(
            departure_time=estimate.departure_time,
            arrival_time=estimate.arrival_time,
            duration_seconds=estimate.duration_seconds,
            traffic_factored=estimate.traffic_factored,
        )
