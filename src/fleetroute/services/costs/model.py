"""Vehicle fuel and trip cost model."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from typing import Any, Mapping

from ...config import settings
from ...errors import InvalidVehicleClass
from ...models.domain import VehicleClass

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class VehicleProfile:
    vehicle_class: VehicleClass
    distance_per_fuel_unit: float
    fuel_cost_per_unit: float
    maintenance_cost_per_km: float
    labor_cost_per_km: float
    avoid_tolls: bool = False
    use_traffic_model: bool = True


DEFAULT_PROFILES: dict[VehicleClass, VehicleProfile] = {
    VehicleClass.TRUCK: VehicleProfile(
        vehicle_class=VehicleClass.TRUCK,
        distance_per_fuel_unit=4.0,
        fuel_cost_per_unit=95.0,
        maintenance_cost_per_km=3.0,
        labor_cost_per_km=8.0,
        avoid_tolls=True,
        use_traffic_model=False,
    ),
    VehicleClass.HEAVY_TRUCK: VehicleProfile(
        vehicle_class=VehicleClass.HEAVY_TRUCK,
        distance_per_fuel_unit=3.0,
        fuel_cost_per_unit=95.0,
        maintenance_cost_per_km=3.0,
        labor_cost_per_km=8.0,
        avoid_tolls=True,
        use_traffic_model=False,
    ),
    VehicleClass.CAR: VehicleProfile(
        vehicle_class=VehicleClass.CAR,
        distance_per_fuel_unit=15.0,
        fuel_cost_per_unit=105.0,
        maintenance_cost_per_km=1.5,
        labor_cost_per_km=5.0,
    ),
    VehicleClass.BIKE: VehicleProfile(
        vehicle_class=VehicleClass.BIKE,
        distance_per_fuel_unit=40.0,
        fuel_cost_per_unit=105.0,
        maintenance_cost_per_km=0.5,
        labor_cost_per_km=3.0,
        use_traffic_model=False,
    ),
    VehicleClass.DEFAULT: VehicleProfile(
        vehicle_class=VehicleClass.DEFAULT,
        distance_per_fuel_unit=12.0,
        fuel_cost_per_unit=100.0,
        maintenance_cost_per_km=0.0,
        labor_cost_per_km=0.0,
    ),
}


class CostModel(ABC):
    """Contract for fuel and trip cost estimators."""

    @abstractmethod
    def profile(self, vehicle_class: str | VehicleClass) -> VehicleProfile:
        raise NotImplementedError

    def fuel_consumption(self, distance_meters: float, vehicle_class: str | VehicleClass) -> float:
        """Fuel units burnt over ``distance_meters`` for the given class."""
        profile = self.profile(vehicle_class)
        return (max(distance_meters, 0) / 1000.0) / profile.distance_per_fuel_unit

    def trip_cost(self, distance_meters: float, fuel_units: float, vehicle_class: str | VehicleClass) -> float:
        """Fuel + maintenance + labor cost of a trip."""
        profile = self.profile(vehicle_class)
        distance_km = max(distance_meters, 0) / 1000.0
        fuel_cost = max(fuel_units, 0.0) * profile.fuel_cost_per_unit
        maintenance_cost = distance_km * profile.maintenance_cost_per_km
        labor_cost = distance_km * profile.labor_cost_per_km
        return fuel_cost + maintenance_cost + labor_cost


class TableCostModel(CostModel):
    """Cost model backed by a per-class profile table.

    Unknown classes resolve to the ``default`` profile unless ``strict`` is set.
    """

    def __init__(self, profiles: Mapping[VehicleClass, VehicleProfile] | None = None, *, strict: bool = False) -> None:
        self.profiles = dict(profiles or DEFAULT_PROFILES)
        if VehicleClass.DEFAULT not in self.profiles:
            raise ValueError("Cost model profiles must include the 'default' class.")
        self.strict = strict

    def profile(self, vehicle_class: str | VehicleClass) -> VehicleProfile:
        return resolve_profile(self.profiles, vehicle_class, strict=self.strict)


def resolve_profile(
    profiles: Mapping[VehicleClass, VehicleProfile],
    vehicle_class: str | VehicleClass,
    *,
    strict: bool = False,
) -> VehicleProfile:
    try:
        key = VehicleClass(vehicle_class)
    except ValueError:
        if strict:
            raise InvalidVehicleClass(str(vehicle_class)) from None
        logger.warning(f"Unknown vehicle class '{vehicle_class}', using default cost profile")
        key = VehicleClass.DEFAULT
    return profiles.get(key, profiles[VehicleClass.DEFAULT])


def profiles_from_overrides(overrides: Mapping[str, Mapping[str, Any]]) -> dict[VehicleClass, VehicleProfile]:
    """Apply configured coefficient overrides on top of the built-in table."""

    profiles = dict(DEFAULT_PROFILES)
    for raw_class, values in overrides.items():
        vehicle_class = VehicleClass(raw_class)
        profiles[vehicle_class] = replace(profiles[vehicle_class], **dict(values))
    return profiles


def build_cost_model() -> TableCostModel:
    return TableCostModel(profiles_from_overrides(settings.vehicle_profiles))
