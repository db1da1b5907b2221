import pytest

from fleetroute.config import Settings
from fleetroute.errors import InvalidVehicleClass
from fleetroute.models.domain import VehicleClass
from fleetroute.services.costs.model import (
    DEFAULT_PROFILES,
    TableCostModel,
    profiles_from_overrides,
)


@pytest.mark.parametrize(
    "vehicle_class, km_per_unit",
    [
        ("truck", 4.0),
        ("heavy_truck", 3.0),
        ("car", 15.0),
        ("bike", 40.0),
        ("default", 12.0),
    ],
)
def test_fuel_consumption_uses_efficiency_table(vehicle_class, km_per_unit):
    model = TableCostModel()
    assert model.fuel_consumption(120_000, vehicle_class) == pytest.approx(120.0 / km_per_unit)


def test_trip_cost_adds_fuel_maintenance_and_labor():
    model = TableCostModel()
    fuel = model.fuel_consumption(30_000, "car")

    cost = model.trip_cost(30_000, fuel, "car")

    assert cost == pytest.approx(2.0 * 105.0 + 30 * 1.5 + 30 * 5.0)


def test_zero_distance_costs_nothing():
    model = TableCostModel()
    assert model.fuel_consumption(0, "truck") == 0.0
    assert model.trip_cost(0, 0.0, "truck") == 0.0


def test_unknown_class_falls_back_to_default_profile():
    model = TableCostModel()

    assert model.profile("spaceship") == DEFAULT_PROFILES[VehicleClass.DEFAULT]
    assert model.fuel_consumption(12_000, "spaceship") == pytest.approx(1.0)


def test_strict_model_rejects_unknown_class():
    model = TableCostModel(strict=True)

    with pytest.raises(InvalidVehicleClass):
        model.profile("spaceship")


def test_trucks_avoid_tolls_and_cars_use_traffic():
    model = TableCostModel()

    assert model.profile("truck").avoid_tolls
    assert not model.profile("truck").use_traffic_model
    assert model.profile(VehicleClass.CAR).use_traffic_model
    assert not model.profile("car").avoid_tolls


def test_overrides_replace_single_coefficients():
    profiles = profiles_from_overrides({"car": {"distance_per_fuel_unit": 20.0}})
    model = TableCostModel(profiles)

    assert model.fuel_consumption(20_000, "car") == pytest.approx(1.0)
    assert model.profile("car").fuel_cost_per_unit == 105.0


def test_profile_table_must_have_default():
    with pytest.raises(ValueError):
        TableCostModel({VehicleClass.CAR: DEFAULT_PROFILES[VehicleClass.CAR]})


def test_vehicle_profiles_read_from_environment(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("FLEETROUTE_VEHICLE_PROFILES", '{"bike": {"distance_per_fuel_unit": 50.0}}')

    configured = Settings()
    model = TableCostModel(profiles_from_overrides(configured.vehicle_profiles))

    assert model.profile("bike").distance_per_fuel_unit == 50.0
