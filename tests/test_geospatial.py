import pytest

from fleetroute.models.domain import Coordinate
from fleetroute.services.geospatial import (
    decode_polyline,
    distance_km,
    distance_to_path_km,
    haversine_km,
    midpoint,
)


def test_distance_is_symmetric_and_zero_on_same_point():
    a = Coordinate(latitude=21.5, longitude=39.2)
    b = Coordinate(latitude=24.7, longitude=46.7)

    assert distance_km(a, b) == distance_km(b, a)
    assert distance_km(a, a) == 0.0


def test_one_degree_of_longitude_on_equator():
    assert haversine_km(0.0, 0.0, 0.0, 1.0) == pytest.approx(111.19, abs=0.01)


def test_midpoint_is_average_of_coordinates():
    center = midpoint(Coordinate(0.0, 0.0), Coordinate(2.0, 4.0))
    assert center == Coordinate(latitude=1.0, longitude=2.0)


def test_decode_polyline_reference_example():
    points = decode_polyline("_p~iF~ps|U_ulLnnqC_mqNvxq`@")

    assert points == [
        pytest.approx((38.5, -120.2)),
        pytest.approx((40.7, -120.95)),
        pytest.approx((43.252, -126.453)),
    ]


def test_distance_to_path_measures_to_nearest_segment():
    path = [(0.0, 0.0), (0.0, 2.0)]
    station = Coordinate(latitude=0.1, longitude=1.0)

    offset = distance_to_path_km(station, path)

    assert offset == pytest.approx(haversine_km(0.1, 1.0, 0.0, 1.0), rel=1e-6)
    assert offset < distance_km(station, Coordinate(0.0, 0.0))


def test_distance_to_single_point_path():
    station = Coordinate(latitude=0.0, longitude=1.0)
    assert distance_to_path_km(station, [(0.0, 0.0)]) == pytest.approx(111.19, abs=0.01)


def test_distance_to_empty_path_is_rejected():
    with pytest.raises(ValueError):
        distance_to_path_km(Coordinate(0.0, 0.0), [])


@pytest.mark.parametrize("polyline", ["_p~iF~ps|", "_p~iF~ps|U_ulL", "_p~iF ~ps|U"])
def test_decode_polyline_rejects_truncated_or_corrupt_input(polyline):
    with pytest.raises(ValueError):
        decode_polyline(polyline)
