"""Geospatial helper functions."""

from __future__ import annotations

import math
from typing import Sequence

from shapely.geometry import LineString, Point
from shapely.ops import nearest_points

from ..models.domain import Coordinate

EARTH_RADIUS_KM = 6371.0


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Compute distance between two coordinates using the Haversine formula."""

    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def distance_km(a: Coordinate, b: Coordinate) -> float:
    """Great-circle distance between two coordinates in kilometers."""

    return haversine_km(a.latitude, a.longitude, b.latitude, b.longitude)


def midpoint(a: Coordinate, b: Coordinate) -> Coordinate:
    """Arithmetic midpoint of two coordinates."""

    return Coordinate(latitude=(a.latitude + b.latitude) / 2, longitude=(a.longitude + b.longitude) / 2)


def distance_to_path_km(point: Coordinate, path: Sequence[tuple[float, float]]) -> float:
    """Great-circle distance from ``point`` to the closest position on a (lat, lon) path.

    The closest position is found by planar projection in degree space, then
    measured with Haversine.
    """

    if not path:
        raise ValueError("Path must contain at least one coordinate.")
    if len(path) == 1:
        lat, lon = path[0]
        return haversine_km(point.latitude, point.longitude, lat, lon)

    line = LineString([(lon, lat) for lat, lon in path])
    _, nearest = nearest_points(Point(point.longitude, point.latitude), line)
    return haversine_km(point.latitude, point.longitude, nearest.y, nearest.x)


def decode_polyline(polyline: str) -> list[tuple[float, float]]:
    """Decode Google polyline string to list of (lat, lon) coordinates.

    Both Google Directions and OSRM (``geometries=polyline``) use this encoding
    with a precision of five decimal places. A truncated or corrupt string
    raises ``ValueError``.
    """
    coordinates = []
    index = 0
    lat = 0
    lon = 0

    while index < len(polyline):
        shift = 0
        result = 0
        while True:
            if index >= len(polyline):
                raise ValueError(f"Polyline is truncated at offset {index}.")
            b = ord(polyline[index]) - 63
            if not 0 <= b < 64:
                raise ValueError(f"Invalid polyline character {polyline[index]!r} at offset {index}.")
            index += 1
            result |= (b & 0x1f) << shift
            shift += 5
            if b < 0x20:
                break
        lat += ~(result >> 1) if (result & 1) else (result >> 1)

        shift = 0
        result = 0
        while True:
            if index >= len(polyline):
                raise ValueError(f"Polyline is truncated at offset {index}.")
            b = ord(polyline[index]) - 63
            if not 0 <= b < 64:
                raise ValueError(f"Invalid polyline character {polyline[index]!r} at offset {index}.")
            index += 1
            result |= (b & 0x1f) << shift
            shift += 5
            if b < 0x20:
                break
        lon += ~(result >> 1) if (result & 1) else (result >> 1)

        coordinates.append((lat / 1e5, lon / 1e5))

    return coordinates
