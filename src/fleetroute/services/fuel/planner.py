"""Refuel decision and fuel-station scoring."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from ...config import settings
from ...models.domain import Coordinate, FuelStation
from ..geospatial import decode_polyline, distance_km, distance_to_path_km, midpoint
from ..routing.providers import PlaceSearchProvider

logger = logging.getLogger(__name__)

FUEL_STATION_CATEGORY = "gas_station"


@dataclass(frozen=True, slots=True)
class StationScoring:
    distance_weight: float = 1000.0
    price_ceiling: float = 110.0
    rating_weight: float = 20.0

    @classmethod
    def from_settings(cls) -> "StationScoring":
        return cls(
            distance_weight=settings.station_distance_weight,
            price_ceiling=settings.station_price_ceiling,
            rating_weight=settings.station_rating_weight,
        )


def needs_refuel(current_fuel_level: float, fuel_required: float, safety_margin: float) -> bool:
    return current_fuel_level < fuel_required * safety_margin


def score_station(station: FuelStation, scoring: StationScoring | None = None) -> float:
    """Higher is better: closer, cheaper and better rated stations win."""
    scoring = scoring or StationScoring()
    distance_score = scoring.distance_weight / (1.0 + station.distance_from_route_meters / 1000.0)
    price_score = scoring.price_ceiling - station.price_per_unit
    rating_score = station.rating_out_of_5 * scoring.rating_weight
    return distance_score + price_score + rating_score


def select_best_station(
    stations: Sequence[FuelStation], scoring: StationScoring | None = None
) -> Optional[FuelStation]:
    """Maximum-score station; on equal scores the earlier candidate is kept."""
    best: Optional[FuelStation] = None
    best_score = float("-inf")
    for station in stations:
        score = score_station(station, scoring)
        if score > best_score:
            best = station
            best_score = score
    return best


def find_stations_near_route(
    places: PlaceSearchProvider,
    start: Coordinate,
    end: Coordinate,
    *,
    polyline: str = "",
    radius_meters: int | None = None,
    default_price_per_unit: float | None = None,
) -> list[FuelStation]:
    """Fuel stations around the route midpoint, nearest to the route first.

    Distance is measured to the decoded route geometry when a polyline is
    available and decodable, otherwise to the midpoint used as search center.
    """
    center = midpoint(start, end)
    radius = radius_meters if radius_meters is not None else settings.fuel_station_search_radius_meters
    price = default_price_per_unit if default_price_per_unit is not None else settings.default_fuel_price_per_unit
    path: list[tuple[float, float]] = []
    if polyline:
        try:
            path = decode_polyline(polyline)
        except ValueError as e:
            logger.warning(f"Ignoring undecodable route polyline, measuring from midpoint: {e}")

    stations: list[FuelStation] = []
    for place in places.nearby(center, radius, FUEL_STATION_CATEGORY):
        if path:
            offset_km = distance_to_path_km(place.coordinate, path)
        else:
            offset_km = distance_km(center, place.coordinate)
        stations.append(
            FuelStation(
                id=place.id,
                name=place.name,
                coordinate=place.coordinate,
                price_per_unit=price,
                rating_out_of_5=place.rating,
                distance_from_route_meters=int(offset_km * 1000),
                brand=place.brand,
            )
        )

    stations.sort(key=lambda station: station.distance_from_route_meters)
    logger.info(f"Found {len(stations)} fuel stations within {radius}m of route midpoint")
    return stations
