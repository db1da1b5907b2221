"""Nearest-neighbor route construction."""

from __future__ import annotations

from typing import Sequence

from ...models.domain import Coordinate, Stop
from ..geospatial import distance_km


def nearest_neighbor_order(start: Coordinate, coordinates: Sequence[Coordinate]) -> list[int]:
    """Greedy visiting order over ``coordinates`` starting from ``start``.

    Returns indices into ``coordinates``. Ties keep the earliest candidate, so
    the order is reproducible for identical input.
    """
    remaining = list(range(len(coordinates)))
    order: list[int] = []
    current = start

    while remaining:
        nearest_pos = 0
        nearest_distance = distance_km(current, coordinates[remaining[0]])
        for pos in range(1, len(remaining)):
            candidate_distance = distance_km(current, coordinates[remaining[pos]])
            if candidate_distance < nearest_distance:
                nearest_pos = pos
                nearest_distance = candidate_distance
        nearest = remaining.pop(nearest_pos)
        order.append(nearest)
        current = coordinates[nearest]

    return order


def nearest_neighbor_stops(start: Coordinate, stops: Sequence[Stop]) -> list[Stop]:
    order = nearest_neighbor_order(start, [stop.coordinate for stop in stops])
    return [stops[index] for index in order]
