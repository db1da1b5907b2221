"""2-opt local search over an open route anchored at a fixed start.

The tour is addressed by index: position 0 is the start coordinate and
positions ``1..n`` hold the stops. A move reverses the stop segment between
two positions ``1 <= i < j <= n``; the start never moves and the route does
not return to it.

Policy is first-improvement: an improving reversal is kept immediately and
the scan continues from the next ``(i, j)`` pair of the same pass. Passes
repeat until one completes without any accepted reversal, or until
``max_passes`` is reached.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from ...models.domain import Coordinate, Stop
from ..geospatial import distance_km

logger = logging.getLogger(__name__)

# Reversals must beat the current length by more than float noise
IMPROVEMENT_EPSILON_KM = 1e-9


@dataclass(slots=True)
class TwoOptResult:
    order: list[int]
    length_km: float
    passes: int
    improvements: int


def route_length_km(start: Coordinate, coordinates: Sequence[Coordinate], order: Sequence[int]) -> float:
    """Length of start -> coordinates[order[0]] -> ... -> coordinates[order[-1]]."""
    total = 0.0
    previous = start
    for index in order:
        current = coordinates[index]
        total += distance_km(previous, current)
        previous = current
    return total


def _reverse(order: list[int], i: int, j: int) -> None:
    # ``i``/``j`` are tour positions; the stop at tour position p is order[p - 1]
    lo, hi = i - 1, j - 1
    while lo < hi:
        order[lo], order[hi] = order[hi], order[lo]
        lo += 1
        hi -= 1


def two_opt_order(
    start: Coordinate,
    coordinates: Sequence[Coordinate],
    order: Sequence[int] | None = None,
    *,
    max_passes: int | None = None,
) -> TwoOptResult:
    """Improve a visiting order; the returned length never exceeds the input's."""

    current = list(order) if order is not None else list(range(len(coordinates)))
    n = len(current)
    best_length = route_length_km(start, coordinates, current)
    passes = 0
    improvements = 0

    improved = n >= 2
    while improved:
        if max_passes is not None and passes >= max_passes:
            break
        improved = False
        passes += 1
        for i in range(1, n):
            for j in range(i + 1, n + 1):
                _reverse(current, i, j)
                candidate_length = route_length_km(start, coordinates, current)
                if candidate_length < best_length - IMPROVEMENT_EPSILON_KM:
                    best_length = candidate_length
                    improvements += 1
                    improved = True
                else:
                    _reverse(current, i, j)
        logger.debug(f"2-opt pass {passes}: length={best_length:.3f}km improvements={improvements}")

    return TwoOptResult(order=current, length_km=best_length, passes=passes, improvements=improvements)


def two_opt_stops(start: Coordinate, stops: Sequence[Stop], *, max_passes: int | None = None) -> list[Stop]:
    result = two_opt_order(start, [stop.coordinate for stop in stops], max_passes=max_passes)
    return [stops[index] for index in result.order]
