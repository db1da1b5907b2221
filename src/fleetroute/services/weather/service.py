"""Weather advisory along a route."""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from typing import Sequence

from ...config import settings
from ...errors import WeatherUnavailable
from ...models.domain import Coordinate, DrivingImpact, WeatherSnapshot
from ..routing.providers import WeatherProvider, WeatherReading

logger = logging.getLogger(__name__)

MEDIUM_IMPACT_CONDITIONS = frozenset({"rain", "snow"})
HIGH_IMPACT_CONDITIONS = frozenset({"thunderstorm"})
LOW_VISIBILITY_KM = 1.0

# Longest sleep between deadline checks while lookups are in flight
_POLL_SECONDS = 0.05


def classify_impact(condition_label: str, visibility_km: float) -> DrivingImpact:
    condition = condition_label.strip().lower()
    if condition in HIGH_IMPACT_CONDITIONS or visibility_km < LOW_VISIBILITY_KM:
        return DrivingImpact.HIGH
    if condition in MEDIUM_IMPACT_CONDITIONS:
        return DrivingImpact.MEDIUM
    return DrivingImpact.LOW


def to_snapshot(coordinate: Coordinate, reading: WeatherReading) -> WeatherSnapshot:
    visibility_km = reading.visibility_meters / 1000.0
    return WeatherSnapshot(
        coordinate=coordinate,
        temperature_c=reading.temperature_c,
        humidity_pct=reading.humidity_pct,
        visibility_km=visibility_km,
        wind_speed_kmh=reading.wind_speed_kmh,
        condition_label=reading.condition_label,
        driving_impact=classify_impact(reading.condition_label, visibility_km),
    )


class _Lookup:
    """One coordinate's provider call holding a concurrency slot while it runs.

    The slot is handed back when the call returns or when the caller gives up
    on it, whichever comes first.
    """

    def __init__(self, coordinate: Coordinate, slots: threading.Semaphore) -> None:
        self.coordinate = coordinate
        self.started_at: float | None = None
        self._slots = slots
        self._lock = threading.Lock()
        self._holds_slot = False

    def run(self, provider: WeatherProvider) -> WeatherReading:
        self._slots.acquire()
        with self._lock:
            self._holds_slot = True
            self.started_at = time.monotonic()
        try:
            return provider.current(self.coordinate)
        finally:
            self.release_slot()

    def release_slot(self) -> None:
        with self._lock:
            if self._holds_slot:
                self._holds_slot = False
                self._slots.release()


def fetch_weather_conditions(
    provider: WeatherProvider,
    coordinates: Sequence[Coordinate],
    *,
    max_parallel_requests: int | None = None,
    timeout_seconds: float | None = None,
) -> list[WeatherSnapshot]:
    """Look up every coordinate concurrently and keep the ones that succeed.

    At most ``max_parallel_requests`` lookups run at once. Each lookup gets
    its own ``timeout_seconds`` counted from the moment it starts; a lookup
    that overruns is abandoned and its slot goes to the next queued
    coordinate. Failed or abandoned lookups are logged and skipped; results
    keep the input order.
    """
    if not coordinates:
        return []

    limit = min(max_parallel_requests or settings.weather_max_parallel_requests, len(coordinates))
    timeout = timeout_seconds if timeout_seconds is not None else settings.http_timeout_seconds
    slots = threading.Semaphore(limit)
    lookups = [_Lookup(point, slots) for point in coordinates]

    # One thread per coordinate; the semaphore bounds how many call the provider
    executor = ThreadPoolExecutor(max_workers=len(coordinates))
    expired: set[Future[WeatherReading]] = set()
    try:
        futures: list[Future[WeatherReading]] = [executor.submit(lookup.run, provider) for lookup in lookups]
        owner = dict(zip(futures, lookups))
        pending = set(futures)
        while pending:
            _, pending = wait(pending, timeout=min(timeout, _POLL_SECONDS), return_when=FIRST_COMPLETED)
            now = time.monotonic()
            for future in list(pending):
                lookup = owner[future]
                if lookup.started_at is not None and now - lookup.started_at >= timeout and not future.done():
                    pending.discard(future)
                    expired.add(future)
                    lookup.release_slot()
    finally:
        executor.shutdown(wait=False, cancel_futures=True)

    snapshots: list[WeatherSnapshot] = []
    skipped = 0
    for coordinate, future in zip(coordinates, futures):
        if future in expired:
            skipped += 1
            logger.warning(f"Weather lookup for {coordinate.as_tuple()} did not finish within {timeout:.1f}s")
            continue
        try:
            reading = future.result()
        except WeatherUnavailable as e:
            skipped += 1
            logger.warning(f"Skipping weather for {coordinate.as_tuple()}: {e}")
            continue
        except Exception as e:
            skipped += 1
            logger.warning(f"Weather lookup for {coordinate.as_tuple()} failed unexpectedly: {e!r}")
            continue
        snapshots.append(to_snapshot(coordinate, reading))

    if skipped:
        logger.info(f"Weather advisory returned {len(snapshots)}/{len(coordinates)} locations ({skipped} skipped)")
    return snapshots
