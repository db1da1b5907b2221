"""Traffic advisory derived from free-flow vs. traffic-adjusted durations."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from ...config import settings
from ...models.domain import CongestionLevel, TrafficSnapshot
from ..routing.providers import DirectionsResult


@dataclass(frozen=True, slots=True)
class CongestionThresholds:
    """Delay boundaries in seconds; a delay equal to a boundary takes the higher level."""

    medium_delay_seconds: int = 300
    high_delay_seconds: int = 900
    high_congestion_departure_offset: timedelta = timedelta(hours=2)

    @classmethod
    def from_settings(cls) -> "CongestionThresholds":
        return cls(
            medium_delay_seconds=settings.congestion_medium_delay_seconds,
            high_delay_seconds=settings.congestion_high_delay_seconds,
            high_congestion_departure_offset=timedelta(hours=settings.high_congestion_departure_offset_hours),
        )


def classify_congestion(delay_seconds: float, thresholds: CongestionThresholds | None = None) -> CongestionLevel:
    thresholds = thresholds or CongestionThresholds()
    if delay_seconds >= thresholds.high_delay_seconds:
        return CongestionLevel.HIGH
    if delay_seconds >= thresholds.medium_delay_seconds:
        return CongestionLevel.MEDIUM
    return CongestionLevel.LOW


def build_traffic_snapshot(
    result: DirectionsResult,
    *,
    thresholds: CongestionThresholds | None = None,
    now: datetime | None = None,
) -> TrafficSnapshot:
    thresholds = thresholds or CongestionThresholds()
    now = now or datetime.now(timezone.utc)

    free_flow = result.duration_seconds
    in_traffic = result.duration_in_traffic_seconds
    delay = in_traffic - free_flow
    average_speed = (result.distance_meters / 1000.0) / (in_traffic / 3600.0) if in_traffic > 0 else 0.0

    level = classify_congestion(delay, thresholds)
    departure = now + thresholds.high_congestion_departure_offset if level is CongestionLevel.HIGH else now
    return TrafficSnapshot(
        current_delay_seconds=delay,
        average_speed_kmh=average_speed,
        congestion_level=level,
        recommended_departure_time=departure,
    )
