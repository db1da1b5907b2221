from datetime import datetime, timedelta, timezone

import pytest

from fleetroute.models.domain import CongestionLevel
from fleetroute.services.routing.providers import DirectionsResult, RouteLeg
from fleetroute.services.traffic.service import (
    CongestionThresholds,
    build_traffic_snapshot,
    classify_congestion,
)

NOW = datetime(2026, 3, 2, 7, 30, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "delay, expected",
    [
        (0, CongestionLevel.LOW),
        (299, CongestionLevel.LOW),
        (300, CongestionLevel.MEDIUM),
        (899, CongestionLevel.MEDIUM),
        (900, CongestionLevel.HIGH),
        (3600, CongestionLevel.HIGH),
    ],
)
def test_congestion_boundaries(delay, expected):
    assert classify_congestion(delay) is expected


def test_negative_delay_is_low():
    assert classify_congestion(-60) is CongestionLevel.LOW


def test_snapshot_for_light_traffic_departs_now():
    result = DirectionsResult(
        legs=[RouteLeg(distance_meters=30_000, duration_seconds=1800, duration_in_traffic_seconds=1800)]
    )

    snapshot = build_traffic_snapshot(result, now=NOW)

    assert snapshot.current_delay_seconds == 0
    assert snapshot.average_speed_kmh == pytest.approx(60.0)
    assert snapshot.congestion_level is CongestionLevel.LOW
    assert snapshot.recommended_departure_time == NOW


def test_heavy_congestion_recommends_later_departure():
    result = DirectionsResult(
        legs=[
            RouteLeg(distance_meters=10_000, duration_seconds=600, duration_in_traffic_seconds=1200),
            RouteLeg(distance_meters=10_000, duration_seconds=600, duration_in_traffic_seconds=1200),
        ]
    )

    snapshot = build_traffic_snapshot(result, now=NOW)

    assert snapshot.current_delay_seconds == 1200
    assert snapshot.congestion_level is CongestionLevel.HIGH
    assert snapshot.recommended_departure_time == NOW + timedelta(hours=2)
    assert snapshot.average_speed_kmh == pytest.approx(30.0)


def test_custom_thresholds_and_offset():
    thresholds = CongestionThresholds(
        medium_delay_seconds=60,
        high_delay_seconds=120,
        high_congestion_departure_offset=timedelta(minutes=30),
    )
    result = DirectionsResult(
        legs=[RouteLeg(distance_meters=5_000, duration_seconds=300, duration_in_traffic_seconds=420)]
    )

    snapshot = build_traffic_snapshot(result, thresholds=thresholds, now=NOW)

    assert snapshot.congestion_level is CongestionLevel.HIGH
    assert snapshot.recommended_departure_time == NOW + timedelta(minutes=30)


def test_missing_traffic_duration_means_no_delay():
    result = DirectionsResult(legs=[RouteLeg(distance_meters=1_000, duration_seconds=120)])

    snapshot = build_traffic_snapshot(result, now=NOW)

    assert snapshot.current_delay_seconds == 0
    assert snapshot.congestion_level is CongestionLevel.LOW


def test_zero_duration_has_zero_speed():
    result = DirectionsResult(legs=[RouteLeg(distance_meters=0, duration_seconds=0, duration_in_traffic_seconds=0)])

    assert build_traffic_snapshot(result, now=NOW).average_speed_kmh == 0.0
