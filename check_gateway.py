#!/usr/bin/env python3
"""Script to verify connectivity to the configured routing and weather gateways."""

import sys
from pathlib import Path

project_root = Path(__file__).parent
sys.path.insert(0, str(project_root / "src"))

from fleetroute.config import settings
from fleetroute.errors import RoutingEngineError
from fleetroute.models.domain import Coordinate
from fleetroute.services.routing.service import build_route_service

# Two points in Berlin, close enough for any backend
ORIGIN = Coordinate(latitude=52.517037, longitude=13.388860)
DESTINATION = Coordinate(latitude=52.496891, longitude=13.385983)


def main():
    print("=" * 60)
    print("Routing Gateway Connection Test")
    print("=" * 60)
    print()

    print("1. Checking configuration...")
    print(f"   [OK] Directions backend: {settings.directions_backend}")
    print(f"   [{'OK' if settings.google_maps_api_key else '--'}] Google Maps key configured")
    print(f"   [{'OK' if settings.openweather_api_key else '--'}] OpenWeatherMap key configured")
    print()

    print("2. Building route service...")
    try:
        service = build_route_service()
    except RoutingEngineError as e:
        print(f"   [ERROR] {e}")
        return 1
    print()

    print("3. Requesting a traffic snapshot...")
    try:
        snapshot = service.get_traffic_info(ORIGIN, DESTINATION)
        print(f"   [OK] Delay: {snapshot.current_delay_seconds}s, congestion: {snapshot.congestion_level.value}")
        print(f"   [OK] Average speed: {snapshot.average_speed_kmh:.1f} km/h")
    except RoutingEngineError as e:
        print(f"   [ERROR] Traffic request failed: {e}")
        return 1
    print()

    if service.weather is not None:
        print("4. Requesting weather...")
        conditions = service.get_weather_conditions([ORIGIN])
        if conditions:
            print(f"   [OK] {conditions[0].condition_label} ({conditions[0].driving_impact.value} impact)")
        else:
            print("   [ERROR] Weather lookup returned nothing")
            return 1
        print()

    print("=" * 60)
    print("[SUCCESS] Gateways are connected and working!")
    print("=" * 60)
    return 0


if __name__ == "__main__":
    sys.exit(main())
