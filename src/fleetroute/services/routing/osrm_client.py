"""HTTP client for interacting with OSRM services."""

from __future__ import annotations

import logging
from typing import Sequence

import httpx

from ...config import settings
from ...errors import GatewayUnavailable, NoRouteFound
from ...models.domain import Coordinate
from ..http_gateway import JsonHttpClient
from .providers import DirectionsResult, RouteLeg

logger = logging.getLogger(__name__)

_NO_ROUTE_CODES = {"NoRoute", "NoTrips", "NoSegment"}


def build_coordinate_string(coordinates: Sequence[Coordinate]) -> str:
    """OSRM expects ``lon,lat;lon,lat;...``."""
    return ";".join(f"{point.longitude},{point.latitude}" for point in coordinates)


def describe_step(step: dict) -> str:
    maneuver = step.get("maneuver") or {}
    parts = [str(maneuver.get("type", "continue"))]
    if maneuver.get("modifier"):
        parts.append(str(maneuver["modifier"]))
    text = " ".join(parts)
    if step.get("name"):
        text = f"{text} onto {step['name']}"
    return text[:1].upper() + text[1:]


class OSRMClient:
    """Implements ``DirectionsProvider`` against an OSRM server.

    OSRM has no live traffic model and no toll data, so ``avoid_tolls`` and
    ``use_traffic_model`` are accepted but have no effect and legs never carry
    a traffic-adjusted duration.
    """

    def __init__(
        self,
        base_url: str | None = None,
        profile: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = base_url or settings.osrm_base_url
        if not self.base_url:
            raise ValueError("OSRM base URL is not configured.")
        self.base_url = self.base_url.rstrip("/")
        self.profile = profile or settings.osrm_profile
        self._http = JsonHttpClient(
            service_name="OSRM",
            error_cls=GatewayUnavailable,
            timeout=timeout,
            max_retries=max_retries,
            transport=transport,
        )

    def _request(self, service: str, coordinates: Sequence[Coordinate], params: dict[str, str]) -> dict:
        url = f"{self.base_url}/{service}/v1/{self.profile}/{build_coordinate_string(coordinates)}"
        logger.debug(f"OSRM {service} request for {len(coordinates)} coordinates")
        data = self._http.get_json(url, params)
        code = data.get("code")
        if code in _NO_ROUTE_CODES:
            raise NoRouteFound(f"OSRM found no route ({code}).")
        if code != "Ok":
            error_msg = data.get("message", "Unknown OSRM error")
            raise GatewayUnavailable(f"OSRM {service} request failed: {error_msg}")
        return data

    def route(
        self,
        origin: Coordinate,
        destination: Coordinate,
        waypoints: Sequence[Coordinate] = (),
        *,
        optimize_waypoints: bool = False,
        avoid_tolls: bool = False,
        use_traffic_model: bool = False,
    ) -> DirectionsResult:
        coordinates = [origin, *waypoints, destination]
        params = {
            "overview": "full",
            "geometries": "polyline",
            "steps": "true",
        }

        if optimize_waypoints and waypoints:
            # Trip service solves the visiting order with both ends pinned
            params.update({"source": "first", "destination": "last", "roundtrip": "false"})
            data = self._request("trip", coordinates, params)
            routes = data.get("trips") or []
        else:
            data = self._request("route", coordinates, params)
            routes = data.get("routes") or []

        if not routes:
            raise NoRouteFound("OSRM returned zero routes.")
        try:
            result = _parse_route(routes[0])
            if optimize_waypoints and waypoints:
                result.waypoint_order = _trip_waypoint_order(data.get("waypoints") or [], len(waypoints))
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise GatewayUnavailable(f"OSRM returned a malformed route: {e}") from e
        return result


def _trip_waypoint_order(waypoints: list[dict], intermediate_count: int) -> list[int]:
    """Visiting order of intermediate inputs from OSRM ``waypoint_index`` values.

    Input position 0 is the origin and the last position is the destination;
    intermediate input ``k`` sits at position ``k + 1``.
    """
    intermediate = waypoints[1 : intermediate_count + 1]
    if len(intermediate) != intermediate_count:
        raise GatewayUnavailable("OSRM trip response is missing waypoint positions.")
    ranked = sorted(range(intermediate_count), key=lambda k: int(intermediate[k]["waypoint_index"]))
    return ranked


def _parse_route(route: dict) -> DirectionsResult:
    legs: list[RouteLeg] = []
    instructions: list[str] = []
    for leg in route.get("legs") or []:
        legs.append(
            RouteLeg(
                distance_meters=int(round(float(leg["distance"]))),
                duration_seconds=int(round(float(leg["duration"]))),
            )
        )
        instructions.extend(describe_step(step) for step in leg.get("steps") or [])
    return DirectionsResult(legs=legs, polyline=route.get("geometry") or "", instructions=instructions)


def check_health(base_url: str | None = None) -> bool:
    """Check OSRM service health by routing between two fixed coordinates.

    Public OSRM endpoints may not have a /health endpoint.
    """
    base = base_url or settings.osrm_base_url
    if not base:
        return False
    try:
        client = OSRMClient(base_url=base, timeout=5.0, max_retries=0)
        client.route(
            Coordinate(latitude=52.517037, longitude=13.388860),
            Coordinate(latitude=52.496891, longitude=13.385983),
        )
        return True
    except (GatewayUnavailable, NoRouteFound):
        return False
