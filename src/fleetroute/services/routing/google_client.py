"""Google Maps Platform adapter for directions and nearby place search."""

from __future__ import annotations

import html
import logging
import re
from typing import Sequence

import httpx

from ...config import settings
from ...errors import GatewayUnavailable, NoRouteFound
from ...models.domain import Coordinate
from ..http_gateway import JsonHttpClient
from .providers import DirectionsResult, PlaceResult, RouteLeg

logger = logging.getLogger(__name__)

_TAG_PATTERN = re.compile(r"<[^>]+>")
_NO_ROUTE_STATUSES = {"ZERO_RESULTS", "NOT_FOUND"}
# Directions API limit on intermediate waypoints per request
MAX_WAYPOINTS = 25


def _latlng(coordinate: Coordinate) -> str:
    return f"{coordinate.latitude:.6f},{coordinate.longitude:.6f}"


def strip_html(instruction: str) -> str:
    """Turn a Google ``html_instructions`` fragment into plain text."""
    text = _TAG_PATTERN.sub(" ", instruction)
    return " ".join(html.unescape(text).split())


class GoogleMapsClient:
    """Implements ``DirectionsProvider`` and ``PlaceSearchProvider``.

    Directions requests carry at most ``MAX_WAYPOINTS`` intermediate
    waypoints; longer routes are refused before any request is sent.
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        region: str | None = None,
        language: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.api_key = api_key or settings.google_maps_api_key
        if not self.api_key:
            raise ValueError("Google Maps API key is not configured.")
        self.base_url = (base_url or settings.google_maps_base_url).rstrip("/")
        self.region = region or settings.google_maps_region
        self.language = language or settings.google_maps_language
        self._http = JsonHttpClient(
            service_name="Google Maps",
            error_cls=GatewayUnavailable,
            timeout=timeout,
            max_retries=max_retries,
            transport=transport,
        )

    def _check_status(self, data: dict, *, allow_empty: bool = False) -> None:
        status = data.get("status", "UNKNOWN_ERROR")
        if status == "OK":
            return
        if status in _NO_ROUTE_STATUSES:
            if allow_empty:
                return
            raise NoRouteFound(f"Google Maps found no route ({status}).")
        message = data.get("error_message") or status
        raise GatewayUnavailable(f"Google Maps request failed: {message}")

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
        if len(waypoints) > MAX_WAYPOINTS:
            raise GatewayUnavailable(
                f"Google Maps accepts at most {MAX_WAYPOINTS} waypoints per route, got {len(waypoints)}."
            )
        params: dict[str, str] = {
            "origin": _latlng(origin),
            "destination": _latlng(destination),
            "mode": "driving",
            "language": self.language,
            "region": self.region,
            "key": self.api_key,
        }
        if waypoints:
            prefix = ["optimize:true"] if optimize_waypoints else []
            params["waypoints"] = "|".join(prefix + [_latlng(point) for point in waypoints])
        if avoid_tolls:
            params["avoid"] = "tolls"
        if use_traffic_model:
            # duration_in_traffic is only returned for a departure time
            params["departure_time"] = "now"
            params["traffic_model"] = "best_guess"

        data = self._http.get_json(f"{self.base_url}/directions/json", params)
        self._check_status(data)
        routes = data.get("routes") or []
        if not routes:
            raise NoRouteFound("Google Maps returned zero routes.")
        try:
            return parse_directions_route(routes[0])
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise GatewayUnavailable(f"Google Maps returned a malformed route: {e}") from e

    def nearby(self, center: Coordinate, radius_meters: int, category: str) -> list[PlaceResult]:
        params = {
            "location": _latlng(center),
            "radius": str(radius_meters),
            "type": category,
            "key": self.api_key,
        }
        data = self._http.get_json(f"{self.base_url}/place/nearbysearch/json", params)
        self._check_status(data, allow_empty=True)
        places: list[PlaceResult] = []
        for item in data.get("results") or []:
            location = (item.get("geometry") or {}).get("location") or {}
            if "lat" not in location or "lng" not in location:
                logger.debug(f"Skipping place without location: {item.get('place_id')}")
                continue
            places.append(
                PlaceResult(
                    id=str(item.get("place_id", "")),
                    name=str(item.get("name", "")),
                    coordinate=Coordinate(latitude=float(location["lat"]), longitude=float(location["lng"])),
                    rating=float(item.get("rating") or 0.0),
                )
            )
        return places


def parse_directions_route(route: dict) -> DirectionsResult:
    legs: list[RouteLeg] = []
    instructions: list[str] = []
    for leg in route.get("legs") or []:
        in_traffic = leg.get("duration_in_traffic")
        legs.append(
            RouteLeg(
                distance_meters=int(leg["distance"]["value"]),
                duration_seconds=int(leg["duration"]["value"]),
                duration_in_traffic_seconds=int(in_traffic["value"]) if in_traffic else None,
            )
        )
        for step in leg.get("steps") or []:
            text = strip_html(step.get("html_instructions", ""))
            if text:
                instructions.append(text)
    return DirectionsResult(
        legs=legs,
        polyline=(route.get("overview_polyline") or {}).get("points", ""),
        instructions=instructions,
        waypoint_order=[int(index) for index in route.get("waypoint_order") or []],
    )
