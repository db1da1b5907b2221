"""Error types raised by the route optimization engine."""

from __future__ import annotations


class RoutingEngineError(Exception):
    """Base class for every error the engine hands back to its caller."""


class EmptyStopSet(RoutingEngineError, ValueError):
    """No stops were supplied for an optimization request."""

    def __init__(self, message: str = "At least one stop is required to optimize a route.") -> None:
        super().__init__(message)


class NoRouteFound(RoutingEngineError):
    """The directions gateway returned zero candidate routes."""


class GatewayUnavailable(RoutingEngineError):
    """Transport, timeout or upstream failure of a routing/places gateway."""


class WeatherUnavailable(RoutingEngineError):
    """Transport, timeout or upstream failure of the weather provider."""


class InvalidVehicleClass(RoutingEngineError, ValueError):
    """Unknown vehicle class under strict profile resolution."""

    def __init__(self, vehicle_class: str) -> None:
        super().__init__(f"Unknown vehicle class '{vehicle_class}'.")
        self.vehicle_class = vehicle_class
