"""OpenWeatherMap adapter for current conditions."""

from __future__ import annotations

import httpx

from ...config import settings
from ...errors import WeatherUnavailable
from ...models.domain import Coordinate
from ..http_gateway import JsonHttpClient
from ..routing.providers import WeatherReading

# OpenWeatherMap caps reported visibility at 10 km
MAX_VISIBILITY_METERS = 10_000


class OpenWeatherClient:
    """Implements ``WeatherProvider`` using the ``/weather`` endpoint in metric units."""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.api_key = api_key or settings.openweather_api_key
        if not self.api_key:
            raise ValueError("OpenWeatherMap API key is not configured.")
        self.base_url = (base_url or settings.openweather_base_url).rstrip("/")
        self._http = JsonHttpClient(
            service_name="OpenWeatherMap",
            error_cls=WeatherUnavailable,
            timeout=timeout,
            max_retries=max_retries,
            transport=transport,
        )

    def current(self, coordinate: Coordinate) -> WeatherReading:
        params = {
            "lat": f"{coordinate.latitude:.6f}",
            "lon": f"{coordinate.longitude:.6f}",
            "appid": self.api_key,
            "units": "metric",
        }
        data = self._http.get_json(f"{self.base_url}/weather", params)
        try:
            return parse_weather(data)
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise WeatherUnavailable(f"OpenWeatherMap returned malformed conditions: {e}") from e


def parse_weather(data: dict) -> WeatherReading:
    main = data["main"]
    weather = data.get("weather") or []
    condition = str(weather[0].get("main", "")).lower() if weather else ""
    return WeatherReading(
        temperature_c=float(main["temp"]),
        humidity_pct=float(main.get("humidity", 0.0)),
        wind_speed_kmh=float((data.get("wind") or {}).get("speed", 0.0)) * 3.6,
        visibility_meters=float(data.get("visibility", MAX_VISIBILITY_METERS)),
        condition_label=condition,
    )
