"""Application configuration and settings management."""

from typing import Any, Literal, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="FLEETROUTE_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Fleet Route Optimization API"
    api_prefix: str = "/api"
    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

    directions_backend: Literal["google", "osrm"] = Field(
        default="google",
        description="Which routing gateway answers directions requests.",
    )
    google_maps_api_key: Optional[str] = Field(default=None, description="Google Maps Platform API key.")
    google_maps_base_url: str = Field(default="https://maps.googleapis.com/maps/api")
    google_maps_region: str = Field(default="IN")
    google_maps_language: str = Field(default="en")
    osrm_base_url: Optional[str] = Field(
        default=None,
        description="Base URL for the OSRM routing service (e.g., http://localhost:5000).",
    )
    osrm_profile: Literal["driving", "driving-hgv"] = Field(
        default="driving",
        description="OSRM profile to use when computing routes.",
    )
    openweather_api_key: Optional[str] = Field(default=None, description="OpenWeatherMap API key.")
    openweather_base_url: str = Field(default="https://api.openweathermap.org/data/2.5")
    http_timeout_seconds: float = Field(default=30.0, gt=0.0)
    gateway_max_retries: int = Field(default=0, ge=0)
    gateway_backoff_seconds: float = Field(default=1.0, ge=0.0)

    small_route_threshold: int = Field(
        default=10,
        ge=1,
        description="Stop counts up to this value are ordered by the gateway itself.",
    )
    fuel_safety_margin: float = Field(default=1.2, ge=1.0)
    fuel_station_search_radius_meters: int = Field(default=50_000, ge=1)
    default_fuel_price_per_unit: float = Field(default=100.0, ge=0.0)
    station_distance_weight: float = Field(default=1000.0, ge=0.0)
    station_price_ceiling: float = Field(default=110.0)
    station_rating_weight: float = Field(default=20.0, ge=0.0)

    congestion_medium_delay_seconds: int = Field(default=300, ge=0)
    congestion_high_delay_seconds: int = Field(default=900, ge=0)
    high_congestion_departure_offset_hours: float = Field(default=2.0, ge=0.0)

    weather_max_parallel_requests: int = Field(default=8, ge=1)

    vehicle_profiles: dict[str, dict[str, Any]] = Field(
        default_factory=dict,
        description="Per-class overrides for the built-in vehicle cost table.",
    )

    @field_validator("frontend_allowed_origins", mode="before")
    @classmethod
    def _parse_str_tuple_from_env(cls, value: Any) -> tuple[str, ...]:
        """Parse string tuple from environment variable (comma-separated or JSON array)."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(str(item) for item in value)
        if isinstance(value, str):
            try:
                parsed = json.loads(value)
                if isinstance(parsed, list):
                    return tuple(str(item) for item in parsed)
            except (json.JSONDecodeError, TypeError):
                pass
            if "," in value:
                return tuple(item.strip() for item in value.split(",") if item.strip())
            if value.strip():
                return (value.strip(),)
        return tuple()

    @field_validator("vehicle_profiles", mode="before")
    @classmethod
    def _parse_profiles_from_env(cls, value: Any) -> dict[str, dict[str, Any]]:
        if value is None or value == "":
            return {}
        if isinstance(value, str):
            parsed = json.loads(value)
            if not isinstance(parsed, dict):
                raise ValueError("vehicle_profiles must be a JSON object keyed by vehicle class.")
            return parsed
        return value


settings = Settings()
