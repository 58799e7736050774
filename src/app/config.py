"""Application configuration and settings management."""

from pathlib import Path
from typing import Any, Literal, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="OPS_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Order Policy API"
    api_prefix: str = "/api"
    log_level: str = Field(default="INFO", description="Root logging level.")
    data_root: Path = Field(default=Path("data"), description="Root directory for static data files.")
    fee_schedule_file: Path = Field(
        default=Path("data/delivery_fees.json"),
        description="JSON file with distance fee tiers, used when the database is not configured.",
    )
    merchant_timezone: str = Field(
        default="Asia/Manila",
        description="Time zone in which merchant operating hours are expressed.",
    )
    default_merchant_open: bool = Field(
        default=True,
        description="Open/closed flag used when a merchant has no readable operating hours.",
    )
    fallback_delivery_fee: float = Field(
        default=50.0,
        ge=0.0,
        description="Fee charged when no distance tier can be read at all.",
    )
    fee_override_policy: Literal["replace", "additive"] = Field(
        default="replace",
        description="How a matched order-amount tier combines with the distance band fee.",
    )

    # Road routing for trip distance; straight-line distance is used when unset or unreachable
    osrm_base_url: Optional[str] = Field(
        default=None,
        description="Base URL for the OSRM routing service (e.g., http://localhost:5000).",
    )
    osrm_profile: Literal["driving", "driving-hgv"] = Field(
        default="driving",
        description="OSRM profile to use when computing trip distance and duration.",
    )
    osrm_timeout_seconds: float = Field(default=10.0, gt=0.0)
    osrm_max_retries: int = Field(default=1, ge=0)
    osrm_backoff_seconds: float = Field(default=0.5, ge=0.0)

    # Rider location reporting
    rider_api_base_url: Optional[str] = Field(
        default=None,
        description="Base URL of the platform API receiving rider location reports.",
    )
    rider_api_token: Optional[str] = Field(default=None, description="Bearer token for location reports.")
    location_report_timeout_seconds: float = Field(default=10.0, gt=0.0)
    location_min_interval_seconds: float = Field(default=10.0, ge=0.0)
    location_min_distance_meters: float = Field(default=10.0, ge=0.0)
    location_poll_seconds: float = Field(default=1.0, gt=0.0)
    location_report_workers: int = Field(default=4, ge=1)

    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:8081",
            "http://127.0.0.1:8081",
            "http://localhost:5173",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

    # Supabase configuration
    supabase_url: Optional[str] = Field(
        default=None,
        description="Supabase project URL (e.g., https://xxx.supabase.co).",
    )
    supabase_key: Optional[str] = Field(
        default=None,
        description="Supabase service role key for backend operations.",
    )

    @field_validator("data_root", "fee_schedule_file", mode="before")
    @classmethod
    def _expand_path(cls, value: Any) -> Path:
        path_value = value if isinstance(value, Path) else Path(str(value))
        return path_value.expanduser().resolve()

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


settings = Settings()
