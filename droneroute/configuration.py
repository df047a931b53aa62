"""Mini README: Centralised configuration models and helpers for droneroute.

Structure:
    * RoutePlannerSettings - pydantic model describing runtime configuration.
    * get_settings - cached accessor for environment-aware settings.

Usage:
    Import ``get_settings`` to read environment variables (prefixed with
    ``DRONEROUTE_``) covering avoidance margins, DID and restriction surface
    dataset locations, route defaults and the service port. The configuration
    is cached so validation runs once per process; tests build
    ``RoutePlannerSettings`` directly and hand it to a ``PlanningContext``.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class RoutePlannerSettings(BaseSettings):
    """Runtime configuration for the route optimisation engine."""

    model_config = SettingsConfigDict(
        env_prefix="DRONEROUTE_",
        env_file=".env",
        case_sensitive=False,
    )

    environment: str = Field(
        "development",
        description="Environment label controlling debug toggles and logging levels.",
    )
    log_level: str = Field("INFO", description="Root logging level name.")
    did_data_directory: Path = Field(
        Path("data/did"),
        description="Directory holding per-prefecture DID GeoJSON files.",
    )
    did_dataset_url: Optional[str] = Field(
        None,
        description=(
            "URL template with {code} and {name} placeholders. When set, DID"
            " datasets are fetched over HTTP instead of from the data directory."
        ),
    )
    surface_data_directory: Optional[Path] = Field(
        None,
        description="Directory holding per-airport restriction surface GeoJSON files.",
    )
    surface_dataset_url: Optional[str] = Field(
        None,
        description=(
            "URL template with {slug} and {name} placeholders for airport restriction"
            " surfaces. Takes precedence over the surface directory."
        ),
    )
    did_fetch_concurrency: int = Field(
        4,
        description="Maximum number of prefecture datasets fetched in parallel.",
        ge=1,
        le=47,
    )
    airport_avoidance_margin: float = Field(300.0, ge=0.0)
    prohibited_avoidance_margin: float = Field(300.0, ge=0.0)
    did_avoidance_distance: float = Field(100.0, ge=0.0)
    did_avoidance_mode: bool = Field(
        False, description="Suggest positions outside DIDs for affected waypoints."
    )
    did_warning_only_mode: bool = Field(
        False, description="Flag DID waypoints without proposing a new position."
    )
    max_correction_iterations: int = Field(10, ge=1, le=100)
    selected_drone_id: str = Field("mavic-3-enterprise")
    optimization_algorithm: str = Field(
        "nearest-neighbor", description="Either 'nearest-neighbor' or '2-opt'."
    )
    check_regulations: bool = Field(True)
    auto_split: bool = Field(True)
    objective: str = Field("balanced")
    objective_aware_two_opt: bool = Field(
        False, description="Let 2-opt compare weighted segment scores instead of distance."
    )
    include_heliports: bool = Field(
        False, description="Index heliports as low-priority restricted zones."
    )
    interface_host: str = Field(
        "0.0.0.0",
        description="Network interface for the HTTP service to bind to.",
    )
    interface_port: int = Field(
        8000,
        description="Default port the HTTP service exposes.",
        ge=1,
        le=65535,
    )

    @field_validator("did_data_directory", "surface_data_directory", mode="before")
    @classmethod
    def _expand_path(cls, value: Optional[str | Path]) -> Optional[Path]:
        """Ensure configured paths expand user directories."""

        if value is None or value == "":
            return None
        return Path(value).expanduser().resolve()

    @field_validator("optimization_algorithm")
    @classmethod
    def _known_algorithm(cls, value: str) -> str:
        if value not in {"nearest-neighbor", "2-opt"}:
            raise ValueError("optimization_algorithm must be 'nearest-neighbor' or '2-opt'")
        return value


@lru_cache()
def get_settings() -> RoutePlannerSettings:
    """Return cached settings, ensuring consistent configuration across modules."""

    return RoutePlannerSettings()
