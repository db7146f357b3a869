"""
Application configuration.

Centralized settings with support for:
- Environment variables (GF_ prefix)
- .env file
- CLI argument overrides

Detection parameters end up in an immutable DetectionConfig which is
passed explicitly into every pipeline stage.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


@dataclass(frozen=True)
class DetectionConfig:
    """
    Parameters of the stop-based peak detector.

    Immutable value object. Use from_profile() for the named presets.

    Attributes:
        stop_speed_threshold_mps: Points slower than this count as stopped.
        cluster_distance_m: Spatial merge radius for stop segments.
        cluster_time_gap_min: Temporal merge window for stop segments.
        min_stop_duration_min: Minimum total cluster duration to qualify.
        prominence_radius_m: Spatial neighbor window for prominence.
        prominence_time_window_min: Temporal neighbor window for prominence.
        elevation_percentile: Elevation bar for the elevation sub-score.
    """

    stop_speed_threshold_mps: float = 0.5
    cluster_distance_m: float = 50.0
    cluster_time_gap_min: float = 5.0
    min_stop_duration_min: float = 1.0
    prominence_radius_m: float = 100.0
    prominence_time_window_min: float = 10.0
    elevation_percentile: float = 80.0

    def __post_init__(self) -> None:
        for name in (
            "stop_speed_threshold_mps",
            "cluster_distance_m",
            "cluster_time_gap_min",
            "min_stop_duration_min",
            "prominence_radius_m",
            "prominence_time_window_min",
        ):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must not be negative: {getattr(self, name)}")
        if not (0.0 <= self.elevation_percentile <= 100.0):
            raise ValueError(
                f"elevation_percentile must be within 0..100: {self.elevation_percentile}"
            )

    @classmethod
    def from_profile(cls, name: str, **overrides) -> "DetectionConfig":
        """
        Build config from a named profile.

        Args:
            name: Profile name (see DETECTION_PROFILES)
            **overrides: Field values replacing the profile values

        Raises:
            ValueError: If the profile is unknown
        """
        if name not in DETECTION_PROFILES:
            available = ", ".join(DETECTION_PROFILES)
            raise ValueError(f"Unknown detection profile: {name}. Available: {available}")
        return replace(DETECTION_PROFILES[name], **overrides)


# "standard": short breaks count, stops merge within 5 min.
# "patient": longer summit breaks, stops merge within 15 min.
DETECTION_PROFILES: dict[str, DetectionConfig] = {
    "standard": DetectionConfig(),
    "patient": DetectionConfig(cluster_time_gap_min=15.0, min_stop_duration_min=3.0),
}


class Settings(BaseSettings):
    """
    Application settings with environment variable support.

    Priority: CLI args > Environment > .env file > defaults

    Environment variables use GF_ prefix:
    - GF_PROFILE, GF_STOP_SPEED_THRESHOLD_MPS, GF_CLUSTER_DISTANCE_M, ...
    - GF_LOOKUP_PROVIDER, GF_OVERPASS_URL, GF_LOOKUP_RADIUS_M
    - GF_OUTPUT_FORMAT, GF_DEBUG_LEVEL
    """

    model_config = SettingsConfigDict(
        env_prefix="GF_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Detection (None = take value from profile)
    profile: str = Field(default="standard", description="Detection profile: standard, patient")
    stop_speed_threshold_mps: Optional[float] = Field(default=None, description="Stop speed threshold (m/s)")
    cluster_distance_m: Optional[float] = Field(default=None, description="Cluster merge radius (m)")
    cluster_time_gap_min: Optional[float] = Field(default=None, description="Cluster merge window (min)")
    min_stop_duration_min: Optional[float] = Field(default=None, description="Minimum stop duration (min)")
    prominence_radius_m: Optional[float] = Field(default=None, description="Prominence neighbor radius (m)")
    prominence_time_window_min: Optional[float] = Field(default=None, description="Prominence neighbor window (min)")
    elevation_percentile: Optional[float] = Field(default=None, description="Elevation percentile bar")
    min_score: float = Field(default=0.0, description="Hide peaks below this composite score")

    # Named-peak lookup
    lookup_enabled: bool = Field(default=False, description="Query OSM for peak names")
    lookup_provider: str = Field(default="overpass", description="Named-peak lookup provider")
    overpass_url: str = Field(
        default="https://overpass-api.de/api/interpreter",
        description="Overpass API interpreter endpoint",
    )
    lookup_radius_m: float = Field(default=100.0, description="Search radius for named peaks (m)")
    http_timeout_s: float = Field(default=30.0, description="HTTP timeout (s)")

    # Output
    output_format: str = Field(default="console", description="Output channel: console, json, none")
    output_path: Optional[str] = Field(default=None, description="File for json output (default: stdout)")
    debug_level: str = Field(default="info", description="Debug level: info, verbose")

    def get_detection_config(self) -> DetectionConfig:
        """Create immutable DetectionConfig from profile plus explicit overrides."""
        overrides = {
            name: getattr(self, name)
            for name in (
                "stop_speed_threshold_mps",
                "cluster_distance_m",
                "cluster_time_gap_min",
                "min_stop_duration_min",
                "prominence_radius_m",
                "prominence_time_window_min",
                "elevation_percentile",
            )
            if getattr(self, name) is not None
        }
        return DetectionConfig.from_profile(self.profile, **overrides)
