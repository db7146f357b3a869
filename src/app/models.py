"""
Data Transfer Objects (DTOs) for Gipfelfinder.

Defines the records passed between the detection stages:
TrackPoint -> StopSegment -> StopCluster -> ScoredCluster -> DetectedPeak.
All records are immutable; every stage builds new ones.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, Tuple


class StopState(str, Enum):
    """States of the stop segmenter."""
    IDLE = "IDLE"
    IN_STOP = "IN_STOP"


@dataclass(frozen=True)
class TrackPoint:
    """One recorded fix along a track."""
    index: int
    lat: float
    lon: float
    elevation_m: Optional[float] = None
    time: Optional[datetime] = None
    distance_m: float = 0.0  # cumulative from track start
    speed_mps: float = 0.0  # from previous point


@dataclass(frozen=True)
class TrackSummary:
    """Overview of a parsed track."""
    point_count: int
    total_distance_km: float
    min_elevation_m: Optional[float] = None
    max_elevation_m: Optional[float] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None

    @property
    def duration_minutes(self) -> float:
        if self.start_time is None or self.end_time is None:
            return 0.0
        return (self.end_time - self.start_time).total_seconds() / 60.0


@dataclass(frozen=True)
class StopSegment:
    """
    Maximal run of consecutive slow points.

    start_index/end_index are inclusive TrackPoint indices. highest_index
    is the first point carrying max_elevation_m.
    """
    start_index: int
    end_index: int
    start_time: Optional[datetime]
    end_time: Optional[datetime]
    avg_lat: float
    avg_lon: float
    avg_elevation_m: float
    max_elevation_m: float
    highest_index: int

    @property
    def point_count(self) -> int:
        return self.end_index - self.start_index + 1

    @property
    def duration_minutes(self) -> float:
        if self.start_time is None or self.end_time is None:
            return 0.0
        return (self.end_time - self.start_time).total_seconds() / 60.0


@dataclass(frozen=True)
class StopCluster:
    """One or more stop segments representing the same physical stop."""
    segments: Tuple[StopSegment, ...]
    seed_order: int  # position of the seed segment in the segmenter output
    avg_lat: float
    avg_lon: float
    avg_elevation_m: float
    max_elevation_m: float
    representative_index: int
    total_duration_minutes: float
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None


@dataclass(frozen=True)
class ScoredCluster:
    """A stop cluster with its summit-likelihood scores (0-100 each)."""
    cluster: StopCluster
    prominence_m: float
    duration_score: float
    elevation_score: float
    prominence_score: float
    score: float


@dataclass(frozen=True)
class DetectedPeak:
    """
    Ranked summit candidate handed to the user for confirmation.

    name/osm_elevation_m/wikipedia are only set after a named-peak lookup.
    """
    rank: int
    lat: float
    lon: float
    elevation_m: float
    start_time: Optional[datetime]
    end_time: Optional[datetime]
    duration_minutes: float
    score: float
    duration_score: float
    elevation_score: float
    prominence_score: float
    prominence_m: float
    representative_index: int
    name: Optional[str] = None
    osm_elevation_m: Optional[float] = None
    wikipedia: Optional[str] = None


@dataclass(frozen=True)
class OsmPeak:
    """Named peak returned by an external lookup."""
    name: str
    lat: float
    lon: float
    distance_m: float
    elevation_m: Optional[float] = None
    wikipedia: Optional[str] = None
    tags: dict = field(default_factory=dict, compare=False)
