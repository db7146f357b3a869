"""
Candidate Scorer.

Rates each stop cluster as a summit candidate with three sub-scores
on a 0-100 scale and combines them into a composite score:

- duration:   min(total_minutes / 10, 1) * 100
- elevation:  100 if the cluster sits at or above the track's elevation
              percentile, else 50
- prominence: min(prominence / 50, 1) * 100, where prominence is the
              cluster's max elevation over the mean of its spatial and
              temporal neighbors

Composite = arithmetic mean of the three. Pure function of the
clusters and the full point list.
"""
from __future__ import annotations

import math
from datetime import datetime
from typing import Optional, Sequence

from app.models import ScoredCluster, StopCluster, TrackPoint
from core.geo import haversine_m

DEFAULT_PROMINENCE_RADIUS_M = 100.0
DEFAULT_PROMINENCE_TIME_WINDOW_MIN = 10.0
DEFAULT_ELEVATION_PERCENTILE = 80.0

# Normalization constants
FULL_DURATION_MIN = 10.0
FULL_PROMINENCE_M = 50.0
ELEVATION_SCORE_ABOVE = 100.0
ELEVATION_SCORE_BELOW = 50.0


def score_clusters(
    clusters: Sequence[StopCluster],
    points: Sequence[TrackPoint],
    prominence_radius_m: float = DEFAULT_PROMINENCE_RADIUS_M,
    prominence_time_window_min: float = DEFAULT_PROMINENCE_TIME_WINDOW_MIN,
    elevation_percentile: float = DEFAULT_ELEVATION_PERCENTILE,
) -> list[ScoredCluster]:
    """Score every cluster. Same clusters in, same order out.

    Args:
        clusters: Qualifying stop clusters.
        points: The full parsed track.
        prominence_radius_m: Spatial neighbor radius around the cluster position.
        prominence_time_window_min: Temporal neighbor window around cluster start.
        elevation_percentile: Percentile (0-100) used as the elevation bar.

    Returns:
        One ScoredCluster per input cluster.
    """
    threshold = elevation_threshold(points, elevation_percentile)
    return [
        _score_cluster(c, points, threshold, prominence_radius_m, prominence_time_window_min)
        for c in clusters
    ]


def elevation_threshold(points: Sequence[TrackPoint], percentile: float) -> float:
    """Elevation at index floor(N * percentile / 100) of the sorted elevations.

    Points without elevation are ignored; returns 0.0 if none has one.
    """
    elevations = sorted(p.elevation_m for p in points if p.elevation_m is not None)
    if not elevations:
        return 0.0
    idx = min(int(math.floor(len(elevations) * percentile / 100.0)), len(elevations) - 1)
    return elevations[idx]


def compute_prominence(
    cluster: StopCluster,
    points: Sequence[TrackPoint],
    radius_m: float,
    time_window_min: float,
) -> float:
    """Cluster max elevation minus mean elevation of its neighbor set.

    Neighbors: points within radius_m of the cluster position, united with
    points within time_window_min of the cluster start, minus the cluster's
    representative point. Falls back to the cluster's average elevation
    when no neighbor has an elevation.
    """
    neighbor_elevations = [
        p.elevation_m
        for p in points
        if p.index != cluster.representative_index
        and p.elevation_m is not None
        and _is_neighbor(p, cluster, radius_m, time_window_min)
    ]
    if neighbor_elevations:
        reference = sum(neighbor_elevations) / len(neighbor_elevations)
    else:
        reference = cluster.avg_elevation_m
    return cluster.max_elevation_m - reference


def _is_neighbor(
    point: TrackPoint,
    cluster: StopCluster,
    radius_m: float,
    time_window_min: float,
) -> bool:
    if haversine_m(cluster.avg_lat, cluster.avg_lon, point.lat, point.lon) <= radius_m:
        return True
    return _within_minutes(point.time, cluster.start_time, time_window_min)


def _within_minutes(t: Optional[datetime], ref: Optional[datetime], window_min: float) -> bool:
    if t is None or ref is None:
        return False
    return abs((t - ref).total_seconds()) / 60.0 <= window_min


def _score_cluster(
    cluster: StopCluster,
    points: Sequence[TrackPoint],
    threshold: float,
    radius_m: float,
    time_window_min: float,
) -> ScoredCluster:
    prominence = compute_prominence(cluster, points, radius_m, time_window_min)

    duration_score = min(cluster.total_duration_minutes / FULL_DURATION_MIN, 1.0) * 100.0
    if cluster.avg_elevation_m >= threshold:
        elevation_score = ELEVATION_SCORE_ABOVE
    else:
        elevation_score = ELEVATION_SCORE_BELOW
    # Negative prominence (cluster in a dip) scores 0
    prominence_score = min(max(prominence / FULL_PROMINENCE_M, 0.0), 1.0) * 100.0

    return ScoredCluster(
        cluster=cluster,
        prominence_m=prominence,
        duration_score=duration_score,
        elevation_score=elevation_score,
        prominence_score=prominence_score,
        score=(duration_score + elevation_score + prominence_score) / 3.0,
    )
