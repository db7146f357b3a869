"""
Stop Clusterer.

Greedy single-pass merge of stop segments that represent the same
physical stop. A candidate joins a cluster when it is close to the
cluster's SEED segment in space OR in time. The relation is not
transitive: two members of one cluster need not be close to each other.

Cluster averages are taken over all member points, i.e. segment averages
weighted by point count. With a steady logging interval this equals
weighting by duration; with irregular sampling the point weighting wins.
"""
from __future__ import annotations

import logging
from typing import Sequence

from app.models import StopCluster, StopSegment
from core.geo import haversine_m

logger = logging.getLogger(__name__)

DEFAULT_CLUSTER_DISTANCE_M = 50.0
DEFAULT_CLUSTER_TIME_GAP_MIN = 5.0
DEFAULT_MIN_STOP_DURATION_MIN = 1.0


def cluster_stops(
    segments: Sequence[StopSegment],
    cluster_distance_m: float = DEFAULT_CLUSTER_DISTANCE_M,
    cluster_time_gap_min: float = DEFAULT_CLUSTER_TIME_GAP_MIN,
    min_stop_duration_min: float = DEFAULT_MIN_STOP_DURATION_MIN,
) -> list[StopCluster]:
    """Cluster stop segments.

    Args:
        segments: Stop segments in index order.
        cluster_distance_m: Max distance between seed and candidate positions.
        cluster_time_gap_min: Max gap between seed end and candidate start.
        min_stop_duration_min: Clusters with less total duration are dropped.

    Returns:
        Qualifying clusters in order of their seed segment.
    """
    used = [False] * len(segments)
    clusters: list[StopCluster] = []
    discarded = 0

    for i, seed in enumerate(segments):
        if used[i]:
            continue
        used[i] = True
        members = [seed]

        for j in range(i + 1, len(segments)):
            if used[j]:
                continue
            candidate = segments[j]
            if _is_near(seed, candidate, cluster_distance_m, cluster_time_gap_min):
                members.append(candidate)
                used[j] = True

        total_minutes = sum(s.duration_minutes for s in members)
        if total_minutes < min_stop_duration_min:
            discarded += 1
            continue

        clusters.append(_build_cluster(members, seed_order=i, total_minutes=total_minutes))

    logger.debug(
        "Clustered %d segments into %d clusters (%d below %.1f min discarded)",
        len(segments), len(clusters), discarded, min_stop_duration_min,
    )
    return clusters


def _is_near(
    seed: StopSegment,
    candidate: StopSegment,
    max_distance_m: float,
    max_gap_min: float,
) -> bool:
    """Distance criterion OR time criterion, both anchored to the seed."""
    distance = haversine_m(seed.avg_lat, seed.avg_lon, candidate.avg_lat, candidate.avg_lon)
    if distance <= max_distance_m:
        return True

    if seed.end_time is None or candidate.start_time is None:
        return False
    gap_min = (candidate.start_time - seed.end_time).total_seconds() / 60.0
    return gap_min <= max_gap_min


def _build_cluster(
    members: list[StopSegment],
    seed_order: int,
    total_minutes: float,
) -> StopCluster:
    """Aggregate member segments; averages are weighted by point count."""
    n_points = sum(s.point_count for s in members)
    highest = max(members, key=lambda s: s.max_elevation_m)

    return StopCluster(
        segments=tuple(members),
        seed_order=seed_order,
        avg_lat=sum(s.avg_lat * s.point_count for s in members) / n_points,
        avg_lon=sum(s.avg_lon * s.point_count for s in members) / n_points,
        avg_elevation_m=sum(s.avg_elevation_m * s.point_count for s in members) / n_points,
        max_elevation_m=highest.max_elevation_m,
        representative_index=highest.highest_index,
        total_duration_minutes=total_minutes,
        start_time=members[0].start_time,
        end_time=members[-1].end_time,
    )
