"""
Stop Segmenter.

Scans track points left to right and extracts maximal runs of
consecutive points slower than a speed threshold ("stops").

State machine:
    IDLE    --slow point-->          IN_STOP (open stop with this point)
    IN_STOP --slow point-->          IN_STOP (extend)
    IN_STOP --fast point-->          IDLE    (close: emit if >= 2 points)
    IN_STOP --end of sequence-->     close, same rule
    IDLE    --end of sequence-->     done
"""
from __future__ import annotations

import logging
from typing import Sequence

from app.models import StopSegment, StopState, TrackPoint

logger = logging.getLogger(__name__)

DEFAULT_STOP_SPEED_THRESHOLD_MPS = 0.5
MIN_SEGMENT_POINTS = 2


def find_stop_segments(
    points: Sequence[TrackPoint],
    stop_speed_threshold: float = DEFAULT_STOP_SPEED_THRESHOLD_MPS,
) -> list[StopSegment]:
    """Extract stop segments from a track.

    Args:
        points: Parsed track points in sequence order.
        stop_speed_threshold: Points with speed below this (m/s) are stopped.

    Returns:
        Non-overlapping StopSegments in index order, each with >= 2 points.
    """
    segments: list[StopSegment] = []
    state = StopState.IDLE
    open_stop: list[TrackPoint] = []

    for pt in points:
        if pt.speed_mps < stop_speed_threshold:
            if state == StopState.IDLE:
                state = StopState.IN_STOP
                open_stop = []
            open_stop.append(pt)
        elif state == StopState.IN_STOP:
            _close_stop(open_stop, segments)
            state = StopState.IDLE
            open_stop = []

    if state == StopState.IN_STOP:
        _close_stop(open_stop, segments)

    logger.debug("Found %d stop segments (threshold %.2f m/s)", len(segments), stop_speed_threshold)
    return segments


def _close_stop(stop_points: list[TrackPoint], segments: list[StopSegment]) -> None:
    """Emit the accumulated stop if it is long enough, else drop it."""
    if len(stop_points) < MIN_SEGMENT_POINTS:
        return
    segments.append(_build_segment(stop_points))


def _build_segment(stop_points: list[TrackPoint]) -> StopSegment:
    """Aggregate stop points into a StopSegment.

    Missing elevation counts as 0 in the average. The maximum only looks at
    points with elevation; without any it is 0 at the first point.
    """
    n = len(stop_points)
    with_elevation = [p for p in stop_points if p.elevation_m is not None]
    if with_elevation:
        highest = max(with_elevation, key=lambda p: p.elevation_m)
        max_elevation = highest.elevation_m
    else:
        highest = stop_points[0]
        max_elevation = 0.0

    return StopSegment(
        start_index=stop_points[0].index,
        end_index=stop_points[-1].index,
        start_time=stop_points[0].time,
        end_time=stop_points[-1].time,
        avg_lat=sum(p.lat for p in stop_points) / n,
        avg_lon=sum(p.lon for p in stop_points) / n,
        avg_elevation_m=sum(p.elevation_m for p in with_elevation) / n,
        max_elevation_m=max_elevation,
        highest_index=highest.index,
    )
