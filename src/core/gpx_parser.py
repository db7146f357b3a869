"""
GPX Parser.

Decodes GPX track data using gpxpy into an ordered list of TrackPoints
with cumulative haversine distance and instantaneous speed.
Elevation and time are optional per fix; latitude/longitude are required.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import gpxpy
import gpxpy.gpx

from app.models import TrackPoint, TrackSummary
from core.geo import haversine_m

logger = logging.getLogger(__name__)


class GPXParseError(ValueError):
    """Raised when input is not well-formed GPX track data."""


class EmptyTrackError(ValueError):
    """Raised when input parses but contains no track points."""


def parse_gpx(file_path: str | Path) -> list[TrackPoint]:
    """Read a GPX file and parse it.

    Raises:
        GPXParseError: If the file cannot be read or is not valid GPX.
        EmptyTrackError: If the file holds no track points.
    """
    return parse_gpx_bytes(read_track_file(file_path))


def read_track_file(file_path: str | Path) -> bytes:
    """Read raw track bytes. Raises GPXParseError if unreadable."""
    file_path = Path(file_path)
    try:
        return file_path.read_bytes()
    except OSError as e:
        raise GPXParseError(f"Cannot read file: {file_path} ({e})") from e


def parse_gpx_bytes(content: bytes) -> list[TrackPoint]:
    """Parse raw GPX bytes into track points.

    Args:
        content: GPX document as bytes.

    Returns:
        Non-empty list of TrackPoint in document order.

    Raises:
        GPXParseError: On undecodable bytes or malformed GPX/XML.
        EmptyTrackError: On empty input or a document without track points.
    """
    if not content or not content.strip():
        raise EmptyTrackError("GPX input is empty")

    gpx = _parse_content(content)
    points = _extract_points(gpx)
    if not points:
        raise EmptyTrackError("No track points found in GPX data")

    logger.debug("Parsed %d track points (%.0f m)", len(points), points[-1].distance_m)
    return points


def _parse_content(content: bytes) -> gpxpy.gpx.GPX:
    """Parse GPX with gpxpy. Raises GPXParseError on failure."""
    try:
        text = content.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise GPXParseError(f"GPX input is not valid UTF-8: {e}") from e

    try:
        return gpxpy.parse(text)
    except Exception as e:
        raise GPXParseError(f"Invalid GPX format: {e}") from e


def _extract_points(gpx: gpxpy.gpx.GPX) -> list[TrackPoint]:
    """Extract all track points from all tracks/segments with distance and speed."""
    points: list[TrackPoint] = []
    cumulative_m = 0.0

    for track in gpx.tracks:
        for segment in track.segments:
            for pt in segment.points:
                time = _as_utc(pt.time)
                speed = 0.0
                if points:
                    prev = points[-1]
                    step_m = haversine_m(prev.lat, prev.lon, pt.latitude, pt.longitude)
                    cumulative_m += step_m
                    speed = _speed(step_m, prev.time, time)

                points.append(TrackPoint(
                    index=len(points),
                    lat=pt.latitude,
                    lon=pt.longitude,
                    elevation_m=pt.elevation,
                    time=time,
                    distance_m=cumulative_m,
                    speed_mps=speed,
                ))

    return points


def _as_utc(ts: Optional[datetime]) -> Optional[datetime]:
    """GPX times without zone are read as UTC, so all stages compare aware datetimes."""
    if ts is None or ts.tzinfo is not None:
        return ts
    return ts.replace(tzinfo=timezone.utc)


def _speed(step_m: float, prev_time: Optional[datetime], curr_time: Optional[datetime]) -> float:
    """Speed in m/s between two fixes; 0 without usable time delta."""
    if prev_time is None or curr_time is None:
        return 0.0
    dt = (curr_time - prev_time).total_seconds()
    if dt <= 0:
        return 0.0
    return step_m / dt


def track_summary(points: list[TrackPoint]) -> TrackSummary:
    """Summarize a parsed track (distance, elevation range, time span)."""
    elevations = [p.elevation_m for p in points if p.elevation_m is not None]
    times = [p.time for p in points if p.time is not None]
    return TrackSummary(
        point_count=len(points),
        total_distance_km=round(points[-1].distance_m / 1000.0, 3) if points else 0.0,
        min_elevation_m=min(elevations) if elevations else None,
        max_elevation_m=max(elevations) if elevations else None,
        start_time=times[0] if times else None,
        end_time=times[-1] if times else None,
    )
