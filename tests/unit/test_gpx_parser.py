"""
Tests for the GPX parser.

Tracks are synthetic GPX documents built in gpx_builders.
"""
from datetime import timedelta

import pytest

from core.gpx_parser import (
    EmptyTrackError,
    GPXParseError,
    parse_gpx,
    parse_gpx_bytes,
    track_summary,
)
from gpx_builders import T0, TrackBuilder, make_gpx


# --- Basic parsing ---

class TestParseBasic:
    """GIVEN a timed track WHEN parse_gpx_bytes THEN points, distance, speed."""

    def test_point_count_and_indices(self):
        points = parse_gpx_bytes(TrackBuilder().add(5, 10.0).to_gpx())
        assert len(points) == 5
        assert [p.index for p in points] == [0, 1, 2, 3, 4]

    def test_first_point_has_zero_distance_and_speed(self):
        points = parse_gpx_bytes(TrackBuilder().add(3, 10.0).to_gpx())
        assert points[0].distance_m == 0.0
        assert points[0].speed_mps == 0.0

    def test_cumulative_distance(self):
        """4 steps of 10 m -> ~40 m."""
        points = parse_gpx_bytes(TrackBuilder().add(5, 10.0).to_gpx())
        assert points[-1].distance_m == pytest.approx(40.0, abs=0.1)

    def test_speed_from_time_delta(self):
        """24 m every 12 s -> 2 m/s."""
        points = parse_gpx_bytes(TrackBuilder(interval_s=12).add(3, 24.0).to_gpx())
        assert points[1].speed_mps == pytest.approx(2.0, abs=0.01)
        assert points[2].speed_mps == pytest.approx(2.0, abs=0.01)

    def test_elevation_and_time_extracted(self):
        points = parse_gpx_bytes(TrackBuilder().add(2, 10.0, ele=1234.5).to_gpx())
        assert points[0].elevation_m == pytest.approx(1234.5)
        assert points[0].time == T0
        assert points[1].time - points[0].time == timedelta(seconds=12)


# --- Distance monotonicity ---

class TestDistanceMonotonic:
    """GIVEN out-and-back track WHEN parsed THEN cumulative distance never decreases."""

    def test_non_decreasing(self):
        track = TrackBuilder().add(10, 20.0).add(10, -20.0).add(5, 0.0).add(5, 7.0)
        points = parse_gpx_bytes(track.to_gpx())
        distances = [p.distance_m for p in points]
        assert distances == sorted(distances)
        # Walking back still adds distance
        assert distances[-1] > 400.0


# --- Optional fields ---

class TestMissingFields:
    """GIVEN fixes without elevation/time WHEN parsed THEN tolerated."""

    def test_missing_elevation(self):
        points = parse_gpx_bytes(TrackBuilder().add(3, 10.0, ele=None).to_gpx())
        assert all(p.elevation_m is None for p in points)

    def test_missing_time_gives_zero_speed(self):
        points = parse_gpx_bytes(TrackBuilder(start=None).add(4, 50.0).to_gpx())
        assert all(p.time is None for p in points)
        assert all(p.speed_mps == 0.0 for p in points)
        assert points[-1].distance_m == pytest.approx(150.0, abs=0.1)

    def test_duplicate_timestamp_gives_zero_speed(self):
        """dt <= 0 -> speed 0."""
        fixes = [
            (47.0, 11.0, 400.0, T0),
            (47.001, 11.0, 400.0, T0),
        ]
        points = parse_gpx_bytes(make_gpx(fixes))
        assert points[1].speed_mps == 0.0
        assert points[1].distance_m > 100.0

    def test_partial_time(self):
        """Speed needs time on both points of a pair."""
        fixes = [
            (47.0, 11.0, 400.0, T0),
            (47.0001, 11.0, 400.0, None),
            (47.0002, 11.0, 400.0, T0 + timedelta(seconds=20)),
        ]
        points = parse_gpx_bytes(make_gpx(fixes))
        assert points[1].speed_mps == 0.0
        assert points[2].speed_mps == 0.0

    def test_time_without_zone_read_as_utc(self):
        """A zoneless <time> next to a ...Z one -> both UTC, speed computed."""
        content = b"""<?xml version="1.0" encoding="UTF-8"?>
        <gpx version="1.1" xmlns="http://www.topografix.com/GPX/1/1">
          <trk><trkseg>
            <trkpt lat="47.0" lon="11.0"><time>2024-07-14T08:00:00Z</time></trkpt>
            <trkpt lat="47.0002" lon="11.0"><time>2024-07-14T08:00:12</time></trkpt>
          </trkseg></trk>
        </gpx>"""
        points = parse_gpx_bytes(content)
        assert points[1].time.utcoffset() == timedelta(0)
        assert points[1].time - points[0].time == timedelta(seconds=12)
        assert points[1].speed_mps == pytest.approx(points[1].distance_m / 12)


# --- Multiple segments ---

class TestMultiSegment:
    """GIVEN two track segments WHEN parsed THEN one continuous sequence."""

    def test_segments_concatenated(self):
        content = b"""<?xml version="1.0" encoding="UTF-8"?>
        <gpx version="1.1" xmlns="http://www.topografix.com/GPX/1/1">
          <trk><trkseg>
            <trkpt lat="47.0" lon="11.0"><ele>400</ele></trkpt>
            <trkpt lat="47.001" lon="11.0"><ele>410</ele></trkpt>
          </trkseg><trkseg>
            <trkpt lat="47.002" lon="11.0"><ele>420</ele></trkpt>
          </trkseg></trk>
        </gpx>"""
        points = parse_gpx_bytes(content)
        assert [p.index for p in points] == [0, 1, 2]
        assert points[2].distance_m == pytest.approx(222.4, abs=0.5)


# --- Errors ---

class TestErrors:
    """GIVEN bad input WHEN parsed THEN EmptyTrackError / GPXParseError."""

    def test_empty_bytes(self):
        with pytest.raises(EmptyTrackError):
            parse_gpx_bytes(b"")

    def test_whitespace_only(self):
        with pytest.raises(EmptyTrackError):
            parse_gpx_bytes(b"  \n\t ")

    def test_invalid_xml(self):
        with pytest.raises(GPXParseError):
            parse_gpx_bytes(b"<not><valid><gpx>")

    def test_invalid_utf8(self):
        with pytest.raises(GPXParseError):
            parse_gpx_bytes(b"\xff\xfe\xfa<gpx>")

    def test_no_track_points(self):
        content = b"""<?xml version="1.0" encoding="UTF-8"?>
        <gpx version="1.1" xmlns="http://www.topografix.com/GPX/1/1">
          <trk><name>Nothing</name><trkseg></trkseg></trk>
        </gpx>"""
        with pytest.raises(EmptyTrackError):
            parse_gpx_bytes(content)

    def test_empty_track_is_not_parse_error(self):
        """Callers must be able to tell "no data" from "bad file"."""
        assert not issubclass(EmptyTrackError, GPXParseError)
        assert not issubclass(GPXParseError, EmptyTrackError)

    def test_missing_file(self, tmp_path):
        with pytest.raises(GPXParseError):
            parse_gpx(tmp_path / "missing.gpx")


# --- File helper and summary ---

class TestParseFile:
    def test_parse_file(self, tmp_path):
        path = tmp_path / "tour.gpx"
        path.write_bytes(TrackBuilder().add(6, 10.0).to_gpx())
        assert len(parse_gpx(path)) == 6


class TestTrackSummary:
    def test_summary(self):
        ele = lambda i: 400.0 + 10 * i  # noqa: E731
        points = parse_gpx_bytes(TrackBuilder(interval_s=60).add(11, 100.0, ele).to_gpx())
        summary = track_summary(points)
        assert summary.point_count == 11
        assert summary.total_distance_km == pytest.approx(1.0, abs=0.01)
        assert summary.min_elevation_m == 400.0
        assert summary.max_elevation_m == 500.0
        assert summary.duration_minutes == pytest.approx(10.0)

    def test_summary_without_time_and_elevation(self):
        points = parse_gpx_bytes(TrackBuilder(start=None).add(3, 10.0, ele=None).to_gpx())
        summary = track_summary(points)
        assert summary.min_elevation_m is None
        assert summary.duration_minutes == 0.0
