"""
Tests for the stop clusterer.

Segments are built directly so that distance and time relations are exact.
"""
from datetime import timedelta

import pytest

from app.models import StopSegment
from core.stop_clusterer import cluster_stops
from gpx_builders import DEG_PER_M, T0

LAT0 = 47.0


def _segment(north_m, start_min, duration_min, n_points=5, ele=500.0, max_ele=None, first_index=0):
    """Stop segment north_m meters north of LAT0, starting start_min after T0."""
    return StopSegment(
        start_index=first_index,
        end_index=first_index + n_points - 1,
        start_time=T0 + timedelta(minutes=start_min),
        end_time=T0 + timedelta(minutes=start_min + duration_min),
        avg_lat=LAT0 + north_m * DEG_PER_M,
        avg_lon=11.0,
        avg_elevation_m=ele,
        max_elevation_m=max_ele if max_ele is not None else ele,
        highest_index=first_index,
    )


class TestMergeCriteria:
    """GIVEN segment pairs WHEN cluster_stops THEN merged by distance OR time."""

    def test_distance_alone_merges(self):
        """30 m apart, 20 min gap -> one cluster."""
        a = _segment(0, 0, 2)
        b = _segment(30, 22, 2, first_index=100)
        clusters = cluster_stops([a, b], cluster_distance_m=50, cluster_time_gap_min=5)
        assert len(clusters) == 1
        assert clusters[0].segments == (a, b)

    def test_time_alone_merges(self):
        """500 m apart, 2 min gap -> one cluster."""
        a = _segment(0, 0, 2)
        b = _segment(500, 4, 2, first_index=100)
        clusters = cluster_stops([a, b], cluster_distance_m=50, cluster_time_gap_min=5)
        assert len(clusters) == 1

    def test_far_and_late_stay_separate(self):
        a = _segment(0, 0, 2)
        b = _segment(500, 30, 2, first_index=100)
        clusters = cluster_stops([a, b], cluster_distance_m=50, cluster_time_gap_min=5)
        assert len(clusters) == 2
        assert [c.seed_order for c in clusters] == [0, 1]

    def test_boundaries_inclusive(self):
        a = _segment(0, 0, 2)
        b = _segment(600, 7, 2, first_index=100)
        clusters = cluster_stops([a, b], cluster_distance_m=50, cluster_time_gap_min=5)
        assert len(clusters) == 1

    def test_missing_time_disables_time_criterion(self):
        a = _segment(0, 0, 2)
        b = StopSegment(
            start_index=100, end_index=104, start_time=None, end_time=None,
            avg_lat=LAT0 + 500 * DEG_PER_M, avg_lon=11.0,
            avg_elevation_m=500.0, max_elevation_m=500.0, highest_index=100,
        )
        clusters = cluster_stops([a, b], min_stop_duration_min=1)
        assert len(clusters) == 1
        assert clusters[0].segments == (a,)


class TestGreedySeedAnchoring:
    """GIVEN a chain of segments WHEN clustered THEN only the seed is the anchor."""

    def test_not_transitive(self):
        """S1 is 40 m from seed S0; S2 is 40 m from S1 but 80 m from S0."""
        s0 = _segment(0, 0, 2)
        s1 = _segment(40, 30, 2, first_index=100)
        s2 = _segment(80, 60, 2, first_index=200)
        clusters = cluster_stops([s0, s1, s2], cluster_distance_m=50, cluster_time_gap_min=5)
        assert [c.segments for c in clusters] == [(s0, s1), (s2,)]

    def test_members_not_compared_to_each_other(self):
        """S1 and S2 are both within 50 m of the seed but 90 m from each other."""
        s0 = _segment(0, 0, 2)
        s1 = _segment(45, 30, 2, first_index=100)
        s2 = _segment(-45, 60, 2, first_index=200)
        clusters = cluster_stops([s0, s1, s2], cluster_distance_m=50, cluster_time_gap_min=5)
        assert len(clusters) == 1
        assert clusters[0].segments == (s0, s1, s2)


class TestDurationFloor:
    """GIVEN short clusters WHEN clustered THEN dropped, members not reused."""

    def test_short_cluster_discarded(self):
        clusters = cluster_stops([_segment(0, 0, 0.5)], min_stop_duration_min=1)
        assert clusters == []

    def test_sum_of_members_counts(self):
        """Two 0.6 min stops at the same place -> 1.2 min cluster qualifies."""
        a = _segment(0, 0, 0.6)
        b = _segment(10, 20, 0.6, first_index=100)
        clusters = cluster_stops([a, b], min_stop_duration_min=1)
        assert len(clusters) == 1
        assert clusters[0].total_duration_minutes == pytest.approx(1.2)

    def test_discarded_members_not_reconsidered(self):
        """S1 joins the short seed S0 and is lost with it, even though S1 alone would qualify with S2."""
        s0 = _segment(0, 0, 0.2)
        s1 = _segment(30, 30, 0.2, first_index=100)
        s2 = _segment(70, 32, 5, first_index=200)
        clusters = cluster_stops(
            [s0, s1, s2], cluster_distance_m=50, cluster_time_gap_min=5, min_stop_duration_min=1,
        )
        assert len(clusters) == 1
        assert clusters[0].segments == (s2,)
        assert clusters[0].seed_order == 2

    def test_every_cluster_meets_floor(self):
        segs = [_segment(i * 200, i * 30, d, first_index=i * 50) for i, d in enumerate([0.3, 2, 0.9, 1.0, 4])]
        for c in cluster_stops(segs, min_stop_duration_min=1):
            assert c.total_duration_minutes >= 1

    def test_empty_input(self):
        assert cluster_stops([]) == []


class TestClusterAggregates:
    """GIVEN merged segments WHEN aggregated THEN point-weighted averages."""

    def test_point_weighted_average(self):
        a = _segment(0, 0, 2, n_points=3, ele=600.0)
        b = _segment(20, 20, 2, n_points=6, ele=300.0, first_index=100)
        c = cluster_stops([a, b])[0]
        assert c.avg_elevation_m == pytest.approx((600 * 3 + 300 * 6) / 9)
        assert c.avg_lat == pytest.approx(LAT0 + (20 * 6 / 9) * DEG_PER_M, abs=1e-9)

    def test_max_and_representative_from_highest_member(self):
        a = _segment(0, 0, 2, ele=600.0, max_ele=650.0)
        b = _segment(20, 20, 2, ele=700.0, max_ele=720.0, first_index=100)
        c = cluster_stops([a, b])[0]
        assert c.max_elevation_m == 720.0
        assert c.representative_index == 100

    def test_times_from_first_and_last_member(self):
        a = _segment(0, 0, 2)
        b = _segment(20, 20, 3, first_index=100)
        c = cluster_stops([a, b])[0]
        assert c.start_time == T0
        assert c.end_time == T0 + timedelta(minutes=23)
        assert c.total_duration_minutes == pytest.approx(5.0)
