"""
Result Ranker/Selector.

Turns scored clusters into ranked DetectedPeak records and offers the
selection helpers used when the user confirms detected summits.
No cluster is rejected here; quality bars are a caller decision.
"""
from __future__ import annotations

from typing import Iterable, Sequence

from app.models import DetectedPeak, ScoredCluster


def rank_clusters(scored: Sequence[ScoredCluster]) -> list[DetectedPeak]:
    """Sort by composite score descending and build DetectedPeaks.

    The sort is stable, so equal scores keep their seed order.
    """
    ordered = sorted(scored, key=lambda s: s.score, reverse=True)
    return [_to_peak(rank, s) for rank, s in enumerate(ordered, start=1)]


def _to_peak(rank: int, scored: ScoredCluster) -> DetectedPeak:
    c = scored.cluster
    return DetectedPeak(
        rank=rank,
        lat=c.avg_lat,
        lon=c.avg_lon,
        elevation_m=c.max_elevation_m,
        start_time=c.start_time,
        end_time=c.end_time,
        duration_minutes=c.total_duration_minutes,
        score=scored.score,
        duration_score=scored.duration_score,
        elevation_score=scored.elevation_score,
        prominence_score=scored.prominence_score,
        prominence_m=scored.prominence_m,
        representative_index=c.representative_index,
    )


def select_peaks(peaks: Sequence[DetectedPeak], ranks: Iterable[int]) -> list[DetectedPeak]:
    """Return the peaks the user picked, in ranked order.

    Raises:
        ValueError: If a rank does not exist in peaks.
    """
    wanted = set(ranks)
    known = {p.rank for p in peaks}
    unknown = sorted(wanted - known)
    if unknown:
        raise ValueError(f"Unknown peak rank(s): {unknown}")
    return [p for p in peaks if p.rank in wanted]


def filter_by_score(peaks: Sequence[DetectedPeak], min_score: float) -> list[DetectedPeak]:
    """Keep peaks with score >= min_score. Ranks are left unchanged."""
    return [p for p in peaks if p.score >= min_score]
