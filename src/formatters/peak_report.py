"""
Peak report formatter.

Renders detected peaks either as a console table or as JSON in the
summit log's summit+visit import format (one object per peak with an
additional "detection" block).
"""
from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Optional, Sequence

from app.models import DetectedPeak, TrackSummary

NO_PEAKS_MESSAGE = "No peaks detected."


class PeakReportFormatter:
    """Formats ranked peaks for console and JSON output."""

    def format_text(
        self,
        peaks: Sequence[DetectedPeak],
        summary: Optional[TrackSummary] = None,
    ) -> str:
        """Human-readable table of peaks, best first."""
        lines: list[str] = []

        if summary is not None:
            lines.append(f"Track points: {summary.point_count}")
            lines.append(f"Distance: {summary.total_distance_km:.2f} km")
            if summary.min_elevation_m is not None and summary.max_elevation_m is not None:
                lines.append(
                    f"Elevation: {summary.min_elevation_m:.0f}-{summary.max_elevation_m:.0f} m"
                )
            if summary.duration_minutes:
                lines.append(f"Duration: {summary.duration_minutes:.0f} min")
            lines.append("")

        if not peaks:
            lines.append(NO_PEAKS_MESSAGE)
            return "\n".join(lines)

        lines.append(f"Peaks detected: {len(peaks)}")
        lines.append(
            f"{'#':>3}  {'Score':>5}  {'Ele':>6}  {'Dur':>5}  "
            f"{'D/E/P':<11}  {'Position':<21}  Name"
        )
        for p in peaks:
            subs = f"{p.duration_score:.0f}/{p.elevation_score:.0f}/{p.prominence_score:.0f}"
            lines.append(
                f"{p.rank:>3}  {p.score:>5.1f}  {p.elevation_m:>5.0f}m  "
                f"{p.duration_minutes:>4.1f}'  {subs:<11}  "
                f"{p.lat:>9.5f}, {p.lon:>9.5f}  {p.name or '-'}"
            )
        return "\n".join(lines)

    def format_json(self, peaks: Sequence[DetectedPeak], notes: Optional[str] = None) -> str:
        """JSON array importable as summits with one visit each."""
        return json.dumps(
            [self.to_record(p, notes) for p in peaks],
            indent=2,
            ensure_ascii=False,
        )

    def to_record(self, peak: DetectedPeak, notes: Optional[str] = None) -> dict[str, Any]:
        """One summit+visit record for a detected peak."""
        return {
            "name": peak.name or f"Detected peak {peak.rank}",
            "latitude": round(peak.lat, 6),
            "longitude": round(peak.lon, 6),
            "elevation": round(peak.osm_elevation_m if peak.osm_elevation_m is not None else peak.elevation_m),
            "wikipedia": peak.wikipedia,
            "date": peak.start_time.date().isoformat() if peak.start_time else None,
            "notes": notes,
            "detection": {
                "rank": peak.rank,
                "score": round(peak.score, 1),
                "duration_score": round(peak.duration_score, 1),
                "elevation_score": round(peak.elevation_score, 1),
                "prominence_score": round(peak.prominence_score, 1),
                "prominence_m": round(peak.prominence_m, 1),
                "duration_minutes": round(peak.duration_minutes, 2),
                "track_elevation_m": round(peak.elevation_m, 1),
                "start_time": _iso(peak.start_time),
                "end_time": _iso(peak.end_time),
                "point_index": peak.representative_index,
            },
        }


def _iso(ts: Optional[datetime]) -> Optional[str]:
    return ts.isoformat() if ts else None
