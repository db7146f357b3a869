"""
Peak detection service - orchestrates the detection pipeline.

Runs Parser -> Segmenter -> Clusterer -> Scorer -> Ranker once per
track. Each call works on its own data; the service holds no state
besides the configuration and the debug buffer.
"""
from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Callable, Optional

from app.config import DetectionConfig
from app.debug import DebugBuffer
from app.models import DetectedPeak, TrackSummary
from core.gpx_parser import parse_gpx_bytes, read_track_file, track_summary
from core.peak_ranking import rank_clusters
from core.peak_scoring import score_clusters
from core.stop_clusterer import cluster_stops
from core.stop_segmenter import find_stop_segments

logger = logging.getLogger("peak_detection")


class DetectionCancelled(RuntimeError):
    """Raised when a caller cancels detection between stages."""


class PeakDetectionService:
    """
    Service for detecting summit candidates in GPX tracks.

    Example:
        >>> service = PeakDetectionService(DetectionConfig())
        >>> peaks = service.detect_file("tour.gpx")
        >>> if not peaks:
        ...     print("no peaks detected")
    """

    def __init__(
        self,
        config: Optional[DetectionConfig] = None,
        debug: Optional[DebugBuffer] = None,
    ) -> None:
        """
        Initialize the service.

        Args:
            config: Detection parameters (defaults when omitted)
            debug: Optional debug buffer for stage statistics
        """
        self._config = config if config is not None else DetectionConfig()
        self._debug = debug if debug is not None else DebugBuffer()

    @property
    def config(self) -> DetectionConfig:
        return self._config

    @property
    def debug(self) -> DebugBuffer:
        """Access to debug buffer for logging."""
        return self._debug

    def detect(
        self,
        content: bytes,
        should_cancel: Optional[Callable[[], bool]] = None,
    ) -> list[DetectedPeak]:
        """
        Run the full pipeline on GPX bytes.

        Args:
            content: GPX document
            should_cancel: Checked between stages; True aborts the run

        Returns:
            Ranked peaks; empty list when no peak qualifies

        Raises:
            GPXParseError: If content is not valid GPX
            EmptyTrackError: If content holds no track points
            DetectionCancelled: If should_cancel returned True
        """
        return self.analyze(content, should_cancel)[1]

    def analyze(
        self,
        content: bytes,
        should_cancel: Optional[Callable[[], bool]] = None,
    ) -> tuple[TrackSummary, list[DetectedPeak]]:
        """Like detect(), but also returns the track summary."""
        cfg = self._config

        points = parse_gpx_bytes(content)
        summary = track_summary(points)
        self._debug.add(f"points: {summary.point_count}")
        self._debug.add(f"distance: {summary.total_distance_km:.2f} km")
        self._check_cancel(should_cancel, "parse")

        segments = find_stop_segments(points, cfg.stop_speed_threshold_mps)
        self._debug.add(f"stop segments: {len(segments)}")
        self._check_cancel(should_cancel, "segment")

        clusters = cluster_stops(
            segments,
            cluster_distance_m=cfg.cluster_distance_m,
            cluster_time_gap_min=cfg.cluster_time_gap_min,
            min_stop_duration_min=cfg.min_stop_duration_min,
        )
        self._debug.add(f"clusters: {len(clusters)}")
        self._check_cancel(should_cancel, "cluster")

        scored = score_clusters(
            clusters,
            points,
            prominence_radius_m=cfg.prominence_radius_m,
            prominence_time_window_min=cfg.prominence_time_window_min,
            elevation_percentile=cfg.elevation_percentile,
        )
        self._check_cancel(should_cancel, "score")

        peaks = rank_clusters(scored)
        self._debug.add(f"peaks: {len(peaks)}")
        logger.info(
            "Detected %d peak candidates from %d points (%d stops)",
            len(peaks), len(points), len(segments),
        )
        return summary, peaks

    def detect_file(
        self,
        file_path: str | Path,
        should_cancel: Optional[Callable[[], bool]] = None,
    ) -> list[DetectedPeak]:
        """Read a GPX file and run detect() on its content."""
        return self.detect(read_track_file(file_path), should_cancel)

    async def detect_file_async(
        self,
        file_path: str | Path,
        should_cancel: Optional[Callable[[], bool]] = None,
    ) -> list[DetectedPeak]:
        """Like detect_file(), but reads the file without blocking the event loop."""
        content = await asyncio.to_thread(read_track_file, file_path)
        return self.detect(content, should_cancel)

    def _check_cancel(self, should_cancel: Optional[Callable[[], bool]], stage: str) -> None:
        if should_cancel is not None and should_cancel():
            logger.info("Detection cancelled after %s stage", stage)
            raise DetectionCancelled(f"Detection cancelled after {stage} stage")
