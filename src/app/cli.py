"""
CLI entry point for Gipfelfinder.

Thin layer that wires together configuration, services, and outputs.
Business logic lives in core/services, this module only handles:
- Argument parsing
- Dependency wiring
- Exit codes
"""
from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional

from app.config import DETECTION_PROFILES, Settings
from app.debug import DebugBuffer
from core.gpx_parser import EmptyTrackError, GPXParseError, read_track_file
from core.peak_ranking import filter_by_score
from formatters.peak_report import PeakReportFormatter
from outputs.base import OutputError, get_channel
from providers.base import ProviderError, get_lookup
from services.peak_detection import PeakDetectionService
from services.peak_enrichment import enrich_peaks

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_EMPTY_TRACK = 2

# CLI option -> Settings field
_OVERRIDES = {
    "profile": "profile",
    "speed_threshold": "stop_speed_threshold_mps",
    "cluster_distance": "cluster_distance_m",
    "time_gap": "cluster_time_gap_min",
    "min_duration": "min_stop_duration_min",
    "prominence_radius": "prominence_radius_m",
    "prominence_window": "prominence_time_window_min",
    "percentile": "elevation_percentile",
    "min_score": "min_score",
    "format": "output_format",
    "output": "output_path",
    "debug": "debug_level",
}


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser with all CLI options."""
    parser = argparse.ArgumentParser(
        prog="gipfelfinder",
        description="Detect visited summits in a GPX track",
    )
    parser.add_argument("gpx_file", metavar="FILE", help="GPX track file")
    parser.add_argument(
        "--profile",
        choices=sorted(DETECTION_PROFILES),
        help="Detection profile (default: standard)",
    )
    parser.add_argument("--speed-threshold", type=float, metavar="MPS",
                        help="Stop speed threshold in m/s (default: 0.5)")
    parser.add_argument("--cluster-distance", type=float, metavar="M",
                        help="Merge stops within this distance in m (default: 50)")
    parser.add_argument("--time-gap", type=float, metavar="MIN",
                        help="Merge stops within this gap in minutes (profile default)")
    parser.add_argument("--min-duration", type=float, metavar="MIN",
                        help="Minimum stop duration in minutes (profile default)")
    parser.add_argument("--prominence-radius", type=float, metavar="M",
                        help="Prominence neighbor radius in m (default: 100)")
    parser.add_argument("--prominence-window", type=float, metavar="MIN",
                        help="Prominence neighbor window in minutes (default: 10)")
    parser.add_argument("--percentile", type=float,
                        help="Elevation percentile bar (default: 80)")
    parser.add_argument("--min-score", type=float,
                        help="Hide peaks below this score (default: 0)")
    parser.add_argument(
        "--lookup",
        action="store_true",
        help="Look up peak names in OpenStreetMap",
    )
    parser.add_argument(
        "--format",
        choices=["console", "json", "none"],
        help="Output format",
    )
    parser.add_argument(
        "--output",
        type=str,
        metavar="PATH",
        help="Write output to file instead of stdout",
    )
    parser.add_argument(
        "--debug",
        choices=["info", "verbose"],
        help="Debug output level",
    )
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """
    Main entry point.

    Args:
        argv: Command line arguments (uses sys.argv if None)

    Returns:
        Exit code (0 success or no peaks, 1 error, 2 empty track)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    overrides = {}
    for option, field_name in _OVERRIDES.items():
        value = getattr(args, option)
        if value is not None:
            overrides[field_name] = value
    if args.lookup:
        overrides["lookup_enabled"] = True

    try:
        settings = Settings(**overrides)
    except ValueError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_ERROR

    logging.basicConfig(
        level=logging.DEBUG if settings.debug_level == "verbose" else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    debug = DebugBuffer()
    debug.add(f"settings.profile: {settings.profile}")
    debug.add(f"settings.output_format: {settings.output_format}")

    try:
        return _run(args.gpx_file, settings, debug)
    except EmptyTrackError as e:
        print(f"No track data: {e}", file=sys.stderr)
        return EXIT_EMPTY_TRACK
    except GPXParseError as e:
        print(f"GPX error: {e}", file=sys.stderr)
        return EXIT_ERROR
    except ProviderError as e:
        print(f"Provider error: {e}", file=sys.stderr)
        return EXIT_ERROR
    except OutputError as e:
        print(f"Output error: {e}", file=sys.stderr)
        return EXIT_ERROR
    except ValueError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_ERROR


def _run(gpx_file: str, settings: Settings, debug: DebugBuffer) -> int:
    """Detect, optionally enrich, format and send."""
    config = settings.get_detection_config()
    content = read_track_file(gpx_file)

    service = PeakDetectionService(config, debug)
    summary, peaks = service.analyze(content)
    peaks = filter_by_score(peaks, settings.min_score)

    if peaks and settings.lookup_enabled:
        lookup = get_lookup(settings.lookup_provider, settings)
        try:
            peaks = enrich_peaks(peaks, lookup, settings.lookup_radius_m)
        finally:
            lookup.close()

    formatter = PeakReportFormatter()
    subject = f"Gipfelfinder - {gpx_file}"

    if settings.output_format == "json":
        body = formatter.format_json(peaks)
        channel_name = "file" if settings.output_path else "stdout"
    elif settings.output_format == "none":
        body = ""
        channel_name = "none"
    else:
        body = formatter.format_text(peaks, summary)
        if settings.debug_level == "verbose":
            body += "\n\n[Debug Info]\n" + debug.as_text()
        channel_name = "file" if settings.output_path else "console"

    channel = get_channel(channel_name, settings)
    channel.send(subject, body)

    if not peaks:
        print("No peaks detected.", file=sys.stderr)
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
