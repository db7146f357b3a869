"""
Peak enrichment - attaches OSM names to detected peaks.

Lookup failures never abort the run: the affected peak stays unnamed
and the error is logged.
"""
from __future__ import annotations

import logging
from dataclasses import replace
from typing import TYPE_CHECKING, Sequence

from app.models import DetectedPeak
from providers.base import ProviderError

if TYPE_CHECKING:
    from providers.base import PeakLookup

logger = logging.getLogger("peak_enrichment")

DEFAULT_LOOKUP_RADIUS_M = 100.0


def enrich_peaks(
    peaks: Sequence[DetectedPeak],
    lookup: "PeakLookup",
    radius_m: float = DEFAULT_LOOKUP_RADIUS_M,
) -> list[DetectedPeak]:
    """Return new peaks with name/osm_elevation_m/wikipedia from the lookup.

    Args:
        peaks: Ranked peaks from the detector
        lookup: Named-peak lookup provider
        radius_m: Search radius around each peak

    Returns:
        Peaks in the same order; unmatched peaks are returned unchanged.
    """
    enriched: list[DetectedPeak] = []
    named = 0
    for peak in peaks:
        try:
            match = lookup.find_peak(peak.lat, peak.lon, radius_m)
        except ProviderError as e:
            logger.warning(f"Peak lookup failed for rank {peak.rank}: {e}")
            enriched.append(peak)
            continue

        if match is None:
            enriched.append(peak)
            continue

        named += 1
        enriched.append(replace(
            peak,
            name=match.name,
            osm_elevation_m=match.elevation_m,
            wikipedia=match.wikipedia,
        ))

    logger.info(f"Named {named}/{len(peaks)} peaks via {lookup.name}")
    return enriched
