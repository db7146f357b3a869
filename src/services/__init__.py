"""
Service layer for summit detection.

Services orchestrate the detection pipeline and the named-peak lookup.
"""
from services.peak_detection import DetectionCancelled, PeakDetectionService
from services.peak_enrichment import enrich_peaks

__all__ = [
    "PeakDetectionService",
    "DetectionCancelled",
    "enrich_peaks",
]
