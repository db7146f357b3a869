"""
Overpass (OpenStreetMap) named-peak lookup.

Queries nodes tagged natural=peak or natural=volcano around a detected
summit position and returns the nearest one with its name, elevation
and wikipedia tag.

API Documentation: https://wiki.openstreetmap.org/wiki/Overpass_API
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Optional

import httpx
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception,
    before_sleep_log,
)

from app.models import OsmPeak
from core.geo import haversine_m
from providers.base import ProviderRequestError

if TYPE_CHECKING:
    from app.config import Settings

logger = logging.getLogger("overpass")

DEFAULT_URL = "https://overpass-api.de/api/interpreter"
TIMEOUT = 30.0

# Retry Configuration
RETRY_ATTEMPTS = 4
RETRY_WAIT_MIN = 2  # seconds
RETRY_WAIT_MAX = 30  # seconds
RETRY_STATUS_CODES = {429, 502, 503, 504}

UNNAMED_PEAK = "Unnamed peak"

QUERY_TEMPLATE = """
[out:json];
(
  node["natural"="peak"](around:{radius},{lat},{lon});
  node["natural"="volcano"](around:{radius},{lat},{lon});
);
out body;
"""


def _is_retryable_error(exception: BaseException) -> bool:
    """Check if exception is retryable."""
    if isinstance(exception, httpx.HTTPStatusError):
        return exception.response.status_code in RETRY_STATUS_CODES
    if isinstance(exception, (httpx.ConnectError, httpx.ReadTimeout)):
        return True
    return False


def build_query(lat: float, lon: float, radius_m: float) -> str:
    """Overpass QL query for peaks/volcanoes within radius_m of a point."""
    return QUERY_TEMPLATE.format(radius=int(round(radius_m)), lat=lat, lon=lon)


def _parse_elevation(tags: dict[str, Any]) -> Optional[float]:
    """OSM ele tags are free text ("2962", "2962 m", "2962,5")."""
    raw = tags.get("ele") or tags.get("elevation")
    if raw is None:
        return None
    text = str(raw).strip().lower().removesuffix("m").strip().replace(",", ".")
    try:
        return float(text)
    except ValueError:
        logger.debug("Unparseable OSM elevation tag: %r", raw)
        return None


class OverpassLookup:
    """
    Named-peak lookup backed by the Overpass API.

    Example:
        >>> lookup = OverpassLookup()
        >>> peak = lookup.find_peak(47.4210, 10.9863)
        >>> peak.name
        'Zugspitze'
    """

    def __init__(
        self,
        url: str = DEFAULT_URL,
        timeout: float = TIMEOUT,
        client: Optional[httpx.Client] = None,
    ) -> None:
        """Initialize lookup with HTTP client (injectable for tests)."""
        self._url = url
        self._client = client if client is not None else httpx.Client(timeout=timeout)

    @classmethod
    def from_settings(cls, settings: "Settings") -> "OverpassLookup":
        return cls(url=settings.overpass_url, timeout=settings.http_timeout_s)

    @property
    def name(self) -> str:
        """Provider identifier."""
        return "overpass"

    def close(self) -> None:
        self._client.close()

    @retry(
        retry=retry_if_exception(_is_retryable_error),
        stop=stop_after_attempt(RETRY_ATTEMPTS),
        wait=wait_exponential(multiplier=1, min=RETRY_WAIT_MIN, max=RETRY_WAIT_MAX),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
    def _request(self, query: str) -> dict[str, Any]:
        """POST query to Overpass with retry on transient errors."""
        response = self._client.post(self._url, data={"data": query})
        response.raise_for_status()
        return response.json()

    def fetch_elements(self, lat: float, lon: float, radius_m: float = 100.0) -> list[dict[str, Any]]:
        """
        Raw Overpass elements around a position.

        Raises:
            ProviderRequestError: If the request fails after retries
        """
        query = build_query(lat, lon, radius_m)
        try:
            data = self._request(query)
        except httpx.HTTPStatusError as e:
            raise ProviderRequestError(
                self.name, f"HTTP {e.response.status_code}: {e.response.text[:200]}"
            ) from e
        except httpx.HTTPError as e:
            raise ProviderRequestError(self.name, f"Request failed: {e}") from e
        except ValueError as e:
            raise ProviderRequestError(self.name, f"Invalid JSON response: {e}") from e

        elements = data.get("elements", []) if isinstance(data, dict) else []
        return [el for el in elements if "lat" in el and "lon" in el]

    def find_peak(self, lat: float, lon: float, radius_m: float = 100.0) -> Optional[OsmPeak]:
        """
        Nearest named peak within radius_m, or None if OSM has none.

        Raises:
            ProviderRequestError: If the request fails after retries
        """
        elements = self.fetch_elements(lat, lon, radius_m)
        if not elements:
            logger.debug("No OSM peak within %.0f m of %.5f, %.5f", radius_m, lat, lon)
            return None

        nearest = min(elements, key=lambda el: haversine_m(lat, lon, el["lat"], el["lon"]))
        tags = nearest.get("tags", {}) or {}
        return OsmPeak(
            name=tags.get("name") or UNNAMED_PEAK,
            lat=nearest["lat"],
            lon=nearest["lon"],
            distance_m=round(haversine_m(lat, lon, nearest["lat"], nearest["lon"]), 1),
            elevation_m=_parse_elevation(tags),
            wikipedia=tags.get("wikipedia"),
            tags=dict(tags),
        )
