"""
Named-peak lookup protocol and factory.

Defines the interface for services that resolve a detected summit
position to a named peak (e.g. OpenStreetMap via Overpass).
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Optional, Protocol, runtime_checkable

if TYPE_CHECKING:
    from app.config import Settings
    from app.models import OsmPeak


@runtime_checkable
class PeakLookup(Protocol):
    """
    Protocol for named-peak lookups.

    Uses structural subtyping (PEP 544).

    Example:
        >>> lookup = get_lookup("overpass")
        >>> peak = lookup.find_peak(47.4210, 10.9863, radius_m=100)
    """

    @property
    def name(self) -> str:
        """
        Provider identifier.

        Returns:
            Short name like "overpass"
        """
        ...

    def find_peak(
        self,
        lat: float,
        lon: float,
        radius_m: float = 100.0,
    ) -> Optional["OsmPeak"]:
        """
        Find the named peak nearest to a position.

        Args:
            lat: Latitude of the detected summit
            lon: Longitude of the detected summit
            radius_m: Search radius in meters

        Returns:
            Nearest peak within radius, or None

        Raises:
            ProviderError: If the request fails
        """
        ...

    def close(self) -> None:
        """Release connections held by the lookup."""
        ...


class ProviderError(Exception):
    """Base exception for provider errors."""

    def __init__(self, provider: str, message: str) -> None:
        self.provider = provider
        super().__init__(f"[{provider}] {message}")


class ProviderNotFoundError(ProviderError):
    """Raised when an unknown provider is requested."""

    def __init__(self, name: str) -> None:
        super().__init__(name, f"Provider not found: {name}")


class ProviderRequestError(ProviderError):
    """Raised when a provider request fails."""

    pass


_LOOKUP_FACTORIES: dict[str, Callable[["Settings"], PeakLookup]] = {}


def register_lookup(name: str, factory: Callable[["Settings"], PeakLookup]) -> None:
    """
    Register a lookup factory.

    Factories are called with the application Settings.
    """
    _LOOKUP_FACTORIES[name] = factory


def get_lookup(name: str, settings: Optional["Settings"] = None) -> PeakLookup:
    """
    Factory function to create lookup instances.

    Args:
        name: Provider identifier (e.g., "overpass")
        settings: Application settings (defaults are used if omitted)

    Returns:
        Lookup instance implementing PeakLookup protocol

    Raises:
        ProviderNotFoundError: If provider is not registered
    """
    if name not in _LOOKUP_FACTORIES:
        _load_lookups()

    if name not in _LOOKUP_FACTORIES:
        raise ProviderNotFoundError(name)

    if settings is None:
        from app.config import Settings
        settings = Settings()
    return _LOOKUP_FACTORIES[name](settings)


def _load_lookups() -> None:
    """Load all available lookups."""
    from providers.overpass import OverpassLookup
    _LOOKUP_FACTORIES.setdefault("overpass", OverpassLookup.from_settings)
