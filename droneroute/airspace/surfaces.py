"""Mini README: Airport restriction-surface parsing.

Restriction surfaces are the precise obstacle-limitation polygons around an
airport. When an airport has surfaces loaded they are authoritative for that
airport and override the conservative circular zone.

Structure:
    * SurfaceKind - surface classification.
    * classify_surface - derive a kind from a feature's string properties.
    * RestrictionSurface - one polygonal surface attached to an airport.
    * parse_surfaces - turn a GeoJSON FeatureCollection into surfaces.
    * SurfaceState - LOADED / FAILED / ABSENT status tracked per airport.
    * SurfaceSource - anything with ``fetch(airport_name)``; see
      ``surface_sources`` for the file and HTTP implementations.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Protocol

from shapely.geometry import Point
from shapely.geometry.base import BaseGeometry

from ..logging_utils import get_logger
from ..utils.geojson import iter_polygon_features

LOGGER = get_logger(__name__)


class SurfaceKind(str, Enum):
    APPROACH = "approach"
    TRANSITIONAL = "transitional"
    HORIZONTAL = "horizontal"
    CONICAL = "conical"
    OUTER_HORIZONTAL = "outer_horizontal"
    EXTENDED_APPROACH = "extended_approach"
    OTHER = "other"


SURFACE_LABELS: Dict[SurfaceKind, str] = {
    SurfaceKind.APPROACH: "Approach Surface",
    SurfaceKind.TRANSITIONAL: "Transitional Surface",
    SurfaceKind.HORIZONTAL: "Horizontal Surface",
    SurfaceKind.CONICAL: "Conical Surface",
    SurfaceKind.OUTER_HORIZONTAL: "Outer Horizontal Surface",
    SurfaceKind.EXTENDED_APPROACH: "Extended Approach Surface",
    SurfaceKind.OTHER: "Airport Airspace",
}

# Order matters: the more specific phrase must be tested first.
_CLASSIFIERS = (
    (SurfaceKind.EXTENDED_APPROACH, ("延長進入表面", "extended approach")),
    (SurfaceKind.APPROACH, ("進入表面", "approach")),
    (SurfaceKind.TRANSITIONAL, ("転移表面", "transitional")),
    (SurfaceKind.OUTER_HORIZONTAL, ("外側水平表面", "outer horizontal")),
    (SurfaceKind.HORIZONTAL, ("水平表面", "horizontal")),
    (SurfaceKind.CONICAL, ("円錐表面", "conical")),
)


class SurfaceState(str, Enum):
    """Per-airport surface status."""

    LOADED = "loaded"
    FAILED = "failed"
    ABSENT = "absent"


SurfaceFetcher = Callable[[str], Mapping[str, Any]]


class SurfaceSource(Protocol):
    def fetch(self, airport_name: str) -> Mapping[str, Any]:
        ...


def classify_surface(properties: Mapping[str, Any]) -> SurfaceKind:
    """Classify a surface from the text of its properties."""

    text = " ".join(str(value) for value in properties.values() if isinstance(value, str))
    lowered = text.lower()
    for kind, needles in _CLASSIFIERS:
        if any(needle in text or needle in lowered for needle in needles):
            return kind
    return SurfaceKind.OTHER


@dataclass(slots=True)
class RestrictionSurface:
    airport_name: str
    kind: SurfaceKind
    geometry: BaseGeometry
    properties: Dict[str, Any] = field(default_factory=dict)

    @property
    def label(self) -> str:
        return SURFACE_LABELS[self.kind]

    def contains(self, lat: float, lng: float) -> bool:
        return bool(self.geometry.covers(Point(lng, lat)))


def parse_surfaces(airport_name: str, collection: Mapping[str, Any]) -> List[RestrictionSurface]:
    """Parse a FeatureCollection into surfaces for ``airport_name``.

    Raises ``ValueError`` when the payload is not a FeatureCollection so the
    caller can record the airport as failed.
    """

    if not isinstance(collection, Mapping) or collection.get("type") != "FeatureCollection":
        raise ValueError(f"Surface payload for {airport_name!r} is not a FeatureCollection")
    surfaces = [
        RestrictionSurface(
            airport_name=airport_name,
            kind=classify_surface(properties),
            geometry=geometry,
            properties=properties,
        )
        for geometry, properties in iter_polygon_features(collection)
    ]
    LOGGER.debug("Parsed %s restriction surfaces for %s", len(surfaces), airport_name)
    return surfaces
