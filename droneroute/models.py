"""Mini README: Shared value types for the route optimisation engine.

Structure:
    * LatLng - plain coordinate pair used for home points and centroids.
    * Waypoint - immutable survey waypoint; corrections produce copies.
    * SurveyPolygon - closed ``[lng, lat]`` ring owning derived waypoints.
    * Severity - ordered severity scale shared by zones, issues and reports.
    * ZoneKind - restricted zone categories.
    * Restriction - one restriction hit for a coordinate.

Every type here crosses module boundaries (optimizer, analyzer, splitter and
the HTTP surface), so the module has no dependencies beyond the standard
library.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple


class Severity(str, Enum):
    """Ordered severity labels; compare with ``rank``."""

    SAFE = "safe"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]

    @classmethod
    def highest(cls, severities: Sequence["Severity"]) -> "Severity":
        """Return the most severe entry, ``SAFE`` for an empty sequence."""

        best = cls.SAFE
        for severity in severities:
            if severity.rank > best.rank:
                best = severity
        return best


_SEVERITY_RANK = {
    Severity.SAFE: 0,
    Severity.LOW: 1,
    Severity.MEDIUM: 2,
    Severity.HIGH: 3,
    Severity.CRITICAL: 4,
}


class ZoneKind(str, Enum):
    """Categories of restricted airspace."""

    AIRPORT = "airport"
    MILITARY = "military"
    PROHIBITED = "prohibited"
    HELIPORT = "heliport"
    DID = "did"


@dataclass(frozen=True, slots=True)
class LatLng:
    """Latitude/longitude pair in decimal degrees."""

    lat: float
    lng: float

    def as_dict(self) -> Dict[str, float]:
        return {"lat": self.lat, "lng": self.lng}

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> "LatLng":
        return cls(lat=float(payload["lat"]), lng=float(payload["lng"]))


@dataclass(frozen=True, slots=True)
class Waypoint:
    """A survey waypoint.

    ``id`` is the stable identity across every transformation. ``index`` is
    the display order inside the originating polygon, not the tour order.
    Waypoints are frozen; ``moved_to`` returns a corrected copy flagged as
    ``modified``.
    """

    id: str
    lat: float
    lng: float
    index: int = 0
    polygon_id: Optional[str] = None
    elevation: Optional[float] = None
    modified: bool = False

    @property
    def position(self) -> LatLng:
        return LatLng(self.lat, self.lng)

    def moved_to(self, position: LatLng) -> "Waypoint":
        """Return a copy at ``position`` marked as modified."""

        return replace(self, lat=position.lat, lng=position.lng, modified=True)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "lat": self.lat,
            "lng": self.lng,
            "index": self.index,
            "polygon_id": self.polygon_id,
            "elevation": self.elevation,
            "modified": self.modified,
        }

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any], *, position: int = 0) -> "Waypoint":
        """Build a waypoint from a JSON-like mapping (CLI and file inputs)."""

        return cls(
            id=str(payload.get("id", position + 1)),
            lat=float(payload["lat"]),
            lng=float(payload["lng"]),
            index=int(payload.get("index", position + 1)),
            polygon_id=payload.get("polygon_id") or payload.get("polygonId"),
            elevation=payload.get("elevation"),
        )


@dataclass(slots=True)
class SurveyPolygon:
    """Closed polygon ring of ``[lng, lat]`` pairs (first equals last)."""

    id: str
    ring: List[Tuple[float, float]]
    name: str = ""

    @property
    def is_closed(self) -> bool:
        return len(self.ring) >= 4 and tuple(self.ring[0]) == tuple(self.ring[-1])

    def vertices(self) -> List[Tuple[float, float]]:
        """Return the ring without its closing vertex."""

        if self.is_closed:
            return [tuple(point) for point in self.ring[:-1]]
        return [tuple(point) for point in self.ring]


@dataclass(slots=True)
class Restriction:
    """A single restricted zone matched by a coordinate."""

    kind: ZoneKind
    name: str
    severity: Severity
    distance: Optional[float] = None
    radius: Optional[float] = None
    waypoint_id: Optional[str] = None
    waypoint_index: Optional[int] = None
    description: str = ""
    details: Dict[str, Any] = field(default_factory=dict)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "type": self.kind.value,
            "name": self.name,
            "severity": self.severity.value,
            "distance": self.distance,
            "radius": self.radius,
            "waypoint_id": self.waypoint_id,
            "waypoint_index": self.waypoint_index,
            "description": self.description,
            **self.details,
        }
