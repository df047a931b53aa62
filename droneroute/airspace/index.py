"""Mini README: Spatial index over restricted airspace.

Structure:
    * PointQueryResult / PathQueryResult / PolygonQueryResult - query outputs.
    * RestrictionIndex - shapely ``STRtree`` built once over circle polygons of
      every restricted zone, with optional per-airport restriction surfaces.

Candidate zones come from the tree (bounding boxes); circles are then tested
exactly with the haversine distance. For airports the surface state decides
the verdict:

    LOADED  surfaces are authoritative, points outside every surface are clear.
    FAILED  the airport is ignored (a warning is logged when the load fails).
    ABSENT  the circle verdict stands.

The index is read-only after construction apart from surface attachment,
which happens while a ``PlanningContext`` is being prepared.
"""

from __future__ import annotations

import math
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

import shapely
from shapely.geometry import LineString, Point, Polygon, box
from shapely.geometry.base import BaseGeometry
from shapely.ops import unary_union
from shapely.strtree import STRtree

from ..geo import METRES_PER_DEGREE, circle_ring, distance_meters, geometry_area_m2, ring_to_polygon
from ..geo.primitives import HasPosition, Ring
from ..logging_utils import get_logger
from ..models import LatLng, Severity, ZoneKind
from .surfaces import RestrictionSurface, SurfaceFetcher, SurfaceState, parse_surfaces
from .zones import RestrictedZone

LOGGER = get_logger(__name__)


@dataclass(slots=True)
class PointQueryResult:
    colliding: bool = False
    zone_name: Optional[str] = None
    kind: Optional[ZoneKind] = None
    severity: Severity = Severity.SAFE
    distance: Optional[float] = None

    def as_dict(self) -> Dict[str, Any]:
        return {
            "colliding": self.colliding,
            "zone_name": self.zone_name,
            "kind": self.kind.value if self.kind else None,
            "severity": self.severity.value,
            "distance": self.distance,
        }


@dataclass(slots=True)
class PathQueryResult:
    colliding: bool = False
    intersection_points: List[LatLng] = field(default_factory=list)
    severity: Severity = Severity.SAFE
    zones: List[str] = field(default_factory=list)
    affected_segments: List[Dict[str, Any]] = field(default_factory=list)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "is_colliding": self.colliding,
            "intersection_points": [point.as_dict() for point in self.intersection_points],
            "severity": self.severity.value,
            "zones": list(self.zones),
            "affected_segments": [dict(segment) for segment in self.affected_segments],
        }


@dataclass(slots=True)
class PolygonQueryResult:
    colliding: bool = False
    overlap_area_ratio: float = 0.0
    intersections: List[Dict[str, Any]] = field(default_factory=list)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "colliding": self.colliding,
            "overlap_area_ratio": self.overlap_area_ratio,
            "intersections": list(self.intersections),
        }


class RestrictionIndex:
    """Answer point, path and polygon queries against restricted zones."""

    def __init__(self, zones: Iterable[RestrictedZone], *, circle_points: int = 64) -> None:
        self._zones: List[RestrictedZone] = list(zones)
        self._circles: List[Polygon] = [
            Polygon(circle_ring(zone.lat, zone.lng, zone.radius, circle_points))
            for zone in self._zones
        ]
        self._tree: Optional[STRtree] = STRtree(self._circles) if self._circles else None
        self._surfaces: Dict[str, List[RestrictionSurface]] = {}
        self._surface_union: Dict[str, BaseGeometry] = {}
        self._surface_state: Dict[str, SurfaceState] = {}
        LOGGER.info("Restriction index built with %s zones", len(self._zones))

    def __len__(self) -> int:
        return len(self._zones)

    @property
    def zones(self) -> List[RestrictedZone]:
        return list(self._zones)

    # ------------------------------------------------------------------
    # Restriction surfaces
    # ------------------------------------------------------------------
    def surface_state(self, airport_name: str) -> SurfaceState:
        return self._surface_state.get(airport_name, SurfaceState.ABSENT)

    def surfaces_for(self, airport_name: str) -> List[RestrictionSurface]:
        return list(self._surfaces.get(airport_name, []))

    def attach_surfaces(self, airport_name: str, collection: Dict[str, Any]) -> SurfaceState:
        """Attach a surface FeatureCollection to an airport zone."""

        try:
            surfaces = parse_surfaces(airport_name, collection)
        except ValueError as error:
            return self.mark_surface_failed(airport_name, error)
        if not surfaces:
            self._surface_state[airport_name] = SurfaceState.ABSENT
            return SurfaceState.ABSENT
        self._surfaces[airport_name] = surfaces
        self._surface_union[airport_name] = unary_union([surface.geometry for surface in surfaces])
        self._surface_state[airport_name] = SurfaceState.LOADED
        LOGGER.info("Loaded %s restriction surfaces for %s", len(surfaces), airport_name)
        return SurfaceState.LOADED

    def mark_surface_failed(self, airport_name: str, reason: object = None) -> SurfaceState:
        LOGGER.warning(
            "Restriction surfaces for %s unavailable, ignoring zone: %s", airport_name, reason
        )
        self._surfaces.pop(airport_name, None)
        self._surface_union.pop(airport_name, None)
        self._surface_state[airport_name] = SurfaceState.FAILED
        return SurfaceState.FAILED

    def load_surfaces(
        self, fetch: SurfaceFetcher, airport_names: Optional[Iterable[str]] = None
    ) -> Dict[str, SurfaceState]:
        """Fetch and attach surfaces for the given (or every) airport."""

        if airport_names is None:
            airport_names = [zone.name for zone in self._zones if zone.kind is ZoneKind.AIRPORT]
        states: Dict[str, SurfaceState] = {}
        for name in airport_names:
            try:
                collection = fetch(name)
            except Exception as error:  # noqa: BLE001 - any fetch failure degrades to ignored
                states[name] = self.mark_surface_failed(name, error)
                continue
            states[name] = self.attach_surfaces(name, collection)
        return states

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _effective_geometry(self, position: int) -> Optional[BaseGeometry]:
        zone = self._zones[position]
        circle = self._circles[position]
        if zone.kind is not ZoneKind.AIRPORT:
            return circle
        state = self.surface_state(zone.name)
        if state is SurfaceState.FAILED:
            return None
        if state is SurfaceState.LOADED:
            return circle.intersection(self._surface_union[zone.name])
        return circle

    def _point_applies(self, position: int, lat: float, lng: float) -> Optional[float]:
        """Return the distance to the zone centre when the point is restricted."""

        zone = self._zones[position]
        distance = distance_meters(lat, lng, zone.lat, zone.lng)
        if distance >= zone.radius:
            return None
        if zone.kind is ZoneKind.AIRPORT:
            state = self.surface_state(zone.name)
            if state is SurfaceState.FAILED:
                return None
            if state is SurfaceState.LOADED and not self._surface_union[zone.name].covers(
                Point(lng, lat)
            ):
                LOGGER.debug("Point %.6f,%.6f cleared by %s surfaces", lat, lng, zone.name)
                return None
        return distance

    def _hits(self, lat: float, lng: float, candidates: Iterable[int]) -> List[Tuple[RestrictedZone, float]]:
        hits: List[Tuple[RestrictedZone, float]] = []
        for position in candidates:
            distance = self._point_applies(int(position), lat, lng)
            if distance is not None:
                hits.append((self._zones[int(position)], distance))
        hits.sort(key=lambda hit: (-hit[0].severity.rank, hit[1]))
        return hits

    @staticmethod
    def _best(hits: Sequence[Tuple[RestrictedZone, float]]) -> PointQueryResult:
        if not hits:
            return PointQueryResult()
        zone, distance = hits[0]
        return PointQueryResult(
            colliding=True,
            zone_name=zone.name,
            kind=zone.kind,
            severity=zone.severity,
            distance=distance,
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def restrictions_at(self, lat: float, lng: float) -> List[Tuple[RestrictedZone, float]]:
        """Every zone containing the point, most severe first, with distances."""

        if self._tree is None:
            return []
        return self._hits(lat, lng, self._tree.query(Point(lng, lat)))

    def zones_near(self, lat: float, lng: float, buffer_m: float) -> List[RestrictedZone]:
        """Zones whose bounding box lies within ``buffer_m`` of the point.

        Candidates only; callers apply their own distance test.
        """

        if self._tree is None:
            return []
        d_lat = buffer_m / METRES_PER_DEGREE
        d_lng = buffer_m / (METRES_PER_DEGREE * max(math.cos(math.radians(lat)), 1e-6))
        window = box(lng - d_lng, lat - d_lat, lng + d_lng, lat + d_lat)
        return [self._zones[int(position)] for position in sorted(self._tree.query(window))]

    def query_point(self, lat: float, lng: float) -> PointQueryResult:
        return self._best(self.restrictions_at(lat, lng))

    def query_batch(self, points: Sequence[Any]) -> Dict[str, PointQueryResult]:
        """Query many waypoints with one bulk tree lookup, keyed by ``id``."""

        results: Dict[str, PointQueryResult] = {str(point.id): PointQueryResult() for point in points}
        if self._tree is None or not points:
            return results
        geometries = shapely.points([(point.lng, point.lat) for point in points])
        input_positions, tree_positions = self._tree.query(geometries)
        candidates: Dict[int, List[int]] = defaultdict(list)
        for input_position, tree_position in zip(input_positions, tree_positions):
            candidates[int(input_position)].append(int(tree_position))
        for input_position, zone_positions in candidates.items():
            point = points[input_position]
            results[str(point.id)] = self._best(self._hits(point.lat, point.lng, zone_positions))
        return results

    def query_path(self, coords: Sequence[HasPosition]) -> PathQueryResult:
        """Test each consecutive segment against every candidate zone."""

        result = PathQueryResult()
        if self._tree is None or not coords:
            return result
        if len(coords) == 1:
            single = self.query_point(coords[0].lat, coords[0].lng)
            if single.colliding:
                result.colliding = True
                result.severity = single.severity
                result.zones.append(single.zone_name or "")
            return result

        severities: List[Severity] = []
        for start, end in zip(coords, coords[1:]):
            segment = LineString([(start.lng, start.lat), (end.lng, end.lat)])
            for position in self._tree.query(segment):
                geometry = self._effective_geometry(int(position))
                if geometry is None or geometry.is_empty or not segment.intersects(geometry):
                    continue
                zone = self._zones[int(position)]
                severities.append(zone.severity)
                if zone.name not in result.zones:
                    result.zones.append(zone.name)
                result.intersection_points.extend(_boundary_crossings(segment, geometry))
        result.colliding = bool(severities)
        result.severity = Severity.highest(severities)
        return result

    def query_polygon(self, ring: Ring) -> PolygonQueryResult:
        """Share of a survey polygon's area that lies inside restricted zones."""

        polygon = ring_to_polygon(ring)
        if polygon is None or self._tree is None:
            return PolygonQueryResult()
        origin_lat = polygon.centroid.y
        total_area = geometry_area_m2(polygon, origin_lat)
        if total_area <= 0:
            return PolygonQueryResult()

        parts: List[BaseGeometry] = []
        intersections: List[Dict[str, Any]] = []
        for position in self._tree.query(polygon):
            geometry = self._effective_geometry(int(position))
            if geometry is None or geometry.is_empty:
                continue
            overlap = polygon.intersection(geometry)
            if overlap.is_empty:
                continue
            zone = self._zones[int(position)]
            area = geometry_area_m2(overlap, origin_lat)
            parts.append(overlap)
            intersections.append(
                {
                    "name": zone.name,
                    "kind": zone.kind.value,
                    "severity": zone.severity.value,
                    "area_m2": round(area, 1),
                    "ratio": area / total_area,
                }
            )
        if not parts:
            return PolygonQueryResult()
        covered = geometry_area_m2(unary_union(parts), origin_lat)
        return PolygonQueryResult(
            colliding=True,
            overlap_area_ratio=min(1.0, covered / total_area),
            intersections=intersections,
        )


def _boundary_crossings(segment: LineString, geometry: BaseGeometry) -> List[LatLng]:
    crossing = segment.intersection(geometry.boundary)
    if crossing.is_empty:
        return []
    points: List[LatLng] = []
    for part in getattr(crossing, "geoms", [crossing]):
        if isinstance(part, Point):
            points.append(LatLng(lat=part.y, lng=part.x))
        else:
            # Collinear overlap with the boundary; report its end points.
            for x, y in list(part.coords)[:: max(1, len(part.coords) - 1)]:
                points.append(LatLng(lat=y, lng=x))
    return points
