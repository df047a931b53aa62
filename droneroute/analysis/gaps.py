"""Mini README: Risk and gap analysis with corrective waypoint positions.

Structure:
    * Issue / Gap - one waypoint's violations and its proposed position.
    * WaypointAnalysis / PolygonAnalysis / OptimizationPlan - reports.
    * GapAnalyzer - evaluates waypoints and polygons for one context.
    * generate_optimization_plan - convenience wrapper used by the interfaces.

Detection per position:
    * airport and military circles: ``distance < radius``
    * prohibited circles: ``distance < radius + prohibited margin``
    * DID membership: reported when DID avoidance or DID warnings are enabled

Correction pushes the position out of every violated zone at once. Each
active zone contributes a radial push (in local east/north metres) to
``radius + margin``; the summed vector is applied and the position re-tested,
up to ``max_correction_iterations`` times. A DID becomes a circle around its
centroid whose radius is the current distance plus the avoidance distance.
No recommendation (``None``) is produced when a DID has no centroid under
avoidance mode or when the iteration does not settle.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ..airspace import RestrictedZone
from ..context import PlanningContext
from ..did import DIDReport
from ..geo import distance_meters, local_offset, offset_position
from ..logging_utils import get_logger
from ..models import LatLng, Severity, SurveyPolygon, Waypoint, ZoneKind

LOGGER = get_logger(__name__)

CLEARANCE_M = 1.0
HIGH_OVERLAP_RATIO = 0.2
_DEGENERATE_M = 1e-3
_ZONE_FALLBACK_BEARING = math.radians(45.0)


@dataclass(slots=True)
class Issue:
    type: str
    zone_name: str
    severity: Severity
    current_distance: Optional[float] = None
    required_distance: Optional[float] = None
    description: str = ""

    def as_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "zone_name": self.zone_name,
            "severity": self.severity.value,
            "current_distance": self.current_distance,
            "required_distance": self.required_distance,
            "description": self.description,
        }


@dataclass(slots=True)
class Gap:
    waypoint_id: str
    waypoint_index: int
    issues: List[Issue]
    current: LatLng
    recommended: Optional[LatLng]

    @property
    def move_distance(self) -> float:
        if self.recommended is None:
            return 0.0
        return distance_meters(
            self.current.lat, self.current.lng, self.recommended.lat, self.recommended.lng
        )

    def as_dict(self) -> Dict[str, Any]:
        return {
            "waypoint_id": self.waypoint_id,
            "waypoint_index": self.waypoint_index,
            "issues": [issue.as_dict() for issue in self.issues],
            "current": self.current.as_dict(),
            "recommended": self.recommended.as_dict() if self.recommended else None,
            "move_distance": round(self.move_distance),
        }


@dataclass(slots=True)
class WaypointAnalysis:
    gaps: List[Gap] = field(default_factory=list)
    recommended_waypoints: List[Waypoint] = field(default_factory=list)

    @property
    def has_issues(self) -> bool:
        return bool(self.gaps)

    @property
    def summary(self) -> str:
        if not self.gaps:
            return "All waypoints are in safe positions"
        return f"{len(self.gaps)} waypoint(s) have issues"

    def as_dict(self) -> Dict[str, Any]:
        return {
            "has_issues": self.has_issues,
            "total_gaps": len(self.gaps),
            "gaps": [gap.as_dict() for gap in self.gaps],
            "recommended_waypoints": [waypoint.as_dict() for waypoint in self.recommended_waypoints],
            "summary": self.summary,
        }


@dataclass(slots=True)
class PolygonGap:
    vertex_index: int
    issues: List[Issue]
    current: LatLng
    recommended: Optional[LatLng]

    def as_dict(self) -> Dict[str, Any]:
        return {
            "vertex_index": self.vertex_index,
            "issues": [issue.as_dict() for issue in self.issues],
            "current": self.current.as_dict(),
            "recommended": self.recommended.as_dict() if self.recommended else None,
        }


@dataclass(slots=True)
class PolygonAnalysis:
    polygon_id: str
    gaps: List[PolygonGap] = field(default_factory=list)
    overlap_ratio: float = 0.0
    overlap_severity: Severity = Severity.SAFE
    intersections: List[Dict[str, Any]] = field(default_factory=list)
    recommended_ring: Optional[List[Tuple[float, float]]] = None

    @property
    def has_issues(self) -> bool:
        return bool(self.gaps) or self.overlap_ratio > 0

    def as_dict(self) -> Dict[str, Any]:
        return {
            "polygon_id": self.polygon_id,
            "has_issues": self.has_issues,
            "total_gaps": len(self.gaps),
            "gaps": [gap.as_dict() for gap in self.gaps],
            "overlap_ratio": self.overlap_ratio,
            "overlap_severity": self.overlap_severity.value,
            "intersections": list(self.intersections),
            "recommended_ring": [list(point) for point in self.recommended_ring]
            if self.recommended_ring
            else None,
        }


@dataclass(slots=True)
class OptimizationPlan:
    waypoint_analysis: WaypointAnalysis
    polygon_analyses: List[PolygonAnalysis] = field(default_factory=list)

    @property
    def has_issues(self) -> bool:
        return self.waypoint_analysis.has_issues or any(
            analysis.has_issues for analysis in self.polygon_analyses
        )

    @property
    def gaps(self) -> List[Gap]:
        return self.waypoint_analysis.gaps

    @property
    def recommended_waypoints(self) -> List[Waypoint]:
        return self.waypoint_analysis.recommended_waypoints

    @property
    def actions(self) -> List[str]:
        actions: List[str] = []
        did_gaps = [gap for gap in self.gaps if any(issue.type == ZoneKind.DID.value for issue in gap.issues)]
        other_gaps = [gap for gap in self.gaps if gap not in did_gaps]
        if other_gaps:
            actions.append(f"Move {len(other_gaps)} waypoint(s) clear of airports and prohibited areas")
        if did_gaps:
            actions.append(f"{len(did_gaps)} waypoint(s) inside a DID (flight permit required)")
        for analysis in self.polygon_analyses:
            if analysis.gaps:
                actions.append(f"Adjust {len(analysis.gaps)} vertex(es) of polygon {analysis.polygon_id}")
            elif analysis.overlap_ratio > 0:
                actions.append(
                    f"Polygon {analysis.polygon_id} overlaps restricted airspace"
                    f" ({analysis.overlap_ratio:.0%})"
                )
        return actions

    @property
    def summary(self) -> str:
        if self.has_issues:
            return "Corrections are proposed to improve safety"
        return "The current plan meets the safety criteria"

    def as_dict(self) -> Dict[str, Any]:
        return {
            "has_issues": self.has_issues,
            "gaps": [gap.as_dict() for gap in self.gaps],
            "recommended_waypoints": [waypoint.as_dict() for waypoint in self.recommended_waypoints],
            "waypoint_analysis": self.waypoint_analysis.as_dict(),
            "polygon_analyses": [analysis.as_dict() for analysis in self.polygon_analyses],
            "summary": self.summary,
            "actions": self.actions,
        }


@dataclass(slots=True)
class _Constraint:
    """Circle the position must stay out of: ``distance(center) >= required``."""

    center: LatLng
    required: float
    fallback_bearing: float


class GapAnalyzer:
    """Evaluate waypoints and polygons against zones and DIDs."""

    def __init__(self, context: PlanningContext) -> None:
        self.context = context
        settings = context.settings
        self.airport_margin = settings.airport_avoidance_margin
        self.prohibited_margin = settings.prohibited_avoidance_margin
        self.did_distance = settings.did_avoidance_distance
        self.did_avoid = settings.did_avoidance_mode
        self.did_warn = settings.did_warning_only_mode
        self.max_iterations = settings.max_correction_iterations

    # ------------------------------------------------------------------
    # Zone detection
    # ------------------------------------------------------------------
    def _detection_radius(self, zone: RestrictedZone) -> Optional[float]:
        if zone.kind in (ZoneKind.AIRPORT, ZoneKind.MILITARY):
            return zone.radius
        if zone.kind is ZoneKind.PROHIBITED:
            return zone.radius + self.prohibited_margin
        return None

    def _required_radius(self, zone: RestrictedZone) -> float:
        if zone.kind is ZoneKind.PROHIBITED:
            return zone.radius + self.prohibited_margin
        return zone.radius + self.airport_margin

    def violated_zones(self, lat: float, lng: float) -> List[Tuple[RestrictedZone, float]]:
        """Zones whose detection radius contains the position, with distances."""

        buffer = max(self.prohibited_margin, 0.0) + CLEARANCE_M
        hits: List[Tuple[RestrictedZone, float]] = []
        for zone in self.context.index.zones_near(lat, lng, buffer):
            threshold = self._detection_radius(zone)
            if threshold is None:
                continue
            distance = distance_meters(lat, lng, zone.lat, zone.lng)
            if distance < threshold:
                hits.append((zone, distance))
        return hits

    def _zone_issues(self, lat: float, lng: float) -> List[Issue]:
        return [
            Issue(
                type=zone.kind.value,
                zone_name=zone.name,
                severity=zone.severity,
                current_distance=float(round(distance)),
                required_distance=self._required_radius(zone),
                description=f"{round(distance)}m from {zone.name}",
            )
            for zone, distance in self.violated_zones(lat, lng)
        ]

    # ------------------------------------------------------------------
    # Correction
    # ------------------------------------------------------------------
    def _zone_constraints(self, position: LatLng) -> List[_Constraint]:
        return [
            _Constraint(zone.center, self._required_radius(zone), _ZONE_FALLBACK_BEARING)
            for zone, _ in self.violated_zones(position.lat, position.lng)
        ]

    def correct_position(
        self, position: LatLng, fixed: Sequence[_Constraint] = ()
    ) -> Optional[LatLng]:
        """Push ``position`` out of every violated circle; ``None`` if unsettled."""

        current = position
        for _ in range(self.max_iterations + 1):
            active = [
                constraint
                for constraint in fixed
                if distance_meters(current.lat, current.lng, constraint.center.lat, constraint.center.lng)
                < constraint.required
            ]
            active.extend(self._zone_constraints(current))
            if not active:
                return current
            east_total = 0.0
            north_total = 0.0
            for constraint in active:
                east, north = local_offset(constraint.center, current)
                length = math.hypot(east, north)
                if length < _DEGENERATE_M:
                    unit_east = math.sin(constraint.fallback_bearing)
                    unit_north = math.cos(constraint.fallback_bearing)
                else:
                    unit_east = east / length
                    unit_north = north / length
                distance = distance_meters(
                    current.lat, current.lng, constraint.center.lat, constraint.center.lng
                )
                push = constraint.required + CLEARANCE_M - distance
                east_total += unit_east * push
                north_total += unit_north * push
            current = offset_position(current, east_total, north_total)
        LOGGER.warning(
            "No safe position found for %.6f,%.6f after %s iterations",
            position.lat,
            position.lng,
            self.max_iterations,
        )
        return None

    # ------------------------------------------------------------------
    # DID membership
    # ------------------------------------------------------------------
    def _did_entry(
        self, waypoint: Waypoint, report: Optional[DIDReport]
    ) -> Tuple[bool, Optional[str], Optional[LatLng]]:
        if report is not None:
            entry = report.for_waypoint(waypoint.id)
            if entry is not None and (entry.lat, entry.lng) == (waypoint.lat, waypoint.lng):
                return True, entry.area, entry.centroid
            if entry is None and not waypoint.modified:
                return False, None, None
        result = self.context.resolver.check_did_area_sync(waypoint.lat, waypoint.lng)
        return result.is_did, result.area_name, result.centroid

    # ------------------------------------------------------------------
    # Public analysis
    # ------------------------------------------------------------------
    def analyze_waypoint_gaps(
        self, waypoints: Sequence[Waypoint], did_context: Optional[DIDReport] = None
    ) -> WaypointAnalysis:
        analysis = WaypointAnalysis()
        check_did = self.did_avoid or self.did_warn
        for waypoint in waypoints:
            issues = self._zone_issues(waypoint.lat, waypoint.lng)
            fixed: List[_Constraint] = []
            unresolvable = False
            if check_did:
                is_did, area, centroid = self._did_entry(waypoint, did_context)
                if is_did:
                    issues.append(
                        Issue(
                            type=ZoneKind.DID.value,
                            zone_name=area or "DID",
                            severity=Severity.HIGH if self.did_avoid else Severity.LOW,
                            current_distance=0.0,
                            required_distance=self.did_distance if self.did_avoid else None,
                            description=f"Inside densely inhabited district ({area or 'DID'})",
                        )
                    )
                    if self.did_avoid:
                        if centroid is None:
                            unresolvable = True
                        else:
                            offset = distance_meters(
                                waypoint.lat, waypoint.lng, centroid.lat, centroid.lng
                            )
                            fixed.append(
                                _Constraint(centroid, offset + self.did_distance, math.radians(90.0))
                            )

            if not issues:
                analysis.recommended_waypoints.append(waypoint)
                continue

            recommended = None if unresolvable else self.correct_position(waypoint.position, fixed)
            analysis.gaps.append(
                Gap(
                    waypoint_id=waypoint.id,
                    waypoint_index=waypoint.index,
                    issues=issues,
                    current=waypoint.position,
                    recommended=recommended,
                )
            )
            if recommended is not None and recommended != waypoint.position:
                analysis.recommended_waypoints.append(waypoint.moved_to(recommended))
            else:
                analysis.recommended_waypoints.append(waypoint)
        LOGGER.debug("Gap analysis: %s of %s waypoints flagged", len(analysis.gaps), len(waypoints))
        return analysis

    def analyze_polygon_gaps(self, polygon: SurveyPolygon) -> PolygonAnalysis:
        """Vertex violations plus the polygon's overlap with restricted zones."""

        analysis = PolygonAnalysis(polygon_id=polygon.id)
        vertices = polygon.vertices()
        if len(vertices) < 3:
            return analysis
        recommended_ring: List[Tuple[float, float]] = []
        for position, (lng, lat) in enumerate(vertices):
            issues = self._zone_issues(lat, lng)
            current = LatLng(lat=lat, lng=lng)
            if issues:
                recommended = self.correct_position(current)
                analysis.gaps.append(PolygonGap(position, issues, current, recommended))
                current = recommended or current
            recommended_ring.append((current.lng, current.lat))

        overlap = self.context.index.query_polygon(polygon.ring)
        analysis.overlap_ratio = overlap.overlap_area_ratio
        analysis.intersections = overlap.intersections
        if overlap.colliding:
            analysis.overlap_severity = (
                Severity.HIGH if overlap.overlap_area_ratio > HIGH_OVERLAP_RATIO else Severity.MEDIUM
            )
        if analysis.gaps:
            recommended_ring.append(recommended_ring[0])
            analysis.recommended_ring = recommended_ring
        return analysis

    def generate_optimization_plan(
        self,
        polygons: Sequence[SurveyPolygon],
        waypoints: Sequence[Waypoint],
        did_context: Optional[DIDReport] = None,
    ) -> OptimizationPlan:
        plan = OptimizationPlan(
            waypoint_analysis=self.analyze_waypoint_gaps(waypoints, did_context),
            polygon_analyses=[self.analyze_polygon_gaps(polygon) for polygon in polygons],
        )
        LOGGER.info("Optimization plan: %s", plan.summary)
        return plan


def generate_optimization_plan(
    context: PlanningContext,
    polygons: Sequence[SurveyPolygon],
    waypoints: Sequence[Waypoint],
    did_context: Optional[DIDReport] = None,
) -> OptimizationPlan:
    return GapAnalyzer(context).generate_optimization_plan(polygons, waypoints, did_context)
