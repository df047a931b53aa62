"""Mini README: Restriction reports built on top of ``RestrictionIndex``.

Structure:
    * check_airspace_restrictions - every zone containing one coordinate.
    * check_all_waypoints_restrictions - de-duplicated zones for a waypoint set.
    * check_flight_path_collision - path test per polygon group.
    * check_route_restrictions - per-waypoint entries, DID included, consumed
      by the route optimizer.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Dict, List, Optional, Sequence, Set, Tuple

from ..logging_utils import get_logger
from ..models import Restriction, Severity, Waypoint, ZoneKind
from .index import PathQueryResult, RestrictionIndex

if TYPE_CHECKING:
    from ..did.resolver import DIDResolver

LOGGER = get_logger(__name__)

DID_RESTRICTION_NAME = "DID (densely inhabited district)"


def check_airspace_restrictions(index: RestrictionIndex, lat: float, lng: float) -> List[Restriction]:
    """Return every restricted zone whose radius contains the coordinate."""

    return [
        Restriction(
            kind=zone.kind,
            name=zone.name,
            severity=zone.severity,
            distance=float(round(distance)),
            radius=zone.radius,
        )
        for zone, distance in index.restrictions_at(lat, lng)
    ]


def check_all_waypoints_restrictions(
    index: RestrictionIndex, waypoints: Sequence[Waypoint]
) -> List[Restriction]:
    """Zones touched by any waypoint, reported once per ``(kind, name)``."""

    seen: Set[Tuple[ZoneKind, str]] = set()
    restrictions: List[Restriction] = []
    for waypoint in waypoints:
        for restriction in check_airspace_restrictions(index, waypoint.lat, waypoint.lng):
            key = (restriction.kind, restriction.name)
            if key in seen:
                continue
            seen.add(key)
            restriction.waypoint_id = waypoint.id
            restriction.waypoint_index = waypoint.index
            restrictions.append(restriction)
    return restrictions


def check_flight_path_collision(
    index: RestrictionIndex, waypoints: Sequence[Waypoint]
) -> PathQueryResult:
    """Test the legs between waypoints of the same polygon.

    Each polygon is flown in ``index`` order whatever order the caller passes
    the waypoints in. Waypoints without a polygon are stand-alone points and
    are never joined to their neighbours. Every colliding leg is listed in
    ``affected_segments``.
    """

    groups: Dict[str, List[Waypoint]] = {}
    for position, waypoint in enumerate(waypoints):
        key = waypoint.polygon_id or f"__standalone_{position}"
        groups.setdefault(key, []).append(waypoint)

    combined = PathQueryResult()
    severities: List[Severity] = []
    for polygon_id, members in groups.items():
        if len(members) < 2:
            continue
        ordered = sorted(members, key=lambda waypoint: waypoint.index)
        for leg, (start, end) in enumerate(zip(ordered, ordered[1:])):
            result = index.query_path([start, end])
            if not result.colliding:
                continue
            severities.append(result.severity)
            combined.intersection_points.extend(result.intersection_points)
            combined.zones.extend(name for name in result.zones if name not in combined.zones)
            combined.affected_segments.append(
                {
                    "index": leg,
                    "polygon_id": polygon_id,
                    "from_waypoint": start.id,
                    "to_waypoint": end.id,
                    "intersection_count": len(result.intersection_points),
                    "severity": result.severity.value,
                }
            )
    combined.colliding = bool(severities)
    combined.severity = Severity.highest(severities)
    return combined


def check_route_restrictions(
    index: RestrictionIndex,
    waypoints: Sequence[Waypoint],
    resolver: Optional["DIDResolver"] = None,
) -> List[Restriction]:
    """Per-waypoint restriction entries including DID membership.

    DID membership is read from the resolver cache, so callers preload the
    relevant prefectures first.
    """

    restrictions: List[Restriction] = []
    for waypoint in waypoints:
        for restriction in check_airspace_restrictions(index, waypoint.lat, waypoint.lng):
            restriction.waypoint_id = waypoint.id
            restriction.waypoint_index = waypoint.index
            restriction.description = f"{restriction.distance:.0f}m from {restriction.name}"
            restrictions.append(restriction)
        if resolver is not None and resolver.check_did_area_sync(waypoint.lat, waypoint.lng).is_did:
            restrictions.append(
                Restriction(
                    kind=ZoneKind.DID,
                    name=DID_RESTRICTION_NAME,
                    severity=Severity.MEDIUM,
                    waypoint_id=waypoint.id,
                    waypoint_index=waypoint.index,
                    description="Inside a DID (flight permit required)",
                )
            )
    LOGGER.debug("Route restriction check found %s entries", len(restrictions))
    return restrictions
