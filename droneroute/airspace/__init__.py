"""Mini README: Restricted airspace data, spatial index and reports."""

from .index import PathQueryResult, PointQueryResult, PolygonQueryResult, RestrictionIndex
from .restrictions import (
    check_airspace_restrictions,
    check_all_waypoints_restrictions,
    check_flight_path_collision,
    check_route_restrictions,
)
from .surface_sources import FileSurfaceSource, HttpSurfaceSource, surface_slug
from .surfaces import (
    RestrictionSurface,
    SurfaceKind,
    SurfaceSource,
    SurfaceState,
    classify_surface,
    parse_surfaces,
)
from .zones import RestrictedZone, default_zones, zones_from_records

__all__ = [
    "FileSurfaceSource",
    "HttpSurfaceSource",
    "PathQueryResult",
    "PointQueryResult",
    "PolygonQueryResult",
    "RestrictedZone",
    "RestrictionIndex",
    "RestrictionSurface",
    "SurfaceKind",
    "SurfaceSource",
    "SurfaceState",
    "check_airspace_restrictions",
    "check_all_waypoints_restrictions",
    "check_flight_path_collision",
    "check_route_restrictions",
    "classify_surface",
    "default_zones",
    "parse_surfaces",
    "surface_slug",
    "zones_from_records",
]
