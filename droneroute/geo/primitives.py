"""Mini README: Geodesic and planar geometry helpers.

Structure:
    * distance_meters / distance_between - haversine great-circle distance.
    * pairwise_distance_matrix - vectorised N x N haversine matrix (numpy).
    * initial_bearing / destination_point - spherical bearing helpers.
    * local_offset / offset_position - metre offsets in a local tangent plane.
    * point_in_ring / point_in_polygon - ray casting over ``[lng, lat]`` rings.
    * ring_to_polygon / polygon_area_m2 / polygon_intersection_area - shapely
      backed area calculations in a local metric projection.
    * circle_ring - closed ring approximating a circle of given radius.

Rings follow GeoJSON ordering (``[lng, lat]``). Malformed rings never raise:
containment answers ``False`` and areas answer ``0.0``.
"""

from __future__ import annotations

import math
from typing import Iterable, List, Optional, Protocol, Sequence, Tuple

import numpy as np
from shapely.errors import GEOSException
from shapely.geometry import Polygon
from shapely.ops import transform

from ..models import LatLng

EARTH_RADIUS_M = 6_371_000.0
METRES_PER_DEGREE = 111_320.0

Ring = Sequence[Sequence[float]]


class HasPosition(Protocol):
    lat: float
    lng: float


def distance_meters(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Haversine distance in metres between two coordinates."""

    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lng2 - lng1)
    a = (
        math.sin(d_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    )
    # Clamp guards against a > 1 from rounding on antipodal inputs.
    a = min(1.0, max(0.0, a))
    return EARTH_RADIUS_M * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def distance_between(a: HasPosition, b: HasPosition) -> float:
    """Distance between two objects exposing ``lat`` and ``lng``."""

    return distance_meters(a.lat, a.lng, b.lat, b.lng)


def pairwise_distance_matrix(points: Sequence[HasPosition]) -> np.ndarray:
    """Return the symmetric haversine distance matrix for ``points``."""

    if not points:
        return np.zeros((0, 0))
    lats = np.radians(np.array([point.lat for point in points], dtype=float))
    lngs = np.radians(np.array([point.lng for point in points], dtype=float))
    d_phi = lats[:, None] - lats[None, :]
    d_lambda = lngs[:, None] - lngs[None, :]
    a = (
        np.sin(d_phi / 2) ** 2
        + np.cos(lats)[:, None] * np.cos(lats)[None, :] * np.sin(d_lambda / 2) ** 2
    )
    a = np.clip(a, 0.0, 1.0)
    matrix = EARTH_RADIUS_M * 2 * np.arctan2(np.sqrt(a), np.sqrt(1 - a))
    np.fill_diagonal(matrix, 0.0)
    return (matrix + matrix.T) / 2


def initial_bearing(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Initial great-circle bearing from point 1 to point 2 in degrees [0, 360)."""

    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_lambda = math.radians(lng2 - lng1)
    y = math.sin(d_lambda) * math.cos(phi2)
    x = math.cos(phi1) * math.sin(phi2) - math.sin(phi1) * math.cos(phi2) * math.cos(d_lambda)
    return (math.degrees(math.atan2(y, x)) + 360.0) % 360.0


def destination_point(lat: float, lng: float, distance_m: float, bearing_deg: float) -> LatLng:
    """Point reached travelling ``distance_m`` along ``bearing_deg`` (0 = north)."""

    delta = distance_m / EARTH_RADIUS_M
    theta = math.radians(bearing_deg)
    phi1 = math.radians(lat)
    lambda1 = math.radians(lng)
    phi2 = math.asin(
        math.sin(phi1) * math.cos(delta) + math.cos(phi1) * math.sin(delta) * math.cos(theta)
    )
    lambda2 = lambda1 + math.atan2(
        math.sin(theta) * math.sin(delta) * math.cos(phi1),
        math.cos(delta) - math.sin(phi1) * math.sin(phi2),
    )
    lng2 = (math.degrees(lambda2) + 540.0) % 360.0 - 180.0
    return LatLng(lat=math.degrees(phi2), lng=lng2)


def local_offset(origin: HasPosition, point: HasPosition) -> Tuple[float, float]:
    """East/north offset in metres of ``point`` relative to ``origin``."""

    east = (point.lng - origin.lng) * METRES_PER_DEGREE * math.cos(math.radians(origin.lat))
    north = (point.lat - origin.lat) * METRES_PER_DEGREE
    return east, north


def offset_position(origin: HasPosition, east: float, north: float) -> LatLng:
    """Inverse of ``local_offset``."""

    cos_lat = math.cos(math.radians(origin.lat)) or 1e-12
    return LatLng(
        lat=origin.lat + north / METRES_PER_DEGREE,
        lng=origin.lng + east / (METRES_PER_DEGREE * cos_lat),
    )


def midpoint(a: HasPosition, b: HasPosition) -> LatLng:
    """Arithmetic midpoint, adequate for the short legs of a survey."""

    return LatLng(lat=(a.lat + b.lat) / 2, lng=(a.lng + b.lng) / 2)


def point_in_ring(lng: float, lat: float, ring: Ring) -> bool:
    """Ray casting test of a point against a single ring."""

    try:
        n = len(ring)
        if n < 3:
            return False
        inside = False
        j = n - 1
        for i in range(n):
            xi, yi = float(ring[i][0]), float(ring[i][1])
            xj, yj = float(ring[j][0]), float(ring[j][1])
            if (yi > lat) != (yj > lat):
                if lng < (xj - xi) * (lat - yi) / (yj - yi) + xi:
                    inside = not inside
            j = i
        return inside
    except (TypeError, IndexError, ValueError):
        return False


def point_in_polygon(lat: float, lng: float, rings: Sequence[Ring]) -> bool:
    """Containment against an outer ring followed by optional holes."""

    if not rings:
        return False
    if not point_in_ring(lng, lat, rings[0]):
        return False
    return not any(point_in_ring(lng, lat, hole) for hole in rings[1:])


def ring_to_polygon(ring: Ring) -> Optional[Polygon]:
    """Build a shapely polygon, or ``None`` when the ring is malformed."""

    try:
        polygon = Polygon([(float(x), float(y)) for x, y, *_ in ring])
    except (TypeError, ValueError, GEOSException):
        return None
    if polygon.is_empty or not polygon.is_valid:
        return None
    return polygon


def _to_local_metres(geometry, origin_lat: float):
    scale_x = METRES_PER_DEGREE * math.cos(math.radians(origin_lat))

    def _project(x, y, z=None):
        return (np.asarray(x) * scale_x, np.asarray(y) * METRES_PER_DEGREE)

    return transform(_project, geometry)


def geometry_area_m2(geometry, origin_lat: Optional[float] = None) -> float:
    """Area in square metres of a lng/lat shapely geometry."""

    if geometry is None or geometry.is_empty:
        return 0.0
    if origin_lat is None:
        origin_lat = geometry.centroid.y
    return float(_to_local_metres(geometry, origin_lat).area)


def polygon_area_m2(ring: Ring) -> float:
    """Approximate area of a ring in square metres."""

    polygon = ring_to_polygon(ring)
    if polygon is None:
        return 0.0
    return geometry_area_m2(polygon)


def polygon_intersection_area(ring_a: Ring, ring_b: Ring) -> float:
    """Area in square metres shared by two rings (0.0 for malformed input)."""

    polygon_a = ring_to_polygon(ring_a)
    polygon_b = ring_to_polygon(ring_b)
    if polygon_a is None or polygon_b is None:
        return 0.0
    overlap = polygon_a.intersection(polygon_b)
    return geometry_area_m2(overlap, polygon_a.centroid.y)


def circle_ring(lat: float, lng: float, radius_m: float, points: int = 64) -> List[Tuple[float, float]]:
    """Closed ``[lng, lat]`` ring approximating a geodesic circle."""

    ring: List[Tuple[float, float]] = []
    for step in range(points):
        vertex = destination_point(lat, lng, radius_m, step * 360.0 / points)
        ring.append((vertex.lng, vertex.lat))
    ring.append(ring[0])
    return ring


def bounding_box(points: Iterable[Sequence[float]]) -> Tuple[float, float, float, float]:
    """Return ``(min_lng, min_lat, max_lng, max_lat)`` of ``[lng, lat]`` pairs."""

    xs: List[float] = []
    ys: List[float] = []
    for point in points:
        xs.append(float(point[0]))
        ys.append(float(point[1]))
    if not xs:
        raise ValueError("At least one coordinate is required")
    return (min(xs), min(ys), max(xs), max(ys))
