"""Mini README: Tests for the geodesic helpers.

Checks haversine distances against known city pairs, the bearing and
destination round trip, the numpy distance matrix and polygon areas.
"""

from __future__ import annotations

import pytest

from droneroute.geo import (
    circle_ring,
    destination_point,
    distance_meters,
    initial_bearing,
    local_offset,
    offset_position,
    pairwise_distance_matrix,
    point_in_polygon,
    polygon_area_m2,
    polygon_intersection_area,
)
from droneroute.models import LatLng

SQUARE = [(139.0, 35.0), (139.01, 35.0), (139.01, 35.01), (139.0, 35.01), (139.0, 35.0)]


def test_distance_between_tokyo_and_osaka() -> None:
    """Tokyo station to Osaka station is roughly 400 km."""

    distance = distance_meters(35.6812, 139.7671, 34.7025, 135.4959)
    assert 395_000 < distance < 410_000
    assert distance_meters(35.0, 139.0, 35.0, 139.0) == 0.0


def test_destination_point_round_trip() -> None:
    target = destination_point(35.0, 139.0, 1000.0, 90.0)
    assert distance_meters(35.0, 139.0, target.lat, target.lng) == pytest.approx(1000.0, abs=0.5)
    assert initial_bearing(35.0, 139.0, target.lat, target.lng) == pytest.approx(90.0, abs=0.1)


def test_distance_matrix_matches_scalar_haversine() -> None:
    points = [LatLng(35.0, 139.0), LatLng(35.01, 139.02), LatLng(34.99, 139.05)]
    matrix = pairwise_distance_matrix(points)

    assert matrix.shape == (3, 3)
    assert (matrix == matrix.T).all()
    assert matrix[0, 0] == 0.0
    assert matrix[0, 2] == pytest.approx(distance_meters(35.0, 139.0, 34.99, 139.05), rel=1e-9)


def test_local_offset_inverts_offset_position() -> None:
    origin = LatLng(35.0, 139.0)
    moved = offset_position(origin, 100.0, -50.0)
    east, north = local_offset(origin, moved)
    assert east == pytest.approx(100.0)
    assert north == pytest.approx(-50.0)


def test_point_in_polygon_and_malformed_ring() -> None:
    assert point_in_polygon(35.005, 139.005, [SQUARE])
    assert not point_in_polygon(35.02, 139.005, [SQUARE])
    assert not point_in_polygon(35.005, 139.005, [[(139.0, 35.0)]])
    assert not point_in_polygon(35.005, 139.005, [])


def test_polygon_overlap_area_is_half_for_shifted_square() -> None:
    shifted = [(lng + 0.005, lat) for lng, lat in SQUARE]
    area = polygon_area_m2(SQUARE)

    assert area > 900_000
    assert polygon_intersection_area(SQUARE, shifted) == pytest.approx(area / 2, rel=0.01)
    assert polygon_intersection_area(SQUARE, [(0, 0), (1, 1)]) == 0.0


def test_circle_ring_is_closed_at_radius() -> None:
    ring = circle_ring(35.0, 139.0, 500.0, points=32)
    assert len(ring) == 33
    assert ring[0] == ring[-1]
    for lng, lat in ring:
        assert distance_meters(35.0, 139.0, lat, lng) == pytest.approx(500.0, abs=0.5)


def test_haversine_triangle_inequality() -> None:
    a, b, c = (35.0, 139.0), (35.2, 139.3), (34.9, 139.6)
    ab = distance_meters(*a, *b)
    bc = distance_meters(*b, *c)
    ac = distance_meters(*a, *c)
    assert ac <= ab + bc + 1e-6
    assert ab == pytest.approx(distance_meters(*b, *a))
