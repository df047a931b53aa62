"""Mini README: Tests for the restricted airspace index and reports.

Covers point, batch, path and polygon queries, the restriction surface
override rules for airports and the waypoint level restriction reports.
"""

from __future__ import annotations

import pytest

from conftest import SURFACE_SQUARE, TEST_ZONE_RECORDS
from droneroute.airspace import (
    RestrictionIndex,
    SurfaceKind,
    SurfaceState,
    check_airspace_restrictions,
    check_all_waypoints_restrictions,
    check_flight_path_collision,
    classify_surface,
    default_zones,
    zones_from_records,
)
from droneroute.geo import destination_point
from droneroute.models import LatLng, Severity, Waypoint, ZoneKind


@pytest.fixture
def index() -> RestrictionIndex:
    return RestrictionIndex(zones_from_records(TEST_ZONE_RECORDS))


def test_haneda_is_reported_as_airport() -> None:
    """A point next to Haneda lies inside its 9 km circle."""

    index = RestrictionIndex(default_zones())
    restrictions = check_airspace_restrictions(index, 35.55, 139.78)

    assert restrictions
    first = restrictions[0]
    assert first.kind is ZoneKind.AIRPORT
    assert "Haneda" in first.name
    assert first.distance < first.radius


def test_imperial_palace_is_critical() -> None:
    index = RestrictionIndex(default_zones())
    result = index.query_point(35.6852, 139.7528)

    assert result.colliding
    assert result.zone_name == "Imperial Palace"
    assert result.kind is ZoneKind.PROHIBITED
    assert result.severity is Severity.CRITICAL


def test_open_ocean_has_no_restrictions() -> None:
    index = RestrictionIndex(default_zones())
    assert check_airspace_restrictions(index, 30.0, 150.0) == []
    assert not index.query_point(30.0, 150.0).colliding


def test_malformed_zone_records_are_skipped() -> None:
    zones = zones_from_records(
        [
            {"name": "ok", "lat": 35.0, "lng": 139.0, "radius": 100, "type": "heliport"},
            {"name": "no radius", "lat": 35.0, "lng": 139.0, "type": "airport"},
            {"name": "bad kind", "lat": 35.0, "lng": 139.0, "radius": 100, "type": "castle"},
        ]
    )
    assert [zone.name for zone in zones] == ["ok"]
    assert zones[0].severity is Severity.MEDIUM


def test_query_batch_keys_by_waypoint_id(index: RestrictionIndex) -> None:
    waypoints = [
        Waypoint(id="in", lat=35.60, lng=139.60),
        Waypoint(id="out", lat=35.70, lng=139.40),
    ]
    results = index.query_batch(waypoints)

    assert results["in"].colliding
    assert results["in"].zone_name == "Test Airport"
    assert not results["out"].colliding


def test_query_path_crossing_zone(index: RestrictionIndex) -> None:
    """A leg straight through the palace circle crosses its boundary twice."""

    path = [LatLng(35.65, 139.64), LatLng(35.65, 139.66)]
    result = index.query_path(path)

    assert result.colliding
    assert result.zones == ["Test Palace"]
    assert result.severity is Severity.CRITICAL
    assert len(result.intersection_points) == 2

    clear = index.query_path([LatLng(35.70, 139.64), LatLng(35.70, 139.66)])
    assert not clear.colliding
    assert clear.severity is Severity.SAFE


def test_query_path_single_point_falls_back(index: RestrictionIndex) -> None:
    result = index.query_path([LatLng(35.60, 139.60)])
    assert result.colliding
    assert result.zones == ["Test Airport"]


def test_query_polygon_overlap(index: RestrictionIndex) -> None:
    ring = [(139.64, 35.64), (139.66, 35.64), (139.66, 35.66), (139.64, 35.66), (139.64, 35.64)]
    result = index.query_polygon(ring)

    assert result.colliding
    assert 0.0 < result.overlap_area_ratio < 1.0
    assert result.intersections[0]["name"] == "Test Palace"

    assert not index.query_polygon([(139.64, 35.64), (139.66, 35.64)]).colliding


def test_loaded_surfaces_override_circle(index: RestrictionIndex) -> None:
    """Once surfaces load, points outside them are no longer restricted."""

    north = destination_point(35.60, 139.60, 1000.0, 0.0)
    assert index.query_point(north.lat, north.lng).colliding

    state = index.attach_surfaces("Test Airport", SURFACE_SQUARE)

    assert state is SurfaceState.LOADED
    assert index.surfaces_for("Test Airport")[0].kind is SurfaceKind.HORIZONTAL
    assert index.query_point(35.60, 139.60).colliding
    assert not index.query_point(north.lat, north.lng).colliding


def test_failed_surfaces_ignore_airport(index: RestrictionIndex) -> None:
    def failing_fetch(name: str):
        raise ConnectionError("offline")

    states = index.load_surfaces(failing_fetch)

    assert states == {"Test Airport": SurfaceState.FAILED}
    assert not index.query_point(35.60, 139.60).colliding
    # Non-airport zones are unaffected.
    assert index.query_point(35.65, 139.65).colliding


def test_surface_payload_validation(index: RestrictionIndex) -> None:
    assert index.attach_surfaces("Test Airport", {"type": "Feature"}) is SurfaceState.FAILED
    assert (
        index.attach_surfaces("Test Airport", {"type": "FeatureCollection", "features": []})
        is SurfaceState.ABSENT
    )
    assert index.query_point(35.60, 139.60).colliding


def test_classify_surface_prefers_specific_names() -> None:
    assert classify_surface({"name": "延長進入表面"}) is SurfaceKind.EXTENDED_APPROACH
    assert classify_surface({"name": "進入表面"}) is SurfaceKind.APPROACH
    assert classify_surface({"kind": "Outer Horizontal Surface"}) is SurfaceKind.OUTER_HORIZONTAL
    assert classify_surface({"height": 45}) is SurfaceKind.OTHER


def test_waypoint_restrictions_deduplicate_by_zone(index: RestrictionIndex) -> None:
    waypoints = [
        Waypoint(id="a", lat=35.60, lng=139.60, index=1),
        Waypoint(id="b", lat=35.601, lng=139.601, index=2),
    ]
    restrictions = check_all_waypoints_restrictions(index, waypoints)

    assert len(restrictions) == 1
    assert restrictions[0].waypoint_id == "a"
    assert restrictions[0].as_dict()["type"] == "airport"


def test_flight_path_only_joins_waypoints_of_one_polygon(index: RestrictionIndex) -> None:
    west = Waypoint(id="w", lat=35.65, lng=139.64)
    east = Waypoint(id="e", lat=35.65, lng=139.66)

    assert not check_flight_path_collision(index, [west, east]).colliding

    grouped = [
        Waypoint(id="w", lat=35.65, lng=139.64, polygon_id="p1"),
        Waypoint(id="e", lat=35.65, lng=139.66, polygon_id="p1"),
    ]
    result = check_flight_path_collision(index, grouped)
    assert result.colliding
    assert result.as_dict()["is_colliding"] is True


def test_flight_path_follows_polygon_visit_order() -> None:
    """Legs are built in ``index`` order regardless of the order received."""

    index = RestrictionIndex(
        zones_from_records([{"name": "Shrine", "lat": 35.0, "lng": 139.01, "radius": 300, "type": "red"}])
    )
    first = Waypoint(id="a", lat=35.0, lng=139.0, index=1, polygon_id="field")
    second = Waypoint(id="b", lat=35.0, lng=139.02, index=2, polygon_id="field")
    third = Waypoint(id="c", lat=35.05, lng=139.01, index=3, polygon_id="field")

    in_order = check_flight_path_collision(index, [first, second, third])
    shuffled = check_flight_path_collision(index, [first, third, second])

    for result in (in_order, shuffled):
        assert result.colliding
        assert result.severity is Severity.CRITICAL
        assert result.affected_segments == [
            {
                "index": 0,
                "polygon_id": "field",
                "from_waypoint": "a",
                "to_waypoint": "b",
                "intersection_count": 2,
                "severity": "critical",
            }
        ]
    assert shuffled.as_dict()["affected_segments"][0]["to_waypoint"] == "b"
