"""Mini README: Tests for the waypoint planner.

Validates vertex waypoints, the lawnmower grid and global renumbering so
generated ids stay deterministic between runs.
"""

from __future__ import annotations

import pytest

from droneroute.geo import point_in_polygon
from droneroute.models import SurveyPolygon
from droneroute.route_planning import WaypointPlanner

FIELD = SurveyPolygon(
    id="field",
    ring=[(139.40, 35.70), (139.41, 35.70), (139.41, 35.71), (139.40, 35.71), (139.40, 35.70)],
)


def test_polygon_vertices_become_waypoints() -> None:
    waypoints = WaypointPlanner().polygon_to_waypoints(FIELD)

    assert [wp.id for wp in waypoints] == ["field-v1", "field-v2", "field-v3", "field-v4"]
    assert [wp.index for wp in waypoints] == [1, 2, 3, 4]
    assert waypoints[1].lng == 139.41
    assert all(wp.polygon_id == "field" for wp in waypoints)


def test_grid_survey_produces_waypoints_inside_polygon() -> None:
    planner = WaypointPlanner(grid_spacing_m=200.0)
    grid = planner.grid_waypoints(FIELD)

    assert len(grid) > 0
    assert all(point_in_polygon(wp.lat, wp.lng, [FIELD.ring]) for wp in grid)
    assert grid[0].id == "field-g1"
    # Lawnmower: the second row runs west.
    rows = {}
    for wp in grid:
        rows.setdefault(wp.lat, []).append(wp.lng)
    second = list(rows.values())[1]
    assert second == sorted(second, reverse=True)


def test_grid_is_skipped_beyond_point_limit() -> None:
    planner = WaypointPlanner(grid_spacing_m=10.0, max_grid_points=100)
    assert planner.grid_waypoints(FIELD) == []


def test_generate_all_waypoints_renumbers_globally() -> None:
    other = SurveyPolygon(
        id="other",
        ring=[(139.50, 35.70), (139.51, 35.70), (139.505, 35.71), (139.50, 35.70)],
    )
    waypoints = WaypointPlanner().generate_all_waypoints([FIELD, other])

    assert [wp.index for wp in waypoints] == list(range(1, 8))
    assert waypoints[4].id == "other-v1"
    assert waypoints[4].polygon_id == "other"


def test_invalid_spacing_is_rejected() -> None:
    with pytest.raises(ValueError):
        WaypointPlanner(grid_spacing_m=0)
