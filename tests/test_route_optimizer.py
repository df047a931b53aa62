"""Mini README: Tests for the multi-objective route optimiser.

Covers the tour primitives, objective resolution, midpoint risk, the
orchestrated ``optimize_route`` call and its failure results.
"""

from __future__ import annotations

import asyncio
import threading
from typing import List, Sequence

import numpy as np
import pytest

from droneroute.context import PlanningContext
from droneroute.drones import DroneProfile
from droneroute.geo import destination_point, distance_between
from droneroute.models import LatLng, Waypoint, ZoneKind
from droneroute.route_planning import (
    ObjectiveWeights,
    RouteOptimizer,
    RouteOptions,
    format_distance,
    format_time,
    get_objective,
    nearest_neighbor_tour,
    resolve_objective,
    route_distance,
    two_opt_improve,
)


def _grid() -> List[Waypoint]:
    coordinates = [(35.700 + row * 0.005, 139.400 + col * 0.005) for row in range(3) for col in range(3)]
    order = [4, 0, 8, 2, 6, 1, 7, 3, 5]
    return [
        Waypoint(id=f"wp-{position}", lat=coordinates[slot][0], lng=coordinates[slot][1], index=position)
        for position, slot in enumerate(order, start=1)
    ]


def _path_length(waypoints: Sequence[Waypoint]) -> float:
    return sum(distance_between(a, b) for a, b in zip(waypoints, waypoints[1:]))


def _line_matrix(xs: Sequence[float]) -> np.ndarray:
    values = np.array(xs, dtype=float)
    return np.abs(values[:, None] - values[None, :])


def test_nearest_neighbor_tour_on_a_line() -> None:
    matrix = _line_matrix([0, 3, 1, 2])
    route = nearest_neighbor_tour(4, 0, lambda a, b: float(matrix[a, b]))
    assert route == [0, 2, 3, 1]
    assert nearest_neighbor_tour(0, 0, lambda a, b: 0.0) == []
    assert nearest_neighbor_tour(1, 0, lambda a, b: 0.0) == [0]


def test_two_opt_uncrosses_route_and_keeps_start() -> None:
    matrix = _line_matrix([0, 1, 2, 3])
    improved = two_opt_improve([0, 2, 1, 3], matrix)

    assert improved == [0, 1, 2, 3]
    assert route_distance(improved, matrix) == 3.0
    assert two_opt_improve([0, 2, 1], matrix) == [0, 2, 1]


def test_objective_resolution() -> None:
    assert get_objective("no-such-objective").id == "balanced"
    assert get_objective(None).is_default
    assert resolve_objective("safest_route").weights.risk == 1.0
    custom = resolve_objective({"distance": 1.0, "risk": 0.5})
    assert custom.id == "custom"
    assert custom.weights.time == 0.0
    with pytest.raises(ValueError):
        ObjectiveWeights(distance=1.5, time=0, battery=0, risk=0)


def test_segment_risk_levels(context: PlanningContext) -> None:
    optimizer = RouteOptimizer(context)
    asyncio.run(context.resolver.preload([LatLng(35.69, 139.71)]))

    assert optimizer.segment_risk(LatLng(35.65, 139.65)) == 1.0
    assert optimizer.segment_risk(LatLng(35.60, 139.60)) == pytest.approx(0.6)
    assert optimizer.segment_risk(LatLng(35.69, 139.71)) == pytest.approx(0.3)
    assert optimizer.segment_risk(LatLng(35.75, 139.40)) == 0.0


def test_optimize_route_returns_permutation(context: PlanningContext) -> None:
    waypoints = _grid()
    result = asyncio.run(RouteOptimizer(context).optimize_route(waypoints))

    assert result.success
    assert sorted(waypoint.id for waypoint in result.ordered_waypoints) == sorted(
        waypoint.id for waypoint in waypoints
    )
    flown = [waypoint.id for flight in result.flights for waypoint in flight.waypoints]
    assert flown == [waypoint.id for waypoint in result.ordered_waypoints]
    assert result.optimal_start is not None
    assert result.home_point == LatLng(result.optimal_start.lat, result.optimal_start.lng)
    assert result.summary["improvement"] > 0
    assert 0 <= result.objective_achievement <= 100

    payload = result.as_dict()
    assert payload["success"] is True
    assert [item["optimized_order"] for item in payload["ordered_waypoints"]] == list(range(1, 10))


def test_two_opt_never_lengthens_nearest_neighbor(context: PlanningContext) -> None:
    optimizer = RouteOptimizer(context)
    waypoints = _grid()

    greedy = optimizer.plan(waypoints, RouteOptions(algorithm="nearest-neighbor"))
    refined = optimizer.plan(waypoints, RouteOptions(algorithm="2-opt"))

    assert refined.ordered_waypoints[0].id == greedy.ordered_waypoints[0].id
    assert _path_length(refined.ordered_waypoints) <= _path_length(greedy.ordered_waypoints) + 1e-6


def test_small_battery_splits_into_several_flights(context: PlanningContext) -> None:
    context.catalog.register(DroneProfile("tiny", "Tiny", 2, 10, 12, 5))
    result = RouteOptimizer(context).plan(_grid(), RouteOptions(drone_id="tiny"))

    assert result.success
    assert result.total_flights > 1
    assert result.summary["battery_changes"] == result.total_flights - 1
    assert [flight.flight_number for flight in result.flights] == list(range(1, result.total_flights + 1))

    single = RouteOptimizer(context).plan(_grid(), RouteOptions(drone_id="tiny", auto_split=False))
    assert single.total_flights == 1


def test_restrictions_are_attached_to_flights(context: PlanningContext) -> None:
    waypoints = _grid() + [Waypoint(id="airport", lat=35.60, lng=139.60, index=10)]
    result = RouteOptimizer(context).plan(waypoints)

    kinds = {(item.waypoint_id, item.kind) for item in result.restrictions}
    assert ("airport", ZoneKind.AIRPORT) in kinds
    owning = [flight for flight in result.flights if "airport" in flight.waypoint_ids]
    assert any(item.waypoint_id == "airport" for item in owning[0].restrictions)

    unchecked = RouteOptimizer(context).plan(waypoints, RouteOptions(check_regulations=False))
    assert unchecked.restrictions == []


@pytest.mark.parametrize(
    ("waypoints", "options", "message"),
    [
        ([], None, "No waypoints"),
        (
            [Waypoint(id="a", lat=35.7, lng=139.4), Waypoint(id="a", lat=35.71, lng=139.4)],
            None,
            "unique",
        ),
        (_grid(), RouteOptions(algorithm="genetic"), "Unknown algorithm"),
        (_grid(), RouteOptions(drone_id="no-such-drone"), "Unknown drone"),
        (_grid(), RouteOptions(objective={"distance": 2.0}), "distance"),
    ],
)
def test_invalid_requests_fail_cleanly(context: PlanningContext, waypoints, options, message) -> None:
    result = RouteOptimizer(context).plan(waypoints, options)

    assert not result.success
    assert message in result.error
    assert result.as_dict() == {"success": False, "error": result.error}


def test_async_entry_rejects_empty_input(context: PlanningContext) -> None:
    result = asyncio.run(RouteOptimizer(context).optimize_route([]))
    assert not result.success


def test_formatters() -> None:
    assert format_distance(1234.0) == "1.2km"
    assert format_distance(350.4) == "350m"
    assert format_time(65.0) == "1h 5min"
    assert format_time(12.2) == "12min"


def test_small_square_respects_drone_range(context: PlanningContext) -> None:
    """Four corners 300 m apart need more than one sortie from a 960 m drone."""

    context.catalog.register(DroneProfile("tiny", "Tiny", 2, 10, 12, 5))
    north = destination_point(35.70, 139.40, 300.0, 0.0)
    east = destination_point(35.70, 139.40, 300.0, 90.0)
    corners = [(35.70, 139.40), (north.lat, north.lng), (north.lat, east.lng), (35.70, east.lng)]
    waypoints = [
        Waypoint(id=f"corner-{position}", lat=lat, lng=lng, index=position)
        for position, (lat, lng) in enumerate(corners, start=1)
    ]

    result = RouteOptimizer(context).plan(waypoints, RouteOptions(drone_id="tiny"))

    assert result.total_flights > 1
    for flight in result.flights:
        assert not flight.exceeds_range
        assert flight.total_distance <= result.drone.max_range_m


def test_async_entry_plans_off_the_event_loop(context: PlanningContext) -> None:
    optimizer = RouteOptimizer(context)
    threads = {}
    original_plan = optimizer.plan

    def recording_plan(waypoints, options=None):
        threads["plan"] = threading.get_ident()
        return original_plan(waypoints, options)

    optimizer.plan = recording_plan

    async def run():
        threads["loop"] = threading.get_ident()
        return await optimizer.optimize_route(_grid())

    result = asyncio.run(run())

    assert result.success
    assert threads["plan"] != threads["loop"]
