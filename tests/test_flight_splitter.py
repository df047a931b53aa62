"""Mini README: Tests for battery-constrained flight splitting.

Uses a deliberately small drone so a short survey needs several sorties and
checks that every sortie stays within range unless a single waypoint is
out of reach on its own.
"""

from __future__ import annotations

import pytest

from droneroute.drones import DroneProfile
from droneroute.geo import destination_point
from droneroute.models import LatLng, Waypoint
from droneroute.route_planning import split_route_by_battery
from droneroute.route_planning.splitter import battery_usage_percent, flight_time_minutes, single_flight

HOME = LatLng(35.70, 139.40)
# 2 min x 0.8 x 60 s x 10 m/s = 960 m of range.
TINY = DroneProfile("tiny", "Tiny", 2, 10, 12, 5)


def _around_home(distance: float = 400.0, bearings=(90.0, 270.0, 0.0, 180.0)) -> list:
    waypoints = []
    for position, bearing in enumerate(bearings, start=1):
        point = destination_point(HOME.lat, HOME.lng, distance, bearing)
        waypoints.append(Waypoint(id=f"wp-{position}", lat=point.lat, lng=point.lng, index=position))
    return waypoints


def test_range_is_derived_from_effective_flight_time() -> None:
    assert TINY.effective_flight_time_min == pytest.approx(1.6)
    assert TINY.max_range_m == pytest.approx(960.0)


def test_split_keeps_each_flight_within_range() -> None:
    waypoints = _around_home()
    flights = split_route_by_battery(waypoints, TINY, HOME)

    assert len(flights) > 1
    assert [wp.id for flight in flights for wp in flight.waypoints] == [wp.id for wp in waypoints]
    for flight in flights:
        assert not flight.exceeds_range
        assert flight.total_distance <= TINY.max_range_m
        assert flight.total_distance == pytest.approx(sum(flight.segment_distances) + flight.return_distance)


def test_unreachable_waypoint_gets_flagged_flight() -> None:
    far = _around_home(1000.0, bearings=(90.0,))
    flights = split_route_by_battery(far, TINY, HOME)

    assert len(flights) == 1
    assert flights[0].exceeds_range
    assert flights[0].battery_usage_pct == 100.0
    assert flights[0].as_dict()["exceeds_range"] is True


def test_explicit_range_override() -> None:
    waypoints = _around_home()
    assert len(split_route_by_battery(waypoints, TINY, HOME, max_range=10_000.0)) == 1


def test_single_flight_covers_the_whole_tour() -> None:
    waypoints = _around_home()
    flights = single_flight(waypoints, TINY, HOME)

    assert len(flights) == 1
    assert flights[0].waypoint_ids == [wp.id for wp in waypoints]
    assert flights[0].exceeds_range


def test_time_and_battery_helpers() -> None:
    assert flight_time_minutes(900.0, TINY) == pytest.approx(1.5)
    assert battery_usage_percent(1.0, TINY) == pytest.approx(50.0)
    assert battery_usage_percent(10.0, TINY) == 100.0
