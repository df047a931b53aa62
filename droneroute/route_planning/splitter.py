"""Mini README: Battery-constrained flight splitting.

``split_route_by_battery`` walks an ordered tour and opens a new flight from
the home point whenever visiting the next waypoint and flying home would
exceed the drone's range. Flights are contiguous slices of the tour. A
waypoint whose round trip alone exceeds the range still gets its own flight,
flagged with ``exceeds_range``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from ..drones import DroneProfile
from ..geo import distance_between
from ..geo.primitives import HasPosition
from ..logging_utils import get_logger
from ..models import Restriction, Waypoint

LOGGER = get_logger(__name__)


def flight_time_minutes(distance_m: float, drone: DroneProfile) -> float:
    return distance_m / drone.cruise_speed_mps / 60


def battery_usage_percent(time_min: float, drone: DroneProfile) -> float:
    return min(100.0, time_min / drone.max_flight_time_min * 100)


@dataclass(slots=True)
class Flight:
    """One sortie: home, a contiguous slice of the tour, home again."""

    flight_number: int
    waypoints: List[Waypoint]
    segment_distances: List[float]
    return_distance: float
    total_distance: float
    estimated_time_min: float = 0.0
    battery_usage_pct: float = 0.0
    exceeds_range: bool = False
    restrictions: List[Restriction] = field(default_factory=list)

    @property
    def waypoint_ids(self) -> List[str]:
        return [waypoint.id for waypoint in self.waypoints]

    def as_dict(self) -> Dict[str, Any]:
        return {
            "flight_number": self.flight_number,
            "waypoints": [
                {**waypoint.as_dict(), "segment_distance": distance}
                for waypoint, distance in zip(self.waypoints, self.segment_distances)
            ],
            "total_distance": self.total_distance,
            "return_distance": self.return_distance,
            "estimated_time": self.estimated_time_min,
            "battery_usage": self.battery_usage_pct,
            "exceeds_range": self.exceeds_range,
            "restrictions": [restriction.as_dict() for restriction in self.restrictions],
        }


class _FlightBuilder:
    def __init__(self, drone: DroneProfile, home: HasPosition, max_range: float) -> None:
        self.drone = drone
        self.home = home
        self.max_range = max_range
        self.flights: List[Flight] = []
        self._reset()

    def _reset(self) -> None:
        self.waypoints: List[Waypoint] = []
        self.segments: List[float] = []
        self.accumulated = 0.0
        self.last: HasPosition = self.home

    def add(self, waypoint: Waypoint) -> None:
        segment = distance_between(self.last, waypoint)
        self.waypoints.append(waypoint)
        self.segments.append(segment)
        self.accumulated += segment
        self.last = waypoint

    def close(self) -> None:
        if not self.waypoints:
            return
        return_distance = distance_between(self.last, self.home)
        total = self.accumulated + return_distance
        time_min = flight_time_minutes(total, self.drone)
        flight = Flight(
            flight_number=len(self.flights) + 1,
            waypoints=self.waypoints,
            segment_distances=self.segments,
            return_distance=return_distance,
            total_distance=total,
            estimated_time_min=time_min,
            battery_usage_pct=battery_usage_percent(time_min, self.drone),
            exceeds_range=total > self.max_range,
        )
        if flight.exceeds_range:
            LOGGER.warning(
                "Flight %s needs %.0fm but range is %.0fm",
                flight.flight_number,
                total,
                self.max_range,
            )
        self.flights.append(flight)
        self._reset()


def split_route_by_battery(
    ordered: Sequence[Waypoint],
    drone: DroneProfile,
    home: HasPosition,
    *,
    max_range: Optional[float] = None,
) -> List[Flight]:
    """Partition ``ordered`` into range-feasible flights from ``home``."""

    limit = drone.max_range_m if max_range is None else max_range
    builder = _FlightBuilder(drone, home, limit)
    for waypoint in ordered:
        projected = (
            builder.accumulated
            + distance_between(builder.last, waypoint)
            + distance_between(waypoint, home)
        )
        if projected > limit and builder.waypoints:
            builder.close()
        builder.add(waypoint)
    builder.close()
    LOGGER.debug("Split %s waypoints into %s flights", len(ordered), len(builder.flights))
    return builder.flights


def single_flight(ordered: Sequence[Waypoint], drone: DroneProfile, home: HasPosition) -> List[Flight]:
    """Build one flight covering the whole tour (splitting disabled)."""

    builder = _FlightBuilder(drone, home, drone.max_range_m)
    for waypoint in ordered:
        builder.add(waypoint)
    builder.close()
    return builder.flights
