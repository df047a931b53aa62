"""Mini README: Multi-objective route optimiser.

Structure:
    * SegmentScorer - weighted segment score with a cached pairwise risk term.
    * nearest_neighbor_tour / two_opt_improve / route_distance - tour
      construction and refinement over a distance matrix.
    * find_optimal_start_point - try every start, keep the shortest tour.
    * RouteOptions / OptimizationResult - inputs and outputs of a run.
    * RouteOptimizer - orchestrates DID preload, ordering, battery splitting,
      restriction reporting, metrics and objective achievement.
    * format_distance / format_time - human readable helpers for the CLI.

Segment score (lower is better)::

    w.distance * km + w.time * minutes * 10
        + w.battery * battery_ratio * 100 + w.risk * risk * 50

``risk`` is evaluated at the segment midpoint: DID 0.3, airport 0.6,
prohibited 1.0, summed and capped at 1.0.

Optimal start selection is cubic in the number of waypoints; it suits survey
sized inputs (tens to a few hundred waypoints).
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional, Sequence, Tuple

import numpy as np

from ..airspace import check_route_restrictions
from ..drones import DroneProfile
from ..geo import midpoint, pairwise_distance_matrix
from ..logging_utils import get_logger
from ..models import LatLng, Restriction, Severity, Waypoint, ZoneKind
from .objectives import ObjectiveSpec, ObjectiveWeights, OptimizationObjective, resolve_objective
from .splitter import Flight, single_flight, split_route_by_battery

if TYPE_CHECKING:
    from ..context import PlanningContext

LOGGER = get_logger(__name__)

ALGORITHMS = ("nearest-neighbor", "2-opt")
DID_RISK = 0.3
AIRPORT_RISK = 0.6
PROHIBITED_RISK = 1.0
BASELINE_TIME_MIN = 60.0

CostFunction = Callable[[int, int], float]


# ----------------------------------------------------------------------
# Tour construction
# ----------------------------------------------------------------------
def build_distance_matrix(waypoints: Sequence[Waypoint]) -> np.ndarray:
    return pairwise_distance_matrix(waypoints)


def route_distance(route: Sequence[int], matrix: np.ndarray) -> float:
    """Open-path length of ``route`` (no return leg)."""

    return float(sum(matrix[a, b] for a, b in zip(route, route[1:])))


def nearest_neighbor_tour(size: int, start: int, cost: CostFunction) -> List[int]:
    """Greedy tour from ``start``; ties resolve to the lowest index."""

    if size <= 0:
        return []
    if size == 1:
        return [0]
    visited = [False] * size
    visited[start] = True
    route = [start]
    current = start
    for _ in range(size - 1):
        best_index = -1
        best_score = float("inf")
        for candidate in range(size):
            if visited[candidate]:
                continue
            score = cost(current, candidate)
            if score < best_score:
                best_score = score
                best_index = candidate
        visited[best_index] = True
        route.append(best_index)
        current = best_index
    return route


def two_opt_improve(
    route: Sequence[int],
    matrix: np.ndarray,
    *,
    cost: Optional[CostFunction] = None,
    max_passes: Optional[int] = None,
    epsilon: float = 1e-9,
) -> List[int]:
    """Open-path 2-opt: reverse ``route[i+1..j]`` while that shortens the path.

    The first element is never moved. When ``j`` is the last index there is
    no outgoing edge, so only the ``(i, i+1)`` edge is exchanged. ``cost``
    replaces the plain distance lookup for objective-aware refinement.
    """

    current = list(route)
    size = len(current)
    if size < 4:
        return current
    edge = cost or (lambda a, b: float(matrix[a, b]))

    passes = 0
    improved = True
    while improved:
        if max_passes is not None and passes >= max_passes:
            LOGGER.debug("2-opt stopped after %s passes", passes)
            break
        improved = False
        passes += 1
        for i in range(size - 2):
            for j in range(i + 2, size):
                has_next = j + 1 < size
                before = edge(current[i], current[i + 1]) + (
                    edge(current[j], current[j + 1]) if has_next else 0.0
                )
                after = edge(current[i], current[j]) + (
                    edge(current[i + 1], current[j + 1]) if has_next else 0.0
                )
                if before - after > epsilon:
                    current[i + 1 : j + 1] = reversed(current[i + 1 : j + 1])
                    improved = True
    return current


@dataclass(slots=True)
class OptimalStart:
    waypoint_id: str
    index: int
    lat: float
    lng: float
    reason: str
    estimated_total_distance: float = 0.0

    def as_dict(self) -> Dict[str, Any]:
        return {
            "waypoint_id": self.waypoint_id,
            "index": self.index,
            "lat": self.lat,
            "lng": self.lng,
            "reason": self.reason,
            "estimated_total_distance": self.estimated_total_distance,
        }


def find_optimal_start_point(
    waypoints: Sequence[Waypoint],
    matrix: np.ndarray,
    cost: Optional[CostFunction] = None,
) -> Optional[OptimalStart]:
    """Build a greedy tour from every start and keep the shortest one."""

    if not waypoints:
        return None
    if len(waypoints) == 1:
        only = waypoints[0]
        return OptimalStart(only.id, 0, only.lat, only.lng, "only waypoint")
    scorer = cost or (lambda a, b: float(matrix[a, b]))
    best_index = 0
    best_distance = float("inf")
    for start in range(len(waypoints)):
        total = route_distance(nearest_neighbor_tour(len(waypoints), start, scorer), matrix)
        if total < best_distance:
            best_distance = total
            best_index = start
    best = waypoints[best_index]
    return OptimalStart(
        best.id, best_index, best.lat, best.lng, "shortest total route distance", best_distance
    )


# ----------------------------------------------------------------------
# Scoring
# ----------------------------------------------------------------------
class SegmentScorer:
    """Weighted segment cost with a lazily filled, symmetric risk cache."""

    def __init__(
        self,
        waypoints: Sequence[Waypoint],
        matrix: np.ndarray,
        weights: ObjectiveWeights,
        drone: DroneProfile,
        risk: Callable[[LatLng], float],
    ) -> None:
        self.waypoints = waypoints
        self.matrix = matrix
        self.weights = weights
        self.drone = drone
        self._risk = risk
        self._risk_cache: Dict[Tuple[int, int], float] = {}

    def risk(self, a: int, b: int) -> float:
        key = (a, b) if a <= b else (b, a)
        value = self._risk_cache.get(key)
        if value is None:
            value = self._risk(midpoint(self.waypoints[a], self.waypoints[b]))
            self._risk_cache[key] = value
        return value

    def __call__(self, a: int, b: int) -> float:
        distance = float(self.matrix[a, b])
        minutes = distance / self.drone.cruise_speed_mps / 60
        battery_ratio = minutes / self.drone.max_flight_time_min
        # Skip the midpoint lookup when risk carries no weight.
        risk = self.risk(a, b) if self.weights.risk else 0.0
        return (
            self.weights.distance * (distance / 1000)
            + self.weights.time * (minutes * 10)
            + self.weights.battery * (battery_ratio * 100)
            + self.weights.risk * (risk * 50)
        )


# ----------------------------------------------------------------------
# Results
# ----------------------------------------------------------------------
@dataclass(slots=True)
class RouteOptions:
    """Per-call overrides; ``None`` falls back to the context settings."""

    drone_id: Optional[str] = None
    home_point: Optional[LatLng] = None
    algorithm: Optional[str] = None
    check_regulations: Optional[bool] = None
    auto_split: Optional[bool] = None
    objective: ObjectiveSpec = None


@dataclass(slots=True)
class OptimizationResult:
    success: bool
    error: Optional[str] = None
    optimal_start: Optional[OptimalStart] = None
    home_point: Optional[LatLng] = None
    flights: List[Flight] = field(default_factory=list)
    total_distance: float = 0.0
    total_time: float = 0.0
    restrictions: List[Restriction] = field(default_factory=list)
    drone: Optional[DroneProfile] = None
    objective: Optional[OptimizationObjective] = None
    summary: Dict[str, Any] = field(default_factory=dict)
    metrics: Dict[str, Any] = field(default_factory=dict)
    objective_achievement: int = 0
    tradeoffs: List[Dict[str, Any]] = field(default_factory=list)
    ordered_waypoints: List[Waypoint] = field(default_factory=list)

    @classmethod
    def failure(cls, message: str) -> "OptimizationResult":
        LOGGER.info("Route optimisation not possible: %s", message)
        return cls(success=False, error=message)

    @property
    def total_flights(self) -> int:
        return len(self.flights)

    def as_dict(self) -> Dict[str, Any]:
        if not self.success:
            return {"success": False, "error": self.error}
        drone = self.drone
        return {
            "success": True,
            "optimal_start_point": self.optimal_start.as_dict() if self.optimal_start else None,
            "home_point": self.home_point.as_dict() if self.home_point else None,
            "flights": [flight.as_dict() for flight in self.flights],
            "total_flights": self.total_flights,
            "total_distance": self.total_distance,
            "total_time": self.total_time,
            "restrictions": [restriction.as_dict() for restriction in self.restrictions],
            "drone": {
                "id": drone.id,
                "name": drone.name,
                "max_flight_time": drone.max_flight_time_min,
                "cruise_speed": drone.cruise_speed_mps,
                "max_range": drone.max_range_m,
            }
            if drone
            else None,
            "objective": self.objective.id if self.objective else None,
            "summary": dict(self.summary),
            "metrics": dict(self.metrics),
            "objective_achievement": self.objective_achievement,
            "tradeoffs": list(self.tradeoffs),
            "ordered_waypoints": [
                {**waypoint.as_dict(), "optimized_order": order}
                for order, waypoint in enumerate(self.ordered_waypoints, start=1)
            ],
        }


def _risk_label(score: float) -> str:
    if score > 0.7:
        return "high"
    if score > 0.3:
        return "medium"
    return "low"


def objective_achievement(
    objective_id: str,
    *,
    improvement: float,
    total_distance_m: float,
    total_time_min: float,
    total_battery_pct: float,
    restriction_count: int,
) -> int:
    """Heuristic 0-100 score of how well the plan meets its objective."""

    safety = max(0.0, 100 - restriction_count * 5)
    battery = max(0.0, 100 - total_battery_pct)
    if objective_id == "shortest_distance":
        value = min(100.0, improvement * 1.5)
    elif objective_id == "fastest_time":
        value = 100 - (total_time_min / BASELINE_TIME_MIN) * 100
    elif objective_id == "safest_route":
        value = safety
    elif objective_id == "battery_efficient":
        value = battery
    else:
        distance_eff = max(0.0, 100 - (total_distance_m / 1000 / 50) * 100)
        time_eff = max(0.0, 100 - (total_time_min * 10 / 600) * 100)
        value = (distance_eff + time_eff + battery + safety) / 4
    return int(round(min(100.0, max(0.0, value))))


def tradeoffs_for(improvement: float, total_time_min: float, restriction_count: int) -> List[Dict[str, Any]]:
    """Explain what the distance gain cost elsewhere."""

    tradeoffs: List[Dict[str, Any]] = []
    if improvement <= 0:
        return tradeoffs
    if total_time_min > BASELINE_TIME_MIN:
        tradeoffs.append(
            {
                "gain": {"metric": "distance", "change": improvement},
                "cost": {"metric": "time", "change": round((total_time_min - BASELINE_TIME_MIN) / 6)},
            }
        )
    if restriction_count > 2:
        tradeoffs.append(
            {
                "gain": {"metric": "distance", "change": improvement},
                "cost": {"metric": "safety", "change": -(restriction_count * 10)},
            }
        )
    return tradeoffs


# ----------------------------------------------------------------------
# Orchestration
# ----------------------------------------------------------------------
class RouteOptimizer:
    """Order waypoints into battery-feasible flights for one context."""

    def __init__(self, context: "PlanningContext") -> None:
        self.context = context

    @property
    def settings(self):
        return self.context.settings

    def segment_risk(self, position: LatLng) -> float:
        """Midpoint risk in [0, 1]; DID status is read from the cache."""

        risk = 0.0
        if self.context.resolver.check_did_area_sync(position.lat, position.lng).is_did:
            risk += DID_RISK
        kinds = {zone.kind for zone, _ in self.context.index.restrictions_at(position.lat, position.lng)}
        if kinds & {ZoneKind.AIRPORT, ZoneKind.MILITARY, ZoneKind.HELIPORT}:
            risk += AIRPORT_RISK
        if ZoneKind.PROHIBITED in kinds:
            risk += PROHIBITED_RISK
        return min(risk, 1.0)

    def _resolve(self, options: Optional[RouteOptions]) -> RouteOptions:
        options = options or RouteOptions()
        settings = self.settings
        return RouteOptions(
            drone_id=options.drone_id or settings.selected_drone_id,
            home_point=options.home_point,
            algorithm=options.algorithm or settings.optimization_algorithm,
            check_regulations=(
                settings.check_regulations
                if options.check_regulations is None
                else options.check_regulations
            ),
            auto_split=settings.auto_split if options.auto_split is None else options.auto_split,
            objective=options.objective if options.objective is not None else settings.objective,
        )

    async def optimize_route(
        self, waypoints: Sequence[Waypoint], options: Optional[RouteOptions] = None
    ) -> OptimizationResult:
        """Preload the DID data the scoring needs, then plan on a worker thread.

        Planning is CPU bound (optimal start selection is cubic), so it runs
        through ``asyncio.to_thread`` to keep the event loop responsive.
        """

        if not waypoints:
            return OptimizationResult.failure("No waypoints supplied")
        coordinates: List[Any] = list(waypoints)
        coordinates.extend(
            midpoint(a, b) for pos, a in enumerate(waypoints) for b in waypoints[pos + 1 :]
        )
        await self.context.resolver.preload(coordinates)
        return await asyncio.to_thread(self.plan, waypoints, options)

    def plan(
        self, waypoints: Sequence[Waypoint], options: Optional[RouteOptions] = None
    ) -> OptimizationResult:
        """Synchronous planning core; DID answers come from the resolver cache."""

        if not waypoints:
            return OptimizationResult.failure("No waypoints supplied")
        ids = [waypoint.id for waypoint in waypoints]
        if len(set(ids)) != len(ids):
            return OptimizationResult.failure("Waypoint ids must be unique")
        opts = self._resolve(options)
        if opts.algorithm not in ALGORITHMS:
            return OptimizationResult.failure(f"Unknown algorithm '{opts.algorithm}'")
        try:
            drone = self.context.catalog.get(opts.drone_id)
        except KeyError:
            return OptimizationResult.failure(f"Unknown drone '{opts.drone_id}'")
        try:
            objective = resolve_objective(opts.objective)
        except ValueError as error:
            return OptimizationResult.failure(str(error))

        matrix = build_distance_matrix(waypoints)
        scorer = SegmentScorer(waypoints, matrix, objective.weights, drone, self.segment_risk)
        start = find_optimal_start_point(waypoints, matrix, scorer)
        home = opts.home_point or LatLng(start.lat, start.lng)

        route = nearest_neighbor_tour(len(waypoints), start.index, scorer)
        if opts.algorithm == "2-opt":
            route = two_opt_improve(
                route,
                matrix,
                cost=scorer if self.settings.objective_aware_two_opt else None,
            )
        ordered = [waypoints[position] for position in route]

        if opts.auto_split:
            flights = split_route_by_battery(ordered, drone, home)
        else:
            flights = single_flight(ordered, drone, home)

        restrictions: List[Restriction] = []
        if opts.check_regulations:
            restrictions = check_route_restrictions(
                self.context.index, ordered, self.context.resolver
            )
            for flight in flights:
                members = set(flight.waypoint_ids)
                flight.restrictions = [item for item in restrictions if item.waypoint_id in members]

        total_distance = sum(flight.total_distance for flight in flights)
        total_time = sum(flight.estimated_time_min for flight in flights)
        total_battery = sum(flight.battery_usage_pct for flight in flights)

        original_distance = route_distance(list(range(len(waypoints))), matrix)
        optimized_distance = route_distance(route, matrix)
        improvement = (
            round((1 - optimized_distance / original_distance) * 100) if original_distance > 0 else 0
        )

        weighted = sum(
            3 if item.severity is Severity.CRITICAL else 2 if item.severity is Severity.HIGH else 1
            for item in restrictions
        )
        risk_score = min(weighted / 10, 1.0)
        metrics = {
            "distance": total_distance,
            "time": total_time,
            "battery_usage": total_battery,
            "risk_score": risk_score,
            "risk_label": _risk_label(risk_score),
            "distance_score": total_distance / 1000,
            "time_score": total_time * 10,
            "battery_score": total_battery / 100,
        }
        summary = {
            "improvement": improvement,
            "battery_changes": len(flights) - 1,
            "warnings": sum(
                1 for item in restrictions if item.severity in (Severity.HIGH, Severity.CRITICAL)
            ),
            "algorithm": opts.algorithm,
        }
        LOGGER.info(
            "Optimised %s waypoints into %s flights (%.0fm, %s%% shorter)",
            len(waypoints),
            len(flights),
            total_distance,
            improvement,
        )
        return OptimizationResult(
            success=True,
            optimal_start=start,
            home_point=home,
            flights=flights,
            total_distance=total_distance,
            total_time=total_time,
            restrictions=restrictions,
            drone=drone,
            objective=objective,
            summary=summary,
            metrics=metrics,
            objective_achievement=objective_achievement(
                objective.id,
                improvement=improvement,
                total_distance_m=total_distance,
                total_time_min=total_time,
                total_battery_pct=total_battery,
                restriction_count=len(restrictions),
            ),
            tradeoffs=tradeoffs_for(improvement, total_time, len(restrictions)),
            ordered_waypoints=ordered,
        )


def format_distance(meters: float) -> str:
    if meters >= 1000:
        return f"{meters / 1000:.1f}km"
    return f"{round(meters)}m"


def format_time(minutes: float) -> str:
    if minutes >= 60:
        hours = int(minutes // 60)
        return f"{hours}h {round(minutes % 60)}min"
    return f"{round(minutes)}min"
