"""Mini README: Route planning subsystem.

Exports the waypoint planner, optimisation objectives, the multi-objective
route optimiser and the battery-constrained flight splitter.
"""

from .objectives import OBJECTIVES, ObjectiveWeights, OptimizationObjective, get_objective, resolve_objective
from .optimizer import (
    OptimizationResult,
    RouteOptimizer,
    RouteOptions,
    build_distance_matrix,
    find_optimal_start_point,
    format_distance,
    format_time,
    nearest_neighbor_tour,
    route_distance,
    two_opt_improve,
)
from .planner import WaypointPlanner
from .splitter import Flight, split_route_by_battery

__all__ = [
    "OBJECTIVES",
    "Flight",
    "ObjectiveWeights",
    "OptimizationObjective",
    "OptimizationResult",
    "RouteOptimizer",
    "RouteOptions",
    "WaypointPlanner",
    "build_distance_matrix",
    "find_optimal_start_point",
    "format_distance",
    "format_time",
    "get_objective",
    "nearest_neighbor_tour",
    "resolve_objective",
    "route_distance",
    "split_route_by_battery",
    "two_opt_improve",
]
