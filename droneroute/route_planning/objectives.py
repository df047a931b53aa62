"""Mini README: Optimisation objectives for multi-objective route scoring.

Each objective is a weight vector over distance, time, battery and risk used
by the nearest-neighbour construction. ``resolve_objective`` accepts a preset
identifier, a custom ``ObjectiveWeights`` or a mapping of weights; unknown
identifiers fall back to the balanced preset.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Union

from ..logging_utils import get_logger

LOGGER = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class ObjectiveWeights:
    distance: float
    time: float
    battery: float
    risk: float

    def __post_init__(self) -> None:
        for name in ("distance", "time", "battery", "risk"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"Objective weight '{name}' must be within [0, 1], got {value}")

    def as_dict(self) -> Dict[str, float]:
        return {
            "distance": self.distance,
            "time": self.time,
            "battery": self.battery,
            "risk": self.risk,
        }


@dataclass(frozen=True, slots=True)
class OptimizationObjective:
    id: str
    name: str
    description: str
    weights: ObjectiveWeights
    is_default: bool = False

    def as_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "weights": self.weights.as_dict(),
            "is_default": self.is_default,
        }


OBJECTIVES: List[OptimizationObjective] = [
    OptimizationObjective(
        "balanced",
        "Balanced",
        "Trade distance, time, battery and safety off against each other",
        ObjectiveWeights(distance=0.4, time=0.3, battery=0.3, risk=0.5),
        is_default=True,
    ),
    OptimizationObjective(
        "shortest_distance",
        "Shortest distance",
        "Minimise total flight distance",
        ObjectiveWeights(distance=1.0, time=0.2, battery=0.3, risk=0.3),
    ),
    OptimizationObjective(
        "fastest_time",
        "Fastest time",
        "Minimise total flight time",
        ObjectiveWeights(distance=0.5, time=1.0, battery=0.4, risk=0.3),
    ),
    OptimizationObjective(
        "safest_route",
        "Safest route",
        "Keep clear of DIDs, airports and prohibited areas",
        ObjectiveWeights(distance=0.2, time=0.2, battery=0.2, risk=1.0),
    ),
    OptimizationObjective(
        "battery_efficient",
        "Battery efficient",
        "Minimise battery consumption",
        ObjectiveWeights(distance=0.5, time=0.4, battery=1.0, risk=0.3),
    ),
]

_BY_ID: Dict[str, OptimizationObjective] = {objective.id: objective for objective in OBJECTIVES}
DEFAULT_OBJECTIVE: OptimizationObjective = next(item for item in OBJECTIVES if item.is_default)

ObjectiveSpec = Union[None, str, ObjectiveWeights, Mapping[str, float], OptimizationObjective]


def get_objective(objective_id: Optional[str]) -> OptimizationObjective:
    """Return the preset for ``objective_id`` or the default one."""

    objective = _BY_ID.get(objective_id or "")
    if objective is None:
        if objective_id:
            LOGGER.debug("Unknown objective '%s', using %s", objective_id, DEFAULT_OBJECTIVE.id)
        return DEFAULT_OBJECTIVE
    return objective


def resolve_objective(requested: ObjectiveSpec) -> OptimizationObjective:
    """Normalise any accepted objective description into an objective."""

    if isinstance(requested, OptimizationObjective):
        return requested
    if isinstance(requested, ObjectiveWeights):
        return OptimizationObjective("custom", "Custom", "User supplied weights", requested)
    if isinstance(requested, Mapping):
        weights = ObjectiveWeights(
            distance=float(requested.get("distance", 0.0)),
            time=float(requested.get("time", 0.0)),
            battery=float(requested.get("battery", 0.0)),
            risk=float(requested.get("risk", 0.0)),
        )
        return OptimizationObjective("custom", "Custom", "User supplied weights", weights)
    return get_objective(requested)
