"""Mini README: Waypoint and polygon gap analysis."""

from .gaps import (
    Gap,
    GapAnalyzer,
    Issue,
    OptimizationPlan,
    PolygonAnalysis,
    WaypointAnalysis,
    generate_optimization_plan,
)

__all__ = [
    "Gap",
    "GapAnalyzer",
    "Issue",
    "OptimizationPlan",
    "PolygonAnalysis",
    "WaypointAnalysis",
    "generate_optimization_plan",
]
