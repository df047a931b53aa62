"""Mini README: Pydantic request models for the HTTP surface.

Each model converts itself into the engine's dataclasses (``to_waypoint``,
``to_polygon``, ``to_options``) so the route handlers stay thin.
"""

from __future__ import annotations

from typing import List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, Field, field_validator

from ..models import LatLng, SurveyPolygon, Waypoint
from ..route_planning import ObjectiveWeights, RouteOptions


class CoordinateModel(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)

    def to_latlng(self) -> LatLng:
        return LatLng(lat=self.lat, lng=self.lng)


class WaypointModel(CoordinateModel):
    id: str = Field(..., min_length=1)
    index: int = Field(0, ge=0)
    polygon_id: Optional[str] = None
    elevation: Optional[float] = None
    modified: bool = False

    def to_waypoint(self) -> Waypoint:
        return Waypoint(
            id=self.id,
            lat=self.lat,
            lng=self.lng,
            index=self.index,
            polygon_id=self.polygon_id,
            elevation=self.elevation,
            modified=self.modified,
        )


class PolygonModel(BaseModel):
    id: str = Field(..., min_length=1)
    name: str = ""
    ring: List[Tuple[float, float]] = Field(
        ..., description="Closed ring of [lng, lat] pairs (first equals last)."
    )

    @field_validator("ring")
    @classmethod
    def _closed_ring(cls, value: List[Tuple[float, float]]) -> List[Tuple[float, float]]:
        if len(value) < 4 or tuple(value[0]) != tuple(value[-1]):
            raise ValueError("ring must be closed and hold at least three distinct vertices")
        return value

    def to_polygon(self) -> SurveyPolygon:
        return SurveyPolygon(id=self.id, ring=[tuple(point) for point in self.ring], name=self.name)


class WeightsModel(BaseModel):
    distance: float = Field(..., ge=0, le=1)
    time: float = Field(..., ge=0, le=1)
    battery: float = Field(..., ge=0, le=1)
    risk: float = Field(..., ge=0, le=1)

    def to_weights(self) -> ObjectiveWeights:
        return ObjectiveWeights(
            distance=self.distance, time=self.time, battery=self.battery, risk=self.risk
        )


class OptimizeRouteRequest(BaseModel):
    waypoints: List[WaypointModel]
    drone_id: Optional[str] = None
    home_point: Optional[CoordinateModel] = None
    algorithm: Optional[Literal["nearest-neighbor", "2-opt"]] = None
    check_regulations: Optional[bool] = None
    auto_split: Optional[bool] = None
    objective: Optional[Union[str, WeightsModel]] = None

    def to_options(self) -> RouteOptions:
        objective = self.objective
        if isinstance(objective, WeightsModel):
            objective = objective.to_weights()
        return RouteOptions(
            drone_id=self.drone_id,
            home_point=self.home_point.to_latlng() if self.home_point else None,
            algorithm=self.algorithm,
            check_regulations=self.check_regulations,
            auto_split=self.auto_split,
            objective=objective,
        )


class OptimizationPlanRequest(BaseModel):
    waypoints: List[WaypointModel] = Field(default_factory=list)
    polygons: List[PolygonModel] = Field(default_factory=list)
    include_did: bool = Field(
        True, description="Resolve DID membership before analysing the waypoints."
    )


class WaypointsRequest(BaseModel):
    waypoints: List[WaypointModel]
