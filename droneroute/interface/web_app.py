"""Mini README: FastAPI service exposing the route engine.

Structure:
    * create_application - application factory wiring JSON routes to one
      ``PlanningContext``.

Routes:
    POST /optimize-route      order waypoints into battery-feasible flights
    POST /optimization-plan   gap analysis with corrective positions
    POST /restrictions        restricted zones touched by waypoints
    POST /path-collision      restricted zones crossed by flight legs
    GET  /did-check           DID membership for one coordinate
    GET  /drones              drone catalog
    GET  /objectives          optimisation objective presets

Request bodies are validated by pydantic (HTTP 422 on malformed input);
unknown drones answer HTTP 404.
"""

from __future__ import annotations

from typing import Optional

from fastapi import FastAPI, HTTPException, Query
from fastapi.responses import JSONResponse

from ..airspace import check_all_waypoints_restrictions, check_flight_path_collision
from ..analysis import GapAnalyzer
from ..context import PlanningContext
from ..logging_utils import get_logger
from ..route_planning import OBJECTIVES, RouteOptimizer
from .schemas import OptimizationPlanRequest, OptimizeRouteRequest, WaypointsRequest

LOGGER = get_logger(__name__)


def create_application(context: Optional[PlanningContext] = None) -> FastAPI:
    """Create the FastAPI application bound to ``context``."""

    context = context or PlanningContext.from_settings()
    app = FastAPI(
        title="Drone Route Planner",
        version="0.3.0",
        debug=context.settings.environment != "production",
    )
    optimizer = RouteOptimizer(context)
    analyzer = GapAnalyzer(context)
    app.state.context = context

    @app.post("/optimize-route")
    async def optimize_route(request: OptimizeRouteRequest) -> JSONResponse:
        """Return flights, metrics and restrictions for the waypoints."""

        if request.drone_id and request.drone_id not in context.catalog:
            raise HTTPException(status_code=404, detail=f"Unknown drone '{request.drone_id}'")
        waypoints = [item.to_waypoint() for item in request.waypoints]
        result = await optimizer.optimize_route(waypoints, request.to_options())
        LOGGER.info(
            "Optimise request with %s waypoints -> success=%s", len(waypoints), result.success
        )
        return JSONResponse(result.as_dict())

    @app.post("/optimization-plan")
    async def optimization_plan(request: OptimizationPlanRequest) -> JSONResponse:
        """Analyse waypoints and polygons and propose safer positions."""

        waypoints = [item.to_waypoint() for item in request.waypoints]
        polygons = [item.to_polygon() for item in request.polygons]
        settings = context.settings
        did_context = None
        if request.include_did and (settings.did_avoidance_mode or settings.did_warning_only_mode):
            did_context = await context.resolver.check_all_waypoints_did(waypoints)
        plan = analyzer.generate_optimization_plan(polygons, waypoints, did_context)
        payload = plan.as_dict()
        payload["did_context"] = did_context.as_dict() if did_context else None
        return JSONResponse(payload)

    @app.post("/restrictions")
    async def restrictions(request: WaypointsRequest) -> JSONResponse:
        waypoints = [item.to_waypoint() for item in request.waypoints]
        found = check_all_waypoints_restrictions(context.index, waypoints)
        return JSONResponse({"restrictions": [item.as_dict() for item in found]})

    @app.post("/path-collision")
    async def path_collision(request: WaypointsRequest) -> JSONResponse:
        waypoints = [item.to_waypoint() for item in request.waypoints]
        return JSONResponse(check_flight_path_collision(context.index, waypoints).as_dict())

    @app.get("/did-check")
    async def did_check(
        lat: float = Query(..., ge=-90, le=90),
        lng: float = Query(..., ge=-180, le=180),
    ) -> JSONResponse:
        result = await context.resolver.check_did_area(lat, lng)
        return JSONResponse(result.as_dict())

    @app.get("/drones")
    async def drones() -> JSONResponse:
        return JSONResponse(
            {
                "default": context.settings.selected_drone_id,
                "drones": [profile.as_dict() for profile in context.catalog.profiles()],
            }
        )

    @app.get("/objectives")
    async def objectives() -> JSONResponse:
        return JSONResponse({"objectives": [objective.as_dict() for objective in OBJECTIVES]})

    return app
