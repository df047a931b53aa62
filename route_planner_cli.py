"""Mini README: Command line entry point for the drone route planner.

Commands:
    * serve    - start the FastAPI service with uvicorn.
    * optimize - order the waypoints of a JSON file into flights.
    * plan     - run the gap analysis on a JSON file.

Input files hold either a list of waypoints or an object with ``waypoints``
and optional ``polygons`` (``{"id", "ring": [[lng, lat], ...]}``) or a GeoJSON
``area`` polygon. Settings come from ``DRONEROUTE_`` environment variables.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import typer
import uvicorn

from droneroute.analysis import GapAnalyzer
from droneroute.configuration import get_settings
from droneroute.context import PlanningContext
from droneroute.logging_utils import configure_logging
from droneroute.models import LatLng, SurveyPolygon, Waypoint
from droneroute.route_planning import RouteOptions, RouteOptimizer, WaypointPlanner, format_distance, format_time
from droneroute.utils import polygon_from_geojson

cli = typer.Typer(help="Plan battery-feasible drone survey routes around restricted airspace.")


def _load_inputs(path: Path) -> Tuple[List[Waypoint], List[SurveyPolygon]]:
    try:
        payload: Any = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as error:
        raise typer.BadParameter(f"Cannot read {path}: {error}") from error
    if isinstance(payload, list):
        payload = {"waypoints": payload}
    polygons = [
        SurveyPolygon(id=str(item["id"]), ring=[tuple(point) for point in item["ring"]], name=item.get("name", ""))
        for item in payload.get("polygons", [])
    ]
    if payload.get("area"):
        polygons.append(polygon_from_geojson(payload["area"], polygon_id=f"area-{len(polygons) + 1}"))
    waypoints = [
        Waypoint.from_mapping(item, position=position)
        for position, item in enumerate(payload.get("waypoints", []))
    ]
    if not waypoints and polygons:
        waypoints = WaypointPlanner().generate_all_waypoints(polygons)
    return waypoints, polygons


def _emit(payload: Dict[str, Any]) -> None:
    typer.echo(json.dumps(payload, indent=2, ensure_ascii=False))


@cli.command()
def serve(
    host: str = typer.Option(None, help="Host interface to bind."),
    port: int = typer.Option(None, help="Port to listen on."),
    production: bool = typer.Option(
        False, help="Use production server settings (disable auto-reload)."
    ),
) -> None:
    """Start the HTTP service using uvicorn."""

    settings = get_settings()
    effective_host = host or settings.interface_host
    effective_port = port or settings.interface_port
    configure_logging(settings.log_level)

    # Browsers cannot open the 0.0.0.0 / :: wildcard addresses.
    browser_host = "127.0.0.1" if effective_host in {"0.0.0.0", "::"} else effective_host
    typer.echo(
        f"Starting route planner on {effective_host}:{effective_port}.\n"
        f"API docs at http://{browser_host}:{effective_port}/docs"
    )
    uvicorn.run(
        "droneroute.interface.web_app:create_application",
        host=effective_host,
        port=effective_port,
        factory=True,
        reload=not production,
    )


@cli.command()
def optimize(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSON waypoint file."),
    drone: Optional[str] = typer.Option(None, help="Drone identifier from the catalog."),
    algorithm: Optional[str] = typer.Option(None, help="'nearest-neighbor' or '2-opt'."),
    objective: Optional[str] = typer.Option(None, help="Objective preset identifier."),
    home_lat: Optional[float] = typer.Option(None, help="Home point latitude."),
    home_lng: Optional[float] = typer.Option(None, help="Home point longitude."),
    no_split: bool = typer.Option(False, "--no-split", help="Fly the whole tour as one flight."),
    as_json: bool = typer.Option(False, "--json", help="Print the full result as JSON."),
) -> None:
    """Optimise the visiting order and split it into flights."""

    settings = get_settings()
    configure_logging(settings.log_level)
    waypoints, _ = _load_inputs(file)
    home = LatLng(home_lat, home_lng) if home_lat is not None and home_lng is not None else None
    context = PlanningContext.from_settings(settings)
    options = RouteOptions(
        drone_id=drone,
        home_point=home,
        algorithm=algorithm,
        auto_split=False if no_split else None,
        objective=objective,
    )
    result = asyncio.run(RouteOptimizer(context).optimize_route(waypoints, options))
    if as_json or not result.success:
        _emit(result.as_dict())
        if not result.success:
            raise typer.Exit(code=1)
        return

    typer.echo(
        f"{len(waypoints)} waypoints -> {result.total_flights} flight(s), "
        f"{format_distance(result.total_distance)}, {format_time(result.total_time)} "
        f"({result.summary['improvement']}% shorter than input order)"
    )
    for flight in result.flights:
        marker = " [exceeds range]" if flight.exceeds_range else ""
        typer.echo(
            f"  Flight {flight.flight_number}: {len(flight.waypoints)} waypoints, "
            f"{format_distance(flight.total_distance)}, {format_time(flight.estimated_time_min)}, "
            f"battery {flight.battery_usage_pct:.0f}%{marker}"
        )
    for restriction in result.restrictions:
        typer.echo(f"  ! {restriction.severity.value}: {restriction.name} ({restriction.kind.value})")
    typer.echo(f"Objective achievement: {result.objective_achievement}%")


@cli.command()
def plan(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSON waypoint file."),
    as_json: bool = typer.Option(False, "--json", help="Print the full plan as JSON."),
) -> None:
    """Report waypoint and polygon gaps with recommended positions."""

    settings = get_settings()
    configure_logging(settings.log_level)
    waypoints, polygons = _load_inputs(file)
    context = PlanningContext.from_settings(settings)
    did_context = None
    if settings.did_avoidance_mode or settings.did_warning_only_mode:
        did_context = asyncio.run(context.resolver.check_all_waypoints_did(waypoints))
    result = GapAnalyzer(context).generate_optimization_plan(polygons, waypoints, did_context)
    if as_json:
        _emit(result.as_dict())
        return
    typer.echo(result.summary)
    for gap in result.gaps:
        issues = ", ".join(f"{issue.type}:{issue.zone_name}" for issue in gap.issues)
        target = (
            f"move {gap.move_distance:.0f}m to {gap.recommended.lat:.6f},{gap.recommended.lng:.6f}"
            if gap.recommended
            else "no safe position found"
        )
        typer.echo(f"  Waypoint {gap.waypoint_id}: {issues} -> {target}")
    for action in result.actions:
        typer.echo(f"  - {action}")


if __name__ == "__main__":
    cli()
