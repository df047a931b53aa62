"""Mini README: Survey waypoint generation from polygons.

Structure:
    * WaypointPlanner - turns ``SurveyPolygon`` rings into vertex waypoints and
      optional interior grid waypoints.

Grid waypoints follow a lawnmower sweep over the polygon's bounding box at a
metre spacing and keep only points inside the ring. Waypoint ids are derived
from the polygon id (``<polygon>-v<n>`` for vertices, ``<polygon>-g<n>`` for
grid points) so repeated runs are reproducible.
"""

from __future__ import annotations

import math
from typing import Iterable, List, Sequence

from ..geo import METRES_PER_DEGREE, bounding_box, point_in_polygon, polygon_area_m2
from ..logging_utils import get_logger
from ..models import SurveyPolygon, Waypoint

LOGGER = get_logger(__name__)


def _frange(start: float, stop: float, step: float) -> Iterable[float]:
    """Yield a range of floats inclusive of the stop boundary."""

    count = int(math.floor((stop - start) / step + 1e-9))
    for position in range(count + 1):
        yield round(start + position * step, 8)


class WaypointPlanner:
    """Generate survey waypoints for polygons."""

    def __init__(self, *, grid_spacing_m: float = 50.0, max_grid_points: int = 5000) -> None:
        if grid_spacing_m <= 0:
            raise ValueError("Grid spacing must be positive")
        self.grid_spacing_m = grid_spacing_m
        self.max_grid_points = max_grid_points
        LOGGER.debug("Initialised WaypointPlanner with spacing=%sm", grid_spacing_m)

    def polygon_to_waypoints(self, polygon: SurveyPolygon) -> List[Waypoint]:
        """Vertex waypoints in ring order; the closing vertex is dropped."""

        return [
            Waypoint(
                id=f"{polygon.id}-v{position}",
                lat=float(lat),
                lng=float(lng),
                index=position,
                polygon_id=polygon.id,
            )
            for position, (lng, lat) in enumerate(polygon.vertices(), start=1)
        ]

    def grid_waypoints(self, polygon: SurveyPolygon) -> List[Waypoint]:
        """Lawnmower grid inside the polygon at ``grid_spacing_m``."""

        if len(polygon.vertices()) < 3:
            return []
        min_lng, min_lat, max_lng, max_lat = bounding_box(polygon.ring)
        mid_lat = (min_lat + max_lat) / 2
        lat_step = self.grid_spacing_m / METRES_PER_DEGREE
        lng_step = self.grid_spacing_m / (METRES_PER_DEGREE * max(math.cos(math.radians(mid_lat)), 1e-6))

        estimated = ((max_lat - min_lat) / lat_step + 1) * ((max_lng - min_lng) / lng_step + 1)
        if estimated > self.max_grid_points:
            LOGGER.warning(
                "Grid for polygon %s would hold ~%d points (limit %d); skipping",
                polygon.id,
                estimated,
                self.max_grid_points,
            )
            return []

        rings = [polygon.ring]
        waypoints: List[Waypoint] = []
        reverse = False
        for lat in _frange(min_lat, max_lat, lat_step):
            longitudes = list(_frange(min_lng, max_lng, lng_step))
            if reverse:
                longitudes.reverse()
            reverse = not reverse
            for lng in longitudes:
                if not point_in_polygon(lat, lng, rings):
                    continue
                position = len(waypoints) + 1
                waypoints.append(
                    Waypoint(
                        id=f"{polygon.id}-g{position}",
                        lat=lat,
                        lng=lng,
                        index=position,
                        polygon_id=polygon.id,
                    )
                )
        LOGGER.info(
            "Generated %s grid waypoints for polygon %s (%.0f m2)",
            len(waypoints),
            polygon.id,
            polygon_area_m2(polygon.ring),
        )
        return waypoints

    def generate_all_waypoints(
        self, polygons: Sequence[SurveyPolygon], *, include_grid: bool = False
    ) -> List[Waypoint]:
        """Vertices (and optionally grids) for every polygon, numbered globally."""

        generated: List[Waypoint] = []
        for polygon in polygons:
            batch = self.polygon_to_waypoints(polygon)
            if include_grid:
                batch.extend(self.grid_waypoints(polygon))
            generated.extend(batch)
        return [
            Waypoint(
                id=waypoint.id,
                lat=waypoint.lat,
                lng=waypoint.lng,
                index=position,
                polygon_id=waypoint.polygon_id,
                elevation=waypoint.elevation,
            )
            for position, waypoint in enumerate(generated, start=1)
        ]
