"""Mini README: Geodesic primitives shared by every planning subsystem.

Exposes great-circle distances, bearing/destination helpers, local metre
offsets, point-in-polygon ray casting and polygon overlap areas. See
``primitives`` for details.
"""

from .primitives import (
    EARTH_RADIUS_M,
    METRES_PER_DEGREE,
    bounding_box,
    circle_ring,
    destination_point,
    distance_between,
    distance_meters,
    geometry_area_m2,
    initial_bearing,
    local_offset,
    midpoint,
    offset_position,
    pairwise_distance_matrix,
    point_in_polygon,
    point_in_ring,
    polygon_area_m2,
    polygon_intersection_area,
    ring_to_polygon,
)

__all__ = [
    "EARTH_RADIUS_M",
    "METRES_PER_DEGREE",
    "bounding_box",
    "circle_ring",
    "destination_point",
    "distance_between",
    "distance_meters",
    "geometry_area_m2",
    "initial_bearing",
    "local_offset",
    "midpoint",
    "offset_position",
    "pairwise_distance_matrix",
    "point_in_polygon",
    "point_in_ring",
    "polygon_area_m2",
    "polygon_intersection_area",
    "ring_to_polygon",
]
