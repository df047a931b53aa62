"""Mini README: Utility helpers for droneroute.

Exports GeoJSON parsing helpers shared by the DID resolver, the restriction
surface loader and the HTTP surface.
"""

from .geojson import iter_polygon_features, polygon_from_geojson

__all__ = ["iter_polygon_features", "polygon_from_geojson"]
