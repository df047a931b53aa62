"""Mini README: GeoJSON helper utilities for droneroute.

This module validates GeoJSON payloads and turns
Polygon/MultiPolygon features into shapely geometries. Keeping the logic
isolated avoids importing web framework dependencies when the DID resolver
or the restriction surface loader parse reference datasets.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Iterator, Mapping, Tuple, Union

from shapely.errors import GEOSException
from shapely.geometry import shape
from shapely.geometry.base import BaseGeometry

from ..logging_utils import get_logger
from ..models import SurveyPolygon

LOGGER = get_logger(__name__)

GeoJSONPayload = Union[str, bytes, Mapping[str, Any]]
POLYGON_TYPES = {"Polygon", "MultiPolygon"}


def load_geojson(payload: GeoJSONPayload) -> Dict[str, Any]:
    """Decode a GeoJSON document from text or return the mapping unchanged."""

    if isinstance(payload, (str, bytes)):
        try:
            decoded = json.loads(payload)
        except json.JSONDecodeError as error:
            raise ValueError("GeoJSON payload is invalid JSON") from error
    else:
        decoded = dict(payload)
    if not isinstance(decoded, dict):
        raise ValueError("GeoJSON payload must be an object")
    return decoded


def _geometry_of(geojson: Mapping[str, Any]) -> Mapping[str, Any]:
    if geojson.get("type") == "Feature":
        return geojson.get("geometry") or {}
    return geojson


def polygon_from_geojson(area_geojson: GeoJSONPayload, *, polygon_id: str = "polygon-1") -> SurveyPolygon:
    """Convert a Polygon geometry or Feature into a ``SurveyPolygon``."""

    geojson = load_geojson(area_geojson)
    geometry = _geometry_of(geojson)
    if geometry.get("type") != "Polygon":
        raise ValueError("Only polygon GeoJSON payloads are supported")
    coordinates = geometry.get("coordinates")
    if not coordinates or not coordinates[0]:
        raise ValueError("Polygon coordinates are required")
    properties = geojson.get("properties") or {}
    ring = [(float(point[0]), float(point[1])) for point in coordinates[0]]
    return SurveyPolygon(
        id=str(geojson.get("id") or properties.get("id") or polygon_id),
        ring=ring,
        name=str(properties.get("name", "")),
    )


def iter_polygon_features(
    collection: Mapping[str, Any],
) -> Iterator[Tuple[BaseGeometry, Dict[str, Any]]]:
    """Yield ``(geometry, properties)`` for every usable polygon feature.

    Features with missing, non-polygonal or unparsable geometries are skipped
    with a debug log rather than failing the whole collection.
    """

    for position, feature in enumerate(collection.get("features") or []):
        geometry_payload = (feature or {}).get("geometry")
        if not geometry_payload or geometry_payload.get("type") not in POLYGON_TYPES:
            continue
        try:
            geometry = shape(geometry_payload)
        except (GEOSException, ValueError, TypeError, KeyError, IndexError) as error:
            LOGGER.debug("Skipping feature %s with invalid geometry: %s", position, error)
            continue
        if geometry.is_empty:
            continue
        yield geometry, dict(feature.get("properties") or {})
