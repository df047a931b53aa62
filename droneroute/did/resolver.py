"""Mini README: Densely inhabited district (DID) resolver.

Structure:
    * DIDArea / DIDDataset - parsed polygons of one prefecture with an
      ``STRtree`` for point lookups.
    * DIDResult - answer for one coordinate.
    * DIDReport - batch answer for a waypoint set (the "DID context" consumed
      by the gap analyzer).
    * DIDResolver - lazy, cached, coalescing loader with bounded concurrency.

Lookup flow per coordinate: locate the prefecture, load (or reuse) its
dataset, then test containment. Missing prefectures and failed loads answer
``is_did=False`` with ``certainty="unknown"`` so callers can tell the fallback
apart from a confirmed negative. Failures are never cached; the next call
retries the fetch.

``preload`` is the batched entry point: it resolves every distinct prefecture
for a coordinate set and loads them concurrently, at most
``concurrency`` fetches at a time. The synchronous ``check_did_area_sync``
reads only the cache and never blocks.
"""

from __future__ import annotations

import asyncio
import weakref
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Set

from shapely.geometry import Point
from shapely.geometry.base import BaseGeometry
from shapely.strtree import STRtree

from ..geo.primitives import HasPosition
from ..logging_utils import get_logger
from ..models import LatLng, Waypoint
from ..utils.geojson import iter_polygon_features
from .prefectures import BoundingBoxLocator, Prefecture, PrefectureLocator
from .sources import DIDDatasetSource

LOGGER = get_logger(__name__)

DEFAULT_AREA_NAME = "Densely inhabited district"
AREA_NAME_PROPERTIES = ("CITYNAME", "CITY_NAME")


@dataclass(slots=True)
class DIDArea:
    name: str
    geometry: BaseGeometry
    centroid: Optional[LatLng]


@dataclass(slots=True)
class DIDDataset:
    """Immutable polygon collection for one prefecture."""

    prefecture: Prefecture
    areas: List[DIDArea]
    _tree: Optional[STRtree] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if self.areas:
            self._tree = STRtree([area.geometry for area in self.areas])

    @classmethod
    def from_geojson(cls, prefecture: Prefecture, payload: Mapping[str, Any]) -> "DIDDataset":
        if not isinstance(payload, Mapping) or payload.get("type") != "FeatureCollection":
            raise ValueError(f"DID dataset for {prefecture.name} is not a FeatureCollection")
        areas: List[DIDArea] = []
        for geometry, properties in iter_polygon_features(payload):
            name = next(
                (str(properties[key]) for key in AREA_NAME_PROPERTIES if properties.get(key)),
                DEFAULT_AREA_NAME,
            )
            centre = geometry.centroid
            centroid = None if centre.is_empty else LatLng(lat=centre.y, lng=centre.x)
            areas.append(DIDArea(name=name, geometry=geometry, centroid=centroid))
        return cls(prefecture=prefecture, areas=areas)

    def lookup(self, lat: float, lng: float) -> Optional[DIDArea]:
        """Return the first area (in dataset order) covering the point."""

        if self._tree is None:
            return None
        point = Point(lng, lat)
        for position in sorted(int(value) for value in self._tree.query(point)):
            area = self.areas[position]
            if area.geometry.covers(point):
                return area
        return None


@dataclass(slots=True)
class DIDResult:
    is_did: bool
    area_name: Optional[str] = None
    centroid: Optional[LatLng] = None
    certainty: str = "unknown"
    source: str = "fallback"
    prefecture_code: Optional[str] = None
    description: str = ""

    @classmethod
    def fallback(cls, prefecture_code: Optional[str] = None) -> "DIDResult":
        return cls(
            is_did=False,
            prefecture_code=prefecture_code,
            description="DID status unknown (no dataset available)",
        )

    def as_dict(self) -> Dict[str, Any]:
        return {
            "is_did": self.is_did,
            "area": self.area_name,
            "centroid": self.centroid.as_dict() if self.centroid else None,
            "certainty": self.certainty,
            "source": self.source,
            "prefecture_code": self.prefecture_code,
            "description": self.description,
        }


@dataclass(slots=True)
class DIDWaypoint:
    waypoint_id: str
    waypoint_index: int
    lat: float
    lng: float
    area: Optional[str]
    centroid: Optional[LatLng]

    def as_dict(self) -> Dict[str, Any]:
        return {
            "waypoint_id": self.waypoint_id,
            "waypoint_index": self.waypoint_index,
            "lat": self.lat,
            "lng": self.lng,
            "area": self.area,
            "centroid": self.centroid.as_dict() if self.centroid else None,
        }


@dataclass(slots=True)
class DIDReport:
    """DID membership for a waypoint set, grouped by area."""

    did_waypoints: List[DIDWaypoint] = field(default_factory=list)
    area_summaries: List[Dict[str, Any]] = field(default_factory=list)
    total_checked: int = 0

    @property
    def has_did_waypoints(self) -> bool:
        return bool(self.did_waypoints)

    def for_waypoint(self, waypoint_id: str) -> Optional[DIDWaypoint]:
        return next((entry for entry in self.did_waypoints if entry.waypoint_id == waypoint_id), None)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "has_did_waypoints": self.has_did_waypoints,
            "did_waypoints": [entry.as_dict() for entry in self.did_waypoints],
            "area_summaries": list(self.area_summaries),
            "did_count": len(self.did_waypoints),
            "total_checked": self.total_checked,
        }


class DIDResolver:
    """Prefecture-scoped DID lookups backed by a process-lifetime cache."""

    def __init__(
        self,
        source: DIDDatasetSource,
        *,
        locator: Optional[PrefectureLocator] = None,
        concurrency: int = 4,
    ) -> None:
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        self.source = source
        self.locator = locator or BoundingBoxLocator()
        self.concurrency = concurrency
        self._cache: Dict[str, DIDDataset] = {}
        self._inflight: Dict[str, asyncio.Task] = {}
        self._semaphores: "weakref.WeakKeyDictionary[asyncio.AbstractEventLoop, asyncio.Semaphore]" = (
            weakref.WeakKeyDictionary()
        )

    # ------------------------------------------------------------------
    # Cache management
    # ------------------------------------------------------------------
    @property
    def cached_codes(self) -> Set[str]:
        return set(self._cache)

    def clear_cache(self) -> None:
        """Drop every cached dataset; there is no per-prefecture eviction."""

        self._cache.clear()
        LOGGER.info("DID cache cleared")

    def identify_prefecture(self, lat: float, lng: float) -> Optional[Prefecture]:
        return self.locator.locate(lat, lng)

    def is_cache_ready(self, lat: float, lng: float) -> bool:
        """True when a sync check for the point would not miss the cache.

        Coordinates outside every prefecture need no data and count as ready.
        """

        prefecture = self.identify_prefecture(lat, lng)
        return prefecture is None or prefecture.code in self._cache

    def all_cache_ready(self, coordinates: Iterable[HasPosition]) -> bool:
        return all(self.is_cache_ready(point.lat, point.lng) for point in coordinates)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------
    def _semaphore(self) -> asyncio.Semaphore:
        loop = asyncio.get_running_loop()
        semaphore = self._semaphores.get(loop)
        if semaphore is None:
            semaphore = asyncio.Semaphore(self.concurrency)
            self._semaphores[loop] = semaphore
        return semaphore

    async def _fetch(self, prefecture: Prefecture) -> Optional[DIDDataset]:
        async with self._semaphore():
            try:
                payload = await self.source.fetch(prefecture)
                dataset = DIDDataset.from_geojson(prefecture, payload)
            except Exception as error:  # noqa: BLE001 - any source failure falls back to "not a DID"
                LOGGER.warning(
                    "DID dataset for %s (%s) unavailable: %s", prefecture.name, prefecture.code, error
                )
                return None
        self._cache[prefecture.code] = dataset
        LOGGER.info(
            "Loaded DID dataset for %s with %s areas", prefecture.name, len(dataset.areas)
        )
        return dataset

    async def load_dataset(self, prefecture: Prefecture) -> Optional[DIDDataset]:
        """Return the cached dataset, fetching it once for concurrent callers."""

        cached = self._cache.get(prefecture.code)
        if cached is not None:
            return cached
        loop = asyncio.get_running_loop()
        task = self._inflight.get(prefecture.code)
        if task is None or task.get_loop() is not loop:
            task = loop.create_task(self._fetch(prefecture))
            self._inflight[prefecture.code] = task
        try:
            return await task
        finally:
            if self._inflight.get(prefecture.code) is task and task.done():
                del self._inflight[prefecture.code]

    async def preload(self, coordinates: Iterable[HasPosition]) -> Set[str]:
        """Load every prefecture needed by ``coordinates``; return loaded codes."""

        prefectures: Dict[str, Prefecture] = {}
        for point in coordinates:
            prefecture = self.identify_prefecture(point.lat, point.lng)
            if prefecture is not None:
                prefectures.setdefault(prefecture.code, prefecture)
        if not prefectures:
            return set()
        datasets = await asyncio.gather(
            *(self.load_dataset(prefecture) for prefecture in prefectures.values())
        )
        loaded = {code for code, dataset in zip(prefectures, datasets) if dataset is not None}
        LOGGER.info("Preloaded %s of %s DID prefecture(s)", len(loaded), len(prefectures))
        return loaded

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------
    @staticmethod
    def _answer(dataset: DIDDataset, lat: float, lng: float) -> DIDResult:
        area = dataset.lookup(lat, lng)
        if area is None:
            return DIDResult(
                is_did=False,
                certainty="confirmed",
                source="dataset",
                prefecture_code=dataset.prefecture.code,
                description="Outside DID",
            )
        LOGGER.debug("DID hit at %.6f,%.6f in %s", lat, lng, area.name)
        return DIDResult(
            is_did=True,
            area_name=area.name,
            centroid=area.centroid,
            certainty="confirmed",
            source="dataset",
            prefecture_code=dataset.prefecture.code,
            description=f"Inside DID of {area.name}",
        )

    async def check_did_area(self, lat: float, lng: float) -> DIDResult:
        prefecture = self.identify_prefecture(lat, lng)
        if prefecture is None:
            return DIDResult.fallback()
        dataset = await self.load_dataset(prefecture)
        if dataset is None:
            return DIDResult.fallback(prefecture.code)
        return self._answer(dataset, lat, lng)

    def check_did_area_sync(self, lat: float, lng: float) -> DIDResult:
        """Cache-only variant; an unloaded prefecture answers the fallback."""

        prefecture = self.identify_prefecture(lat, lng)
        if prefecture is None:
            return DIDResult.fallback()
        dataset = self._cache.get(prefecture.code)
        if dataset is None:
            return DIDResult.fallback(prefecture.code)
        return self._answer(dataset, lat, lng)

    async def check_all_waypoints_did(self, waypoints: Sequence[Waypoint]) -> DIDReport:
        """Preload, then report every waypoint inside a DID grouped by area."""

        report = DIDReport(total_checked=len(waypoints))
        if not waypoints:
            return report
        await self.preload(waypoints)
        areas: Dict[str, List[int]] = {}
        for waypoint in waypoints:
            result = self.check_did_area_sync(waypoint.lat, waypoint.lng)
            if not result.is_did:
                continue
            report.did_waypoints.append(
                DIDWaypoint(
                    waypoint_id=waypoint.id,
                    waypoint_index=waypoint.index,
                    lat=waypoint.lat,
                    lng=waypoint.lng,
                    area=result.area_name,
                    centroid=result.centroid,
                )
            )
            areas.setdefault(result.area_name or DEFAULT_AREA_NAME, []).append(waypoint.index)
        report.area_summaries = [
            {"area": name, "waypoint_indices": indices, "count": len(indices)}
            for name, indices in areas.items()
        ]
        return report
