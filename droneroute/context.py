"""Mini README: Planning context shared by every planning operation.

``PlanningContext`` owns the long-lived state of a planning session: the
settings, the restriction index (with any configured airport surfaces), the
DID resolver (and therefore its cache) and the drone catalog. Build one per
session with ``from_settings`` and pass it to the optimiser, the gap
analyser and the restriction reports. Contexts share nothing with each other.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from .airspace import (
    FileSurfaceSource,
    HttpSurfaceSource,
    RestrictedZone,
    RestrictionIndex,
    SurfaceSource,
    SurfaceState,
    default_zones,
)
from .configuration import RoutePlannerSettings, get_settings
from .did import DIDDatasetSource, DIDResolver, FileDatasetSource, HttpDatasetSource, PrefectureLocator
from .drones import DroneCatalog, default_catalog
from .logging_utils import get_logger

LOGGER = get_logger(__name__)


@dataclass(slots=True)
class PlanningContext:
    settings: RoutePlannerSettings
    index: RestrictionIndex
    resolver: DIDResolver
    catalog: DroneCatalog

    @classmethod
    def from_settings(
        cls,
        settings: Optional[RoutePlannerSettings] = None,
        *,
        did_source: Optional[DIDDatasetSource] = None,
        zones: Optional[Iterable[RestrictedZone]] = None,
        locator: Optional[PrefectureLocator] = None,
        catalog: Optional[DroneCatalog] = None,
        surface_source: Optional[SurfaceSource] = None,
    ) -> "PlanningContext":
        """Assemble a context; explicit collaborators override the defaults.

        Restriction surfaces are loaded for every airport when a surface source
        is passed in or configured; without one the airport circles apply.
        """

        settings = settings or get_settings()
        if did_source is None:
            if settings.did_dataset_url:
                did_source = HttpDatasetSource(settings.did_dataset_url)
            else:
                did_source = FileDatasetSource(settings.did_data_directory)
        if surface_source is None:
            if settings.surface_dataset_url:
                surface_source = HttpSurfaceSource(settings.surface_dataset_url)
            elif settings.surface_data_directory is not None:
                surface_source = FileSurfaceSource(settings.surface_data_directory)
        if zones is None:
            zones = default_zones(include_heliports=settings.include_heliports)
        index = RestrictionIndex(zones)
        if surface_source is not None:
            states = index.load_surfaces(surface_source.fetch)
            loaded = sum(state is SurfaceState.LOADED for state in states.values())
            failed = sum(state is SurfaceState.FAILED for state in states.values())
            LOGGER.info(
                "Restriction surfaces: %s loaded, %s failed, %s airports checked",
                loaded,
                failed,
                len(states),
            )
        context = cls(
            settings=settings,
            index=index,
            resolver=DIDResolver(
                did_source, locator=locator, concurrency=settings.did_fetch_concurrency
            ),
            catalog=catalog or default_catalog(),
        )
        LOGGER.info(
            "Planning context ready (%s zones, %s drones, DID source %s)",
            len(context.index),
            len(context.catalog.available_drones()),
            type(did_source).__name__,
        )
        return context
