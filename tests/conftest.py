"""Mini README: Shared fixtures for the route engine tests.

Provides an in-memory DID source (no files, no network), a compact set of
restricted zones near Tokyo and a ``PlanningContext`` wired to both so tests
stay deterministic.
"""

from __future__ import annotations

import asyncio
from collections import Counter
from typing import Any, Dict, Iterable, Optional

import pytest

from droneroute.airspace import zones_from_records
from droneroute.configuration import RoutePlannerSettings
from droneroute.context import PlanningContext
from droneroute.did import Prefecture

TOKYO_CODE = "13"

# One DID square in western Tokyo (centroid 35.69, 139.71).
TOKYO_DID: Dict[str, Any] = {
    "type": "FeatureCollection",
    "features": [
        {
            "type": "Feature",
            "properties": {"CITYNAME": "Shinjuku"},
            "geometry": {
                "type": "Polygon",
                "coordinates": [
                    [[139.70, 35.68], [139.72, 35.68], [139.72, 35.70], [139.70, 35.70], [139.70, 35.68]]
                ],
            },
        }
    ],
}

TEST_ZONE_RECORDS = [
    {"name": "Test Airport", "lat": 35.60, "lng": 139.60, "radius": 2000, "type": "airport"},
    {"name": "Test Palace", "lat": 35.65, "lng": 139.65, "radius": 300, "type": "red"},
]

# Horizontal surface reaching about 550 m north and south of the test airport.
SURFACE_SQUARE: Dict[str, Any] = {
    "type": "FeatureCollection",
    "features": [
        {
            "type": "Feature",
            "properties": {"name": "水平表面"},
            "geometry": {
                "type": "Polygon",
                "coordinates": [
                    [[139.59, 35.595], [139.61, 35.595], [139.61, 35.605], [139.59, 35.605], [139.59, 35.595]]
                ],
            },
        }
    ],
}


class FakeDIDSource:
    """DID source serving prepared payloads and counting fetches."""

    def __init__(self, datasets: Optional[Dict[str, Dict[str, Any]]] = None, failures: Iterable[str] = ()) -> None:
        self.datasets = dict(datasets or {})
        self.failures = set(failures)
        self.calls: Counter = Counter()

    async def fetch(self, prefecture: Prefecture) -> Dict[str, Any]:
        self.calls[prefecture.code] += 1
        await asyncio.sleep(0)
        if prefecture.code in self.failures or prefecture.code not in self.datasets:
            raise FileNotFoundError(prefecture.dataset_name)
        return self.datasets[prefecture.code]


def make_settings(**overrides: Any) -> RoutePlannerSettings:
    return RoutePlannerSettings(_env_file=None, **overrides)


def make_context(source: Optional[FakeDIDSource] = None, **overrides: Any) -> PlanningContext:
    return PlanningContext.from_settings(
        make_settings(**overrides),
        did_source=source or FakeDIDSource({TOKYO_CODE: TOKYO_DID}),
        zones=zones_from_records(TEST_ZONE_RECORDS),
    )


@pytest.fixture
def did_source() -> FakeDIDSource:
    return FakeDIDSource({TOKYO_CODE: TOKYO_DID})


@pytest.fixture
def context(did_source: FakeDIDSource) -> PlanningContext:
    return make_context(did_source)
