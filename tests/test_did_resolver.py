"""Mini README: Tests for the DID resolver and dataset sources.

Exercises lookups, coalesced loading, bounded concurrency, the
never-cached failure fallback and both dataset sources.
"""

from __future__ import annotations

import asyncio
import json
import threading
from pathlib import Path

import pytest

from conftest import TOKYO_CODE, TOKYO_DID, FakeDIDSource
from droneroute.did import (
    BoundingBoxLocator,
    DIDDataset,
    DIDResolver,
    FileDatasetSource,
    HttpDatasetSource,
)
from droneroute.models import LatLng, Waypoint

INSIDE = (35.69, 139.71)
OUTSIDE_SAME_PREFECTURE = (35.60, 139.40)


def test_locator_finds_tokyo_and_nothing_abroad() -> None:
    locator = BoundingBoxLocator()
    assert locator.locate(*INSIDE).code == TOKYO_CODE
    assert locator.locate(0.0, 0.0) is None
    assert locator.by_code("27").name == "osaka"


def test_check_did_area_inside_and_outside(did_source: FakeDIDSource) -> None:
    resolver = DIDResolver(did_source)

    inside = asyncio.run(resolver.check_did_area(*INSIDE))
    outside = asyncio.run(resolver.check_did_area(*OUTSIDE_SAME_PREFECTURE))

    assert inside.is_did
    assert inside.area_name == "Shinjuku"
    assert inside.certainty == "confirmed"
    assert inside.centroid.lat == pytest.approx(35.69)
    assert inside.centroid.lng == pytest.approx(139.71)
    assert not outside.is_did
    assert outside.certainty == "confirmed"
    assert did_source.calls[TOKYO_CODE] == 1


def test_coordinates_outside_japan_need_no_fetch(did_source: FakeDIDSource) -> None:
    resolver = DIDResolver(did_source)
    result = asyncio.run(resolver.check_did_area(0.0, 0.0))

    assert not result.is_did
    assert result.certainty == "unknown"
    assert not did_source.calls
    assert resolver.is_cache_ready(0.0, 0.0)


def test_concurrent_lookups_share_one_fetch(did_source: FakeDIDSource) -> None:
    resolver = DIDResolver(did_source)

    async def run():
        return await asyncio.gather(*(resolver.check_did_area(*INSIDE) for _ in range(5)))

    results = asyncio.run(run())

    assert all(result.is_did for result in results)
    assert did_source.calls[TOKYO_CODE] == 1


def test_failed_load_is_not_cached() -> None:
    source = FakeDIDSource(failures=[TOKYO_CODE])
    resolver = DIDResolver(source)

    first = asyncio.run(resolver.check_did_area(*INSIDE))
    second = asyncio.run(resolver.check_did_area(*INSIDE))

    assert not first.is_did
    assert first.certainty == "unknown"
    assert first.prefecture_code == TOKYO_CODE
    assert not second.is_did
    assert source.calls[TOKYO_CODE] == 2
    assert resolver.cached_codes == set()


def test_sync_check_reads_only_the_cache(did_source: FakeDIDSource) -> None:
    resolver = DIDResolver(did_source)

    assert not resolver.check_did_area_sync(*INSIDE).is_did
    assert not resolver.is_cache_ready(*INSIDE)
    assert not did_source.calls

    loaded = asyncio.run(resolver.preload([LatLng(*INSIDE)]))

    assert loaded == {TOKYO_CODE}
    assert resolver.check_did_area_sync(*INSIDE).is_did
    assert resolver.all_cache_ready([LatLng(*INSIDE), LatLng(0.0, 0.0)])

    resolver.clear_cache()
    assert resolver.cached_codes == set()
    assert not resolver.check_did_area_sync(*INSIDE).is_did


def test_preload_respects_concurrency_limit() -> None:
    class SlowSource:
        def __init__(self) -> None:
            self.active = 0
            self.peak = 0
            self.calls = 0

        async def fetch(self, prefecture):
            self.calls += 1
            self.active += 1
            self.peak = max(self.peak, self.active)
            await asyncio.sleep(0.01)
            self.active -= 1
            return {"type": "FeatureCollection", "features": []}

    source = SlowSource()
    resolver = DIDResolver(source, concurrency=2)
    coordinates = [
        LatLng(35.69, 139.71),  # Tokyo
        LatLng(34.69, 135.50),  # Osaka
        LatLng(33.59, 130.40),  # Fukuoka
        LatLng(43.06, 141.35),  # Hokkaido
        LatLng(38.27, 140.87),  # Miyagi
        LatLng(35.69, 139.71),
    ]

    loaded = asyncio.run(resolver.preload(coordinates))

    assert len(loaded) == 5
    assert source.calls == 5
    assert source.peak <= 2


def test_invalid_concurrency_is_rejected(did_source: FakeDIDSource) -> None:
    with pytest.raises(ValueError):
        DIDResolver(did_source, concurrency=0)


def test_waypoint_report_groups_by_area(did_source: FakeDIDSource) -> None:
    resolver = DIDResolver(did_source)
    waypoints = [
        Waypoint(id="a", lat=35.69, lng=139.71, index=1),
        Waypoint(id="b", lat=35.60, lng=139.40, index=2),
        Waypoint(id="c", lat=35.695, lng=139.705, index=3),
    ]

    report = asyncio.run(resolver.check_all_waypoints_did(waypoints))

    assert report.has_did_waypoints
    assert [entry.waypoint_id for entry in report.did_waypoints] == ["a", "c"]
    assert report.area_summaries == [{"area": "Shinjuku", "waypoint_indices": [1, 3], "count": 2}]
    assert report.for_waypoint("b") is None
    assert report.as_dict()["total_checked"] == 3


def test_dataset_parsing() -> None:
    prefecture = BoundingBoxLocator().by_code(TOKYO_CODE)
    unnamed = {
        "type": "FeatureCollection",
        "features": [dict(TOKYO_DID["features"][0], properties={})],
    }

    assert DIDDataset.from_geojson(prefecture, unnamed).areas[0].name == "Densely inhabited district"
    with pytest.raises(ValueError):
        DIDDataset.from_geojson(prefecture, {"type": "Feature"})


def test_file_source_reads_prefecture_file(tmp_path: Path) -> None:
    prefecture = BoundingBoxLocator().by_code(TOKYO_CODE)
    (tmp_path / "r02_did_13_tokyo.geojson").write_text(json.dumps(TOKYO_DID), encoding="utf-8")
    source = FileDatasetSource(tmp_path)
    resolver = DIDResolver(source)

    assert source.path_for(prefecture).name == prefecture.dataset_name
    assert asyncio.run(resolver.check_did_area(*INSIDE)).is_did
    # Osaka has no file; the lookup degrades to the fallback.
    assert asyncio.run(resolver.check_did_area(34.69, 135.50)).certainty == "unknown"


def test_http_source_downloads_with_session() -> None:
    class Response:
        def raise_for_status(self) -> None:
            return None

        def json(self):
            return TOKYO_DID

    class Session:
        def __init__(self) -> None:
            self.urls = []

        def get(self, url, headers=None, timeout=None):
            self.urls.append((url, timeout))
            return Response()

    session = Session()
    source = HttpDatasetSource("https://data.example/{code}/{name}.geojson", timeout=5.0, session=session)
    prefecture = BoundingBoxLocator().by_code(TOKYO_CODE)

    payload = asyncio.run(source.fetch(prefecture))

    assert payload is TOKYO_DID
    assert session.urls == [("https://data.example/13/tokyo.geojson", 5.0)]


def test_http_source_keeps_one_session_per_thread() -> None:
    source = HttpDatasetSource("https://data.example/{code}.geojson")
    sessions = {}

    def remember(key: str) -> None:
        sessions[key] = source.session_for_thread()

    worker = threading.Thread(target=remember, args=("worker",))
    worker.start()
    worker.join()
    remember("main")

    assert source.session_for_thread() is sessions["main"]
    assert sessions["worker"] is not sessions["main"]
