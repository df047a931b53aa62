"""Mini README: Tests for the FastAPI service.

Drives every route through ``TestClient`` against a context wired to the
in-memory DID source and the compact test zones.
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from conftest import make_context
from droneroute.interface import create_application

GRID = [
    {"id": f"wp-{row}{col}", "lat": 35.70 + row * 0.005, "lng": 139.40 + col * 0.005}
    for row in range(2)
    for col in range(3)
]


@pytest.fixture
def client() -> TestClient:
    return TestClient(create_application(make_context()))


def test_optimize_route_returns_flights(client: TestClient) -> None:
    response = client.post("/optimize-route", json={"waypoints": GRID, "algorithm": "2-opt"})

    assert response.status_code == 200
    payload = response.json()
    assert payload["success"] is True
    assert payload["total_flights"] >= 1
    assert payload["summary"]["algorithm"] == "2-opt"
    assert len(payload["ordered_waypoints"]) == len(GRID)


def test_optimize_route_accepts_custom_weights(client: TestClient) -> None:
    weights = {"distance": 1.0, "time": 0.0, "battery": 0.0, "risk": 0.0}
    response = client.post("/optimize-route", json={"waypoints": GRID, "objective": weights})
    assert response.json()["objective"] == "custom"


def test_unknown_drone_is_not_found(client: TestClient) -> None:
    response = client.post("/optimize-route", json={"waypoints": GRID, "drone_id": "paper-plane"})
    assert response.status_code == 404


def test_malformed_waypoint_is_rejected(client: TestClient) -> None:
    response = client.post("/optimize-route", json={"waypoints": [{"id": "x", "lat": 200, "lng": 0}]})
    assert response.status_code == 422


def test_restrictions_and_path_collision(client: TestClient) -> None:
    airport = {"id": "apt", "lat": 35.60, "lng": 139.60}
    response = client.post("/restrictions", json={"waypoints": [airport]})
    assert response.json()["restrictions"][0]["type"] == "airport"

    legs = [
        {"id": "w", "lat": 35.65, "lng": 139.64, "polygon_id": "p1"},
        {"id": "e", "lat": 35.65, "lng": 139.66, "polygon_id": "p1"},
    ]
    collision = client.post("/path-collision", json={"waypoints": legs}).json()
    assert collision["is_colliding"] is True
    assert collision["zones"] == ["Test Palace"]


def test_did_check(client: TestClient) -> None:
    payload = client.get("/did-check", params={"lat": 35.69, "lng": 139.71}).json()
    assert payload["is_did"] is True
    assert payload["area"] == "Shinjuku"

    assert client.get("/did-check", params={"lat": 95, "lng": 0}).status_code == 422


def test_optimization_plan(client: TestClient) -> None:
    body = {
        "waypoints": [{"id": "apt", "lat": 35.601, "lng": 139.60}],
        "polygons": [
            {
                "id": "field",
                "ring": [[139.645, 35.645], [139.66, 35.645], [139.66, 35.66], [139.645, 35.66], [139.645, 35.645]],
            }
        ],
    }
    payload = client.post("/optimization-plan", json=body).json()

    assert payload["has_issues"] is True
    assert payload["gaps"][0]["waypoint_id"] == "apt"
    assert payload["polygon_analyses"][0]["overlap_ratio"] > 0
    assert payload["did_context"] is None


def test_optimization_plan_includes_did_context_in_avoidance_mode() -> None:
    client = TestClient(create_application(make_context(did_avoidance_mode=True)))
    body = {"waypoints": [{"id": "did", "lat": 35.692, "lng": 139.712}]}

    payload = client.post("/optimization-plan", json=body).json()

    assert payload["did_context"]["did_count"] == 1
    assert payload["gaps"][0]["issues"][0]["type"] == "did"


def test_open_polygon_is_rejected(client: TestClient) -> None:
    body = {"polygons": [{"id": "open", "ring": [[139.6, 35.6], [139.7, 35.6], [139.7, 35.7]]}]}
    assert client.post("/optimization-plan", json=body).status_code == 422


def test_catalog_routes(client: TestClient) -> None:
    drones = client.get("/drones").json()
    assert drones["default"] == "mavic-3-enterprise"
    assert len(drones["drones"]) == 5

    objectives = client.get("/objectives").json()["objectives"]
    assert [item["id"] for item in objectives][0] == "balanced"
    assert len(objectives) == 5
