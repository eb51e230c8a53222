from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from conftest import ADMIN_ID, OTHER_ID, OWNER_ID


@pytest.fixture
def workshop(client: TestClient, auth) -> dict:
    resp = client.post(
        "/api/service-workshops",
        json={"name": "Dacia Service Pipera", "city": "Bucharest", "country": "Romania"},
        headers=auth(ADMIN_ID),
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


def test_workshops_are_admin_managed(client: TestClient, auth, workshop) -> None:
    assert client.post(
        "/api/service-workshops", json={"name": "Backyard"}, headers=auth(OWNER_ID),
    ).status_code == 403

    resp = client.get("/api/service-workshops", headers=auth(OWNER_ID))
    assert resp.status_code == 200
    assert [w["name"] for w in resp.json()] == ["Dacia Service Pipera"]


def test_log_service_at_known_workshop(client: TestClient, auth, create_vehicle, workshop) -> None:
    v = create_vehicle(OWNER_ID)

    resp = client.post(
        f"/api/vehicles/{v['uuid']}/maintenance",
        json={"serviceWorkshopUUID": workshop["uuid"], "serviceDate": "2024-03-10T09:00:00",
              "serviceType": "oil_change", "cost": 350.0},
        headers=auth(OWNER_ID),
    )

    assert resp.status_code == 201, resp.text
    record = resp.json()
    assert record["workshopName"] == "Dacia Service Pipera"
    assert record["serviceType"] == "oil_change"


def test_log_service_at_custom_workshop(client: TestClient, auth, create_vehicle) -> None:
    v = create_vehicle(OWNER_ID)

    resp = client.post(
        f"/api/vehicles/{v['uuid']}/maintenance",
        json={"customServiceWorkshopName": "Uncle Ion's garage", "serviceDate": "2024-03-10T09:00:00",
              "serviceType": "brake_replacement"},
        headers=auth(OWNER_ID),
    )

    assert resp.status_code == 201
    assert resp.json()["workshopName"] == "Uncle Ion's garage"
    assert resp.json()["serviceWorkshopUUID"] is None


def test_workshop_is_required(client: TestClient, auth, create_vehicle) -> None:
    v = create_vehicle(OWNER_ID)
    resp = client.post(
        f"/api/vehicles/{v['uuid']}/maintenance",
        json={"serviceDate": "2024-03-10T09:00:00", "serviceType": "oil_change"},
        headers=auth(OWNER_ID),
    )
    assert resp.status_code == 422


def test_unknown_workshop(client: TestClient, auth, create_vehicle) -> None:
    v = create_vehicle(OWNER_ID)
    resp = client.post(
        f"/api/vehicles/{v['uuid']}/maintenance",
        json={"serviceWorkshopUUID": "nope", "serviceDate": "2024-03-10T09:00:00", "serviceType": "oil_change"},
        headers=auth(OWNER_ID),
    )
    assert resp.status_code == 404


def test_negative_cost(client: TestClient, auth, create_vehicle) -> None:
    v = create_vehicle(OWNER_ID)
    resp = client.post(
        f"/api/vehicles/{v['uuid']}/maintenance",
        json={"customServiceWorkshopName": "X", "serviceDate": "2024-03-10T09:00:00",
              "serviceType": "oil_change", "cost": -1},
        headers=auth(OWNER_ID),
    )
    assert resp.status_code == 422


def test_history_newest_service_first(client: TestClient, auth, create_vehicle) -> None:
    v = create_vehicle(OWNER_ID)
    url = f"/api/vehicles/{v['uuid']}/maintenance"
    for date, service in (("2023-01-05", "tire_rotation"), ("2024-06-01", "oil_change")):
        client.post(
            url,
            json={"customServiceWorkshopName": "Garage", "serviceDate": f"{date}T10:00:00", "serviceType": service},
            headers=auth(OWNER_ID),
        )

    resp = client.get(url, headers=auth(ADMIN_ID))

    assert [r["serviceType"] for r in resp.json()] == ["oil_change", "tire_rotation"]
    assert client.get(url, headers=auth(OTHER_ID)).status_code == 401


def test_update_record(client: TestClient, auth, create_vehicle, workshop) -> None:
    v = create_vehicle(OWNER_ID)
    record = client.post(
        f"/api/vehicles/{v['uuid']}/maintenance",
        json={"customServiceWorkshopName": "Garage", "serviceDate": "2024-03-10T09:00:00",
              "serviceType": "oil_change"},
        headers=auth(OWNER_ID),
    ).json()

    resp = client.patch(
        f"/api/maintenance/{record['uuid']}",
        json={"serviceWorkshopUUID": workshop["uuid"], "notes": "Moved to dealer"},
        headers=auth(OWNER_ID),
    )
    assert resp.status_code == 200
    assert resp.json()["workshopName"] == "Dacia Service Pipera"
    assert resp.json()["notes"] == "Moved to dealer"


def test_update_cannot_clear_both_workshop_fields(client: TestClient, auth, create_vehicle) -> None:
    v = create_vehicle(OWNER_ID)
    record = client.post(
        f"/api/vehicles/{v['uuid']}/maintenance",
        json={"customServiceWorkshopName": "Garage", "serviceDate": "2024-03-10T09:00:00",
              "serviceType": "oil_change"},
        headers=auth(OWNER_ID),
    ).json()

    resp = client.patch(
        f"/api/maintenance/{record['uuid']}", json={"customServiceWorkshopName": None}, headers=auth(OWNER_ID),
    )
    assert resp.status_code == 422
    assert resp.json()["error"]["field"] == "serviceWorkshopUUID"
