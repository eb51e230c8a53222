from __future__ import annotations

from fastapi.testclient import TestClient

from conftest import ADMIN_ID, OTHER_ID, OWNER_ID


def test_record_and_list_newest_first(client: TestClient, auth, create_vehicle) -> None:
    v = create_vehicle(OWNER_ID)
    url = f"/api/vehicles/{v['uuid']}/locations"
    for hour, lat in ((8, 44.40), (10, 44.45), (9, 44.42)):
        resp = client.post(
            url,
            json={"latitude": lat, "longitude": 26.1, "accuracy": 5, "recordedAt": f"2024-05-01T{hour:02d}:00:00"},
            headers=auth(OWNER_ID),
        )
        assert resp.status_code == 201, resp.text

    resp = client.get(url, headers=auth(OWNER_ID))

    assert resp.status_code == 200
    assert [loc["latitude"] for loc in resp.json()] == [44.45, 44.42, 44.40]


def test_limit(client: TestClient, auth, create_vehicle) -> None:
    v = create_vehicle(OWNER_ID)
    url = f"/api/vehicles/{v['uuid']}/locations"
    for minute in range(3):
        client.post(
            url,
            json={"latitude": 1, "longitude": 1, "recordedAt": f"2024-05-01T08:0{minute}:00"},
            headers=auth(OWNER_ID),
        )

    resp = client.get(url, params={"limit": 2}, headers=auth(ADMIN_ID))
    assert len(resp.json()) == 2


def test_coordinates_are_bounded(client: TestClient, auth, create_vehicle) -> None:
    v = create_vehicle(OWNER_ID)
    resp = client.post(
        f"/api/vehicles/{v['uuid']}/locations", json={"latitude": 91, "longitude": 0}, headers=auth(OWNER_ID),
    )
    assert resp.status_code == 422


def test_stranger_cannot_track_vehicle(client: TestClient, auth, create_vehicle) -> None:
    v = create_vehicle(OWNER_ID)
    url = f"/api/vehicles/{v['uuid']}/locations"
    assert client.get(url, headers=auth(OTHER_ID)).status_code == 401
    assert client.post(url, json={"latitude": 0, "longitude": 0}, headers=auth(OTHER_ID)).status_code == 401
