from __future__ import annotations

from fastapi.testclient import TestClient
from sqlalchemy import update

from carsense_api.models.ownership_transfer import OwnershipTransfer
from carsense_api.models.vehicle import Vehicle
from carsense_api.utils.audit import record_ownership_transfer
from conftest import ADMIN_ID, OTHER_ID, OWNER_ID, vehicle_payload

DESCRIPTIVE_FIELDS = (
    "id", "uuid", "ownerId", "vin", "make", "model", "year", "engineType",
    "fuelType", "transmissionType", "drivetrain", "licensePlate", "createdAt",
)


def _transfers(db) -> list[OwnershipTransfer]:
    db.expire_all()
    return db.query(OwnershipTransfer).order_by(OwnershipTransfer.id).all()


# ─── Authentication ───────────────────────────────────────────────────────────
def test_list_requires_session(client: TestClient) -> None:
    resp = client.get("/api/vehicles")
    assert resp.status_code == 401
    body = resp.json()
    assert body["success"] is False
    assert body["error"]["code"] == "UNAUTHORIZED"


def test_invalid_token_is_rejected(client: TestClient) -> None:
    resp = client.get("/api/vehicles", headers={"Authorization": "Bearer not-a-token"})
    assert resp.status_code == 401


def test_token_for_unknown_user_is_rejected(client: TestClient, auth) -> None:
    resp = client.get("/api/vehicles", headers=auth("ghost"))
    assert resp.status_code == 401


# ─── List ─────────────────────────────────────────────────────────────────────
def test_user_sees_only_own_active_vehicles(client: TestClient, auth, create_vehicle) -> None:
    mine = create_vehicle(OWNER_ID, vin="WVWZZZ1KZAW00001")
    gone = create_vehicle(OWNER_ID, vin="WVWZZZ1KZAW00002")
    create_vehicle(OTHER_ID, vin="WVWZZZ1KZAW00003")
    client.delete(f"/api/vehicles/{gone['uuid']}", headers=auth(OWNER_ID))

    resp = client.get("/api/vehicles", headers=auth(OWNER_ID))

    assert resp.status_code == 200
    assert [v["uuid"] for v in resp.json()] == [mine["uuid"]]


def test_admin_sees_all_active_vehicles(client: TestClient, auth, create_vehicle) -> None:
    a = create_vehicle(OWNER_ID, vin="WVWZZZ1KZAW00001")
    b = create_vehicle(OTHER_ID, vin="WVWZZZ1KZAW00002")
    gone = create_vehicle(OTHER_ID, vin="WVWZZZ1KZAW00003")
    client.delete(f"/api/vehicles/{gone['uuid']}", headers=auth(OTHER_ID))

    resp = client.get("/api/vehicles", headers=auth(ADMIN_ID))

    assert resp.status_code == 200
    assert {v["uuid"] for v in resp.json()} == {a["uuid"], b["uuid"]}
    assert all(v["deletedAt"] is None for v in resp.json())


# ─── Create ───────────────────────────────────────────────────────────────────
def test_create_new_vin_returns_201_created(client: TestClient, auth) -> None:
    resp = client.post("/api/vehicles", json=vehicle_payload(vin="wvwzzz1"), headers=auth(OWNER_ID))

    assert resp.status_code == 201
    body = resp.json()
    assert body["created"] is True
    assert "restored" not in body
    vehicle = body["vehicle"]
    assert vehicle["vin"] == "WVWZZZ1"
    assert vehicle["ownerId"] == OWNER_ID
    assert vehicle["deletedAt"] is None
    assert len(vehicle["uuid"]) == 36


def test_create_gives_each_vehicle_a_fresh_uuid(create_vehicle) -> None:
    a = create_vehicle(OWNER_ID, vin="WVWZZZ1KZAW00001")
    b = create_vehicle(OWNER_ID, vin="WVWZZZ1KZAW00002")
    assert a["uuid"] != b["uuid"]


def test_create_with_active_vin_is_a_duplicate(client: TestClient, auth, create_vehicle) -> None:
    create_vehicle(OWNER_ID, vin="WVWZZZ1")

    resp = client.post("/api/vehicles", json=vehicle_payload(vin="WVWZZZ1"), headers=auth(OTHER_ID))

    assert resp.status_code == 409
    assert resp.json()["error"]["code"] == "DUPLICATE_ENTRY"
    assert resp.json()["error"]["field"] == "vin"


def test_create_validates_payload(client: TestClient, auth) -> None:
    resp = client.post(
        "/api/vehicles",
        json=vehicle_payload(vin="WVWZZZIOQ", year=1800, make="  "),
        headers=auth(OWNER_ID),
    )

    assert resp.status_code == 422
    body = resp.json()
    assert body["error"]["code"] == "VALIDATION_ERROR"
    fields = {d["field"] for d in body["error"]["details"]}
    assert {"vin", "year", "make"} <= fields


def test_create_requires_all_descriptive_fields(client: TestClient, auth) -> None:
    payload = vehicle_payload()
    del payload["licensePlate"]
    resp = client.post("/api/vehicles", json=payload, headers=auth(OWNER_ID))
    assert resp.status_code == 422


def test_vin_reuse_example_scenario(client: TestClient, auth, db) -> None:
    created = client.post("/api/vehicles", json=vehicle_payload(vin="WVWZZZ1"), headers=auth(OWNER_ID))
    assert created.status_code == 201
    assert created.json()["created"] is True
    uuid = created.json()["vehicle"]["uuid"]

    deleted = client.delete(f"/api/vehicles/{uuid}", headers=auth(OWNER_ID))
    assert deleted.status_code == 200

    resp = client.post("/api/vehicles", json=vehicle_payload(vin="WVWZZZ1"), headers=auth(OTHER_ID))

    assert resp.status_code == 200
    body = resp.json()
    assert body["restored"] is True
    assert "created" not in body
    assert body["vehicle"]["uuid"] == uuid
    assert body["vehicle"]["ownerId"] == OTHER_ID
    assert body["vehicle"]["deletedAt"] is None

    transfers = _transfers(db)
    assert len(transfers) == 1
    assert transfers[0].fromUserId == OWNER_ID
    assert transfers[0].toUserId == OTHER_ID


def test_vin_reuse_by_same_owner_records_no_transfer(client: TestClient, auth, create_vehicle, db) -> None:
    v = create_vehicle(OWNER_ID, vin="WVWZZZ1")
    client.delete(f"/api/vehicles/{v['uuid']}", headers=auth(OWNER_ID))

    resp = client.post("/api/vehicles", json=vehicle_payload(vin="WVWZZZ1"), headers=auth(OWNER_ID))

    assert resp.status_code == 200
    assert resp.json()["restored"] is True
    assert _transfers(db) == []


def test_vin_reuse_keeps_stored_record(client: TestClient, auth, create_vehicle) -> None:
    v = create_vehicle(OWNER_ID, vin="WVWZZZ1", make="Volkswagen")
    client.delete(f"/api/vehicles/{v['uuid']}", headers=auth(OWNER_ID))

    resp = client.post(
        "/api/vehicles", json=vehicle_payload(vin="WVWZZZ1", make="Skoda"), headers=auth(OTHER_ID),
    )

    assert resp.json()["vehicle"]["make"] == "Volkswagen"


# ─── Get ──────────────────────────────────────────────────────────────────────
def test_get_by_owner_and_admin(client: TestClient, auth, create_vehicle) -> None:
    v = create_vehicle(OWNER_ID)
    for user_id in (OWNER_ID, ADMIN_ID):
        resp = client.get(f"/api/vehicles/{v['uuid']}", headers=auth(user_id))
        assert resp.status_code == 200
        assert resp.json()["vin"] == v["vin"]


def test_get_by_stranger_is_unauthorized(client: TestClient, auth, create_vehicle) -> None:
    v = create_vehicle(OWNER_ID)
    resp = client.get(f"/api/vehicles/{v['uuid']}", headers=auth(OTHER_ID))
    assert resp.status_code == 401


def test_get_unknown_vehicle(client: TestClient, auth) -> None:
    resp = client.get("/api/vehicles/does-not-exist", headers=auth(OWNER_ID))
    assert resp.status_code == 404
    assert resp.json()["error"]["code"] == "NOT_FOUND"


# ─── Update ───────────────────────────────────────────────────────────────────
def test_owner_updates_descriptive_fields(client: TestClient, auth, create_vehicle) -> None:
    v = create_vehicle(OWNER_ID)

    resp = client.patch(
        f"/api/vehicles/{v['uuid']}", json={"licensePlate": "B-999-XYZ", "year": 2020}, headers=auth(OWNER_ID),
    )

    assert resp.status_code == 200
    assert resp.json()["licensePlate"] == "B-999-XYZ"
    assert resp.json()["year"] == 2020
    assert resp.json()["make"] == v["make"]


def test_update_ignores_server_managed_fields(client: TestClient, auth, create_vehicle) -> None:
    v = create_vehicle(OWNER_ID)

    resp = client.patch(
        f"/api/vehicles/{v['uuid']}",
        json={"uuid": "hijacked", "deletedAt": "2024-01-01T00:00:00Z", "make": "Seat"},
        headers=auth(OWNER_ID),
    )

    assert resp.status_code == 200
    assert resp.json()["uuid"] == v["uuid"]
    assert resp.json()["deletedAt"] is None
    assert resp.json()["make"] == "Seat"


def test_update_rejects_null_required_field(client: TestClient, auth, create_vehicle) -> None:
    v = create_vehicle(OWNER_ID)
    resp = client.patch(f"/api/vehicles/{v['uuid']}", json={"make": None}, headers=auth(OWNER_ID))
    assert resp.status_code == 422


def test_update_by_stranger_is_unauthorized(client: TestClient, auth, create_vehicle) -> None:
    v = create_vehicle(OWNER_ID)
    resp = client.patch(f"/api/vehicles/{v['uuid']}", json={"make": "Seat"}, headers=auth(OTHER_ID))
    assert resp.status_code == 401


def test_non_admin_cannot_transfer_ownership(client: TestClient, auth, create_vehicle, db) -> None:
    v = create_vehicle(OWNER_ID)

    resp = client.patch(f"/api/vehicles/{v['uuid']}", json={"ownerId": OTHER_ID}, headers=auth(OWNER_ID))

    assert resp.status_code == 403
    assert resp.json()["error"]["code"] == "FORBIDDEN"
    assert _transfers(db) == []
    assert client.get(f"/api/vehicles/{v['uuid']}", headers=auth(OWNER_ID)).json()["ownerId"] == OWNER_ID


def test_admin_transfers_ownership(client: TestClient, auth, create_vehicle, db) -> None:
    v = create_vehicle(OWNER_ID)

    resp = client.patch(f"/api/vehicles/{v['uuid']}", json={"ownerId": OTHER_ID}, headers=auth(ADMIN_ID))

    assert resp.status_code == 200
    assert resp.json()["ownerId"] == OTHER_ID
    transfers = _transfers(db)
    assert len(transfers) == 1
    assert (transfers[0].fromUserId, transfers[0].toUserId) == (OWNER_ID, OTHER_ID)
    assert transfers[0].vin == v["vin"]

    history = client.get(f"/api/vehicles/{v['uuid']}/transfers", headers=auth(ADMIN_ID))
    assert history.status_code == 200
    assert [(t["fromUserId"], t["toUserId"]) for t in history.json()] == [(OWNER_ID, OTHER_ID)]


def test_transfer_to_unknown_user(client: TestClient, auth, create_vehicle, db) -> None:
    v = create_vehicle(OWNER_ID)
    resp = client.patch(f"/api/vehicles/{v['uuid']}", json={"ownerId": "ghost"}, headers=auth(ADMIN_ID))
    assert resp.status_code == 404
    assert _transfers(db) == []


def test_transfer_history_is_admin_only(client: TestClient, auth, create_vehicle) -> None:
    v = create_vehicle(OWNER_ID)
    resp = client.get(f"/api/vehicles/{v['uuid']}/transfers", headers=auth(OWNER_ID))
    assert resp.status_code == 403


def test_update_to_taken_vin(client: TestClient, auth, create_vehicle) -> None:
    create_vehicle(OWNER_ID, vin="WVWZZZ1KZAW00001")
    v = create_vehicle(OWNER_ID, vin="WVWZZZ1KZAW00002")
    resp = client.patch(f"/api/vehicles/{v['uuid']}", json={"vin": "WVWZZZ1KZAW00001"}, headers=auth(OWNER_ID))
    assert resp.status_code == 409


def test_patch_soft_deleted_vehicle_is_not_found(client: TestClient, auth, create_vehicle) -> None:
    v = create_vehicle(OWNER_ID)
    client.delete(f"/api/vehicles/{v['uuid']}", headers=auth(OWNER_ID))
    resp = client.patch(f"/api/vehicles/{v['uuid']}", json={"make": "Seat"}, headers=auth(OWNER_ID))
    assert resp.status_code == 404


# ─── Delete ───────────────────────────────────────────────────────────────────
def test_owner_soft_deletes_vehicle(client: TestClient, auth, create_vehicle, db) -> None:
    v = create_vehicle(OWNER_ID)

    resp = client.delete(f"/api/vehicles/{v['uuid']}", headers=auth(OWNER_ID))

    assert resp.status_code == 200
    assert resp.json() == {"message": "Vehicle soft deleted successfully", "vehicleUUID": v["uuid"]}
    assert client.get("/api/vehicles", headers=auth(OWNER_ID)).json() == []
    assert client.get(f"/api/vehicles/{v['uuid']}", headers=auth(OWNER_ID)).status_code == 404

    db.expire_all()
    row = db.query(Vehicle).filter(Vehicle.uuid == v["uuid"]).one()
    assert row.deletedAt is not None


def test_delete_touches_only_the_target_row(client: TestClient, auth, create_vehicle, db) -> None:
    v = create_vehicle(OWNER_ID, vin="WVWZZZ1KZAW00001")
    other = create_vehicle(OTHER_ID, vin="WVWZZZ1KZAW00002")

    client.delete(f"/api/vehicles/{v['uuid']}", headers=auth(OWNER_ID))

    db.expire_all()
    assert db.query(Vehicle).filter(Vehicle.uuid == other["uuid"]).one().deletedAt is None


def test_delete_by_stranger_is_unauthorized(client: TestClient, auth, create_vehicle) -> None:
    v = create_vehicle(OWNER_ID)
    resp = client.delete(f"/api/vehicles/{v['uuid']}", headers=auth(OTHER_ID))
    assert resp.status_code == 401


def test_delete_by_admin_is_unauthorized(client: TestClient, auth, create_vehicle) -> None:
    v = create_vehicle(OWNER_ID)
    resp = client.delete(f"/api/vehicles/{v['uuid']}", headers=auth(ADMIN_ID))
    assert resp.status_code == 401


def test_delete_unknown_vehicle(client: TestClient, auth) -> None:
    resp = client.delete("/api/vehicles/does-not-exist", headers=auth(OWNER_ID))
    assert resp.status_code == 404


# ─── Restore ──────────────────────────────────────────────────────────────────
def test_restore_brings_back_prior_values(client: TestClient, auth, create_vehicle) -> None:
    v = create_vehicle(OWNER_ID)
    client.delete(f"/api/vehicles/{v['uuid']}", headers=auth(OWNER_ID))

    resp = client.post(f"/api/vehicles/{v['uuid']}/restore", headers=auth(OWNER_ID))

    assert resp.status_code == 200
    body = resp.json()
    assert body["restored"] is True
    restored = body["vehicle"]
    assert restored["deletedAt"] is None
    for field in DESCRIPTIVE_FIELDS:
        assert restored[field] == v[field], field
    assert [x["uuid"] for x in client.get("/api/vehicles", headers=auth(OWNER_ID)).json()] == [v["uuid"]]


def test_restore_by_admin_is_unauthorized(client: TestClient, auth, create_vehicle) -> None:
    v = create_vehicle(OWNER_ID)
    client.delete(f"/api/vehicles/{v['uuid']}", headers=auth(OWNER_ID))
    resp = client.post(f"/api/vehicles/{v['uuid']}/restore", headers=auth(ADMIN_ID))
    assert resp.status_code == 401


def test_restore_unknown_vehicle(client: TestClient, auth) -> None:
    resp = client.post("/api/vehicles/does-not-exist/restore", headers=auth(OWNER_ID))
    assert resp.status_code == 404


# ─── Concurrent writers ───────────────────────────────────────────────────────
def _race_after_transfer_log(monkeypatch, **winner_values) -> None:
    """Let another writer change the vehicle between the audit row and the conditional update."""
    def racing(db, *args, **kwargs):
        entry = record_ownership_transfer(db, *args, **kwargs)
        db.execute(update(Vehicle).where(Vehicle.id == kwargs["vehicle_id"]).values(**winner_values))
        return entry

    monkeypatch.setattr("carsense_api.services.vehicle_service.record_ownership_transfer", racing)


def test_vin_reuse_losing_race_is_a_duplicate(client: TestClient, auth, create_vehicle, db, monkeypatch) -> None:
    v = create_vehicle(OWNER_ID, vin="WVWZZZ1KZAW00009")
    client.delete(f"/api/vehicles/{v['uuid']}", headers=auth(OWNER_ID))
    _race_after_transfer_log(monkeypatch, deletedAt=None)

    resp = client.post("/api/vehicles", json=vehicle_payload(vin="WVWZZZ1KZAW00009"), headers=auth(OTHER_ID))

    assert resp.status_code == 409
    assert resp.json()["error"]["code"] == "DUPLICATE_ENTRY"
    assert resp.json()["error"]["field"] == "vin"
    assert _transfers(db) == []
    stored = db.query(Vehicle).filter(Vehicle.uuid == v["uuid"]).one()
    assert stored.ownerId == OWNER_ID
    assert stored.deletedAt is not None


def test_transfer_losing_race_is_a_conflict(client: TestClient, auth, create_vehicle, db, monkeypatch) -> None:
    v = create_vehicle(OWNER_ID)
    _race_after_transfer_log(monkeypatch, ownerId=ADMIN_ID)

    resp = client.patch(f"/api/vehicles/{v['uuid']}", json={"ownerId": OTHER_ID}, headers=auth(ADMIN_ID))

    assert resp.status_code == 409
    assert resp.json()["error"]["code"] == "CONFLICT"
    assert _transfers(db) == []
    assert db.query(Vehicle).filter(Vehicle.uuid == v["uuid"]).one().ownerId == OWNER_ID
