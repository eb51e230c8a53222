"""Shared fixtures: an in-memory database, the app wired to it, and seeded users."""

from __future__ import annotations

from typing import Callable

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

import carsense_api.models  # noqa: F401
from carsense_api.config import Settings
from carsense_api.database import Base
from carsense_api.main import create_app
from carsense_api.models.user import User, UserRole
from carsense_api.utils.security import create_access_token

OWNER_ID = "1"
OTHER_ID = "2"
ADMIN_ID = "admin-1"


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        DATABASE_URL="sqlite://",
        SECRET_KEY="test-secret",
        LOG_LEVEL="debug",
        CORS_ORIGINS="http://localhost:5173",
    )


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def app(settings: Settings, engine):
    app = create_app(settings=settings, engine=engine)
    with app.state.session_factory() as db:
        db.add_all([
            User(id=OWNER_ID, name="Alice", email="alice@example.com", role=UserRole.USER),
            User(id=OTHER_ID, name="Bob", email="bob@example.com", role=UserRole.USER),
            User(id=ADMIN_ID, name="Root", email="admin@example.com", role=UserRole.ADMIN),
        ])
        db.commit()
    return app


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture
def db(app):
    session = app.state.session_factory()
    yield session
    session.close()


@pytest.fixture
def auth(settings: Settings) -> Callable[[str], dict]:
    """auth(user_id) -> Authorization header for that user."""
    roles = {ADMIN_ID: "admin"}

    def _headers(user_id: str) -> dict:
        token = create_access_token(settings, user_id, roles.get(user_id, "user"))
        return {"Authorization": f"Bearer {token}"}

    return _headers


def vehicle_payload(**overrides) -> dict:
    payload = {
        "vin": "WVWZZZ1KZAW000001",
        "make": "Volkswagen",
        "model": "Golf",
        "year": 2019,
        "engineType": "1.6 TDI",
        "fuelType": "diesel",
        "transmissionType": "manual",
        "drivetrain": "FWD",
        "licensePlate": "B-123-ABC",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def create_vehicle(client: TestClient, auth) -> Callable[..., dict]:
    """create_vehicle(user_id, **fields) -> vehicle JSON (asserts success)."""

    def _create(user_id: str = OWNER_ID, **fields) -> dict:
        resp = client.post("/api/vehicles", json=vehicle_payload(**fields), headers=auth(user_id))
        assert resp.status_code in (200, 201), resp.text
        return resp.json()["vehicle"]

    return _create
