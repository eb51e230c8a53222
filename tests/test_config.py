from __future__ import annotations

import logging

import pytest
from pydantic import ValidationError

from carsense_api.config import Settings


def test_required_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.delenv("SECRET_KEY", raising=False)

    with pytest.raises(ValidationError) as excinfo:
        Settings(_env_file=None)

    message = str(excinfo.value)
    assert "DATABASE_URL" in message
    assert "SECRET_KEY" in message


def test_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URL", "postgresql+psycopg2://u:p@db:5432/carsense")
    monkeypatch.setenv("SECRET_KEY", "shared-secret")
    monkeypatch.setenv("LOG_LEVEL", "WARN")
    monkeypatch.setenv("ML_SERVICE_URL", "http://ml:8000")
    monkeypatch.setenv("CORS_ORIGINS", "http://a.test, http://b.test,")

    settings = Settings(_env_file=None)

    assert settings.DATABASE_URL.endswith("/carsense")
    assert settings.log_level == logging.WARNING
    assert settings.ML_SERVICE_URL == "http://ml:8000"
    assert settings.get_cors_origins() == ["http://a.test", "http://b.test"]
    assert settings.API_PREFIX == "/api"


@pytest.mark.parametrize(("level", "expected"), [("fatal", logging.CRITICAL), ("trace", logging.DEBUG)])
def test_pino_level_names(level: str, expected: int) -> None:
    settings = Settings(_env_file=None, DATABASE_URL="sqlite://", SECRET_KEY="x", LOG_LEVEL=level)
    assert settings.log_level == expected


def test_unknown_log_level() -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, DATABASE_URL="sqlite://", SECRET_KEY="x", LOG_LEVEL="verbose")


@pytest.mark.parametrize(("raw", "expected"), [("api/", "/api"), ("/v2/api", "/v2/api"), ("/", "")])
def test_api_prefix_is_normalised(raw: str, expected: str) -> None:
    settings = Settings(_env_file=None, DATABASE_URL="sqlite://", SECRET_KEY="x", API_PREFIX=raw)
    assert settings.API_PREFIX == expected
