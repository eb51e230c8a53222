import logging
from functools import lru_cache
from typing import List

from pydantic import field_validator
from pydantic_settings import BaseSettings


# Pino-style level names used by the frontend/backend .env files
LOG_LEVELS = {
    "fatal":   logging.CRITICAL,
    "error":   logging.ERROR,
    "warn":    logging.WARNING,
    "warning": logging.WARNING,
    "info":    logging.INFO,
    "debug":   logging.DEBUG,
    "trace":   logging.DEBUG,
}


class Settings(BaseSettings):
    # ─── Application ───────────────────────────────────────────────────────────
    APP_NAME:   str  = "CarSense API"
    APP_ENV:    str  = "development"
    APP_DEBUG:  bool = True
    APP_HOST:   str  = "0.0.0.0"
    APP_PORT:   int  = 3000
    API_PREFIX: str  = "/api"
    LOG_LEVEL:  str  = "info"

    # ─── Database ──────────────────────────────────────────────────────────────
    DATABASE_URL:          str
    DATABASE_POOL_SIZE:    int  = 10
    DATABASE_MAX_OVERFLOW: int  = 20
    DATABASE_POOL_TIMEOUT: int  = 30
    DATABASE_ECHO:         bool = False

    # ─── Session tokens ────────────────────────────────────────────────────────
    SECRET_KEY:                  str
    ALGORITHM:                   str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 8

    # ─── ML service ────────────────────────────────────────────────────────────
    ML_SERVICE_URL:     str | None = None
    ML_SERVICE_TIMEOUT: float      = 10.0

    # ─── CORS ──────────────────────────────────────────────────────────────────
    CORS_ORIGINS: str = "http://localhost:5173,http://localhost:3000"

    @field_validator("LOG_LEVEL")
    @classmethod
    def check_log_level(cls, v):
        v = v.strip().lower()
        if v not in LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL must be one of {sorted(LOG_LEVELS)}")
        return v

    @field_validator("API_PREFIX")
    @classmethod
    def check_prefix(cls, v):
        v = "/" + v.strip("/")
        return "" if v == "/" else v

    def get_cors_origins(self) -> List[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

    @property
    def log_level(self) -> int:
        return LOG_LEVELS[self.LOG_LEVEL]

    @property
    def is_development(self) -> bool:
        return self.APP_ENV == "development"

    model_config = {"env_file": ".env", "case_sensitive": True, "extra": "ignore"}


@lru_cache
def get_settings() -> Settings:
    return Settings()
