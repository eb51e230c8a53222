import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from sqlalchemy import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from carsense_api.config import Settings, get_settings
from carsense_api.database import build_engine, build_session_factory, check_db_connection
from carsense_api.services.ml_client import MLServiceClient
from carsense_api.utils.exceptions import AppException
from carsense_api.utils.log_format import build_log_handler
from carsense_api.middleware.error_handler import (
    app_exception_handler,
    validation_exception_handler,
    integrity_error_handler,
    storage_error_handler,
    generic_exception_handler,
)

from carsense_api.api.v1 import vehicles
from carsense_api.api.v1 import diagnostics
from carsense_api.api.v1 import dtcs
from carsense_api.api.v1 import locations
from carsense_api.api.v1 import maintenance
from carsense_api.api.v1 import ml

VERSION = "1.0.0"

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    engine: Engine | None = None,
    ml_client: MLServiceClient | None = None,
) -> FastAPI:
    """
    Build the application.

    Everything the request handlers need (settings, session factory, ML
    client) lives on `app.state`; tests pass their own engine and client.
    Run with: uvicorn carsense_api.main:create_app --factory
    """
    settings = settings or get_settings()

    logging.basicConfig(level=settings.log_level, handlers=[build_log_handler()])

    prefix = settings.API_PREFIX
    app = FastAPI(
        title=settings.APP_NAME,
        version=VERSION,
        description="Vehicle registry, diagnostics and health prediction API",
        docs_url=f"{prefix}/docs",
        redoc_url=f"{prefix}/redoc",
        openapi_url=f"{prefix}/openapi.json",
    )

    engine = engine or build_engine(settings)
    if ml_client is None and settings.ML_SERVICE_URL:
        ml_client = MLServiceClient(settings)

    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)
    app.state.ml_client = ml_client

    # ─── CORS ─────────────────────────────────────────────────────────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ─── Exception Handlers ───────────────────────────────────────────────────
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(SQLAlchemyError, storage_error_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    # ─── Routers ──────────────────────────────────────────────────────────────
    app.include_router(vehicles.router,    prefix=prefix, tags=["Vehicles"])
    app.include_router(diagnostics.router, prefix=prefix, tags=["Diagnostics"])
    app.include_router(dtcs.router,        prefix=prefix, tags=["DTC Library"])
    app.include_router(locations.router,   prefix=prefix, tags=["Locations"])
    app.include_router(maintenance.router, prefix=prefix, tags=["Maintenance"])
    app.include_router(ml.router,          prefix=prefix, tags=["ML Predictions"])

    # ─── Startup / Shutdown ───────────────────────────────────────────────────
    @app.on_event("startup")
    def on_startup():
        ok = check_db_connection(engine)
        if ok:
            logger.info("DB connected")
        else:
            logger.error("DB connection FAILED")
        if app.state.ml_client is None:
            logger.warning("ML_SERVICE_URL not set, prediction routes will answer 503")

    @app.on_event("shutdown")
    def on_shutdown():
        if app.state.ml_client is not None:
            app.state.ml_client.close()

    # ─── Health ───────────────────────────────────────────────────────────────
    @app.get("/health", tags=["Health"])
    def health():
        db_ok = check_db_connection(engine)
        return {
            "status":   "ok" if db_ok else "degraded",
            "app":      settings.APP_NAME,
            "version":  VERSION,
            "database": "connected" if db_ok else "unreachable",
        }

    return app


if __name__ == "__main__":
    import uvicorn
    settings = get_settings()
    uvicorn.run("carsense_api.main:create_app", factory=True,
                host=settings.APP_HOST, port=settings.APP_PORT,
                reload=settings.is_development)
