import logging
import traceback
from fastapi import Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from carsense_api.utils.exceptions import AppException, ErrorCode

logger = logging.getLogger(__name__)

# Unique columns a client can collide with, as they appear in driver messages
_UNIQUE_FIELDS = {
    "vehicles.vin":       ("vin",  "VIN already registered"),
    "ix_vehicles_vin":    ("vin",  "VIN already registered"),
    "dtcLibrary.code":    ("code", "DTC code already exists"),
    "ix_dtcLibrary_code": ("code", "DTC code already exists"),
}


def _error_body(message: str, code: str, details: list | None = None, field: str | None = None) -> dict:
    return {
        "success": False,
        "message": message,
        "error": {
            "code": code,
            "details": details,
            "field": field,
        }
    }


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Handle all AppException subclasses (our custom exceptions)."""
    detail = exc.detail
    if exc.status_code >= 500:
        logger.warning(f"{exc.error_code} on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "success": False,
            "message": detail.get("message", "An error occurred"),
            "error": detail.get("error", {"code": ErrorCode.INTERNAL_SERVER_ERROR}),
        },
        headers=exc.headers,
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Request bodies, path and query parameters that fail their schema (422).
    Every failing field is listed in details; error.field names the first one.
    """
    details = []
    for error in exc.errors():
        # loc is a tuple like ("body", "vin") or ("query", "severity")
        loc = error.get("loc", [])
        field = ".".join(str(l) for l in loc if l not in ("body", "query", "path")) if loc else "unknown"
        details.append({
            "field": field or "body",
            "message": error.get("msg", "Invalid value"),
        })

    logger.debug(f"Validation failed on {request.method} {request.url.path}", extra={"errors": details})
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=_error_body(
            "Validation error. Please check your input.",
            ErrorCode.VALIDATION_ERROR,
            details,
            details[0]["field"] if details else None,
        ),
    )


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    """
    Constraint violations that slipped past the service-level checks, e.g. two
    requests registering the same VIN at once. Raw DB errors never reach the client.
    """
    logger.warning(f"IntegrityError on {request.method} {request.url.path}: {exc.orig}")
    raw = str(exc.orig)
    field, message = next(
        (hit for key, hit in _UNIQUE_FIELDS.items() if key in raw),
        (None, "A record with this data already exists."),
    )
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content=_error_body(message, ErrorCode.DUPLICATE_ENTRY, field=field),
    )


async def storage_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Datastore failures other than constraint violations (503)."""
    logger.error(f"Storage error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content=_error_body("The datastore is currently unavailable.", ErrorCode.STORAGE_ERROR),
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Catch-all handler for unexpected exceptions.
    Logs the full traceback, returns a safe 500 response.
    """
    logger.error(
        f"Unhandled exception on {request.method} {request.url.path}\n"
        f"{''.join(traceback.format_exception(type(exc), exc, exc.__traceback__))}"
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body("An unexpected error occurred. Please try again later.", ErrorCode.INTERNAL_SERVER_ERROR),
    )
