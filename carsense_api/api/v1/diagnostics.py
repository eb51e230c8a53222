from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from carsense_api.database import get_db
from carsense_api.dependencies import get_optional_user
from carsense_api.models.user import User
from carsense_api.schemas.common import error_responses
from carsense_api.schemas.diagnostic import DiagnosticCreateRequest, DiagnosticUpdateRequest, DiagnosticOut
from carsense_api.schemas.dtc import DTCInstanceCreateRequest, DTCInstanceUpdateRequest, DTCInstanceOut
from carsense_api.schemas.sensor import SensorSnapshotCreateRequest, SensorSnapshotOut
from carsense_api.services.diagnostic_service import diagnostic_service

router = APIRouter()


# ══════════════════════════════════════════════════════
#  DIAGNOSTIC SESSIONS
# ══════════════════════════════════════════════════════
@router.get("/vehicles/{vehicle_uuid}/diagnostics",
            response_model=list[DiagnosticOut],
            summary="List diagnostic sessions of a vehicle",
            responses=error_responses(401, 404))
def list_diagnostics(
    vehicle_uuid: str,
    db:           Session     = Depends(get_db),
    caller:       User | None = Depends(get_optional_user),
):
    return diagnostic_service.list_diagnostics(db, vehicle_uuid, caller)


@router.post("/vehicles/{vehicle_uuid}/diagnostics",
             status_code=status.HTTP_201_CREATED,
             response_model=DiagnosticOut,
             summary="Start a diagnostic session",
             responses=error_responses(401, 404, 422))
def create_diagnostic(
    vehicle_uuid: str,
    body:         DiagnosticCreateRequest,
    db:           Session     = Depends(get_db),
    caller:       User | None = Depends(get_optional_user),
):
    return diagnostic_service.create_diagnostic(db, vehicle_uuid, body, caller)


@router.get("/diagnostics/{diagnostic_uuid}",
            response_model=DiagnosticOut,
            summary="Get a diagnostic session",
            responses=error_responses(401, 404))
def get_diagnostic(
    diagnostic_uuid: str,
    db:              Session     = Depends(get_db),
    caller:          User | None = Depends(get_optional_user),
):
    return diagnostic_service.get_diagnostic(db, diagnostic_uuid, caller)


@router.patch("/diagnostics/{diagnostic_uuid}",
              response_model=DiagnosticOut,
              summary="Update a diagnostic session",
              responses=error_responses(401, 404, 422))
def update_diagnostic(
    diagnostic_uuid: str,
    body:            DiagnosticUpdateRequest,
    db:              Session     = Depends(get_db),
    caller:          User | None = Depends(get_optional_user),
):
    return diagnostic_service.update_diagnostic(db, diagnostic_uuid, body, caller)


# ══════════════════════════════════════════════════════
#  SENSOR SNAPSHOTS
# ══════════════════════════════════════════════════════
@router.get("/diagnostics/{diagnostic_uuid}/snapshots",
            response_model=list[SensorSnapshotOut],
            summary="List sensor snapshots of a diagnostic session",
            responses=error_responses(401, 404))
def list_snapshots(
    diagnostic_uuid: str,
    db:              Session     = Depends(get_db),
    caller:          User | None = Depends(get_optional_user),
):
    return diagnostic_service.list_snapshots(db, diagnostic_uuid, caller)


@router.post("/diagnostics/{diagnostic_uuid}/snapshots",
             status_code=status.HTTP_201_CREATED,
             response_model=SensorSnapshotOut,
             summary="Record a sensor snapshot with its readings",
             responses=error_responses(401, 404, 422))
def create_snapshot(
    diagnostic_uuid: str,
    body:            SensorSnapshotCreateRequest,
    db:              Session     = Depends(get_db),
    caller:          User | None = Depends(get_optional_user),
):
    return diagnostic_service.create_snapshot(db, diagnostic_uuid, body, caller)


# ══════════════════════════════════════════════════════
#  DTC INSTANCES
# ══════════════════════════════════════════════════════
@router.get("/diagnostics/{diagnostic_uuid}/dtcs",
            response_model=list[DTCInstanceOut],
            summary="List trouble codes found in a diagnostic session",
            responses=error_responses(401, 404))
def list_dtcs(
    diagnostic_uuid: str,
    db:              Session     = Depends(get_db),
    caller:          User | None = Depends(get_optional_user),
):
    return diagnostic_service.list_dtcs(db, diagnostic_uuid, caller)


@router.post("/diagnostics/{diagnostic_uuid}/dtcs",
             status_code=status.HTTP_201_CREATED,
             response_model=DTCInstanceOut,
             summary="Attach a trouble code from the library to a diagnostic session",
             responses=error_responses(401, 404, 422))
def add_dtc(
    diagnostic_uuid: str,
    body:            DTCInstanceCreateRequest,
    db:              Session     = Depends(get_db),
    caller:          User | None = Depends(get_optional_user),
):
    return diagnostic_service.add_dtc(db, diagnostic_uuid, body, caller)


@router.patch("/dtcs/{dtc_uuid}",
              response_model=DTCInstanceOut,
              summary="Confirm or unconfirm a trouble code",
              responses=error_responses(401, 404, 422))
def update_dtc(
    dtc_uuid: str,
    body:     DTCInstanceUpdateRequest,
    db:       Session     = Depends(get_db),
    caller:   User | None = Depends(get_optional_user),
):
    return diagnostic_service.update_dtc(db, dtc_uuid, body, caller)
