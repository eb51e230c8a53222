from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from carsense_api.database import get_db
from carsense_api.dependencies import get_optional_user
from carsense_api.models.user import User
from carsense_api.schemas.common import error_responses
from carsense_api.schemas.maintenance import (
    MaintenanceCreateRequest, MaintenanceUpdateRequest, MaintenanceOut,
    ServiceWorkshopCreateRequest, ServiceWorkshopOut,
)
from carsense_api.services.maintenance_service import maintenance_service

router = APIRouter()


# ══════════════════════════════════════════════════════
#  MAINTENANCE LOG
# ══════════════════════════════════════════════════════
@router.get("/vehicles/{vehicle_uuid}/maintenance",
            response_model=list[MaintenanceOut],
            summary="Maintenance history, newest service first",
            responses=error_responses(401, 404))
def list_records(
    vehicle_uuid: str,
    db:           Session     = Depends(get_db),
    caller:       User | None = Depends(get_optional_user),
):
    return maintenance_service.list_records(db, vehicle_uuid, caller)


@router.post("/vehicles/{vehicle_uuid}/maintenance",
             status_code=status.HTTP_201_CREATED,
             response_model=MaintenanceOut,
             summary="Log a maintenance service",
             responses=error_responses(401, 404, 422))
def create_record(
    vehicle_uuid: str,
    body:         MaintenanceCreateRequest,
    db:           Session     = Depends(get_db),
    caller:       User | None = Depends(get_optional_user),
):
    return maintenance_service.create_record(db, vehicle_uuid, body, caller)


@router.patch("/maintenance/{record_uuid}",
              response_model=MaintenanceOut,
              summary="Update a maintenance record",
              responses=error_responses(401, 404, 422))
def update_record(
    record_uuid: str,
    body:        MaintenanceUpdateRequest,
    db:          Session     = Depends(get_db),
    caller:      User | None = Depends(get_optional_user),
):
    return maintenance_service.update_record(db, record_uuid, body, caller)


# ══════════════════════════════════════════════════════
#  SERVICE WORKSHOPS
# ══════════════════════════════════════════════════════
@router.get("/service-workshops",
            response_model=list[ServiceWorkshopOut],
            summary="List service workshops",
            responses=error_responses(401))
def list_workshops(
    db:     Session     = Depends(get_db),
    caller: User | None = Depends(get_optional_user),
):
    return maintenance_service.list_workshops(db, caller)


@router.post("/service-workshops",
             status_code=status.HTTP_201_CREATED,
             response_model=ServiceWorkshopOut,
             summary="Add a service workshop (Admin)",
             responses=error_responses(401, 403, 422))
def create_workshop(
    body:   ServiceWorkshopCreateRequest,
    db:     Session     = Depends(get_db),
    caller: User | None = Depends(get_optional_user),
):
    return maintenance_service.create_workshop(db, body, caller)
