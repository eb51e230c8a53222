from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from carsense_api.database import get_db
from carsense_api.dependencies import get_optional_user
from carsense_api.models.user import User
from carsense_api.schemas.common import error_responses
from carsense_api.schemas.location import LocationCreateRequest, LocationOut
from carsense_api.services.location_service import location_service

router = APIRouter(prefix="/vehicles/{vehicle_uuid}/locations")


@router.get("", response_model=list[LocationOut], summary="Location history, newest first",
            responses=error_responses(401, 404))
def list_locations(
    vehicle_uuid: str,
    limit:        int         = Query(100, ge=1, le=1000),
    db:           Session     = Depends(get_db),
    caller:       User | None = Depends(get_optional_user),
):
    return location_service.list_locations(db, vehicle_uuid, caller, limit)


@router.post("", status_code=status.HTTP_201_CREATED, response_model=LocationOut,
             summary="Record a vehicle position", responses=error_responses(401, 404, 422))
def add_location(
    vehicle_uuid: str,
    body:         LocationCreateRequest,
    db:           Session     = Depends(get_db),
    caller:       User | None = Depends(get_optional_user),
):
    return location_service.add_location(db, vehicle_uuid, body, caller)
