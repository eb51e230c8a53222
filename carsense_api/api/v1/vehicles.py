from typing import Union

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from carsense_api.database import get_db
from carsense_api.dependencies import get_optional_user
from carsense_api.models.user import User
from carsense_api.schemas.common import error_responses
from carsense_api.schemas.vehicle import (
    VehicleCreateRequest, VehicleUpdateRequest,
    VehicleOut, VehicleCreatedResponse, VehicleRestoredResponse,
    VehicleDeleteResponse, OwnershipTransferOut,
)
from carsense_api.services.vehicle_service import vehicle_service

router = APIRouter(prefix="/vehicles")


# ─── GET /vehicles ────────────────────────────────────────────────────────────
@router.get(
    "",
    response_model=list[VehicleOut],
    summary="List active vehicles (own vehicles, or all for admins)",
    responses=error_responses(401),
)
def list_vehicles(
    db:     Session     = Depends(get_db),
    caller: User | None = Depends(get_optional_user),
):
    return vehicle_service.list_vehicles(db, caller)


# ─── POST /vehicles ───────────────────────────────────────────────────────────
@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=Union[VehicleCreatedResponse, VehicleRestoredResponse],
    summary="Register a vehicle, or reclaim a deleted one with the same VIN",
    responses={
        200: {"model": VehicleRestoredResponse, "description": "Deleted vehicle restored to the caller"},
        **error_responses(401, 409, 422),
    },
)
def create_vehicle(
    body:     VehicleCreateRequest,
    response: Response,
    db:       Session     = Depends(get_db),
    caller:   User | None = Depends(get_optional_user),
):
    """
    - A new VIN creates a vehicle owned by the caller (201).
    - A VIN that belongs to a soft-deleted vehicle restores that vehicle and
      hands it to the caller (200). The stored record is kept as-is.
    - A VIN that belongs to an active vehicle is rejected (409).
    """
    vehicle, restored = vehicle_service.create_vehicle(db, body, caller)
    if restored:
        response.status_code = status.HTTP_200_OK
        return {"vehicle": vehicle, "restored": True}
    return {"vehicle": vehicle, "created": True}


# ─── GET /vehicles/{uuid} ─────────────────────────────────────────────────────
@router.get(
    "/{vehicle_uuid}",
    response_model=VehicleOut,
    summary="Get a vehicle (owner or admin)",
    responses=error_responses(401, 404),
)
def get_vehicle(
    vehicle_uuid: str,
    db:           Session     = Depends(get_db),
    caller:       User | None = Depends(get_optional_user),
):
    return vehicle_service.get_vehicle(db, vehicle_uuid, caller)


# ─── PATCH /vehicles/{uuid} ───────────────────────────────────────────────────
@router.patch(
    "/{vehicle_uuid}",
    response_model=VehicleOut,
    summary="Update a vehicle (owner or admin; ownership transfer is admin only)",
    responses=error_responses(401, 403, 404, 409, 422),
)
def update_vehicle(
    vehicle_uuid: str,
    body:         VehicleUpdateRequest,
    db:           Session     = Depends(get_db),
    caller:       User | None = Depends(get_optional_user),
):
    return vehicle_service.update_vehicle(db, vehicle_uuid, body, caller)


# ─── DELETE /vehicles/{uuid} ──────────────────────────────────────────────────
@router.delete(
    "/{vehicle_uuid}",
    response_model=VehicleDeleteResponse,
    summary="Soft delete a vehicle (current owner only)",
    responses=error_responses(401, 404),
)
def delete_vehicle(
    vehicle_uuid: str,
    db:           Session     = Depends(get_db),
    caller:       User | None = Depends(get_optional_user),
):
    return vehicle_service.delete_vehicle(db, vehicle_uuid, caller)


# ─── POST /vehicles/{uuid}/restore ────────────────────────────────────────────
@router.post(
    "/{vehicle_uuid}/restore",
    response_model=VehicleRestoredResponse,
    summary="Restore a soft-deleted vehicle (current owner only)",
    responses=error_responses(401, 404),
)
def restore_vehicle(
    vehicle_uuid: str,
    db:           Session     = Depends(get_db),
    caller:       User | None = Depends(get_optional_user),
):
    return {"vehicle": vehicle_service.restore_vehicle(db, vehicle_uuid, caller), "restored": True}


# ─── GET /vehicles/{uuid}/transfers ───────────────────────────────────────────
@router.get(
    "/{vehicle_uuid}/transfers",
    response_model=list[OwnershipTransferOut],
    summary="Ownership transfer history (Admin)",
    responses=error_responses(401, 403, 404),
)
def list_transfers(
    vehicle_uuid: str,
    db:           Session     = Depends(get_db),
    caller:       User | None = Depends(get_optional_user),
):
    return vehicle_service.list_transfers(db, vehicle_uuid, caller)
