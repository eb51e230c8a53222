from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from carsense_api.database import get_db
from carsense_api.dependencies import get_optional_user
from carsense_api.models.dtc_library import DTCSeverity
from carsense_api.models.user import User
from carsense_api.schemas.common import error_responses
from carsense_api.schemas.dtc import DTCLibraryCreateRequest, DTCLibraryUpdateRequest, DTCLibraryOut
from carsense_api.services.dtc_service import dtc_library_service

router = APIRouter(prefix="/dtc-library")


@router.get("", response_model=list[DTCLibraryOut], summary="Search the DTC library",
            responses=error_responses(401))
def list_codes(
    search:   Optional[str]         = Query(None, description="Matches code, description or affected system"),
    severity: Optional[DTCSeverity] = Query(None),
    db:       Session               = Depends(get_db),
    caller:   User | None           = Depends(get_optional_user),
):
    return dtc_library_service.list_codes(db, caller, search, severity)


@router.get("/{code}", response_model=DTCLibraryOut, summary="Look up a trouble code",
            responses=error_responses(401, 404))
def get_code(
    code:   str,
    db:     Session     = Depends(get_db),
    caller: User | None = Depends(get_optional_user),
):
    return dtc_library_service.get_code(db, code, caller)


@router.post("", status_code=status.HTTP_201_CREATED, response_model=DTCLibraryOut,
             summary="Add a trouble code (Admin)", responses=error_responses(401, 403, 409, 422))
def create_code(
    body:   DTCLibraryCreateRequest,
    db:     Session     = Depends(get_db),
    caller: User | None = Depends(get_optional_user),
):
    return dtc_library_service.create_code(db, body, caller)


@router.patch("/{code}", response_model=DTCLibraryOut, summary="Edit a trouble code (Admin)",
              responses=error_responses(401, 403, 404, 422))
def update_code(
    code:   str,
    body:   DTCLibraryUpdateRequest,
    db:     Session     = Depends(get_db),
    caller: User | None = Depends(get_optional_user),
):
    return dtc_library_service.update_code(db, code, body, caller)
