from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator, model_validator

from carsense_api.utils.validation import check_vehicle_year, normalize_vin


# ─── Requests ─────────────────────────────────────────────────────────────────
class VehicleCreateRequest(BaseModel):
    vin:               str
    make:              str
    model:             str
    year:              int
    engineType:        str
    fuelType:          str
    transmissionType:  str
    drivetrain:        str
    licensePlate:      str
    odometerUpdatedAt: Optional[datetime] = None

    @field_validator("vin")
    @classmethod
    def check_vin(cls, v):
        return normalize_vin(v)

    @field_validator("year")
    @classmethod
    def check_year(cls, v):
        return check_vehicle_year(v)

    @field_validator("make", "model", "engineType", "fuelType", "transmissionType", "drivetrain", "licensePlate")
    @classmethod
    def check_not_blank(cls, v):
        if not v.strip(): raise ValueError("Field cannot be empty")
        return v.strip()


_REQUIRED_COLUMNS = {
    "vin", "make", "model", "year", "engineType", "fuelType",
    "transmissionType", "drivetrain", "licensePlate", "ownerId",
}


class VehicleUpdateRequest(BaseModel):
    """
    Partial update. uuid, createdAt, updatedAt and deletedAt are not part of
    the input shape and are ignored if sent.
    """
    vin:               Optional[str]      = None
    make:              Optional[str]      = None
    model:             Optional[str]      = None
    year:              Optional[int]      = None
    engineType:        Optional[str]      = None
    fuelType:          Optional[str]      = None
    transmissionType:  Optional[str]      = None
    drivetrain:        Optional[str]      = None
    licensePlate:      Optional[str]      = None
    odometerUpdatedAt: Optional[datetime] = None
    ownerId:           Optional[str]      = None

    @field_validator("vin")
    @classmethod
    def check_vin(cls, v):
        return normalize_vin(v) if v is not None else v

    @field_validator("year")
    @classmethod
    def check_year(cls, v):
        return check_vehicle_year(v) if v is not None else v

    @model_validator(mode="after")
    def check_no_null_required(self):
        nulled = sorted(f for f in self.model_fields_set & _REQUIRED_COLUMNS if getattr(self, f) is None)
        if nulled:
            raise ValueError(f"Fields cannot be null: {', '.join(nulled)}")
        return self


# ─── Responses ────────────────────────────────────────────────────────────────
class VehicleOut(BaseModel):
    id:                int
    uuid:              str
    ownerId:           str
    vin:               str
    make:              str
    model:             str
    year:              int
    engineType:        str
    fuelType:          str
    transmissionType:  str
    drivetrain:        str
    licensePlate:      str
    odometerUpdatedAt: Optional[datetime] = None
    deletedAt:         Optional[datetime] = None
    createdAt:         Optional[datetime] = None
    updatedAt:         Optional[datetime] = None


# extra="forbid" keeps the two POST /vehicles shapes distinguishable in the union
class VehicleCreatedResponse(BaseModel):
    vehicle: VehicleOut
    created: bool = True
    model_config = {"extra": "forbid"}


class VehicleRestoredResponse(BaseModel):
    vehicle:  VehicleOut
    restored: bool = True
    model_config = {"extra": "forbid"}


class VehicleDeleteResponse(BaseModel):
    message:     str
    vehicleUUID: str


class OwnershipTransferOut(BaseModel):
    uuid:          str
    vehicleId:     Optional[int] = None
    vin:           Optional[str] = None
    fromUserId:    str
    toUserId:      str
    transferredAt: datetime
