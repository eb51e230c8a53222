from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator


def _check_coordinates(lat, long):
    if lat is not None and not (-90 <= lat <= 90): raise ValueError("Latitude must be between -90 and 90")
    if long is not None and not (-180 <= long <= 180): raise ValueError("Longitude must be between -180 and 180")


class DiagnosticCreateRequest(BaseModel):
    odometer:     Optional[int]   = Field(None, ge=0)
    locationLat:  Optional[float] = None
    locationLong: Optional[float] = None
    notes:        Optional[str]   = None

    @field_validator("locationLat")
    @classmethod
    def check_lat(cls, v):
        _check_coordinates(v, None)
        return v

    @field_validator("locationLong")
    @classmethod
    def check_long(cls, v):
        _check_coordinates(None, v)
        return v


class DiagnosticUpdateRequest(DiagnosticCreateRequest):
    pass


class DiagnosticOut(BaseModel):
    uuid:         str
    vehicleUUID:  str
    odometer:     Optional[int]   = None
    locationLat:  Optional[float] = None
    locationLong: Optional[float] = None
    notes:        Optional[str]   = None
    createdAt:    Optional[datetime] = None
    updatedAt:    Optional[datetime] = None
