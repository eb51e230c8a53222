from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from carsense_api.models.sensor_snapshot import SensorSource


class SensorReadingIn(BaseModel):
    pid:       str
    value:     float
    unit:      str
    timestamp: Optional[datetime] = None

    @field_validator("pid", "unit")
    @classmethod
    def check_not_blank(cls, v):
        if not v.strip(): raise ValueError("Field cannot be empty")
        return v.strip()


class SensorSnapshotCreateRequest(BaseModel):
    source:   SensorSource          = SensorSource.OBD2
    readings: list[SensorReadingIn] = Field(default_factory=list)


class SensorReadingOut(BaseModel):
    uuid:      str
    pid:       str
    value:     float
    unit:      str
    timestamp: Optional[datetime] = None


class SensorSnapshotOut(BaseModel):
    uuid:           str
    diagnosticUUID: str
    source:         SensorSource
    readings:       list[SensorReadingOut]
    createdAt:      Optional[datetime] = None
    updatedAt:      Optional[datetime] = None
