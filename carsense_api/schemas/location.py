from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class LocationCreateRequest(BaseModel):
    latitude:   float           = Field(..., ge=-90, le=90)
    longitude:  float           = Field(..., ge=-180, le=180)
    accuracy:   Optional[float] = Field(None, ge=0)
    recordedAt: Optional[datetime] = None


class LocationOut(BaseModel):
    uuid:        str
    vehicleUUID: str
    latitude:    float
    longitude:   float
    accuracy:    Optional[float]    = None
    recordedAt:  Optional[datetime] = None
    createdAt:   Optional[datetime] = None
