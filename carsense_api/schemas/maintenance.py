from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator, model_validator

from carsense_api.models.maintenance_log import ServiceType


# ─── Service workshops ────────────────────────────────────────────────────────
class ServiceWorkshopCreateRequest(BaseModel):
    name:    str
    address: Optional[str] = None
    city:    Optional[str] = None
    country: Optional[str] = None
    phone:   Optional[str] = None
    website: Optional[str] = None

    @field_validator("name")
    @classmethod
    def check_name(cls, v):
        if not v.strip(): raise ValueError("Workshop name cannot be empty")
        return v.strip()


class ServiceWorkshopOut(BaseModel):
    uuid:    str
    name:    str
    address: Optional[str] = None
    city:    Optional[str] = None
    country: Optional[str] = None
    phone:   Optional[str] = None
    website: Optional[str] = None


# ─── Maintenance log ──────────────────────────────────────────────────────────
class MaintenanceCreateRequest(BaseModel):
    serviceWorkshopUUID:       Optional[str]   = None
    customServiceWorkshopName: Optional[str]   = None
    serviceDate:               datetime
    serviceType:               ServiceType
    cost:                      Optional[float] = None
    notes:                     Optional[str]   = None

    @field_validator("cost")
    @classmethod
    def check_cost(cls, v):
        if v is not None and v < 0: raise ValueError("Cost cannot be negative")
        return v

    @model_validator(mode="after")
    def check_workshop(self):
        custom = (self.customServiceWorkshopName or "").strip()
        if not self.serviceWorkshopUUID and not custom:
            raise ValueError("Either serviceWorkshopUUID or customServiceWorkshopName is required")
        return self


class MaintenanceUpdateRequest(BaseModel):
    serviceWorkshopUUID:       Optional[str]         = None
    customServiceWorkshopName: Optional[str]         = None
    serviceDate:               Optional[datetime]    = None
    serviceType:               Optional[ServiceType] = None
    cost:                      Optional[float]       = None
    notes:                     Optional[str]         = None

    @field_validator("cost")
    @classmethod
    def check_cost(cls, v):
        if v is not None and v < 0: raise ValueError("Cost cannot be negative")
        return v


class MaintenanceOut(BaseModel):
    uuid:                      str
    vehicleUUID:               str
    serviceWorkshopUUID:       Optional[str]   = None
    customServiceWorkshopName: Optional[str]   = None
    workshopName:              Optional[str]   = None
    serviceDate:               datetime
    serviceType:               ServiceType
    cost:                      Optional[float] = None
    notes:                     Optional[str]   = None
    createdAt:                 Optional[datetime] = None
    updatedAt:                 Optional[datetime] = None
