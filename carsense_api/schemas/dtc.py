from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from carsense_api.models.dtc_library import DTCSeverity
from carsense_api.utils.validation import normalize_dtc_code


# ─── DTC library ──────────────────────────────────────────────────────────────
class DTCLibraryCreateRequest(BaseModel):
    code:           str
    description:    str
    severity:       DTCSeverity
    affectedSystem: Optional[str] = None
    category:       Optional[str] = None

    @field_validator("code")
    @classmethod
    def check_code(cls, v):
        return normalize_dtc_code(v)

    @field_validator("description")
    @classmethod
    def check_desc(cls, v):
        if not v.strip(): raise ValueError("Description cannot be empty")
        return v.strip()


class DTCLibraryUpdateRequest(BaseModel):
    description:    Optional[str]         = None
    severity:       Optional[DTCSeverity] = None
    affectedSystem: Optional[str]         = None
    category:       Optional[str]         = None


class DTCLibraryOut(BaseModel):
    uuid:           str
    code:           str
    description:    str
    severity:       DTCSeverity
    affectedSystem: Optional[str] = None
    category:       Optional[str] = None
    createdAt:      Optional[datetime] = None
    updatedAt:      Optional[datetime] = None


# ─── DTC instances ────────────────────────────────────────────────────────────
class DTCInstanceCreateRequest(BaseModel):
    code:      str
    confirmed: bool = False

    @field_validator("code")
    @classmethod
    def check_code(cls, v):
        return normalize_dtc_code(v)


class DTCInstanceUpdateRequest(BaseModel):
    confirmed: bool


class DTCInstanceOut(BaseModel):
    uuid:           str
    diagnosticUUID: str
    code:           str
    confirmed:      bool
    description:    Optional[str]         = None
    severity:       Optional[DTCSeverity] = None
    affectedSystem: Optional[str]         = None
    createdAt:      Optional[datetime]    = None
    updatedAt:      Optional[datetime]    = None
