import logging

from sqlalchemy import or_
from sqlalchemy.orm import Session

from carsense_api.models.dtc_library import DTCLibrary
from carsense_api.models.user import User
from carsense_api.policy import Action, enforce, require_caller
from carsense_api.schemas.dtc import DTCLibraryCreateRequest, DTCLibraryUpdateRequest
from carsense_api.utils.exceptions import NotFoundException, DuplicateEntryException
from carsense_api.utils.validation import normalize_dtc_code

logger = logging.getLogger(__name__)


def _serialize(e: DTCLibrary) -> dict:
    return {
        "uuid":           e.uuid,
        "code":           e.code,
        "description":    e.description,
        "severity":       e.severity.value,
        "affectedSystem": e.affectedSystem,
        "category":       e.category,
        "createdAt":      e.createdAt,
        "updatedAt":      e.updatedAt,
    }


def _find(db: Session, code: str) -> DTCLibrary:
    try:
        code = normalize_dtc_code(code)
    except ValueError:
        raise NotFoundException(f"DTC code {code}")
    entry = db.query(DTCLibrary).filter(DTCLibrary.code == code).first()
    if not entry:
        raise NotFoundException(f"DTC code {code}")
    return entry


class DTCLibraryService:

    def list_codes(
        self, db: Session, caller: User | None, search: str | None, severity: str | None,
    ) -> list[dict]:
        require_caller(caller)
        q = db.query(DTCLibrary)
        if search:
            kw = f"%{search.strip()}%"
            q = q.filter(or_(
                DTCLibrary.code.ilike(kw),
                DTCLibrary.description.ilike(kw),
                DTCLibrary.affectedSystem.ilike(kw),
            ))
        if severity:
            q = q.filter(DTCLibrary.severity == severity)
        return [_serialize(e) for e in q.order_by(DTCLibrary.code).all()]

    def get_code(self, db: Session, code: str, caller: User | None) -> dict:
        require_caller(caller)
        return _serialize(_find(db, code))

    def create_code(self, db: Session, data: DTCLibraryCreateRequest, caller: User | None) -> dict:
        enforce(caller, None, Action.MANAGE_LIBRARY, "Only admins can edit the DTC library")
        if db.query(DTCLibrary).filter(DTCLibrary.code == data.code).first():
            raise DuplicateEntryException("DTC code already exists", field="code")

        entry = DTCLibrary(**data.model_dump())
        db.add(entry)
        db.commit()
        db.refresh(entry)
        logger.info(f"DTC {entry.code} added to library", extra={"userId": caller.id})
        return _serialize(entry)

    def update_code(self, db: Session, code: str, data: DTCLibraryUpdateRequest, caller: User | None) -> dict:
        enforce(caller, None, Action.MANAGE_LIBRARY, "Only admins can edit the DTC library")
        entry = _find(db, code)
        for field, value in data.model_dump(exclude_unset=True).items():
            if value is None and field in ("description", "severity"):
                continue
            setattr(entry, field, value)
        db.commit()
        db.refresh(entry)
        logger.info(f"DTC {entry.code} updated", extra={"userId": caller.id})
        return _serialize(entry)


dtc_library_service = DTCLibraryService()
