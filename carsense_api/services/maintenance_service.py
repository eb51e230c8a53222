import logging

from sqlalchemy.orm import Session, selectinload

from carsense_api.models.maintenance_log import MaintenanceLog
from carsense_api.models.service_workshop import ServiceWorkshop
from carsense_api.models.user import User
from carsense_api.policy import Action, enforce, require_caller
from carsense_api.schemas.maintenance import (
    MaintenanceCreateRequest, MaintenanceUpdateRequest, ServiceWorkshopCreateRequest,
)
from carsense_api.services.vehicle_service import vehicle_service
from carsense_api.utils.exceptions import NotFoundException, ValidationException

logger = logging.getLogger(__name__)


def _serialize(m: MaintenanceLog) -> dict:
    return {
        "uuid":                      m.uuid,
        "vehicleUUID":               m.vehicleUUID,
        "serviceWorkshopUUID":       m.serviceWorkshopUUID,
        "customServiceWorkshopName": m.customServiceWorkshopName,
        "workshopName":              m.workshop.name if m.workshop else m.customServiceWorkshopName,
        "serviceDate":               m.serviceDate,
        "serviceType":               m.serviceType.value,
        "cost":                      m.cost,
        "notes":                     m.notes,
        "createdAt":                 m.createdAt,
        "updatedAt":                 m.updatedAt,
    }


def _serialize_workshop(w: ServiceWorkshop) -> dict:
    return {
        "uuid":    w.uuid,
        "name":    w.name,
        "address": w.address,
        "city":    w.city,
        "country": w.country,
        "phone":   w.phone,
        "website": w.website,
    }


class MaintenanceService:

    def _check_workshop(self, db: Session, workshop_uuid: str | None) -> None:
        if workshop_uuid and not db.query(ServiceWorkshop).filter(ServiceWorkshop.uuid == workshop_uuid).first():
            raise NotFoundException("Service workshop")

    # ─── Maintenance log ──────────────────────────────────────────────────────
    def list_records(self, db: Session, vehicle_uuid: str, caller: User | None) -> list[dict]:
        vehicle_service.get_accessible(db, vehicle_uuid, caller, Action.VIEW)
        items = (
            db.query(MaintenanceLog)
            .options(selectinload(MaintenanceLog.workshop))
            .filter(MaintenanceLog.vehicleUUID == vehicle_uuid)
            .order_by(MaintenanceLog.serviceDate.desc())
            .all()
        )
        return [_serialize(m) for m in items]

    def create_record(
        self, db: Session, vehicle_uuid: str, data: MaintenanceCreateRequest, caller: User | None,
    ) -> dict:
        v = vehicle_service.get_accessible(db, vehicle_uuid, caller, Action.UPDATE)
        self._check_workshop(db, data.serviceWorkshopUUID)

        record = MaintenanceLog(vehicleUUID=v.uuid, **data.model_dump())
        db.add(record)
        db.commit()
        db.refresh(record)
        logger.info(
            f"Maintenance logged: {record.serviceType.value}",
            extra={"vehicleUUID": v.uuid, "maintenanceUUID": record.uuid},
        )
        return _serialize(record)

    def update_record(
        self, db: Session, record_uuid: str, data: MaintenanceUpdateRequest, caller: User | None,
    ) -> dict:
        require_caller(caller)
        m = db.query(MaintenanceLog).filter(MaintenanceLog.uuid == record_uuid).first()
        if not m:
            raise NotFoundException("Maintenance record")
        vehicle_service.get_accessible(db, m.vehicleUUID, caller, Action.UPDATE)

        changes = data.model_dump(exclude_unset=True)
        self._check_workshop(db, changes.get("serviceWorkshopUUID"))
        for field, value in changes.items():
            if value is None and field in ("serviceDate", "serviceType"):
                continue
            setattr(m, field, value)

        if not m.serviceWorkshopUUID and not (m.customServiceWorkshopName or "").strip():
            db.rollback()
            raise ValidationException(
                "Either serviceWorkshopUUID or customServiceWorkshopName is required",
                field="serviceWorkshopUUID",
            )

        db.commit()
        db.refresh(m)
        logger.info("Maintenance record updated", extra={"maintenanceUUID": m.uuid})
        return _serialize(m)

    # ─── Workshops ────────────────────────────────────────────────────────────
    def list_workshops(self, db: Session, caller: User | None) -> list[dict]:
        require_caller(caller)
        return [_serialize_workshop(w) for w in db.query(ServiceWorkshop).order_by(ServiceWorkshop.name).all()]

    def create_workshop(self, db: Session, data: ServiceWorkshopCreateRequest, caller: User | None) -> dict:
        enforce(caller, None, Action.MANAGE_LIBRARY, "Only admins can add service workshops")
        w = ServiceWorkshop(**data.model_dump())
        db.add(w)
        db.commit()
        db.refresh(w)
        logger.info(f"Service workshop '{w.name}' created", extra={"userId": caller.id})
        return _serialize_workshop(w)


maintenance_service = MaintenanceService()
