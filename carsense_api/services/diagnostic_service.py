import logging

from sqlalchemy.orm import Session, selectinload

from carsense_api.models.diagnostic import Diagnostic
from carsense_api.models.dtc_instance import DTCInstance
from carsense_api.models.dtc_library import DTCLibrary
from carsense_api.models.sensor_snapshot import SensorReading, SensorSnapshot
from carsense_api.models.user import User
from carsense_api.models.vehicle import Vehicle
from carsense_api.policy import Action, require_caller
from carsense_api.schemas.diagnostic import DiagnosticCreateRequest, DiagnosticUpdateRequest
from carsense_api.schemas.dtc import DTCInstanceCreateRequest, DTCInstanceUpdateRequest
from carsense_api.schemas.sensor import SensorSnapshotCreateRequest
from carsense_api.services.vehicle_service import vehicle_service
from carsense_api.utils.exceptions import NotFoundException

logger = logging.getLogger(__name__)


def _serialize(d: Diagnostic) -> dict:
    return {
        "uuid":         d.uuid,
        "vehicleUUID":  d.vehicleUUID,
        "odometer":     d.odometer,
        "locationLat":  d.locationLat,
        "locationLong": d.locationLong,
        "notes":        d.notes,
        "createdAt":    d.createdAt,
        "updatedAt":    d.updatedAt,
    }


def _serialize_snapshot(s: SensorSnapshot) -> dict:
    return {
        "uuid":           s.uuid,
        "diagnosticUUID": s.diagnosticUUID,
        "source":         s.source.value,
        "readings": [
            {"uuid": r.uuid, "pid": r.pid, "value": r.value, "unit": r.unit, "timestamp": r.timestamp}
            for r in s.readings
        ],
        "createdAt": s.createdAt,
        "updatedAt": s.updatedAt,
    }


def _serialize_dtc(i: DTCInstance) -> dict:
    info = i.dtc_info
    return {
        "uuid":           i.uuid,
        "diagnosticUUID": i.diagnosticUUID,
        "code":           i.code,
        "confirmed":      i.confirmed,
        "description":    info.description if info else None,
        "severity":       info.severity.value if info else None,
        "affectedSystem": info.affectedSystem if info else None,
        "createdAt":      i.createdAt,
        "updatedAt":      i.updatedAt,
    }


class DiagnosticService:

    def _get_diagnostic(self, db: Session, diagnostic_uuid: str, caller: User | None, action: Action) -> Diagnostic:
        require_caller(caller)
        d = db.query(Diagnostic).filter(Diagnostic.uuid == diagnostic_uuid).first()
        if not d:
            raise NotFoundException("Diagnostic")
        # Ownership is inherited from the parent vehicle
        vehicle_service.get_accessible(db, d.vehicleUUID, caller, action)
        return d

    # ─── Diagnostics ──────────────────────────────────────────────────────────
    def list_diagnostics(self, db: Session, vehicle_uuid: str, caller: User | None) -> list[dict]:
        vehicle_service.get_accessible(db, vehicle_uuid, caller, Action.VIEW)
        items = (
            db.query(Diagnostic)
            .filter(Diagnostic.vehicleUUID == vehicle_uuid)
            .order_by(Diagnostic.createdAt.desc())
            .all()
        )
        return [_serialize(d) for d in items]

    def create_diagnostic(
        self, db: Session, vehicle_uuid: str, data: DiagnosticCreateRequest, caller: User | None,
    ) -> dict:
        v: Vehicle = vehicle_service.get_accessible(db, vehicle_uuid, caller, Action.UPDATE)
        d = Diagnostic(vehicleUUID=v.uuid, **data.model_dump())
        db.add(d)
        db.commit()
        db.refresh(d)
        logger.info("Diagnostic created", extra={"diagnosticUUID": d.uuid, "vehicleUUID": v.uuid})
        return _serialize(d)

    def get_diagnostic(self, db: Session, diagnostic_uuid: str, caller: User | None) -> dict:
        return _serialize(self._get_diagnostic(db, diagnostic_uuid, caller, Action.VIEW))

    def update_diagnostic(
        self, db: Session, diagnostic_uuid: str, data: DiagnosticUpdateRequest, caller: User | None,
    ) -> dict:
        d = self._get_diagnostic(db, diagnostic_uuid, caller, Action.UPDATE)
        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(d, field, value)
        db.commit()
        db.refresh(d)
        logger.info("Diagnostic updated", extra={"diagnosticUUID": d.uuid})
        return _serialize(d)

    # ─── Sensor snapshots ─────────────────────────────────────────────────────
    def list_snapshots(self, db: Session, diagnostic_uuid: str, caller: User | None) -> list[dict]:
        self._get_diagnostic(db, diagnostic_uuid, caller, Action.VIEW)
        items = (
            db.query(SensorSnapshot)
            .options(selectinload(SensorSnapshot.readings))
            .filter(SensorSnapshot.diagnosticUUID == diagnostic_uuid)
            .order_by(SensorSnapshot.createdAt.desc())
            .all()
        )
        return [_serialize_snapshot(s) for s in items]

    def create_snapshot(
        self, db: Session, diagnostic_uuid: str, data: SensorSnapshotCreateRequest, caller: User | None,
    ) -> dict:
        d = self._get_diagnostic(db, diagnostic_uuid, caller, Action.UPDATE)
        snapshot = SensorSnapshot(diagnosticUUID=d.uuid, source=data.source)
        for r in data.readings:
            reading = SensorReading(pid=r.pid, value=r.value, unit=r.unit)
            if r.timestamp is not None:
                reading.timestamp = r.timestamp
            snapshot.readings.append(reading)
        db.add(snapshot)
        db.commit()
        db.refresh(snapshot)
        logger.info(
            f"Sensor snapshot stored with {len(data.readings)} readings",
            extra={"snapshotUUID": snapshot.uuid, "diagnosticUUID": d.uuid},
        )
        return _serialize_snapshot(snapshot)

    # ─── DTC instances ────────────────────────────────────────────────────────
    def list_dtcs(self, db: Session, diagnostic_uuid: str, caller: User | None) -> list[dict]:
        self._get_diagnostic(db, diagnostic_uuid, caller, Action.VIEW)
        items = (
            db.query(DTCInstance)
            .options(selectinload(DTCInstance.dtc_info))
            .filter(DTCInstance.diagnosticUUID == diagnostic_uuid)
            .order_by(DTCInstance.createdAt, DTCInstance.code)
            .all()
        )
        return [_serialize_dtc(i) for i in items]

    def add_dtc(
        self, db: Session, diagnostic_uuid: str, data: DTCInstanceCreateRequest, caller: User | None,
    ) -> dict:
        d = self._get_diagnostic(db, diagnostic_uuid, caller, Action.UPDATE)
        if not db.query(DTCLibrary).filter(DTCLibrary.code == data.code).first():
            raise NotFoundException(f"DTC code {data.code}")

        instance = DTCInstance(diagnosticUUID=d.uuid, code=data.code, confirmed=data.confirmed)
        db.add(instance)
        db.commit()
        db.refresh(instance)
        logger.info("DTC recorded", extra={"code": data.code, "diagnosticUUID": d.uuid})
        return _serialize_dtc(instance)

    def update_dtc(self, db: Session, dtc_uuid: str, data: DTCInstanceUpdateRequest, caller: User | None) -> dict:
        require_caller(caller)
        instance = db.query(DTCInstance).filter(DTCInstance.uuid == dtc_uuid).first()
        if not instance:
            raise NotFoundException("DTC instance")
        self._get_diagnostic(db, instance.diagnosticUUID, caller, Action.UPDATE)

        instance.confirmed = data.confirmed
        db.commit()
        db.refresh(instance)
        return _serialize_dtc(instance)

    # ─── Latest data for predictions ──────────────────────────────────────────
    def latest_for_vehicle(self, db: Session, vehicle_uuid: str) -> Diagnostic | None:
        return (
            db.query(Diagnostic)
            .filter(Diagnostic.vehicleUUID == vehicle_uuid)
            .order_by(Diagnostic.createdAt.desc())
            .first()
        )


diagnostic_service = DiagnosticService()
