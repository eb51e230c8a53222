import logging
from datetime import datetime, timezone

from sqlalchemy import update
from sqlalchemy.orm import Session

from carsense_api.models.ownership_transfer import OwnershipTransfer
from carsense_api.models.user import User
from carsense_api.models.vehicle import Vehicle
from carsense_api.policy import Action, enforce, require_caller
from carsense_api.schemas.vehicle import VehicleCreateRequest, VehicleUpdateRequest
from carsense_api.utils.audit import record_ownership_transfer
from carsense_api.utils.exceptions import (
    NotFoundException, DuplicateEntryException, ConflictException, UnauthorizedException,
)

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _serialize(v: Vehicle) -> dict:
    return {
        "id":                v.id,
        "uuid":              v.uuid,
        "ownerId":           v.ownerId,
        "vin":               v.vin,
        "make":              v.make,
        "model":             v.model,
        "year":              v.year,
        "engineType":        v.engineType,
        "fuelType":          v.fuelType,
        "transmissionType":  v.transmissionType,
        "drivetrain":        v.drivetrain,
        "licensePlate":      v.licensePlate,
        "odometerUpdatedAt": v.odometerUpdatedAt,
        "deletedAt":         v.deletedAt,
        "createdAt":         v.createdAt,
        "updatedAt":         v.updatedAt,
    }


def _serialize_transfer(t: OwnershipTransfer) -> dict:
    return {
        "uuid":          t.uuid,
        "vehicleId":     t.vehicleId,
        "vin":           t.vin,
        "fromUserId":    t.fromUserId,
        "toUserId":      t.toUserId,
        "transferredAt": t.transferredAt,
    }


def to_columns(data: VehicleCreateRequest, owner_id: str) -> dict:
    """Map the wire-format create payload onto vehicle columns."""
    return {**data.model_dump(), "ownerId": owner_id}


class VehicleService:

    # ─── Lookups shared with child resources ──────────────────────────────────
    def find_by_uuid(self, db: Session, vehicle_uuid: str, for_update: bool = False) -> Vehicle | None:
        q = db.query(Vehicle).filter(Vehicle.uuid == vehicle_uuid)
        if for_update:
            q = q.with_for_update()
        return q.first()

    def get_accessible(self, db: Session, vehicle_uuid: str, caller: User | None, action: Action) -> Vehicle:
        """Active vehicle the caller may act on, for VIEW/UPDATE-style checks."""
        require_caller(caller)
        v = self.find_by_uuid(db, vehicle_uuid)
        if not v or v.is_deleted:
            logger.warning(f"Vehicle not found: {vehicle_uuid}", extra={"vehicleUUID": vehicle_uuid})
            raise NotFoundException("Vehicle")
        self._enforce(caller, v, action)
        return v

    def _enforce(self, caller: User, v: Vehicle, action: Action) -> None:
        try:
            enforce(caller, v.ownerId, action)
        except UnauthorizedException:
            logger.warning(
                f"User {caller.id} not authorized to {action.value} vehicle {v.uuid}",
                extra={"userId": caller.id, "vehicleId": v.id, "vehicleOwnerId": v.ownerId},
            )
            raise

    # ─── List ─────────────────────────────────────────────────────────────────
    def list_vehicles(self, db: Session, caller: User | None) -> list[dict]:
        if caller is None:
            logger.warning("Unauthorized attempt to access vehicles list")
        require_caller(caller)
        logger.info("Fetching vehicles list", extra={"userId": caller.id, "role": caller.role.value})

        q = db.query(Vehicle).filter(Vehicle.deletedAt.is_(None))
        if not caller.is_admin:
            q = q.filter(Vehicle.ownerId == caller.id)

        items = q.order_by(Vehicle.id).all()
        logger.info(f"Vehicles fetched successfully ({len(items)})", extra={"count": len(items)})
        return [_serialize(v) for v in items]

    # ─── Create / VIN reuse ───────────────────────────────────────────────────
    def create_vehicle(self, db: Session, data: VehicleCreateRequest, caller: User | None) -> tuple[dict, bool]:
        """
        Register a vehicle for the caller.
        Returns (vehicle, restored). A soft-deleted vehicle with the same VIN is
        reactivated and reassigned instead of inserting a new row.
        """
        if caller is None:
            logger.warning("Unauthorized attempt to create a vehicle")
        require_caller(caller)
        logger.info("Attempting to create a vehicle", extra={"userId": caller.id, "vin": data.vin})

        existing = (
            db.query(Vehicle)
            .filter(Vehicle.vin == data.vin)
            .order_by(Vehicle.id)
            .with_for_update()
            .all()
        )
        deleted = next((v for v in existing if v.is_deleted), None)

        if deleted:
            return self._reactivate(db, deleted, caller), True

        if existing:
            logger.warning(f"VIN {data.vin} already registered to an active vehicle", extra={"vin": data.vin})
            raise DuplicateEntryException("VIN already registered", field="vin")

        vehicle = Vehicle(**to_columns(data, caller.id))
        db.add(vehicle)
        db.commit()
        db.refresh(vehicle)
        logger.info("Vehicle created successfully", extra={"vehicleId": vehicle.id, "vin": vehicle.vin})
        return _serialize(vehicle), False

    def _reactivate(self, db: Session, v: Vehicle, caller: User) -> dict:
        logger.info("Found deleted vehicle with matching VIN", extra={"vehicleId": v.id, "vin": v.vin})
        previous_owner = v.ownerId

        if previous_owner != caller.id:
            record_ownership_transfer(db, previous_owner, caller.id, vehicle_id=v.id)

        # Compare-and-set on deletedAt: only one concurrent request may reactivate
        result = db.execute(
            update(Vehicle)
            .where(Vehicle.id == v.id, Vehicle.deletedAt.is_not(None))
            .values(ownerId=caller.id, deletedAt=None, updatedAt=_now())
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            db.rollback()
            raise DuplicateEntryException("VIN already registered", field="vin")

        db.commit()
        db.refresh(v)
        logger.info("Vehicle restored successfully", extra={"vehicleId": v.id, "vin": v.vin})
        return _serialize(v)

    # ─── Get ──────────────────────────────────────────────────────────────────
    def get_vehicle(self, db: Session, vehicle_uuid: str, caller: User | None) -> dict:
        if caller is None:
            logger.warning("Unauthorized attempt to get vehicle details", extra={"vehicleUUID": vehicle_uuid})
        v = self.get_accessible(db, vehicle_uuid, caller, Action.VIEW)
        logger.info("Vehicle fetched successfully", extra={"vehicleId": v.id, "vin": v.vin})
        return _serialize(v)

    # ─── Update / ownership transfer ──────────────────────────────────────────
    def update_vehicle(
        self, db: Session, vehicle_uuid: str, data: VehicleUpdateRequest, caller: User | None,
    ) -> dict:
        if caller is None:
            logger.warning("Unauthorized attempt to update a vehicle")
        require_caller(caller)
        logger.info("Attempting to update vehicle", extra={"userId": caller.id, "vehicleUUID": vehicle_uuid})

        v = self.find_by_uuid(db, vehicle_uuid, for_update=True)
        if not v or v.is_deleted:
            logger.warning("Vehicle not found for update", extra={"vehicleUUID": vehicle_uuid})
            raise NotFoundException("Vehicle")
        self._enforce(caller, v, Action.UPDATE)

        changes = data.model_dump(exclude_unset=True)
        new_owner = changes.get("ownerId")
        expected_owner = v.ownerId

        if new_owner is not None and new_owner != expected_owner:
            self._check_transfer(db, caller, v, new_owner)
            record_ownership_transfer(db, expected_owner, new_owner, vehicle_id=v.id, vin=v.vin)
        else:
            changes.pop("ownerId", None)

        if "vin" in changes and changes["vin"] != v.vin:
            if db.query(Vehicle.id).filter(Vehicle.vin == changes["vin"], Vehicle.id != v.id).first():
                raise DuplicateEntryException("VIN already registered", field="vin")

        logger.debug("Validated vehicle update", extra={"vehicleId": v.id, "update": changes})

        if changes:
            # Conditional on the owner we authorized against
            result = db.execute(
                update(Vehicle)
                .where(Vehicle.id == v.id, Vehicle.ownerId == expected_owner, Vehicle.deletedAt.is_(None))
                .values(**changes, updatedAt=_now())
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                db.rollback()
                raise ConflictException()

        db.commit()
        db.refresh(v)
        logger.info("Vehicle updated successfully", extra={"vehicleId": v.id})
        return _serialize(v)

    def _check_transfer(self, db: Session, caller: User, v: Vehicle, new_owner: str) -> None:
        if not caller.is_admin:
            logger.warning(
                "Non-admin user attempted ownership transfer",
                extra={"userId": caller.id, "vehicleId": v.id, "attemptedOwnerId": new_owner},
            )
        enforce(caller, v.ownerId, Action.TRANSFER, "Only admins can transfer ownership")
        if not db.query(User.id).filter(User.id == new_owner).first():
            raise NotFoundException("User")

    # ─── Soft delete / restore ────────────────────────────────────────────────
    def delete_vehicle(self, db: Session, vehicle_uuid: str, caller: User | None) -> dict:
        if caller is None:
            logger.warning("Unauthorized attempt to delete a vehicle")
        require_caller(caller)
        logger.info("Attempting to delete vehicle", extra={"userId": caller.id, "vehicleUUID": vehicle_uuid})

        v = self.find_by_uuid(db, vehicle_uuid, for_update=True)
        if not v or v.is_deleted:
            logger.warning("Vehicle not found for deletion", extra={"vehicleUUID": vehicle_uuid})
            raise NotFoundException("Vehicle")
        self._enforce(caller, v, Action.DELETE)

        db.execute(
            update(Vehicle)
            .where(Vehicle.uuid == vehicle_uuid)
            .values(deletedAt=_now())
            .execution_options(synchronize_session=False)
        )
        db.commit()
        logger.info("Vehicle soft deleted successfully", extra={"vehicleId": v.id, "vin": v.vin})
        return {"message": "Vehicle soft deleted successfully", "vehicleUUID": v.uuid}

    def restore_vehicle(self, db: Session, vehicle_uuid: str, caller: User | None) -> dict:
        if caller is None:
            logger.warning("Unauthorized attempt to restore a vehicle", extra={"vehicleUUID": vehicle_uuid})
        require_caller(caller)
        logger.info("Attempting to restore vehicle", extra={"userId": caller.id, "vehicleUUID": vehicle_uuid})

        v = self.find_by_uuid(db, vehicle_uuid, for_update=True)
        if not v:
            logger.warning("Vehicle not found for restoration", extra={"vehicleUUID": vehicle_uuid})
            raise NotFoundException("Vehicle")
        self._enforce(caller, v, Action.RESTORE)

        db.execute(
            update(Vehicle)
            .where(Vehicle.uuid == vehicle_uuid)
            .values(deletedAt=None, updatedAt=_now())
            .execution_options(synchronize_session=False)
        )
        db.commit()
        db.refresh(v)
        logger.info("Vehicle restored successfully", extra={"vehicleId": v.id, "vin": v.vin})
        return _serialize(v)

    # ─── Transfer history ─────────────────────────────────────────────────────
    def list_transfers(self, db: Session, vehicle_uuid: str, caller: User | None) -> list[dict]:
        require_caller(caller)
        enforce(caller, None, Action.TRANSFER, "Only admins can view ownership history")
        v = self.find_by_uuid(db, vehicle_uuid)
        if not v:
            raise NotFoundException("Vehicle")
        items = (
            db.query(OwnershipTransfer)
            .filter(OwnershipTransfer.vehicleId == v.id)
            .order_by(OwnershipTransfer.transferredAt.desc(), OwnershipTransfer.id.desc())
            .all()
        )
        return [_serialize_transfer(t) for t in items]


vehicle_service = VehicleService()
