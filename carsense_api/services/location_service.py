import logging

from sqlalchemy.orm import Session

from carsense_api.models.location import Location
from carsense_api.models.user import User
from carsense_api.policy import Action
from carsense_api.schemas.location import LocationCreateRequest
from carsense_api.services.vehicle_service import vehicle_service

logger = logging.getLogger(__name__)


def _serialize(loc: Location) -> dict:
    return {
        "uuid":        loc.uuid,
        "vehicleUUID": loc.vehicleUUID,
        "latitude":    loc.latitude,
        "longitude":   loc.longitude,
        "accuracy":    loc.accuracy,
        "recordedAt":  loc.recordedAt,
        "createdAt":   loc.createdAt,
    }


class LocationService:

    def list_locations(self, db: Session, vehicle_uuid: str, caller: User | None, limit: int) -> list[dict]:
        vehicle_service.get_accessible(db, vehicle_uuid, caller, Action.VIEW)
        items = (
            db.query(Location)
            .filter(Location.vehicleUUID == vehicle_uuid)
            .order_by(Location.recordedAt.desc())
            .limit(limit)
            .all()
        )
        return [_serialize(loc) for loc in items]

    def add_location(self, db: Session, vehicle_uuid: str, data: LocationCreateRequest, caller: User | None) -> dict:
        v = vehicle_service.get_accessible(db, vehicle_uuid, caller, Action.UPDATE)
        loc = Location(
            vehicleUUID=v.uuid,
            latitude=data.latitude,
            longitude=data.longitude,
            accuracy=data.accuracy,
        )
        if data.recordedAt is not None:
            loc.recordedAt = data.recordedAt
        db.add(loc)
        db.commit()
        db.refresh(loc)
        logger.info("Location recorded", extra={"vehicleUUID": v.uuid})
        return _serialize(loc)


location_service = LocationService()
