import logging
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from carsense_api.models.ownership_transfer import OwnershipTransfer

logger = logging.getLogger(__name__)


def record_ownership_transfer(
    db: Session,
    from_user_id: str,
    to_user_id: str,
    vehicle_id: int | None = None,
    vin: str | None = None,
) -> OwnershipTransfer:
    """
    Append an ownership transfer record.

    Args:
        db:           Active DB session (flushed, NOT committed; the caller commits)
        from_user_id: Previous owner
        to_user_id:   New owner
        vehicle_id:   Surrogate id of the vehicle, when known
        vin:          VIN of the vehicle, when known

    Usage:
        record_ownership_transfer(db, vehicle.ownerId, caller.id, vehicle_id=vehicle.id)
        db.commit()
    """
    if vehicle_id is None and vin is None:
        raise ValueError("An ownership transfer needs a vehicle id or a VIN")

    entry = OwnershipTransfer(
        vehicleId=vehicle_id,
        vin=vin,
        fromUserId=from_user_id,
        toUserId=to_user_id,
        transferredAt=datetime.now(timezone.utc),
    )
    db.add(entry)
    # Do NOT commit here; the transfer commits with the caller's transaction
    db.flush()
    logger.info(
        "Ownership transfer logged",
        extra={"vehicleId": vehicle_id, "vin": vin, "fromUserId": from_user_id, "toUserId": to_user_id},
    )
    return entry
