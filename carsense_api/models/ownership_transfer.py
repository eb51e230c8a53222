from sqlalchemy import Column, Integer, String, ForeignKey, TIMESTAMP
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from carsense_api.database import Base, generate_uuid


class OwnershipTransfer(Base):
    """Append-only record of a vehicle changing owner. Never updated or deleted."""
    __tablename__ = "ownershipTransfers"

    id            = Column(Integer, primary_key=True, index=True)
    uuid          = Column(String(36), unique=True, nullable=False, default=generate_uuid)
    vehicleId     = Column(Integer, ForeignKey("vehicles.id"), nullable=True, index=True)
    vin           = Column(String(17), nullable=True, index=True)
    fromUserId    = Column(String(64), ForeignKey("users.id"), nullable=False)
    toUserId      = Column(String(64), ForeignKey("users.id"), nullable=False)
    transferredAt = Column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)

    # ─── Relationships ─────────────────────────────────────────────────────────
    vehicle = relationship("Vehicle", back_populates="transfers")

    def __repr__(self):
        return f"<OwnershipTransfer id={self.id} vehicle={self.vehicleId} {self.fromUserId}->{self.toUserId}>"
