from sqlalchemy import Column, Integer, String, ForeignKey, TIMESTAMP
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from carsense_api.database import Base, generate_uuid


class Vehicle(Base):
    __tablename__ = "vehicles"

    id                = Column(Integer, primary_key=True, index=True)
    uuid              = Column(String(36), unique=True, nullable=False, index=True, default=generate_uuid)
    ownerId           = Column(String(64), ForeignKey("users.id"), nullable=False, index=True)
    # Unique across soft-deleted rows too; re-registration reactivates the old row.
    vin               = Column(String(17), unique=True, nullable=False, index=True)
    make              = Column(String(100), nullable=False)
    model             = Column(String(100), nullable=False)
    year              = Column(Integer, nullable=False)
    engineType        = Column(String(50), nullable=False)
    fuelType          = Column(String(50), nullable=False)
    transmissionType  = Column(String(50), nullable=False)
    drivetrain        = Column(String(50), nullable=False)
    licensePlate      = Column(String(20), nullable=False)
    odometerUpdatedAt = Column(TIMESTAMP(timezone=True), nullable=True)
    deletedAt         = Column(TIMESTAMP(timezone=True), nullable=True)  # NULL = active
    createdAt         = Column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)
    updatedAt         = Column(TIMESTAMP(timezone=True), server_default=func.now(),
                               onupdate=func.now(), nullable=False)

    # ─── Relationships ─────────────────────────────────────────────────────────
    owner            = relationship("User", back_populates="vehicles")
    diagnostics      = relationship("Diagnostic", back_populates="vehicle", passive_deletes=True)
    locations        = relationship("Location", back_populates="vehicle", passive_deletes=True)
    maintenance_logs = relationship("MaintenanceLog", back_populates="vehicle", passive_deletes=True)
    transfers        = relationship("OwnershipTransfer", back_populates="vehicle")

    @property
    def is_deleted(self) -> bool:
        return self.deletedAt is not None

    def __repr__(self):
        return f"<Vehicle id={self.id} vin={self.vin} owner={self.ownerId}>"
