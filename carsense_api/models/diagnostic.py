from sqlalchemy import Column, Integer, String, Float, Text, ForeignKey, TIMESTAMP
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from carsense_api.database import Base, generate_uuid


class Diagnostic(Base):
    __tablename__ = "diagnostics"

    uuid         = Column(String(36), primary_key=True, default=generate_uuid)
    vehicleUUID  = Column(String(36), ForeignKey("vehicles.uuid", ondelete="CASCADE"),
                          nullable=False, index=True)
    odometer     = Column(Integer, nullable=True)
    locationLat  = Column(Float, nullable=True)
    locationLong = Column(Float, nullable=True)
    notes        = Column(Text, nullable=True)
    createdAt    = Column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)
    updatedAt    = Column(TIMESTAMP(timezone=True), server_default=func.now(),
                          onupdate=func.now(), nullable=False)

    # ─── Relationships ─────────────────────────────────────────────────────────
    vehicle       = relationship("Vehicle", back_populates="diagnostics")
    snapshots     = relationship("SensorSnapshot", back_populates="diagnostic", passive_deletes=True)
    dtc_instances = relationship("DTCInstance", back_populates="diagnostic", passive_deletes=True)

    def __repr__(self):
        return f"<Diagnostic uuid={self.uuid} vehicle={self.vehicleUUID}>"
