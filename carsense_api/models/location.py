from sqlalchemy import Column, String, Float, ForeignKey, TIMESTAMP
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from carsense_api.database import Base, generate_uuid


class Location(Base):
    __tablename__ = "locations"

    uuid        = Column(String(36), primary_key=True, default=generate_uuid)
    vehicleUUID = Column(String(36), ForeignKey("vehicles.uuid", ondelete="CASCADE"),
                         nullable=False, index=True)
    latitude    = Column(Float, nullable=False)
    longitude   = Column(Float, nullable=False)
    accuracy    = Column(Float, nullable=True)   # metres
    recordedAt  = Column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)
    createdAt   = Column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)
    updatedAt   = Column(TIMESTAMP(timezone=True), server_default=func.now(),
                         onupdate=func.now(), nullable=False)

    # ─── Relationships ─────────────────────────────────────────────────────────
    vehicle = relationship("Vehicle", back_populates="locations")

    def __repr__(self):
        return f"<Location vehicle={self.vehicleUUID} ({self.latitude}, {self.longitude})>"
