from sqlalchemy import Column, String, TIMESTAMP
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from carsense_api.database import Base, generate_uuid


class ServiceWorkshop(Base):
    __tablename__ = "serviceWorkshops"

    uuid      = Column(String(36), primary_key=True, default=generate_uuid)
    name      = Column(String(200), nullable=False)
    address   = Column(String(300), nullable=True)
    city      = Column(String(100), nullable=True)
    country   = Column(String(100), nullable=True)
    phone     = Column(String(50), nullable=True)
    website   = Column(String(300), nullable=True)
    createdAt = Column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)
    updatedAt = Column(TIMESTAMP(timezone=True), server_default=func.now(),
                       onupdate=func.now(), nullable=False)

    # ─── Relationships ─────────────────────────────────────────────────────────
    maintenance_logs = relationship("MaintenanceLog", back_populates="workshop", passive_deletes=True)

    def __repr__(self):
        return f"<ServiceWorkshop uuid={self.uuid} name={self.name}>"
