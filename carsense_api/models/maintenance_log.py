import enum
from sqlalchemy import Column, String, Float, Text, Enum, ForeignKey, TIMESTAMP
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from carsense_api.database import Base, enum_values, generate_uuid


class ServiceType(str, enum.Enum):
    OIL_CHANGE               = "oil_change"
    BRAKE_REPLACEMENT        = "brake_replacement"
    ENGINE_DIAGNOSTICS       = "engine_diagnostics"
    TIRE_ROTATION            = "tire_rotation"
    BATTERY_REPLACEMENT      = "battery_replacement"
    COOLANT_FLUSH            = "coolant_flush"
    TRANSMISSION_SERVICE     = "transmission_service"
    GENERAL_INSPECTION       = "general_inspection"
    TIMING_BELT_REPLACEMENT  = "timing_belt_replacement"
    TIMING_CHAIN_REPLACEMENT = "timing_chain_replacement"
    SPARK_PLUG_REPLACEMENT   = "spark_plug_replacement"
    AIR_FILTER_REPLACEMENT   = "air_filter_replacement"
    FUEL_FILTER_REPLACEMENT  = "fuel_filter_replacement"
    AC_SERVICE               = "ac_service"
    SUSPENSION_INSPECTION    = "suspension_inspection"
    WHEEL_ALIGNMENT          = "wheel_alignment"
    EXHAUST_REPAIR           = "exhaust_repair"
    CLUTCH_REPLACEMENT       = "clutch_replacement"
    SOFTWARE_UPDATE          = "software_update"
    ENGINE_OVERHAUL          = "engine_overhaul"


class MaintenanceLog(Base):
    __tablename__ = "maintenanceLog"

    uuid                      = Column(String(36), primary_key=True, default=generate_uuid)
    vehicleUUID               = Column(String(36), ForeignKey("vehicles.uuid", ondelete="CASCADE"),
                                       nullable=False, index=True)
    serviceWorkshopUUID       = Column(String(36), ForeignKey("serviceWorkshops.uuid", ondelete="CASCADE"),
                                       nullable=True)
    customServiceWorkshopName = Column(String(200), nullable=True)
    serviceDate               = Column(TIMESTAMP(timezone=True), nullable=False)
    serviceType               = Column(Enum(ServiceType, name="serviceType", values_callable=enum_values),
                                       nullable=False)
    cost                      = Column(Float, nullable=True)
    notes                     = Column(Text, nullable=True)
    createdAt                 = Column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)
    updatedAt                 = Column(TIMESTAMP(timezone=True), server_default=func.now(),
                                       onupdate=func.now(), nullable=False)

    # ─── Relationships ─────────────────────────────────────────────────────────
    vehicle  = relationship("Vehicle", back_populates="maintenance_logs")
    workshop = relationship("ServiceWorkshop", back_populates="maintenance_logs")

    def __repr__(self):
        return f"<MaintenanceLog uuid={self.uuid} vehicle={self.vehicleUUID} type={self.serviceType}>"
