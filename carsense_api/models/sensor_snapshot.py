import enum
from sqlalchemy import Column, String, Float, Enum, ForeignKey, TIMESTAMP
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from carsense_api.database import Base, enum_values, generate_uuid


class SensorSource(str, enum.Enum):
    OBD2         = "obd2"
    USER_INPUT   = "user_input"
    AI_ESTIMATED = "ai_estimated"
    SIMULATED    = "simulated"


class SensorSnapshot(Base):
    __tablename__ = "sensorSnapshots"

    uuid           = Column(String(36), primary_key=True, default=generate_uuid)
    diagnosticUUID = Column(String(36), ForeignKey("diagnostics.uuid", ondelete="CASCADE"),
                            nullable=False, index=True)
    source         = Column(Enum(SensorSource, name="source", values_callable=enum_values),
                            default=SensorSource.OBD2, nullable=False)
    createdAt      = Column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)
    updatedAt      = Column(TIMESTAMP(timezone=True), server_default=func.now(),
                            onupdate=func.now(), nullable=False)

    # ─── Relationships ─────────────────────────────────────────────────────────
    diagnostic = relationship("Diagnostic", back_populates="snapshots")
    readings   = relationship("SensorReading", back_populates="snapshot",
                              cascade="all, delete-orphan", passive_deletes=True)

    def __repr__(self):
        return f"<SensorSnapshot uuid={self.uuid} diagnostic={self.diagnosticUUID}>"


class SensorReading(Base):
    __tablename__ = "sensorReadings"

    uuid               = Column(String(36), primary_key=True, default=generate_uuid)
    sensorSnapshotUUID = Column(String(36), ForeignKey("sensorSnapshots.uuid", ondelete="CASCADE"),
                                nullable=False, index=True)
    pid                = Column(String(50), nullable=False)   # e.g. "rpm", "coolant_temp"
    value              = Column(Float, nullable=False)
    unit               = Column(String(20), nullable=False)   # e.g. "RPM", "°C", "%"
    timestamp          = Column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)

    # ─── Relationships ─────────────────────────────────────────────────────────
    snapshot = relationship("SensorSnapshot", back_populates="readings")

    def __repr__(self):
        return f"<SensorReading pid={self.pid} value={self.value}{self.unit}>"
