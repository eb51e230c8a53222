import enum
from sqlalchemy import Column, String, Text, Enum, TIMESTAMP
from sqlalchemy.sql import func
from carsense_api.database import Base, enum_values, generate_uuid


class DTCSeverity(str, enum.Enum):
    LOW    = "low"
    MEDIUM = "medium"
    HIGH   = "high"


class DTCLibrary(Base):
    __tablename__ = "dtcLibrary"

    uuid           = Column(String(36), primary_key=True, default=generate_uuid)
    code           = Column(String(5), unique=True, nullable=False, index=True)
    description    = Column(Text, nullable=False)
    severity       = Column(Enum(DTCSeverity, name="severity", values_callable=enum_values), nullable=False)
    affectedSystem = Column(String(100), nullable=True)
    category       = Column(String(100), nullable=True)
    createdAt      = Column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)
    updatedAt      = Column(TIMESTAMP(timezone=True), server_default=func.now(),
                            onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<DTCLibrary code={self.code} severity={self.severity}>"
