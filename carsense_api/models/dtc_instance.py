from sqlalchemy import Column, String, Boolean, ForeignKey, TIMESTAMP
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from carsense_api.database import Base, generate_uuid


class DTCInstance(Base):
    """A trouble code observed during one diagnostic session."""
    __tablename__ = "dtcInstances"

    uuid           = Column(String(36), primary_key=True, default=generate_uuid)
    diagnosticUUID = Column(String(36), ForeignKey("diagnostics.uuid", ondelete="CASCADE"),
                            nullable=False, index=True)
    code           = Column(String(5), ForeignKey("dtcLibrary.code"), nullable=False)
    confirmed      = Column(Boolean, default=False, nullable=False)
    createdAt      = Column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)
    updatedAt      = Column(TIMESTAMP(timezone=True), server_default=func.now(),
                            onupdate=func.now(), nullable=False)

    # ─── Relationships ─────────────────────────────────────────────────────────
    diagnostic = relationship("Diagnostic", back_populates="dtc_instances")
    dtc_info   = relationship("DTCLibrary")

    def __repr__(self):
        return f"<DTCInstance code={self.code} diagnostic={self.diagnosticUUID}>"
