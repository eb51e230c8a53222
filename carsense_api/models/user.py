import enum
from sqlalchemy import Column, String, Enum, TIMESTAMP
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from carsense_api.database import Base, enum_values


class UserRole(str, enum.Enum):
    USER  = "user"
    ADMIN = "admin"


class User(Base):
    """
    Mirror of the auth provider's users table.
    Rows are created by the auth provider; this service only reads them.
    """
    __tablename__ = "users"

    id        = Column(String(64), primary_key=True)
    name      = Column(String(150), nullable=False)
    email     = Column(String(255), unique=True, nullable=False, index=True)
    role      = Column(Enum(UserRole, name="role", values_callable=enum_values),
                       default=UserRole.USER, nullable=False)
    createdAt = Column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)
    updatedAt = Column(TIMESTAMP(timezone=True), server_default=func.now(),
                       onupdate=func.now(), nullable=False)

    # ─── Relationships ─────────────────────────────────────────────────────────
    vehicles = relationship("Vehicle", back_populates="owner")

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def __repr__(self):
        return f"<User id={self.id} email={self.email} role={self.role}>"
