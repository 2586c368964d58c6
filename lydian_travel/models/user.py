from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text, func
from sqlalchemy.orm import relationship

from lydian_travel.core.database import Base

USER_ROLES = ("traveler", "property_owner", "vehicle_owner", "transfer_owner", "admin")


class User(Base):
    __tablename__ = "users"

    id_user = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False)
    lastname = Column(String(200), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    phone = Column(String(20), nullable=False)
    imageurl = Column(Text, nullable=True)
    birthdate = Column(DateTime, nullable=True)
    city = Column(String(100), nullable=True)
    password_hash = Column(Text, nullable=False)
    role = Column(String(30), nullable=False, default="traveler")
    status = Column(String(30), nullable=False, default="active")
    email_verified = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    sessions = relationship("UserSession", back_populates="user", cascade="all, delete-orphan")

    @property
    def full_name(self) -> str:
        return f"{self.name} {self.lastname}".strip()

    def __repr__(self) -> str:
        return f"<User(id_user={self.id_user}, email={self.email}, role={self.role})>"
