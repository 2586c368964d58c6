from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, func
from sqlalchemy.orm import relationship

from lydian_travel.core.database import Base


class UserSession(Base):
    __tablename__ = "sessions"

    id_session = Column(Integer, primary_key=True, index=True)
    id_user = Column(Integer, ForeignKey("users.id_user", ondelete="CASCADE"), nullable=False)
    access_token = Column(String, nullable=False, index=True)
    refresh_token = Column(String, nullable=False, index=True)
    is_active = Column(Boolean, default=True)
    remember_me = Column(Boolean, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    expires_at = Column(DateTime(timezone=True), nullable=True)

    user = relationship("User", back_populates="sessions")
