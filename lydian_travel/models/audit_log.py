from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, func

from lydian_travel.core.database import Base


class AuditLog(Base):
    __tablename__ = "audit_log"

    id_log = Column(Integer, primary_key=True, index=True)
    entity = Column(String(100), nullable=False)
    action = Column(Text, nullable=False)
    message = Column(Text, nullable=False)
    state = Column(String(30), nullable=False)
    timestamp = Column(DateTime(timezone=True), server_default=func.now())
    id_user = Column(Integer, ForeignKey("users.id_user", ondelete="SET NULL"), nullable=True)
