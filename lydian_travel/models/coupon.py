from sqlalchemy import JSON, Column, DateTime, Integer, Numeric, String

from lydian_travel.core.database import Base


class Coupon(Base):
    __tablename__ = "coupons"

    id_coupon = Column(Integer, primary_key=True, index=True)
    code = Column(String(40), unique=True, nullable=False, index=True)
    type = Column(String(20), nullable=False)
    value = Column(Numeric(10, 2), nullable=False)
    min_amount = Column(Numeric(10, 2), nullable=True)
    max_discount = Column(Numeric(10, 2), nullable=True)
    valid_from = Column(DateTime(timezone=True), nullable=False)
    valid_until = Column(DateTime(timezone=True), nullable=False)
    usage_limit = Column(Integer, nullable=True)
    used_count = Column(Integer, nullable=False, default=0)
    applicable_items = Column(JSON, nullable=True)
    applicable_categories = Column(JSON, nullable=True)
