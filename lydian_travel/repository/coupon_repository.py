from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from lydian_travel.models.coupon import Coupon


def get_coupon_by_code(db: Session, code: str) -> Optional[Coupon]:
    return db.query(Coupon).filter(func.upper(Coupon.code) == code.strip().upper()).first()


def list_coupons(db: Session) -> List[Coupon]:
    return db.query(Coupon).order_by(Coupon.id_coupon).all()


def create_coupon(db: Session, coupon: Coupon) -> Coupon:
    db.add(coupon)
    db.flush()
    return coupon
