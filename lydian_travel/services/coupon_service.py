import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from lydian_travel.models.coupon import Coupon
from lydian_travel.repository import coupon_repository
from lydian_travel.schemas.coupon import CouponCreate
from lydian_travel.services.booking_utils import ensure_utc, to_money, utcnow

logger = logging.getLogger(__name__)

COUPON_TYPE_PERCENTAGE = "percentage"
COUPON_TYPE_FIXED = "fixed_amount"


@dataclass(frozen=True)
class CouponCheck:
    valid: bool
    code: str
    discount: Decimal = Decimal("0.00")
    final_amount: Optional[Decimal] = None
    error: Optional[str] = None


def calculate_discount(coupon: Coupon, amount: Decimal) -> Decimal:
    value = Decimal(str(coupon.value))
    if coupon.type == COUPON_TYPE_PERCENTAGE:
        discount = amount * value / 100
        if coupon.max_discount is not None:
            discount = min(discount, Decimal(str(coupon.max_discount)))
    else:
        discount = value
    return to_money(min(discount, amount))


def check_coupon(
    coupon: Optional[Coupon],
    code: str,
    amount: Decimal,
    *,
    item_type: Optional[str] = None,
    item_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> CouponCheck:
    """Run the coupon rules in order and stop at the first failing one."""
    current = ensure_utc(now) if now is not None else utcnow()
    normalized = code.strip().upper()

    if coupon is None:
        return CouponCheck(valid=False, code=normalized, error="Invalid coupon code")

    if not ensure_utc(coupon.valid_from) <= current <= ensure_utc(coupon.valid_until):
        return CouponCheck(valid=False, code=coupon.code, error="Coupon has expired")

    if coupon.usage_limit is not None and (coupon.used_count or 0) >= coupon.usage_limit:
        return CouponCheck(valid=False, code=coupon.code, error="Coupon usage limit reached")

    if coupon.min_amount is not None and amount < Decimal(str(coupon.min_amount)):
        minimum = Decimal(str(coupon.min_amount)).normalize()
        return CouponCheck(
            valid=False,
            code=coupon.code,
            error=f"Minimum booking amount of {minimum:f} TRY required",
        )

    if coupon.applicable_items and item_id is not None and item_id not in coupon.applicable_items:
        return CouponCheck(valid=False, code=coupon.code, error="Coupon is not valid for this item")

    if (
        coupon.applicable_categories
        and item_type is not None
        and item_type not in coupon.applicable_categories
    ):
        return CouponCheck(
            valid=False,
            code=coupon.code,
            error="Coupon is not valid for this category",
        )

    discount = calculate_discount(coupon, amount)
    return CouponCheck(
        valid=True,
        code=coupon.code,
        discount=discount,
        final_amount=to_money(amount - discount),
    )


class CouponService:
    def __init__(self, db: Session):
        self.db = db

    def validate(
        self,
        code: str,
        amount: Decimal,
        *,
        item_type: Optional[str] = None,
        item_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> CouponCheck:
        coupon = coupon_repository.get_coupon_by_code(self.db, code)
        return check_coupon(
            coupon,
            code,
            to_money(amount),
            item_type=item_type,
            item_id=item_id,
            now=now,
        )

    def redeem(
        self,
        code: str,
        amount: Decimal,
        *,
        item_type: Optional[str] = None,
        item_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> CouponCheck:
        coupon = coupon_repository.get_coupon_by_code(self.db, code)
        result = check_coupon(
            coupon,
            code,
            to_money(amount),
            item_type=item_type,
            item_id=item_id,
            now=now,
        )
        if not result.valid:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=result.error)

        coupon.used_count = (coupon.used_count or 0) + 1
        try:
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Could not redeem coupon",
            ) from exc

        logger.info("Coupon %s redeemed (%s uses)", coupon.code, coupon.used_count)
        return result

    def list_coupons(self) -> List[Coupon]:
        return coupon_repository.list_coupons(self.db)

    def create_coupon(self, payload: CouponCreate) -> Coupon:
        data = payload.model_dump()
        data["code"] = data["code"].strip().upper()
        if coupon_repository.get_coupon_by_code(self.db, data["code"]) is not None:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Coupon code already exists",
            )

        coupon = Coupon(**data, used_count=0)
        try:
            coupon_repository.create_coupon(self.db, coupon)
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Coupon code already exists",
            ) from exc
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Could not create coupon",
            ) from exc

        self.db.refresh(coupon)
        return coupon
