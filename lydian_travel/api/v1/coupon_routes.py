from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from lydian_travel.core.security import get_current_user, require_roles
from lydian_travel.dependencies import get_db
from lydian_travel.models.user import User
from lydian_travel.schemas.coupon import (
    CouponCreate,
    CouponResponse,
    CouponValidateRequest,
    CouponValidationResponse,
)
from lydian_travel.services.coupon_service import CouponService

router = APIRouter(prefix="/coupons", tags=["coupons"])

_admin = require_roles("admin")


@router.post("/validate", response_model=CouponValidationResponse)
def validate_coupon(payload: CouponValidateRequest, db: Session = Depends(get_db)):
    """Check a code against an order amount without consuming it."""

    service = CouponService(db)
    return service.validate(
        payload.code,
        payload.amount,
        item_type=payload.item_type,
        item_id=payload.item_id,
    )


@router.post("/redeem", response_model=CouponValidationResponse)
def redeem_coupon(
    payload: CouponValidateRequest,
    _: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    service = CouponService(db)
    return service.redeem(
        payload.code,
        payload.amount,
        item_type=payload.item_type,
        item_id=payload.item_id,
    )


@router.get("", response_model=List[CouponResponse])
def list_coupons(_: User = Depends(_admin), db: Session = Depends(get_db)):
    service = CouponService(db)
    return service.list_coupons()


@router.post("", response_model=CouponResponse, status_code=status.HTTP_201_CREATED)
def create_coupon(
    payload: CouponCreate,
    _: User = Depends(_admin),
    db: Session = Depends(get_db),
):
    service = CouponService(db)
    return service.create_coupon(payload)


__all__ = ["router"]
