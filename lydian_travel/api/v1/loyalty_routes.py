"""Lydian Miles account routes."""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from lydian_travel.core.security import get_current_user
from lydian_travel.dependencies import get_db
from lydian_travel.models.user import User
from lydian_travel.schemas.loyalty import (
    MilesSummaryResponse,
    MilesTransactionResponse,
    RedeemMilesRequest,
    RedeemMilesResponse,
    ReferralRequest,
    ReferralResponse,
    TierProgressResponse,
)
from lydian_travel.services.loyalty_service import LoyaltyService

router = APIRouter(prefix="/loyalty", tags=["loyalty"])


@router.get("/summary", response_model=MilesSummaryResponse)
def miles_summary(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    service = LoyaltyService(db)
    return service.get_summary(current_user)


@router.get("/transactions", response_model=List[MilesTransactionResponse])
def miles_transactions(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    service = LoyaltyService(db)
    return service.list_transactions(current_user)


@router.get("/tier-progress", response_model=TierProgressResponse)
def tier_progress(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    service = LoyaltyService(db)
    return service.get_tier_progress(current_user)


@router.post("/redeem", response_model=RedeemMilesResponse)
def redeem_miles(
    payload: RedeemMilesRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Spend miles for a TRY discount; amounts must be multiples of 100."""

    service = LoyaltyService(db)
    return service.redeem(current_user, payload.miles)


@router.post("/referrals", response_model=ReferralResponse)
def apply_referral(
    payload: ReferralRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    service = LoyaltyService(db)
    return service.apply_referral(current_user, payload.referral_code)


__all__ = ["router"]
