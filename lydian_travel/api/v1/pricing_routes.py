"""Dynamic price quotes and cancellation fee previews."""

from dataclasses import asdict

from fastapi import APIRouter

from lydian_travel.core.config import settings
from lydian_travel.schemas.pricing import (
    CancellationQuoteRequest,
    CancellationQuoteResponse,
    DynamicPriceRequest,
    DynamicPriceResponse,
)
from lydian_travel.services.pricing_engine import (
    Availability,
    PricingEngine,
    PricingRequest,
    ReservationManager,
)

router = APIRouter(prefix="/pricing", tags=["pricing"])


@router.post("/dynamic", response_model=DynamicPriceResponse)
def dynamic_price(payload: DynamicPriceRequest):
    result = PricingEngine.calculate_dynamic_price(
        payload.base_price,
        PricingRequest(
            item_type=payload.item_type,
            check_in_date=payload.check_in_date,
            adults=payload.adults,
            children=payload.children,
            check_out_date=payload.check_out_date,
        ),
        Availability(available=payload.available, capacity=payload.capacity),
        currency=settings.DEFAULT_CURRENCY,
    )
    return result.as_dict()


@router.post("/cancellation", response_model=CancellationQuoteResponse)
def cancellation_quote(payload: CancellationQuoteRequest):
    """Preview the fee charged if the reservation were cancelled now (or at ``cancelled_at``)."""

    policy = ReservationManager.cancellation_policy(payload.check_in_date, payload.item_type)
    fee = ReservationManager.calculate_cancellation_fee(
        payload.final_price,
        payload.check_in_date,
        policy,
        cancelled_at=payload.cancelled_at,
    )
    return {
        "item_type": policy.item_type,
        "free_cancellation_days": policy.free_cancellation_days,
        "free_cancellation_until": policy.free_cancellation_until,
        "fees": [asdict(row) for row in policy.fees],
        "cancellation_fee": fee,
        "refund_amount": max(payload.final_price - fee, 0),
        "confirmation_code": ReservationManager.generate_confirmation_code(),
    }


__all__ = ["router"]
