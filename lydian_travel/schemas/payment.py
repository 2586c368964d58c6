from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field as PydanticField


class CardDetails(BaseModel):
    number: str
    expiry_month: int = PydanticField(..., ge=1, le=12)
    expiry_year: int
    cvv: str
    holder_name: str


class BillingAddress(BaseModel):
    full_name: str
    address: Optional[str] = None
    city: str
    country: str = "TR"
    zip_code: Optional[str] = None


class PaymentRequest(BaseModel):
    amount: Decimal
    currency: str = "TRY"
    payment_method: Literal["card", "bank_transfer", "wallet"] = "card"
    card: Optional[CardDetails] = None
    billing: BillingAddress


class RefundRequest(BaseModel):
    transaction_id: str
    amount: Optional[Decimal] = PydanticField(None, gt=0)
    reason: Optional[str] = PydanticField(None, max_length=500)


class PaymentIntentCreate(BaseModel):
    amount: Optional[Decimal] = None
    booking_id: Optional[str] = None
    customer_email: Optional[str] = None
    currency: str = "try"


class PaymentIntentResponse(BaseModel):
    payment_intent_id: str
    client_secret: str
    amount: int
    currency: str
    booking_id: str


class PaymentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id_payment: int
    id_booking: int
    transaction_id: str
    kind: str
    method: str
    status: str
    amount: Decimal
    currency: str
    error_message: Optional[str] = None
    provider_response: Dict[str, Any] = PydanticField(default_factory=dict)
    processed_at: Optional[datetime] = None
