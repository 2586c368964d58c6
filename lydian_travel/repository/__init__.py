from . import (
    account_token_repository,
    audit_log_repository,
    booking_repository,
    coupon_repository,
    loyalty_repository,
    payment_repository,
    property_repository,
    review_repository,
    session_repository,
    transfer_repository,
    user_repository,
    vehicle_repository,
)
from .email_repository import EmailRepository

__all__ = [
    "EmailRepository",
    "account_token_repository",
    "audit_log_repository",
    "booking_repository",
    "coupon_repository",
    "loyalty_repository",
    "payment_repository",
    "property_repository",
    "review_repository",
    "session_repository",
    "transfer_repository",
    "user_repository",
    "vehicle_repository",
]
