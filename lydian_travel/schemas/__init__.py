"""Pydantic schemas for the Lydian Travel API."""

from lydian_travel.schemas.auth import (
    LoginRequest,
    MessageResponse,
    RegisterRequest,
    RegisterResponse,
    TokenResponse,
    UserResponse,
    UserUpdate,
)
from lydian_travel.schemas.booking import (
    BookingCreate,
    BookingCreatedResponse,
    BookingResponse,
    BookingUpdate,
    CarBookingCreate,
    PropertyBookingCreate,
    TransferBookingCreate,
)
from lydian_travel.schemas.content import ContentRequest, GeneratedContent
from lydian_travel.schemas.coupon import CouponCreate, CouponResponse
from lydian_travel.schemas.payment import PaymentRequest, PaymentResponse
from lydian_travel.schemas.property import PropertyResponse, PropertyUpdate
from lydian_travel.schemas.property_submission import PropertySubmission
from lydian_travel.schemas.review import ReviewCreate, ReviewResponse
from lydian_travel.schemas.transfer import TransferSearchResponse, TransferVehicleSubmission
from lydian_travel.schemas.vehicle import VehicleResponse, VehicleSubmission

__all__ = [
    "BookingCreate",
    "BookingCreatedResponse",
    "BookingResponse",
    "BookingUpdate",
    "CarBookingCreate",
    "ContentRequest",
    "CouponCreate",
    "CouponResponse",
    "GeneratedContent",
    "LoginRequest",
    "MessageResponse",
    "PaymentRequest",
    "PaymentResponse",
    "PropertyBookingCreate",
    "PropertyResponse",
    "PropertySubmission",
    "PropertyUpdate",
    "RegisterRequest",
    "RegisterResponse",
    "ReviewCreate",
    "ReviewResponse",
    "TokenResponse",
    "TransferBookingCreate",
    "TransferSearchResponse",
    "TransferVehicleSubmission",
    "UserResponse",
    "UserUpdate",
    "VehicleResponse",
    "VehicleSubmission",
]
