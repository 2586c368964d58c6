from .account_token import AccountToken
from .audit_log import AuditLog
from .booking import Booking, BookingStatus, BookingType, PaymentStatus
from .coupon import Coupon
from .email import EmailAttachment, EmailContent
from .loyalty import MilesAccount, MilesTransaction
from .payment import Payment
from .property import RentalProperty
from .review import Review, ReviewVote
from .session import UserSession
from .transfer import AirportTransfer, TransferVehicle
from .user import User
from .vehicle import RentalVehicle

__all__ = [
    "AccountToken",
    "AirportTransfer",
    "AuditLog",
    "Booking",
    "BookingStatus",
    "BookingType",
    "Coupon",
    "EmailAttachment",
    "EmailContent",
    "MilesAccount",
    "MilesTransaction",
    "Payment",
    "PaymentStatus",
    "RentalProperty",
    "RentalVehicle",
    "Review",
    "ReviewVote",
    "TransferVehicle",
    "User",
    "UserSession",
]
