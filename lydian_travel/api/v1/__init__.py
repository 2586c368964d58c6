from fastapi import APIRouter

from .auth_routes import router as auth_router
from .booking_routes import router as booking_router
from .content_routes import router as content_router
from .coupon_routes import router as coupon_router
from .dashboard_routes import router as dashboard_router
from .loyalty_routes import router as loyalty_router
from .notification_routes import router as notification_router
from .payment_routes import router as payment_router
from .pricing_routes import router as pricing_router
from .property_routes import router as property_router
from .review_routes import router as review_router
from .transfer_routes import router as transfer_router
from .travel_routes import router as travel_router
from .vehicle_routes import router as vehicle_router

router = APIRouter()
router.include_router(auth_router)
router.include_router(property_router)
router.include_router(vehicle_router)
router.include_router(transfer_router)
router.include_router(booking_router)
router.include_router(payment_router)
router.include_router(pricing_router)
router.include_router(coupon_router)
router.include_router(loyalty_router)
router.include_router(review_router)
router.include_router(notification_router)
router.include_router(travel_router)
router.include_router(content_router)
router.include_router(dashboard_router)

__all__ = [
    "router",
    "auth_router",
    "booking_router",
    "content_router",
    "coupon_router",
    "dashboard_router",
    "loyalty_router",
    "notification_router",
    "payment_router",
    "pricing_router",
    "property_router",
    "review_router",
    "transfer_router",
    "travel_router",
    "vehicle_router",
]
