"""Routes for triggering booking notification emails."""

from fastapi import APIRouter, Depends, status
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session

from lydian_travel.core.security import require_roles
from lydian_travel.dependencies import get_db, get_email_service
from lydian_travel.models.user import User
from lydian_travel.schemas.booking import ReminderRunResponse
from lydian_travel.services.booking_service import BookingService
from lydian_travel.services.email_service import EmailService

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.post(
    "/reminders",
    response_model=ReminderRunResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
async def send_booking_reminders(
    _: User = Depends(require_roles("admin")),
    db: Session = Depends(get_db),
    email_service: EmailService = Depends(get_email_service),
):
    """Email every confirmed guest whose stay starts tomorrow."""

    service = BookingService(db, email_service=email_service)
    return await run_in_threadpool(service.send_reminders)


__all__ = ["router"]
