"""Render and deliver the transactional emails of the booking platform."""

from __future__ import annotations

import logging
import re
from decimal import Decimal
from io import BytesIO
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

import qrcode
from jinja2 import Environment, FileSystemLoader, TemplateNotFound, select_autoescape
from PIL import Image, ImageDraw, ImageFont
from qrcode import constants
from qrcode.exceptions import DataOverflowError

from lydian_travel.core.config import Settings, settings
from lydian_travel.models.booking import Booking, BookingType
from lydian_travel.models.email import EmailAttachment, EmailContent
from lydian_travel.models.user import User
from lydian_travel.repository import EmailRepository
from lydian_travel.services.booking_utils import RefundQuote, ensure_utc, format_booking_date

logger = logging.getLogger(__name__)

_CONFIRMATION_SUBJECTS = {
    BookingType.PROPERTY: "Booking Confirmation - {ref}",
    BookingType.CAR: "Car Rental Confirmation - {ref}",
    BookingType.TRANSFER: "Transfer Booking Confirmation - {ref}",
    BookingType.FLIGHT: "Flight Booking Confirmation - {ref}",
}
_CONFIRMATION_TEMPLATES = {
    BookingType.PROPERTY: "booking_property",
    BookingType.CAR: "booking_car",
    BookingType.TRANSFER: "booking_transfer",
}
_DATE_LABELS = {
    BookingType.CAR: ("Teslim Alış", "Teslim Ediş"),
    BookingType.TRANSFER: ("Alış Tarihi", "Dönüş Tarihi"),
}
_TYPE_LABELS = {
    BookingType.PROPERTY: "Konaklama",
    BookingType.CAR: "Araç Kiralama",
    BookingType.TRANSFER: "Havalimanı Transferi",
    BookingType.FLIGHT: "Uçuş",
    BookingType.HOTEL: "Otel",
    BookingType.TOUR: "Tur",
}


_PASS_TRANSLATION = str.maketrans(
    {"ı": "i", "İ": "I", "ş": "s", "Ş": "S", "ğ": "g", "Ğ": "G", "→": "->", "₺": "TL"}
)


def _pass_text(value: str) -> str:
    # the bitmap fallback font only covers latin-1
    return value.translate(_PASS_TRANSLATION).encode("latin-1", "replace").decode("latin-1")


def format_amount(value: Decimal | float | int, currency: str = "TRY") -> str:
    formatted = f"{Decimal(str(value)):,.2f}".replace(",", "_").replace(".", ",").replace("_", ".")
    return f"{formatted} {currency}"


def listing_name(booking: Booking) -> str:
    if booking.rental_property is not None:
        return booking.rental_property.name
    if booking.vehicle is not None:
        return booking.vehicle.display_name
    if booking.transfer_vehicle is not None:
        transfer = booking.transfer_vehicle.transfer
        if transfer is not None:
            return f"{transfer.from_location} → {transfer.to_location} ({booking.transfer_vehicle.name})"
        return booking.transfer_vehicle.name
    details = booking.details or {}
    return str(details.get("item_name") or _TYPE_LABELS.get(booking.booking_type, booking.booking_type))


class EmailService:
    def __init__(
        self,
        *,
        repository: EmailRepository | None = None,
        templates_path: Optional[Path] = None,
        config: Settings | None = None,
    ):
        self._settings = config or settings
        self._repository = repository or EmailRepository(self._settings)
        self._templates_path = templates_path or Path(__file__).resolve().parent.parent / "templates" / "email"
        self._environment = Environment(
            loader=FileSystemLoader(self._templates_path),
            autoescape=select_autoescape(["html", "xml"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )

    def _render_template(self, template_name: str, context: Dict[str, Any]) -> str:
        try:
            template = self._environment.get_template(template_name)
        except TemplateNotFound as exc:  # pragma: no cover - configuration error
            raise RuntimeError(f"Email template '{template_name}' not found") from exc
        return template.render(**context)

    def _build_email(
        self,
        *,
        subject: str,
        recipient: str,
        template: str,
        context: Dict[str, Any],
        attachments: Sequence[EmailAttachment] | None = None,
    ) -> EmailContent:
        context = {"site_url": self._settings.SITE_URL, "subject": subject, **context}
        return EmailContent(
            subject=subject,
            recipients=[recipient],
            html_body=self._render_template(f"{template}.html", context),
            text_body=self._render_template(f"{template}.txt", context),
            attachments=tuple(attachments or ()),
        )

    def _deliver(self, email: EmailContent) -> bool:
        if not self._settings.EMAIL_NOTIFICATIONS_ENABLED:
            logger.info("Email notifications disabled; skipping '%s'", email.subject)
            return False
        try:
            self._repository.send_email(email)
        except RuntimeError as exc:
            logger.warning("Could not send '%s' to %s: %s", email.subject, email.primary_recipient(), exc)
            return False
        logger.info("Sent '%s' to %s", email.subject, email.primary_recipient())
        return True

    @staticmethod
    def _recipient(booking: Booking) -> str:
        if booking.guest_email:
            return booking.guest_email
        return booking.user.email if booking.user is not None else ""

    def _booking_context(self, booking: Booking) -> Dict[str, Any]:
        check_in = ensure_utc(booking.check_in_date)
        check_out = ensure_utc(booking.check_out_date)
        guest = booking.guest_name or (booking.user.full_name if booking.user is not None else "")
        check_in_label, check_out_label = _DATE_LABELS.get(booking.booking_type, ("Giriş", "Çıkış"))
        return {
            "booking": booking,
            "reference": booking.booking_reference,
            "type_label": _TYPE_LABELS.get(booking.booking_type, booking.booking_type),
            "listing_name": listing_name(booking),
            "guest_name": guest,
            "check_in_display": format_booking_date(check_in) if check_in else None,
            "check_out_display": format_booking_date(check_out) if check_out else None,
            "check_in_time": check_in.strftime("%H:%M") if check_in else None,
            "check_in_label": check_in_label,
            "check_out_label": check_out_label,
            "amount_display": format_amount(booking.total_amount, booking.currency),
            "details": booking.details or {},
            "manage_url": f"{self._settings.SITE_URL}/profile/bookings",
        }

    def _build_pass_link(self, booking: Booking) -> str:
        template = self._settings.BOOKING_PASS_URL_TEMPLATE
        if template:
            try:
                return template.format(
                    reference=booking.booking_reference,
                    booking_id=booking.id_booking,
                    email=self._recipient(booking),
                )
            except (KeyError, IndexError) as exc:
                logger.warning("Invalid BOOKING_PASS_URL_TEMPLATE: %s", exc)
        return f"lydian:booking:{booking.booking_reference}"

    @staticmethod
    def _build_qr_attachment(target: str, filename_hint: str) -> EmailAttachment:
        safe_hint = re.sub(r"[^A-Za-z0-9_-]", "_", filename_hint)
        qr = qrcode.QRCode(
            version=None,
            error_correction=constants.ERROR_CORRECT_M,
            box_size=10,
            border=4,
        )
        try:
            qr.add_data(target)
            qr.make(fit=True)
        except (DataOverflowError, ValueError) as exc:  # pragma: no cover
            logger.error("Could not encode QR for %s: %s", safe_hint, exc)
            qr = qrcode.QRCode(version=1, error_correction=constants.ERROR_CORRECT_L)
            qr.add_data("TRAVEL LYDIAN")
            qr.make(fit=True)

        image = qr.make_image(fill_color="black", back_color="white")
        buffer = BytesIO()
        image.save(buffer, format="PNG")
        return EmailAttachment(
            filename=f"qr-{safe_hint}.png",
            content_type="image/png",
            data=buffer.getvalue(),
        )

    def _build_booking_pass(self, booking: Booking, context: Dict[str, Any]) -> EmailAttachment:
        width, height = 900, 600
        image = Image.new("RGB", (width, height), "#f8fafc")
        draw = ImageDraw.Draw(image)
        font = ImageFont.load_default()

        padding = 40
        draw.rectangle([0, 0, width, 130], fill="#0f766e")
        draw.text((padding, 40), "Travel LyDian", fill="#ffffff", font=font)
        draw.text((padding, 80), f"Rezervasyon {booking.booking_reference}", fill="#ffffff", font=font)

        rows = [
            ("Misafir", context["guest_name"]),
            ("Hizmet", context["type_label"]),
            ("Detay", context["listing_name"]),
            ("Giris", context["check_in_display"] or "-"),
            ("Cikis", context["check_out_display"] or "-"),
            ("Kisi", str(booking.guest_count)),
            ("Durum", booking.status),
            ("Tutar", context["amount_display"]),
        ]
        y = 170
        for label, value in rows:
            draw.text((padding, y), f"{label}:", fill="#0f172a", font=font)
            draw.text((padding + 200, y), _pass_text(value), fill="#0f172a", font=font)
            y += 36

        draw.text(
            (padding, height - 70),
            "Bu karti check-in sirasinda gosteriniz.",
            fill="#0f172a",
            font=font,
        )

        buffer = BytesIO()
        image.save(buffer, format="PNG")
        return EmailAttachment(
            filename=f"booking-{booking.booking_reference}.png",
            content_type="image/png",
            data=buffer.getvalue(),
        )

    def send_booking_confirmation(self, booking: Booking) -> bool:
        recipient = self._recipient(booking)
        if not recipient:
            logger.warning("Booking %s has no recipient email", booking.booking_reference)
            return False

        context = self._booking_context(booking)
        subject = _CONFIRMATION_SUBJECTS.get(
            booking.booking_type, _CONFIRMATION_SUBJECTS[BookingType.PROPERTY]
        ).format(ref=booking.booking_reference)
        attachments = [
            self._build_booking_pass(booking, context),
            self._build_qr_attachment(self._build_pass_link(booking), booking.booking_reference),
        ]
        email = self._build_email(
            subject=subject,
            recipient=recipient,
            template=_CONFIRMATION_TEMPLATES.get(booking.booking_type, "booking_generic"),
            context=context,
            attachments=attachments,
        )
        return self._deliver(email)

    def send_booking_reminder(self, booking: Booking) -> bool:
        recipient = self._recipient(booking)
        if not recipient:
            return False
        email = self._build_email(
            subject=f"Reminder: Your booking {booking.booking_reference} is tomorrow",
            recipient=recipient,
            template="booking_reminder",
            context=self._booking_context(booking),
        )
        return self._deliver(email)

    def send_cancellation(self, booking: Booking, refund: Optional[RefundQuote] = None) -> bool:
        recipient = self._recipient(booking)
        if not recipient:
            return False
        context = self._booking_context(booking)
        context["refund"] = refund
        if refund is not None:
            context["refund_display"] = format_amount(refund.refund_amount, booking.currency)
        email = self._build_email(
            subject=f"Booking Cancelled - {booking.booking_reference}",
            recipient=recipient,
            template="booking_cancelled",
            context=context,
        )
        return self._deliver(email)

    def send_password_reset(self, user: User, token: str) -> bool:
        email = self._build_email(
            subject="Reset your Travel LyDian password",
            recipient=user.email,
            template="password_reset",
            context={
                "user": user,
                "token": token,
                "action_url": f"{self._settings.SITE_URL}/auth/reset-password?token={token}",
                "expires_minutes": self._settings.PASSWORD_RESET_EXPIRE_MINUTES,
            },
        )
        return self._deliver(email)

    def send_email_verification(self, user: User, token: str) -> bool:
        email = self._build_email(
            subject="Verify your Travel LyDian email address",
            recipient=user.email,
            template="email_verification",
            context={
                "user": user,
                "token": token,
                "action_url": f"{self._settings.SITE_URL}/auth/verify-email?token={token}",
                "expires_hours": self._settings.EMAIL_VERIFICATION_EXPIRE_HOURS,
            },
        )
        return self._deliver(email)


__all__ = ["EmailService", "format_amount", "listing_name"]
