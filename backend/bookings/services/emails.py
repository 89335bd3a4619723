from __future__ import annotations

import logging
from datetime import date as date_cls
from urllib.parse import quote

from django.conf import settings
from django.core.mail import EmailMultiAlternatives
from django.template.loader import render_to_string
from django.utils.dateparse import parse_date

from bookings.models import Booking

logger = logging.getLogger(__name__)

CONFIRMATION_TEMPLATE = "email/booking_confirmed"


def _display_date(value: str) -> str:
    if not value:
        return "TBA"
    try:
        parsed = parse_date(value)
    except ValueError:
        parsed = None
    if parsed is None:
        return value
    return parsed.strftime("%a %b %d %Y")


class BookingNotifier:
    """Send booking confirmation emails to the customer and the bookings inbox."""

    def __init__(self, *, from_email: str, site_name: str, app_base_url: str = "", bcc_email: str = ""):
        self.from_email = from_email
        self.site_name = site_name
        self.app_base_url = (app_base_url or "").rstrip("/")
        self.bcc_email = bcc_email

    @classmethod
    def from_settings(cls) -> "BookingNotifier":
        return cls(
            from_email=settings.DEFAULT_FROM_EMAIL,
            site_name=settings.SITE_NAME,
            app_base_url=getattr(settings, "APP_BASE_URL", "") or settings.FRONTEND_URL,
            bcc_email=getattr(settings, "BOOKINGS_BCC_EMAIL", ""),
        )

    def _context(self, booking: Booking) -> dict:
        reference = booking.external_session_id or booking.item_id
        booking_link = ""
        if self.app_base_url:
            booking_link = f"{self.app_base_url}/bookings/my?ref={quote(reference or '', safe='')}"
        return {
            "site_name": self.site_name,
            "customer_name": booking.customer_name or "Guest",
            "item_name": booking.item_name or f"Booking {booking.item_id}",
            "quantity": booking.quantity,
            "date": _display_date(booking.date),
            "currency": (booking.currency or "usd").upper(),
            "amount": f"{booking.total_cents / 100:.2f}",
            "reference": booking.external_session_id or "",
            "booking_link": booking_link,
            "year": date_cls.today().year,
        }

    def _send(self, *, subject: str, to: str, context: dict) -> None:
        text_body = render_to_string(f"{CONFIRMATION_TEMPLATE}.txt", context).strip()
        html_body = render_to_string(f"{CONFIRMATION_TEMPLATE}.html", context)
        message = EmailMultiAlternatives(
            subject=subject,
            body=text_body,
            from_email=self.from_email,
            to=[to],
        )
        message.attach_alternative(html_body, "text/html")
        message.send(fail_silently=False)

    def send_confirmation(self, booking: Booking) -> int:
        """
        Email the booking confirmation. Returns the number of messages sent.

        Raises whatever the email backend raises; callers decide whether a
        failed notification matters.
        """
        if not booking.email:
            logger.warning("Booking %s has no customer email; skipping confirmation", booking.pk)
            sent = 0
        else:
            context = self._context(booking)
            self._send(
                subject=f"Your {self.site_name} booking is confirmed",
                to=booking.email,
                context=context,
            )
            sent = 1

        if self.bcc_email:
            context = self._context(booking)
            self._send(
                subject=f"Booking confirmed: {booking.external_session_id or booking.pk} - {booking.item_name}",
                to=self.bcc_email,
                context=context,
            )
            sent += 1
        logger.info("Sent %s confirmation email(s) for booking %s", sent, booking.pk)
        return sent
