from __future__ import annotations

import logging
from dataclasses import dataclass

from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction

from bookings.models import Booking
from payments.events import CheckoutSession

logger = logging.getLogger(__name__)


def fit_to_columns(fields: dict) -> dict:
    """Trim text values to their column length; Stripe-collected details skip our serializers."""
    fitted = dict(fields)
    for name, value in fields.items():
        if not isinstance(value, str):
            continue
        max_length = Booking._meta.get_field(name).max_length
        if max_length and len(value) > max_length:
            logger.warning("Truncating booking %s from %s to %s characters", name, len(value), max_length)
            fitted[name] = value[:max_length]
    return fitted


class InvalidStatusTransition(Exception):
    def __init__(self, booking: Booking, target: str):
        self.booking = booking
        self.current = booking.status
        self.target = target
        super().__init__(f"Cannot move booking {booking.pk} from {self.current} to {target}.")


@dataclass
class UpsertResult:
    booking: Booking
    created: bool
    applied: bool
    previous_status: str | None = None


class BookingStore:
    """
    Persistence for bookings keyed by their Stripe checkout session id.

    Every write goes through `upsert_from_session`, which is safe to call for
    duplicate or concurrent deliveries of the same session: the unique
    constraint on `external_session_id` decides the winner and the loser
    updates the winner's row instead of inserting a second one.
    """

    def _locked_get(self, session_id: str) -> Booking | None:
        return Booking.objects.select_for_update().filter(external_session_id=session_id).first()

    def _resolve_user(self, user_id: str):
        if not user_id or not str(user_id).isdigit():
            return None
        return get_user_model().objects.filter(pk=int(user_id)).first()

    def upsert_from_session(self, session: CheckoutSession, status: str, *, user=None) -> UpsertResult:
        if not session.id:
            raise ValueError("Checkout session id is required to store a booking.")

        fields = fit_to_columns(session.booking_fields())
        fields["status"] = status
        if user is None:
            user = self._resolve_user(session.metadata.user_id)

        with transaction.atomic():
            booking = self._locked_get(session.id)
            if booking is None:
                try:
                    with transaction.atomic():
                        booking = Booking.objects.create(external_session_id=session.id, user=user, **fields)
                    logger.info("Created %s booking %s for session %s", status, booking.pk, session.id)
                    return UpsertResult(booking=booking, created=True, applied=True)
                except IntegrityError:
                    # another delivery inserted the row first; update theirs
                    booking = self._locked_get(session.id)
                    if booking is None:
                        raise

            if not Booking.can_transition(booking.status, status):
                logger.warning(
                    "Ignoring %s for session %s: booking %s is already %s",
                    status,
                    session.id,
                    booking.pk,
                    booking.status,
                )
                return UpsertResult(booking=booking, created=False, applied=False, previous_status=booking.status)

            previous_status = booking.status
            if not fields["payment_reference"]:
                fields.pop("payment_reference")
            for name, value in fields.items():
                setattr(booking, name, value)
            if booking.user_id is None and user is not None:
                booking.user = user
            booking.save()
            logger.info("Updated booking %s for session %s to %s", booking.pk, session.id, status)
            return UpsertResult(booking=booking, created=False, applied=True, previous_status=previous_status)

    def transition(self, booking: Booking, target: str, **changes) -> Booking:
        """Move a booking to `target`, raising InvalidStatusTransition when not allowed."""
        with transaction.atomic():
            locked = Booking.objects.select_for_update().get(pk=booking.pk)
            if not Booking.can_transition(locked.status, target):
                raise InvalidStatusTransition(locked, target)
            locked.status = target
            for name, value in changes.items():
                setattr(locked, name, value)
            locked.save()
        return locked

    def mark_refunded_by_payment_reference(self, payment_reference: str) -> Booking | None:
        if not payment_reference:
            return None
        booking = Booking.objects.filter(payment_reference=payment_reference).order_by("-created_at").first()
        if booking is None:
            logger.info("No booking found for refunded payment %s", payment_reference)
            return None
        try:
            return self.transition(booking, Booking.REFUNDED)
        except InvalidStatusTransition as exc:
            logger.warning("Ignoring refund for booking %s: %s", booking.pk, exc)
            return None
