"""
Turn verified Stripe events into booking state.

The reconciler owns three collaborators, passed in explicitly:

* a gateway that verifies signatures (``payments.gateway.StripeGateway``),
* a store that persists bookings (``bookings.services.store.BookingStore``),
* a notifier that emails customers (``bookings.services.emails.BookingNotifier``).

Persistence and notification failures are logged and never raised, so a
verified event is always acknowledged. `ReconcileOutcome.store_failed` lets the
caller decide whether a lost write should be surfaced to Stripe for redelivery.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from bookings.models import Booking

from . import events
from .events import WebhookEvent

logger = logging.getLogger(__name__)

STATUS_BY_EVENT = {
    events.CHECKOUT_COMPLETED: Booking.PAID,
    events.CHECKOUT_ASYNC_SUCCEEDED: Booking.PAID,
    events.CHECKOUT_EXPIRED: Booking.EXPIRED,
    events.CHECKOUT_ASYNC_FAILED: Booking.FAILED,
}

PAID_EVENTS = {events.CHECKOUT_COMPLETED, events.CHECKOUT_ASYNC_SUCCEEDED}


@dataclass
class ReconcileOutcome:
    event_id: str
    event_type: str
    booking: Booking | None = None
    created: bool = False
    applied: bool = False
    notified: bool = False
    store_failed: bool = False
    handled: bool = True

    @property
    def lost_payment(self) -> bool:
        return self.store_failed and self.event_type in PAID_EVENTS


class WebhookReconciler:
    def __init__(self, gateway, store, notifier):
        self.gateway = gateway
        self.store = store
        self.notifier = notifier

    def verify(self, payload: bytes, sig_header: str | None) -> WebhookEvent:
        return self.gateway.verify_event(payload, sig_header)

    def handle(self, payload: bytes, sig_header: str | None) -> ReconcileOutcome:
        return self.process(self.verify(payload, sig_header))

    def process(self, event: WebhookEvent, *, notify: bool = True) -> ReconcileOutcome:
        if event.is_checkout_event:
            return self._apply_checkout_event(event, notify=notify)
        if event.type == events.CHARGE_REFUNDED:
            return self._apply_refund(event)
        if event.type == events.PAYMENT_INTENT_SUCCEEDED:
            logger.info("PaymentIntent %s succeeded (event %s)", event.data_object.get("id"), event.id)
            return ReconcileOutcome(event_id=event.id, event_type=event.type)

        logger.info("Unhandled Stripe event type %s (event %s)", event.type, event.id)
        return ReconcileOutcome(event_id=event.id, event_type=event.type, handled=False)

    def _apply_checkout_event(self, event: WebhookEvent, *, notify: bool) -> ReconcileOutcome:
        outcome = ReconcileOutcome(event_id=event.id, event_type=event.type)
        target_status = STATUS_BY_EVENT[event.type]
        try:
            session = event.checkout_session()
            if event.type == events.CHECKOUT_COMPLETED and not session.payment_settled:
                # delayed payment methods; async_payment_succeeded or _failed settles it
                target_status = Booking.PENDING
            result = self.store.upsert_from_session(session, target_status)
        except Exception:
            # the event is still acknowledged; the caller decides about retries
            logger.exception(
                "Failed to store %s booking for session %s (event %s)",
                target_status,
                event.data_object.get("id"),
                event.id,
            )
            outcome.store_failed = True
            return outcome

        outcome.booking = result.booking
        outcome.created = result.created
        outcome.applied = result.applied

        newly_paid = result.applied and target_status == Booking.PAID and result.previous_status != Booking.PAID
        if notify and newly_paid:
            outcome.notified = self._notify(result.booking)
        return outcome

    def _apply_refund(self, event: WebhookEvent) -> ReconcileOutcome:
        outcome = ReconcileOutcome(event_id=event.id, event_type=event.type)
        try:
            charge = event.charge()
            booking = self.store.mark_refunded_by_payment_reference(charge.payment_intent)
        except Exception:
            logger.exception(
                "Failed to mark payment %s refunded (event %s)", event.data_object.get("payment_intent"), event.id
            )
            outcome.store_failed = True
            return outcome
        outcome.booking = booking
        outcome.applied = booking is not None
        return outcome

    def _notify(self, booking: Booking) -> bool:
        try:
            self.notifier.send_confirmation(booking)
        except Exception:
            logger.exception("Failed to send confirmation email for booking %s", booking.pk)
            return False
        return True
