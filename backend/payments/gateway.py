from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable, Iterator
from uuid import uuid4

import stripe
from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

from .events import Customer, WebhookEvent

logger = logging.getLogger(__name__)


class GatewayConfigurationError(ImproperlyConfigured):
    pass


class WebhookVerificationError(Exception):
    pass


def checkout_metadata(*, item, quantity: int, date: str, customer: Customer, extra: dict | None = None) -> dict[str, str]:
    """Stripe metadata values must be strings; caller-supplied keys never override ours."""
    metadata = {str(key): "" if value is None else str(value) for key, value in (extra or {}).items()}
    metadata.update(
        {
            "itemId": str(item.pk),
            "itemName": item.name,
            "tourId": str(item.pk),
            "date": date or "",
            "quantity": str(quantity),
            "customerName": customer.name,
            "customerEmail": customer.email,
            "customerPhone": customer.phone,
        }
    )
    return metadata


@dataclass
class CheckoutSessionStub:
    """
    Stand-in for stripe.checkout.Session when running in stub mode.

    Local development and tests never hit Stripe; the ids are shaped like
    Stripe's so the rest of the flow (pending booking, redirect URL) behaves
    the same.
    """

    id: str
    payment_intent: str
    payment_status: str
    url: str
    amount_total: int
    currency: str
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class RefundStub:
    id: str
    payment_intent: str
    status: str = "succeeded"


class StripeGateway:
    """Thin wrapper over the Stripe SDK holding its own credentials."""

    def __init__(
        self,
        api_key: str = "",
        webhook_secret: str = "",
        *,
        use_stub: bool = False,
        frontend_url: str = "",
        tolerance: int = 300,
    ):
        self.api_key = api_key or ""
        self.webhook_secret = webhook_secret or ""
        self.use_stub = use_stub or not self.api_key
        self.frontend_url = (frontend_url or "").rstrip("/")
        self.tolerance = tolerance

    @classmethod
    def from_settings(cls) -> "StripeGateway":
        return cls(
            api_key=getattr(settings, "STRIPE_SECRET_KEY", ""),
            webhook_secret=getattr(settings, "STRIPE_WEBHOOK_SECRET", ""),
            use_stub=getattr(settings, "STRIPE_USE_STUB", False),
            frontend_url=getattr(settings, "APP_BASE_URL", "") or settings.FRONTEND_URL,
            tolerance=getattr(settings, "STRIPE_WEBHOOK_TOLERANCE", 300),
        )

    def _require_api_key(self) -> str:
        if not self.api_key:
            raise GatewayConfigurationError("STRIPE_SECRET_KEY is not configured.")
        return self.api_key

    def success_url(self) -> str:
        return f"{self.frontend_url}/payment/success?session_id={{CHECKOUT_SESSION_ID}}"

    def cancel_url(self) -> str:
        return f"{self.frontend_url}/payment/cancel"

    def preview_url(self, *, session_id: str, amount_cents: int) -> str:
        return f"{self.frontend_url}/payments/preview?session={session_id}&amount={amount_cents}"

    def create_checkout_session(
        self,
        *,
        item,
        quantity: int,
        date: str = "",
        customer: Customer | None = None,
        metadata: dict[str, Any] | None = None,
        currency: str = "",
        idempotency_key: str | None = None,
    ):
        """
        Create a hosted Checkout session for `quantity` units of a catalog item.

        Returns the Stripe session, or a CheckoutSessionStub in stub mode.
        The session metadata carries everything the webhook needs to rebuild
        the booking.
        """
        customer = customer or Customer()
        currency = (currency or item.currency or "usd").lower()
        metadata = checkout_metadata(item=item, quantity=quantity, date=date, customer=customer, extra=metadata)
        customer_email = customer.email
        amount_total = item.price_cents * quantity

        if self.use_stub:
            session_id = f"cs_test_{uuid4().hex}"
            return CheckoutSessionStub(
                id=session_id,
                payment_intent="",
                payment_status="unpaid",
                url=self.preview_url(session_id=session_id, amount_cents=amount_total),
                amount_total=amount_total,
                currency=currency,
                metadata=metadata,
            )

        product_data: dict[str, Any] = {"name": item.name}
        if item.description:
            product_data["description"] = item.description[:500]
        if item.images:
            product_data["images"] = list(item.images[:1])

        params: dict[str, Any] = {
            "mode": "payment",
            "line_items": [
                {
                    "quantity": quantity,
                    "price_data": {
                        "currency": currency,
                        "unit_amount": item.price_cents,
                        "product_data": product_data,
                    },
                }
            ],
            "success_url": self.success_url(),
            "cancel_url": self.cancel_url(),
            "metadata": metadata,
            "api_key": self._require_api_key(),
        }
        if customer_email:
            params["customer_email"] = customer_email
        if idempotency_key:
            params["idempotency_key"] = idempotency_key
        return stripe.checkout.Session.create(**params)

    def verify_event(self, payload: bytes, sig_header: str | None) -> WebhookEvent:
        if not self.webhook_secret:
            raise GatewayConfigurationError("STRIPE_WEBHOOK_SECRET is not configured.")
        if not sig_header:
            raise WebhookVerificationError("Missing Stripe signature")

        try:
            body = payload.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise WebhookVerificationError("Payload is not valid UTF-8") from exc

        try:
            stripe.WebhookSignature.verify_header(body, sig_header, self.webhook_secret, self.tolerance)
        except stripe.SignatureVerificationError as exc:
            raise WebhookVerificationError(str(exc) or "Invalid signature") from exc

        try:
            return WebhookEvent.from_dict(json.loads(body))
        except ValueError as exc:
            raise WebhookVerificationError(f"Invalid payload: {exc}") from exc

    def refund(self, payment_intent: str):
        if self.use_stub:
            logger.info("Stub refund for payment %s", payment_intent)
            return RefundStub(id=f"re_test_{uuid4().hex}", payment_intent=payment_intent)
        return stripe.Refund.create(payment_intent=payment_intent, api_key=self._require_api_key())

    def iter_events(self, types: Iterable[str], since: datetime) -> Iterator[WebhookEvent]:
        """Yield recent events of the given types, newest first, as Stripe lists them."""
        if self.use_stub:
            return
        events = stripe.Event.list(
            types=list(types),
            created={"gte": int(since.timestamp())},
            limit=100,
            api_key=self._require_api_key(),
        )
        for event in events.auto_paging_iter():
            # StripeObject renders itself as JSON
            yield WebhookEvent.from_dict(json.loads(str(event)))
