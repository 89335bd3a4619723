"""
Typed views over the Stripe webhook payloads the reconciler understands.

Stripe delivers loosely-typed JSON. We parse the parts we rely on into
dataclasses once, at the edge, and keep any unknown metadata keys in a
passthrough map so nothing the frontend attached is lost.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from django.utils.dateparse import parse_datetime

CHECKOUT_COMPLETED = "checkout.session.completed"
CHECKOUT_ASYNC_SUCCEEDED = "checkout.session.async_payment_succeeded"
CHECKOUT_EXPIRED = "checkout.session.expired"
CHECKOUT_ASYNC_FAILED = "checkout.session.async_payment_failed"
CHARGE_REFUNDED = "charge.refunded"
PAYMENT_INTENT_SUCCEEDED = "payment_intent.succeeded"

CHECKOUT_EVENT_TYPES = (
    CHECKOUT_COMPLETED,
    CHECKOUT_ASYNC_SUCCEEDED,
    CHECKOUT_EXPIRED,
    CHECKOUT_ASYNC_FAILED,
)

_METADATA_KEYS = {
    "itemId": "item_id",
    "itemName": "item_name",
    "quantity": "quantity",
    "date": "date",
    "customerName": "customer_name",
    "customerEmail": "customer_email",
    "customerPhone": "customer_phone",
    "userId": "user_id",
}


def _str_or_empty(value) -> str:
    if value is None:
        return ""
    return str(value)


def _object_id(value) -> str:
    # expandable fields arrive either as an id or as the expanded object
    if isinstance(value, Mapping):
        return _str_or_empty(value.get("id"))
    return _str_or_empty(value)


# payment_status values that mean the money has been collected
SETTLED_PAYMENT_STATUSES = {"paid", "no_payment_required"}

BOOKING_DATE_MAX_LENGTH = 20


def normalize_booking_date(value) -> str:
    """Reduce ISO datetimes such as 2030-06-01T00:00:00.000Z to their date part."""
    value = _str_or_empty(value).strip()
    if not value:
        return ""
    try:
        parsed = parse_datetime(value)
    except ValueError:
        parsed = None
    if parsed is not None:
        return parsed.date().isoformat()
    return value


def parse_quantity(value, default: int = 1) -> int:
    try:
        quantity = int(value)
    except (TypeError, ValueError):
        return default
    return quantity if quantity >= 1 else default


@dataclass(frozen=True)
class Customer:
    email: str = ""
    name: str = ""
    phone: str = ""


@dataclass(frozen=True)
class BookingMetadata:
    item_id: str = ""
    item_name: str = ""
    quantity: str = ""
    date: str = ""
    customer_name: str = ""
    customer_email: str = ""
    customer_phone: str = ""
    user_id: str = ""
    tour_id: str = ""
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> "BookingMetadata":
        data = dict(data or {})
        known = {}
        for key, attr in _METADATA_KEYS.items():
            if key in data:
                known[attr] = _str_or_empty(data.pop(key))
        if "tourId" in data:
            known["tour_id"] = _str_or_empty(data.pop("tourId"))
        return cls(extra=data, **known)

    def as_dict(self) -> dict[str, Any]:
        """Rebuild the flat metadata bag Stripe sent, omitting empty known keys."""
        bag = dict(self.extra)
        for key, attr in _METADATA_KEYS.items():
            value = getattr(self, attr)
            if value:
                bag[key] = value
        if self.tour_id:
            bag["tourId"] = self.tour_id
        return bag

    @property
    def resolved_item_id(self) -> str:
        return self.item_id or self.tour_id

    @property
    def parsed_quantity(self) -> int:
        return parse_quantity(self.quantity or 1)


@dataclass(frozen=True)
class CheckoutSession:
    id: str
    payment_intent: str = ""
    amount_total: int | None = None
    currency: str | None = None
    customer: Customer = field(default_factory=Customer)
    metadata: BookingMetadata = field(default_factory=BookingMetadata)
    payment_status: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CheckoutSession":
        details = data.get("customer_details") or {}
        customer = Customer(
            email=_str_or_empty(details.get("email") or data.get("customer_email")),
            name=_str_or_empty(details.get("name")),
            phone=_str_or_empty(details.get("phone")),
        )
        amount_total = data.get("amount_total")
        return cls(
            id=_str_or_empty(data.get("id")),
            payment_intent=_object_id(data.get("payment_intent")),
            amount_total=int(amount_total) if amount_total is not None else None,
            currency=data.get("currency"),
            customer=customer,
            metadata=BookingMetadata.from_dict(data.get("metadata")),
            payment_status=_str_or_empty(data.get("payment_status")),
        )

    @property
    def payment_settled(self) -> bool:
        # older payloads carry no payment_status; completed used to imply paid
        return not self.payment_status or self.payment_status in SETTLED_PAYMENT_STATUSES

    def booking_fields(self) -> dict[str, Any]:
        """Map the session onto Booking column values."""
        meta = self.metadata
        item_id = meta.resolved_item_id
        return {
            "email": self.customer.email or meta.customer_email,
            "customer_name": self.customer.name or meta.customer_name,
            "customer_phone": self.customer.phone or meta.customer_phone,
            "item_id": item_id,
            "item_name": meta.item_name or (f"Booking {item_id}" if item_id else "Booking"),
            "quantity": meta.parsed_quantity,
            "date": normalize_booking_date(meta.date),
            "total_cents": self.amount_total or 0,
            "currency": (self.currency or "usd").lower(),
            "payment_reference": self.payment_intent,
            "metadata": meta.as_dict(),
        }


@dataclass(frozen=True)
class Charge:
    id: str
    payment_intent: str = ""
    amount_refunded: int = 0
    refunded: bool = False

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Charge":
        return cls(
            id=_str_or_empty(data.get("id")),
            payment_intent=_object_id(data.get("payment_intent")),
            amount_refunded=int(data.get("amount_refunded") or 0),
            refunded=bool(data.get("refunded")),
        )


@dataclass(frozen=True)
class WebhookEvent:
    id: str
    type: str
    data_object: dict[str, Any] = field(default_factory=dict)
    created: int | None = None
    livemode: bool = False

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "WebhookEvent":
        if not isinstance(data, Mapping) or not data.get("type"):
            raise ValueError("Event payload is missing a type.")
        payload = data.get("data") or {}
        return cls(
            id=_str_or_empty(data.get("id")),
            type=str(data["type"]),
            data_object=dict(payload.get("object") or {}),
            created=data.get("created"),
            livemode=bool(data.get("livemode", False)),
        )

    @property
    def is_checkout_event(self) -> bool:
        return self.type in CHECKOUT_EVENT_TYPES

    def checkout_session(self) -> CheckoutSession:
        return CheckoutSession.from_dict(self.data_object)

    def charge(self) -> Charge:
        return Charge.from_dict(self.data_object)
