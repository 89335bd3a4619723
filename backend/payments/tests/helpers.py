import hashlib
import hmac
import json
import time

WEBHOOK_SECRET = "whsec_test_secret"


def sign_payload(payload: str, secret: str = WEBHOOK_SECRET, timestamp: int | None = None) -> str:
    """Build a Stripe-Signature header the same way Stripe does."""
    timestamp = int(time.time()) if timestamp is None else timestamp
    signed = f"{timestamp}.{payload}".encode("utf-8")
    signature = hmac.new(secret.encode("utf-8"), signed, hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={signature}"


def build_event(event_type: str, data_object: dict, *, event_id: str = "evt_test_1") -> str:
    return json.dumps(
        {
            "id": event_id,
            "object": "event",
            "type": event_type,
            "created": int(time.time()),
            "livemode": False,
            "data": {"object": data_object},
        }
    )


def checkout_session_object(
    session_id: str = "cs_test_abc",
    *,
    amount_total: int = 15000,
    currency: str = "usd",
    email: str = "a@example.com",
    payment_intent: str | None = "pi_test_abc",
    payment_status: str = "paid",
    metadata: dict | None = None,
    **extra,
) -> dict:
    data = {
        "id": session_id,
        "object": "checkout.session",
        "amount_total": amount_total,
        "currency": currency,
        "payment_intent": payment_intent,
        "payment_status": payment_status,
        "customer_details": {"email": email, "name": "Ana Example", "phone": None},
        "metadata": {"itemId": "tour-1", "quantity": "2", "date": "2030-06-01"} if metadata is None else metadata,
    }
    data.update(extra)
    return data
