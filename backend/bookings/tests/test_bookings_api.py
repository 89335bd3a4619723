from datetime import timedelta
from types import SimpleNamespace

import pytest
import stripe
from django.utils import timezone

from bookings.models import Booking
from payments.gateway import StripeGateway

pytestmark = pytest.mark.django_db


def _future(days=10):
    return (timezone.localdate() + timedelta(days=days)).isoformat()


@pytest.fixture
def paid_booking(customer, tour):
    return Booking.objects.create(
        external_session_id="cs_test_paid",
        payment_reference="pi_test_paid",
        email=customer.email,
        item_id=str(tour.pk),
        item_name=tour.name,
        quantity=1,
        date=_future(),
        total_cents=15000,
        status=Booking.PAID,
        user=customer,
    )


def test_list_requires_booking_staff(api_client, customer, paid_booking):
    api_client.force_authenticate(user=customer)

    response = api_client.get("/api/bookings/")

    assert response.status_code == 403


def test_list_for_lead_guide_filters_by_status(api_client, lead_guide, paid_booking):
    Booking.objects.create(external_session_id="cs_test_pending", status=Booking.PENDING)
    api_client.force_authenticate(user=lead_guide)

    response = api_client.get("/api/bookings/", {"status": "paid"})

    assert response.status_code == 200
    ids = [row["id"] for row in response.json()]
    assert ids == [paid_booking.id]


def test_list_requires_authentication(api_client):
    assert api_client.get("/api/bookings/").status_code == 401


def test_my_bookings_matches_user_or_email(api_client, customer, other_customer, paid_booking):
    guest_checkout = Booking.objects.create(external_session_id="cs_guest", email="CUSTOMER@example.com")
    Booking.objects.create(external_session_id="cs_other", email=other_customer.email, user=other_customer)
    api_client.force_authenticate(user=customer)

    response = api_client.get("/api/bookings/my-bookings/")

    assert response.status_code == 200
    ids = {row["id"] for row in response.json()}
    assert ids == {paid_booking.id, guest_checkout.id}


def test_retrieve_by_owner_and_admin_only(api_client, customer, other_customer, admin_user, paid_booking):
    api_client.force_authenticate(user=other_customer)
    assert api_client.get(f"/api/bookings/{paid_booking.id}/").status_code == 403

    api_client.force_authenticate(user=customer)
    response = api_client.get(f"/api/bookings/{paid_booking.id}/")
    assert response.status_code == 200
    assert response.json()["total"] == "150.00"

    api_client.force_authenticate(user=admin_user)
    assert api_client.get(f"/api/bookings/{paid_booking.id}/").status_code == 200


def test_admin_create_prices_from_catalog(api_client, admin_user, tour):
    api_client.force_authenticate(user=admin_user)

    response = api_client.post(
        "/api/bookings/",
        {"item_id": str(tour.pk), "quantity": 3, "email": "walkin@example.com", "date": _future()},
        format="json",
    )

    assert response.status_code == 201
    body = response.json()
    assert body["total_cents"] == 45000
    assert body["item_name"] == tour.name
    assert body["status"] == Booking.PENDING
    assert body["external_session_id"] is None


def test_admin_create_with_payment_reference_is_paid(api_client, admin_user):
    api_client.force_authenticate(user=admin_user)

    response = api_client.post(
        "/api/bookings/",
        {"item_id": "custom", "total_cents": 5000, "payment_reference": "pi_manual", "email": "cash@example.com"},
        format="json",
    )

    assert response.status_code == 201
    assert response.json()["status"] == Booking.PAID
    assert response.json()["item_name"] == "Booking custom"


def test_non_admin_cannot_create(api_client, customer, tour):
    api_client.force_authenticate(user=customer)

    response = api_client.post("/api/bookings/", {"item_id": str(tour.pk)}, format="json")

    assert response.status_code == 403


def test_admin_patch_applies_valid_transition(api_client, admin_user, paid_booking):
    api_client.force_authenticate(user=admin_user)

    response = api_client.patch(
        f"/api/bookings/{paid_booking.id}/",
        {"status": Booking.REFUNDED, "customer_name": "Carla C."},
        format="json",
    )

    assert response.status_code == 200
    paid_booking.refresh_from_db()
    assert paid_booking.status == Booking.REFUNDED
    assert paid_booking.customer_name == "Carla C."


def test_admin_patch_rejects_invalid_transition(api_client, admin_user, paid_booking):
    api_client.force_authenticate(user=admin_user)

    response = api_client.patch(f"/api/bookings/{paid_booking.id}/", {"status": Booking.PENDING}, format="json")

    assert response.status_code == 400
    paid_booking.refresh_from_db()
    assert paid_booking.status == Booking.PAID


def test_admin_cannot_change_session_id(api_client, admin_user, paid_booking):
    api_client.force_authenticate(user=admin_user)

    response = api_client.patch(
        f"/api/bookings/{paid_booking.id}/", {"external_session_id": "cs_other"}, format="json"
    )

    assert response.status_code == 400


def test_owner_cancel_refunds_paid_booking(monkeypatch, api_client, customer, paid_booking):
    refunds = []
    monkeypatch.setattr(StripeGateway, "refund", lambda self, payment_intent: refunds.append(payment_intent))
    api_client.force_authenticate(user=customer)

    response = api_client.post(f"/api/bookings/{paid_booking.id}/cancel/")

    assert response.status_code == 200
    assert response.json()["status"] == Booking.CANCELED
    assert refunds == ["pi_test_paid"]


def test_cancel_pending_booking_skips_refund(monkeypatch, api_client, customer):
    booking = Booking.objects.create(external_session_id="cs_p", status=Booking.PENDING, user=customer)
    monkeypatch.setattr(StripeGateway, "refund", lambda self, payment_intent: pytest.fail("refund called"))
    api_client.force_authenticate(user=customer)

    response = api_client.post(f"/api/bookings/{booking.id}/cancel/")

    assert response.status_code == 200
    booking.refresh_from_db()
    assert booking.status == Booking.CANCELED


def test_cancel_past_booking_is_rejected(api_client, customer, paid_booking):
    paid_booking.date = (timezone.localdate() - timedelta(days=1)).isoformat()
    paid_booking.save()
    api_client.force_authenticate(user=customer)

    response = api_client.post(f"/api/bookings/{paid_booking.id}/cancel/")

    assert response.status_code == 400
    paid_booking.refresh_from_db()
    assert paid_booking.status == Booking.PAID


def test_cancel_terminal_booking_is_rejected(api_client, customer):
    booking = Booking.objects.create(external_session_id="cs_e", status=Booking.EXPIRED, user=customer)
    api_client.force_authenticate(user=customer)

    response = api_client.post(f"/api/bookings/{booking.id}/cancel/")

    assert response.status_code == 400


def test_cancel_by_stranger_is_forbidden(api_client, other_customer, paid_booking):
    api_client.force_authenticate(user=other_customer)

    response = api_client.post(f"/api/bookings/{paid_booking.id}/cancel/")

    assert response.status_code == 403


def test_cancel_surfaces_stripe_errors(monkeypatch, settings, api_client, customer, paid_booking):
    settings.STRIPE_USE_STUB = False
    settings.STRIPE_SECRET_KEY = "sk_test_123"

    def failing_refund(**kwargs):
        raise stripe.InvalidRequestError("Charge already refunded", param="payment_intent")

    monkeypatch.setattr(stripe.Refund, "create", failing_refund)
    api_client.force_authenticate(user=customer)

    response = api_client.post(f"/api/bookings/{paid_booking.id}/cancel/")

    assert response.status_code == 502
    paid_booking.refresh_from_db()
    assert paid_booking.status == Booking.PAID


def test_cancel_calls_stripe_refund_with_explicit_key(monkeypatch, settings, api_client, customer, paid_booking):
    settings.STRIPE_USE_STUB = False
    settings.STRIPE_SECRET_KEY = "sk_test_123"
    captured = {}

    def fake_refund(**kwargs):
        captured.update(kwargs)
        return SimpleNamespace(id="re_123", status="succeeded")

    monkeypatch.setattr(stripe.Refund, "create", fake_refund)
    api_client.force_authenticate(user=customer)

    response = api_client.post(f"/api/bookings/{paid_booking.id}/cancel/")

    assert response.status_code == 200
    assert captured == {"payment_intent": "pi_test_paid", "api_key": "sk_test_123"}


def test_admin_delete(api_client, admin_user, paid_booking):
    api_client.force_authenticate(user=admin_user)

    response = api_client.delete(f"/api/bookings/{paid_booking.id}/")

    assert response.status_code == 204
    assert not Booking.objects.filter(pk=paid_booking.pk).exists()


def test_stats_aggregates_paid_bookings(api_client, admin_user):
    for cents in (10000, 20000, 30000):
        Booking.objects.create(status=Booking.PAID, total_cents=cents)
    Booking.objects.create(status=Booking.PENDING, total_cents=99900)
    api_client.force_authenticate(user=admin_user)

    response = api_client.get("/api/bookings/stats/")

    assert response.status_code == 200
    stats = response.json()["stats"]
    assert len(stats) == 1
    month = stats[0]
    today = timezone.now()
    assert (month["year"], month["month"]) == (today.year, today.month)
    assert month["num_bookings"] == 3
    assert month["total_revenue"] == 600.0
    assert month["avg_price"] == 200.0
    assert month["min_price"] == 100.0
    assert month["max_price"] == 300.0


def test_stats_forbidden_for_customers(api_client, customer):
    api_client.force_authenticate(user=customer)

    assert api_client.get("/api/bookings/stats/").status_code == 403


@pytest.mark.parametrize(
    "path",
    ["/api/bookings/checkout-session/7/", "/api/bookings/webhook-checkout/"],
)
def test_legacy_endpoints_are_gone(api_client, path):
    response = api_client.post(path, {}, format="json")

    assert response.status_code == 410
    assert "/api/payments/" in response.json()["detail"]
