import pytest

from bookings.models import Booking
from bookings.services.store import BookingStore, InvalidStatusTransition
from payments.events import BookingMetadata, CheckoutSession, Customer

pytestmark = pytest.mark.django_db


def _session(session_id="cs_test_store", **overrides):
    fields = {
        "id": session_id,
        "payment_intent": "pi_test_store",
        "amount_total": 9000,
        "currency": "EUR",
        "customer": Customer(email="store@example.com", name="Sam Store"),
        "metadata": BookingMetadata.from_dict({"itemId": "3", "itemName": "Sunset Wine Tasting", "quantity": "2"}),
    }
    fields.update(overrides)
    return CheckoutSession(**fields)


def test_upsert_creates_booking_from_session():
    result = BookingStore().upsert_from_session(_session(), Booking.PAID)

    assert result.created is True
    assert result.applied is True
    booking = result.booking
    assert booking.external_session_id == "cs_test_store"
    assert booking.currency == "eur"
    assert booking.total_cents == 9000
    assert booking.item_name == "Sunset Wine Tasting"
    assert booking.quantity == 2
    assert booking.metadata == {"itemId": "3", "itemName": "Sunset Wine Tasting", "quantity": "2"}


def test_upsert_updates_existing_row():
    store = BookingStore()
    store.upsert_from_session(_session(), Booking.PENDING)

    result = store.upsert_from_session(_session(amount_total=12000), Booking.PAID)

    assert result.created is False
    assert result.applied is True
    assert result.previous_status == Booking.PENDING
    assert Booking.objects.count() == 1
    booking = Booking.objects.get()
    assert booking.status == Booking.PAID
    assert booking.total_cents == 12000


def test_upsert_keeps_payment_reference_when_event_has_none():
    store = BookingStore()
    store.upsert_from_session(_session(), Booking.PAID)

    store.upsert_from_session(_session(payment_intent=""), Booking.PAID)

    assert Booking.objects.get().payment_reference == "pi_test_store"


def test_upsert_rejects_invalid_transition():
    store = BookingStore()
    store.upsert_from_session(_session(), Booking.PAID)

    result = store.upsert_from_session(_session(amount_total=1), Booking.EXPIRED)

    assert result.applied is False
    booking = Booking.objects.get()
    assert booking.status == Booking.PAID
    assert booking.total_cents == 9000


def test_concurrent_insert_converges_on_single_row(monkeypatch):
    store = BookingStore()
    # the other delivery committed first
    store.upsert_from_session(_session(amount_total=5000), Booking.PENDING)

    real_locked_get = BookingStore._locked_get
    calls = []

    def racing_locked_get(self, session_id):
        calls.append(session_id)
        if len(calls) == 1:
            return None
        return real_locked_get(self, session_id)

    monkeypatch.setattr(BookingStore, "_locked_get", racing_locked_get)

    result = store.upsert_from_session(_session(amount_total=9000), Booking.PAID)

    assert len(calls) == 2
    assert result.created is False
    assert result.applied is True
    assert Booking.objects.filter(external_session_id="cs_test_store").count() == 1
    booking = Booking.objects.get()
    assert booking.status == Booking.PAID
    assert booking.total_cents == 9000


def test_upsert_requires_session_id():
    with pytest.raises(ValueError):
        BookingStore().upsert_from_session(_session(session_id=""), Booking.PAID)


def test_upsert_links_user_from_metadata(customer):
    session = _session(metadata=BookingMetadata.from_dict({"userId": str(customer.pk)}))

    booking = BookingStore().upsert_from_session(session, Booking.PENDING).booking

    assert booking.user == customer


def test_upsert_ignores_unknown_user_id():
    session = _session(metadata=BookingMetadata.from_dict({"userId": "99999"}))

    booking = BookingStore().upsert_from_session(session, Booking.PENDING).booking

    assert booking.user is None


@pytest.mark.parametrize(
    "current, target, allowed",
    [
        (Booking.PENDING, Booking.PAID, True),
        (Booking.PENDING, Booking.EXPIRED, True),
        (Booking.PENDING, Booking.FAILED, True),
        (Booking.PENDING, Booking.CANCELED, True),
        (Booking.PAID, Booking.REFUNDED, True),
        (Booking.PAID, Booking.CANCELED, True),
        (Booking.PAID, Booking.PAID, True),
        (Booking.PAID, Booking.EXPIRED, False),
        (Booking.PAID, Booking.PENDING, False),
        (Booking.EXPIRED, Booking.PAID, False),
        (Booking.REFUNDED, Booking.CANCELED, False),
        (Booking.CANCELED, Booking.PAID, False),
    ],
)
def test_status_transitions(current, target, allowed):
    assert Booking.can_transition(current, target) is allowed


def test_transition_raises_for_terminal_status():
    booking = Booking.objects.create(status=Booking.EXPIRED)

    with pytest.raises(InvalidStatusTransition):
        BookingStore().transition(booking, Booking.PAID)

    booking.refresh_from_db()
    assert booking.status == Booking.EXPIRED


def test_mark_refunded_by_payment_reference():
    Booking.objects.create(external_session_id="cs_1", payment_reference="pi_refund", status=Booking.PAID)

    booking = BookingStore().mark_refunded_by_payment_reference("pi_refund")

    assert booking.status == Booking.REFUNDED


def test_mark_refunded_ignores_pending_booking():
    Booking.objects.create(external_session_id="cs_2", payment_reference="pi_pending", status=Booking.PENDING)

    assert BookingStore().mark_refunded_by_payment_reference("pi_pending") is None
    assert Booking.objects.get().status == Booking.PENDING
