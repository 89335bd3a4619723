import pytest
from rest_framework.test import APIClient

from payments.tests.helpers import sign_payload


def _make_user(email, *, role="user", **extra):
    from django.contrib.auth import get_user_model

    return get_user_model().objects.create_user(
        username=email,
        email=email,
        password="password123",
        role=role,
        **extra,
    )


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def customer(db):
    return _make_user("customer@example.com", first_name="Carla", last_name="Customer")


@pytest.fixture
def other_customer(db):
    return _make_user("other@example.com")


@pytest.fixture
def admin_user(db):
    return _make_user("admin@example.com", role="admin")


@pytest.fixture
def lead_guide(db):
    return _make_user("lead@example.com", role="lead-guide")


@pytest.fixture
def tour(db):
    from catalog.models import CatalogItem

    return CatalogItem.objects.create(
        kind=CatalogItem.TOUR,
        name="Pico Summit Trek",
        price_cents=15000,
        currency="usd",
        duration="2 days",
        difficulty="difficult",
    )


@pytest.fixture
def post_webhook(api_client):
    """POST a raw event body to a webhook endpoint, signed unless told otherwise."""

    def _post(payload: str, *, signature: str | None = None, path: str = "/api/payments/webhook/"):
        headers = {}
        if signature is None:
            signature = sign_payload(payload)
        if signature:
            headers["HTTP_STRIPE_SIGNATURE"] = signature
        return api_client.generic("POST", path, payload, content_type="application/json", **headers)

    return _post
