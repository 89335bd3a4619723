from io import StringIO

import pytest
from django.core.management import CommandError, call_command


def test_health_endpoint(api_client):
    response = api_client.get("/api/health/")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "success"
    assert body["message"] == "API is running"
    assert "timestamp" in body


@pytest.mark.django_db
def test_devseed_refuses_without_debug(settings):
    settings.DEBUG = False

    with pytest.raises(CommandError):
        call_command("devseed", stdout=StringIO())


@pytest.mark.django_db
def test_devseed_populates_demo_data(settings):
    from bookings.models import Booking
    from catalog.models import CatalogItem
    from reviews.models import Review

    settings.DEBUG = True

    call_command("devseed", stdout=StringIO())
    call_command("devseed", stdout=StringIO())

    assert CatalogItem.objects.count() == 5
    assert Booking.objects.count() == 3
    assert Review.objects.count() == 2
