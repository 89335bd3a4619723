import pytest

from catalog.models import CatalogItem

pytestmark = pytest.mark.django_db


@pytest.fixture
def retired_item(db):
    return CatalogItem.objects.create(name="Old Whale Watch", price_cents=5000, active=False)


def test_public_list_hides_inactive_items(api_client, tour, retired_item):
    response = api_client.get("/api/catalog/")

    assert response.status_code == 200
    names = [row["name"] for row in response.json()]
    assert names == ["Pico Summit Trek"]
    assert response.json()[0]["price"] == "150.00"
    assert response.json()[0]["ratings_average"] == "4.5"


def test_admin_sees_inactive_items(api_client, admin_user, tour, retired_item):
    api_client.force_authenticate(user=admin_user)

    response = api_client.get("/api/catalog/")

    assert {row["name"] for row in response.json()} == {"Pico Summit Trek", "Old Whale Watch"}


def test_retrieve_by_slug(api_client, tour):
    response = api_client.get(f"/api/catalog/{tour.slug}/")

    assert response.status_code == 200
    assert response.json()["id"] == tour.pk


def test_filter_by_kind(api_client, tour):
    CatalogItem.objects.create(kind=CatalogItem.EVENT, name="Azores Jazz Night", price_cents=3000)

    response = api_client.get("/api/catalog/", {"kind": "event"})

    assert [row["name"] for row in response.json()] == ["Azores Jazz Night"]


def test_slugs_are_unique(db):
    first = CatalogItem.objects.create(name="Crater Lake Hike", price_cents=100)
    second = CatalogItem.objects.create(name="Crater Lake Hike", price_cents=100)

    assert first.slug == "crater-lake-hike"
    assert second.slug == "crater-lake-hike-2"


def test_lookup_by_pk_or_slug(tour, retired_item):
    assert CatalogItem.lookup(str(tour.pk)) == tour
    assert CatalogItem.lookup(tour.slug) == tour
    assert CatalogItem.lookup(str(retired_item.pk)) is None
    assert CatalogItem.lookup(str(retired_item.pk), active_only=False) == retired_item
    assert CatalogItem.lookup("") is None


def test_admin_creates_item(api_client, admin_user):
    api_client.force_authenticate(user=admin_user)

    response = api_client.post(
        "/api/catalog/",
        {
            "kind": "vip",
            "name": "  Private Boat Charter ",
            "price_cents": 90000,
            "currency": "EUR",
            "duration": "4 hours",
            "images": ["https://cdn.test/boat.jpg"],
        },
        format="json",
    )

    assert response.status_code == 201
    body = response.json()
    assert body["name"] == "Private Boat Charter"
    assert body["slug"] == "private-boat-charter"
    assert body["currency"] == "eur"


def test_admin_create_rejects_bad_images(api_client, admin_user):
    api_client.force_authenticate(user=admin_user)

    response = api_client.post(
        "/api/catalog/",
        {"name": "Broken", "price_cents": 100, "images": [1, 2]},
        format="json",
    )

    assert response.status_code == 400
    assert "images" in response.json()


def test_customer_cannot_modify_catalog(api_client, customer, tour):
    api_client.force_authenticate(user=customer)

    response = api_client.patch(f"/api/catalog/{tour.pk}/", {"price_cents": 1}, format="json")

    assert response.status_code == 403


def test_ratings_are_read_only(api_client, admin_user, tour):
    api_client.force_authenticate(user=admin_user)

    api_client.patch(f"/api/catalog/{tour.pk}/", {"ratings_quantity": 99}, format="json")

    tour.refresh_from_db()
    assert tour.ratings_quantity == 0


def test_set_ratings_rounds_and_resets(tour):
    tour.set_ratings(4.25, 4)
    tour.refresh_from_db()
    assert str(tour.ratings_average) == "4.3"
    assert tour.ratings_quantity == 4

    tour.set_ratings(None, 0)
    tour.refresh_from_db()
    assert str(tour.ratings_average) == "4.5"
    assert tour.ratings_quantity == 0
