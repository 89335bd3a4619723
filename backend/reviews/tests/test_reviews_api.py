import pytest

from reviews.models import Review

pytestmark = pytest.mark.django_db


def _post_review(client, item, rating=5, text="Breathtaking views from the summit."):
    return client.post("/api/reviews/", {"item": item.pk, "text": text, "rating": rating}, format="json")


def test_create_review_updates_item_ratings(api_client, customer, other_customer, tour):
    api_client.force_authenticate(user=customer)
    response = _post_review(api_client, tour, rating=5)
    assert response.status_code == 201
    assert response.json()["user_name"] == "Carla Customer"

    api_client.force_authenticate(user=other_customer)
    _post_review(api_client, tour, rating=2)

    tour.refresh_from_db()
    assert tour.ratings_quantity == 2
    assert str(tour.ratings_average) == "3.5"


def test_second_review_for_same_item_conflicts(api_client, customer, tour):
    api_client.force_authenticate(user=customer)
    _post_review(api_client, tour)

    response = _post_review(api_client, tour, rating=1)

    assert response.status_code == 409
    assert response.json()["detail"] == "You have already reviewed this item."
    assert Review.objects.count() == 1


def test_review_validation(api_client, customer, tour):
    api_client.force_authenticate(user=customer)

    assert _post_review(api_client, tour, text="too short").status_code == 400
    assert _post_review(api_client, tour, rating=6).status_code == 400


def test_anonymous_users_can_read_but_not_write(api_client, customer, tour):
    Review.objects.create(item=tour, user=customer, text="Loved every minute of it.", rating=4)

    assert api_client.get("/api/reviews/").status_code == 200
    assert api_client.get(f"/api/catalog/{tour.pk}/reviews/").json()[0]["rating"] == 4
    assert _post_review(api_client, tour).status_code == 401


def test_only_owner_or_admin_can_edit(api_client, customer, other_customer, admin_user, tour):
    review = Review.objects.create(item=tour, user=customer, text="Loved every minute of it.", rating=4)

    api_client.force_authenticate(user=other_customer)
    assert api_client.patch(f"/api/reviews/{review.pk}/", {"rating": 1}, format="json").status_code == 403

    api_client.force_authenticate(user=customer)
    assert api_client.patch(f"/api/reviews/{review.pk}/", {"rating": 2}, format="json").status_code == 200
    tour.refresh_from_db()
    assert str(tour.ratings_average) == "2.0"

    api_client.force_authenticate(user=admin_user)
    assert api_client.delete(f"/api/reviews/{review.pk}/").status_code == 204


def test_deleting_last_review_resets_ratings(api_client, customer, tour):
    review = Review.objects.create(item=tour, user=customer, text="Loved every minute of it.", rating=1)
    tour.refresh_from_db()
    assert str(tour.ratings_average) == "1.0"

    api_client.force_authenticate(user=customer)
    api_client.delete(f"/api/reviews/{review.pk}/")

    tour.refresh_from_db()
    assert str(tour.ratings_average) == "4.5"
    assert tour.ratings_quantity == 0


def test_item_cannot_be_moved_on_update(api_client, customer, tour):
    from catalog.models import CatalogItem

    other_item = CatalogItem.objects.create(name="Sete Cidades Kayak", price_cents=6000)
    review = Review.objects.create(item=tour, user=customer, text="Loved every minute of it.", rating=4)
    api_client.force_authenticate(user=customer)

    api_client.patch(f"/api/reviews/{review.pk}/", {"item": other_item.pk}, format="json")

    review.refresh_from_db()
    assert review.item == tour
